"""Concurrent fan-out of secret fetches into a single store."""
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional, Sequence

from ..domains.models import SecretStore
from .fetcher import SecretFetcher

logger = logging.getLogger(__name__)


def fetch_secrets_concurrent(
    fetcher: SecretFetcher,
    identifiers: Sequence[str],
    max_workers: Optional[int] = None,
) -> SecretStore:
    """
    Fetch every identifier in parallel and collect the records.

    All-or-nothing: every fetch is allowed to settle, then the error of the
    first failed identifier (in input order) is raised and the successful
    records are discarded. The pool is shut down before returning or raising.

    Args:
        fetcher: Fetcher used for each identifier
        identifiers: Secret identifiers; duplicates are fetched once
        max_workers: Pool size bound (default: one thread per identifier)

    Returns:
        SecretStore with one record per distinct identifier
    """
    unique = list(dict.fromkeys(identifiers))
    if not unique:
        return SecretStore()

    workers = len(unique) if max_workers is None else min(max_workers, len(unique))
    logger.info(f"Fetching {len(unique)} secrets with {workers} workers")

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="goldfinch-fetch") as executor:
        futures = [executor.submit(fetcher.fetch, identifier) for identifier in unique]
        wait(futures)

    records = []
    for identifier, future in zip(unique, futures):
        error = future.exception()
        if error is not None:
            failed = sum(1 for f in futures if f.exception() is not None)
            logger.debug(f"{failed} of {len(futures)} fetches failed, first: {identifier}")
            raise error
        records.append(future.result())

    return SecretStore(records)
