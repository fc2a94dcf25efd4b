"""Workflows behind the list, get and search commands."""
import logging
from typing import List, Sequence

from ..domains.config_loader import FetchSettings
from ..domains.errors import ListFailed
from ..domains.gcp_client import GCPSecretClient
from ..domains.models import Match, SecretRecord, SecretStore
from .aggregator import fetch_secrets_concurrent
from .fetcher import SecretFetcher
from .search import LabelFormat, search_secrets

logger = logging.getLogger(__name__)


def list_all_secrets(client: GCPSecretClient) -> List[str]:
    """
    List every secret identifier, in the order the store returns them.

    Raises:
        ListFailed: If any page fails; no partial list is returned
    """
    try:
        identifiers = list(client.list_identifiers())
    except Exception as e:
        logger.debug(f"Listing failed: {e}")
        raise ListFailed(e) from e

    logger.info(f"Listed {len(identifiers)} secrets")
    return identifiers


def get_secret(client: GCPSecretClient, identifier: str, settings: FetchSettings) -> SecretRecord:
    """Fetch one named secret directly, without listing."""
    return SecretFetcher(client, timeout=settings.timeout).fetch(identifier)


def get_secrets(client: GCPSecretClient, identifiers: Sequence[str], settings: FetchSettings) -> SecretStore:
    fetcher = SecretFetcher(client, timeout=settings.timeout)
    return fetch_secrets_concurrent(fetcher, identifiers, max_workers=settings.max_workers)


def search_all_secrets(client: GCPSecretClient, pattern: str, settings: FetchSettings) -> List[Match]:
    """
    List every secret, fetch them all concurrently and search the result.

    Key-level matches are labelled "<identifier>/<key>".
    """
    identifiers = list_all_secrets(client)
    store = get_secrets(client, identifiers, settings)
    return search_secrets(store, pattern, LabelFormat.QUALIFIED)


def search_secret(client: GCPSecretClient, identifier: str, pattern: str, settings: FetchSettings) -> List[Match]:
    """Search within one named secret; key-level matches carry bare key labels."""
    record = get_secret(client, identifier, settings)
    return search_secrets(SecretStore([record]), pattern, LabelFormat.BARE)
