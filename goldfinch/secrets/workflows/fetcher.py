"""Fetch one secret and parse its payload into a record."""
import json
import logging
from typing import Optional

from ..domains.errors import FetchFailed, PayloadNotAnObject, PayloadNotParseable, PayloadNotTextual
from ..domains.gcp_client import GCPSecretClient
from ..domains.models import SecretRecord

logger = logging.getLogger(__name__)


def _reject_constant(name: str):
    raise ValueError(f"Non-standard JSON constant {name}")


def parse_payload(identifier: str, payload: Optional[str]) -> SecretRecord:
    """
    Turn a raw secret payload into a record.

    Raises:
        PayloadNotTextual: If there is no text payload
        PayloadNotParseable: If the text is not valid JSON
        PayloadNotAnObject: If the top-level JSON value is not an object
    """
    if payload is None:
        raise PayloadNotTextual(identifier)

    try:
        parsed = json.loads(payload, parse_constant=_reject_constant)
    except ValueError as e:
        raise PayloadNotParseable(identifier, str(e)) from e
    except RecursionError as e:
        raise PayloadNotParseable(identifier, "nesting too deep") from e

    if not isinstance(parsed, dict):
        raise PayloadNotAnObject(identifier)

    return SecretRecord.from_mapping(identifier, parsed)


class SecretFetcher:
    """Retrieves single secrets through a shared store client."""

    def __init__(self, client: GCPSecretClient, timeout: Optional[float] = None):
        self.client = client
        self.timeout = timeout

    def fetch(self, identifier: str) -> SecretRecord:
        """
        Fetch and parse one secret. One remote call, no caching.

        Raises:
            FetchFailed: If the store client fails
            SecretPayloadError: If the payload is not a JSON object
        """
        try:
            payload = self.client.get_payload(identifier, timeout=self.timeout)
        except Exception as e:
            logger.debug(f"Fetch failed for {identifier}: {e}")
            raise FetchFailed(identifier, e) from e

        record = parse_payload(identifier, payload)
        logger.debug(f"Fetched secret '{identifier}' with {len(record)} keys")
        return record
