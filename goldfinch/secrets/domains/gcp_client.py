"""GCP Secret Manager client wrapper."""
import logging
from typing import Iterator, Optional
from google.cloud import secretmanager

logger = logging.getLogger(__name__)


class GCPSecretClient:
    """
    Wrapper around GCP Secret Manager client.

    Safe to share between threads: it holds no per-call state and the
    underlying gRPC client is thread-safe.
    """

    def __init__(self, project_id: str, client: Optional[secretmanager.SecretManagerServiceClient] = None):
        self.project_id = project_id
        self._client = client

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy-initialize client."""
        if self._client is None:
            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def version_name(self, identifier: str) -> str:
        """
        Build the resource name of the version to read.

        Short names resolve against the configured project at the latest
        version; full resource names are used as given.
        """
        if identifier.startswith("projects/"):
            if "/versions/" in identifier:
                return identifier
            return f"{identifier}/versions/latest"
        return f"projects/{self.project_id}/secrets/{identifier}/versions/latest"

    def get_payload(self, identifier: str, timeout: Optional[float] = None) -> Optional[str]:
        """
        Fetch the payload of a secret's latest version.

        Args:
            identifier: Secret name or full resource name
            timeout: Per-call timeout in seconds (None waits indefinitely)

        Returns:
            Payload text, or None if the payload is empty or not UTF-8

        Raises:
            google.api_core.exceptions.GoogleAPIError: On any remote failure
        """
        name = self.version_name(identifier)
        logger.debug(f"Accessing {name}")
        if timeout is None:
            response = self.client.access_secret_version(request={"name": name})
        else:
            response = self.client.access_secret_version(request={"name": name}, timeout=timeout)

        data = response.payload.data
        if not data:
            return None
        try:
            return data.decode("UTF-8")
        except UnicodeDecodeError:
            logger.debug(f"Payload of {name} is binary, not UTF-8 text")
            return None

    def list_identifiers(self) -> Iterator[str]:
        """
        Yield short names of every secret in the project, page by page.

        Names come back in the order the service returns them.
        """
        parent = f"projects/{self.project_id}"
        pager = self.client.list_secrets(request={"parent": parent})
        for page_number, page in enumerate(pager.pages, start=1):
            logger.debug(f"Listing {parent}: page {page_number} with {len(page.secrets)} secrets")
            for secret in page.secrets:
                yield secret.name.rsplit("/", 1)[-1]
