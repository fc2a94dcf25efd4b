"""Error taxonomy for secret retrieval and search."""
from typing import Optional


class GoldfinchError(Exception):
    """Base class for all goldfinch runtime errors."""
    pass


class SecretPayloadError(GoldfinchError):
    """A secret was fetched but its payload cannot become a record."""

    def __init__(self, identifier: str, message: str):
        super().__init__(message)
        self.identifier = identifier


class PayloadNotTextual(SecretPayloadError):
    def __init__(self, identifier: str):
        super().__init__(
            identifier,
            f"Secret '{identifier}' does not contain a string value"
        )


class PayloadNotParseable(SecretPayloadError):
    def __init__(self, identifier: str, reason: str = ""):
        message = f"Secret '{identifier}' value is not valid JSON"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(identifier, message)


class PayloadNotAnObject(SecretPayloadError):
    def __init__(self, identifier: str):
        super().__init__(
            identifier,
            f"Secret '{identifier}' value is not a JSON object with key-value pairs"
        )


class FetchFailed(GoldfinchError):
    """The store client failed while fetching one secret."""

    def __init__(self, identifier: str, cause: Exception):
        super().__init__(f"Failed to fetch secret '{identifier}': {cause}")
        self.identifier = identifier
        self.cause = cause


class ListFailed(GoldfinchError):
    """The store client failed while listing secrets."""

    def __init__(self, cause: Exception):
        super().__init__(f"Failed to list secrets: {cause}")
        self.cause = cause


class NoMatches(GoldfinchError):
    """
    A search produced no results.

    Not a system fault: the CLI reports it and exits non-zero.
    With ``identifier`` set, the search was scoped to that one secret.
    """

    def __init__(self, pattern: str, identifier: Optional[str] = None):
        if identifier is None:
            message = f"No secrets or keys found matching pattern '{pattern}'"
        else:
            message = f"No keys found matching pattern '{pattern}' in secret '{identifier}'"
        super().__init__(message)
        self.pattern = pattern
        self.identifier = identifier
