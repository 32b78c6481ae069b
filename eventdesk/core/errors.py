"""Error taxonomy shared by the store, lifecycle engine, and provider brokers.

Every error carries the HTTP status the API layer answers with. The
application state facade catches `EventDeskError` at its operation boundary
and turns it into a user-facing notification.
"""

from fastapi import status


class EventDeskError(Exception):
    """Base class for expected, user-reportable failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class Unauthenticated(EventDeskError):
    """No caller credential, or one that does not verify."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ValidationError(EventDeskError):
    """A required field is missing; raised before any store or network call."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(EventDeskError):
    """A referenced entity does not exist for this user."""

    status_code = status.HTTP_404_NOT_FOUND


class InvalidState(EventDeskError):
    """OAuth state failed verification, or an entity is in the wrong stage."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConfigurationError(EventDeskError):
    """Server-side settings needed by an integration are missing."""

    def __init__(self, integration: str, missing: list[str]):
        self.missing = missing
        super().__init__(
            f"Server configuration error: missing settings for {integration}: "
            + ", ".join(missing)
        )


class ProviderNotConnected(EventDeskError):
    """The user has no stored token for the provider."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"{provider} account not connected")


class TokenExchangeFailed(EventDeskError):
    """Provider token endpoint rejected an authorization code."""


class TokenRefreshFailed(EventDeskError):
    """Provider token endpoint rejected a refresh token."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ReauthRequired(EventDeskError):
    """Access token expired and there is no refresh token to rotate it."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            f"{provider} access token expired and no refresh token available. "
            "Please reconnect."
        )


class StoreError(EventDeskError):
    """Underlying database query or write failed."""


class ProviderAPIError(EventDeskError):
    """Non-2xx from the Google Calendar or DocuSign REST APIs."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, provider: str, message: str, upstream_status: int | None = None):
        self.provider = provider
        self.upstream_status = upstream_status
        super().__init__(message)


__all__ = [
    "ConfigurationError",
    "EventDeskError",
    "InvalidState",
    "NotFound",
    "ProviderAPIError",
    "ProviderNotConnected",
    "ReauthRequired",
    "StoreError",
    "TokenExchangeFailed",
    "TokenRefreshFailed",
    "Unauthenticated",
    "ValidationError",
]
