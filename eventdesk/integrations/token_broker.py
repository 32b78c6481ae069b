"""OAuth token broker.

Hides the three-legged OAuth dance and transparent token refresh behind
three operations:

- `initiate_auth`: build the provider's consent URL with a signed state
- `handle_callback`: exchange the code, upsert the token row, and return the
  redirect back into the app
- `with_fresh_token`: run a provider call with a valid access token,
  refreshing an expired one first

Refresh is not serialized: two concurrent calls that both see an expired
token each refresh and persist, and the later write wins.
"""

from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, TypeVar
from urllib.parse import urlencode

import httpx

from eventdesk.core.config import Settings
from eventdesk.core.errors import (
    ConfigurationError,
    InvalidState,
    ProviderNotConnected,
    ReauthRequired,
    TokenExchangeFailed,
    TokenRefreshFailed,
    Unauthenticated,
)
from eventdesk.core.logging import get_logger
from eventdesk.integrations.oauth_state import OAuthStateCodec
from eventdesk.models import OAuthProvider, OAuthToken
from eventdesk.store import Store, utcnow

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_EXPIRES_IN = 3600


def error_description(response: httpx.Response) -> str:
    """Best human-readable reason from a provider error response."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        for key in ("error_description", "message"):
            if body.get(key):
                return str(body[key])
        if isinstance(error, str):
            return error
    return response.reason_phrase or f"HTTP {response.status_code}"


class OAuthTokenBroker:
    """Provider-agnostic token broker; subclasses supply endpoints and auth."""

    provider: OAuthProvider
    display_name: str
    scopes: tuple[str, ...] = ()
    success_path: str = "/"

    def __init__(
        self,
        store: Store,
        state_codec: OAuthStateCodec,
        http: httpx.AsyncClient,
        config: Settings,
    ):
        self.store = store
        self.state_codec = state_codec
        self.http = http
        self.config = config

    # Provider specifics

    @property
    def authorize_url(self) -> str:
        raise NotImplementedError

    @property
    def token_url(self) -> str:
        raise NotImplementedError

    @property
    def redirect_uri(self) -> str:
        raise NotImplementedError

    def missing_settings(self) -> list[str]:
        raise NotImplementedError

    def authorize_params(self, state: str) -> dict[str, str]:
        raise NotImplementedError

    def token_request(self, form: dict[str, str]) -> dict[str, Any]:
        """Keyword arguments for the token endpoint POST, credentials included."""
        raise NotImplementedError

    # Operations

    def ensure_configured(self) -> None:
        """Raise ConfigurationError when server settings are incomplete."""
        missing = self.missing_settings()
        if missing:
            raise ConfigurationError(self.display_name, missing)

    async def initiate_auth(self, user_id: str | None, client_origin: str) -> str:
        """Build the provider authorization URL for the calling user.

        Raises:
            Unauthenticated: If there is no verified caller.
            ConfigurationError: If provider settings are missing.
        """
        if not user_id:
            raise Unauthenticated("User not authenticated")
        self.ensure_configured()
        state = await self.state_codec.issue(self.provider, user_id, client_origin)
        logger.info("oauth_authorize_url_issued", provider=self.provider.value, user_id=user_id)
        return f"{self.authorize_url}?{urlencode(self.authorize_params(state))}"

    async def handle_callback(self, code: str | None, state: str | None) -> str:
        """Complete authorization and return the URL to redirect the browser to.

        Raises:
            InvalidState: If code/state is missing or the state fails checks.
            TokenExchangeFailed: If the provider rejects the code.
        """
        if not code or not state:
            raise InvalidState("Missing code or state parameter")
        self.ensure_configured()
        verified = await self.state_codec.verify(self.provider, state)

        tokens = await self._post_token(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
            },
            TokenExchangeFailed,
            f"Failed to authenticate with {self.display_name}",
        )
        await self._save_tokens(verified.user_id, tokens)
        logger.info(
            "oauth_connected", provider=self.provider.value, user_id=verified.user_id
        )
        origin = verified.client_origin.rstrip("/")
        return f"{origin}{self.success_path}?{self.provider.value}_auth_success=true"

    async def is_connected(self, user_id: str) -> bool:
        """Whether the user has a stored token for this provider."""
        return await self.store.get_token(user_id, self.provider) is not None

    async def with_fresh_token(
        self, user_id: str, fn: Callable[[str], Awaitable[T]]
    ) -> T:
        """Call `fn` with a current access token, refreshing it if expired.

        Raises:
            ProviderNotConnected: If no token is stored.
            ReauthRequired: If the token expired and cannot be refreshed.
            TokenRefreshFailed: If the provider rejects the refresh token.
        """
        row = await self.store.get_token(user_id, self.provider)
        if row is None:
            raise ProviderNotConnected(self.display_name)

        access_token = row.access_token
        if row.expires_at < utcnow():
            if not row.refresh_token:
                raise ReauthRequired(self.display_name)
            access_token = await self._refresh(user_id, row)
        return await fn(access_token)

    # Internals

    async def _post_token(
        self,
        form: dict[str, str],
        error_type: type[TokenExchangeFailed] | type[TokenRefreshFailed],
        context: str,
    ) -> dict[str, Any]:
        try:
            response = await self.http.post(self.token_url, **self.token_request(form))
        except httpx.HTTPError as exc:
            logger.error("oauth_token_request_failed", provider=self.provider.value, error=str(exc))
            raise error_type(f"{context}: {exc}") from exc
        if response.is_error:
            reason = error_description(response)
            logger.error(
                "oauth_token_rejected",
                provider=self.provider.value,
                status_code=response.status_code,
                reason=reason,
            )
            raise error_type(f"{context}: {reason}")
        return response.json()

    async def _refresh(self, user_id: str, row: OAuthToken) -> str:
        tokens = await self._post_token(
            {"grant_type": "refresh_token", "refresh_token": row.refresh_token or ""},
            TokenRefreshFailed,
            f"Failed to refresh {self.display_name} access token. Please reconnect",
        )
        values: dict[str, Any] = {
            "access_token": tokens["access_token"],
            "expires_at": self._expires_at(tokens),
        }
        if tokens.get("refresh_token"):
            values["refresh_token"] = tokens["refresh_token"]
        await self.store.update_token(user_id, self.provider, values)
        logger.info("oauth_token_refreshed", provider=self.provider.value, user_id=user_id)
        return tokens["access_token"]

    async def _save_tokens(self, user_id: str, tokens: dict[str, Any]) -> None:
        """Upsert the user's token row, keeping the old refresh token if none is sent."""
        values: dict[str, Any] = {
            "access_token": tokens["access_token"],
            "expires_at": self._expires_at(tokens),
            "scope": tokens.get("scope"),
            "token_type": tokens.get("token_type"),
        }
        existing = await self.store.get_token(user_id, self.provider)
        if existing is not None:
            values["refresh_token"] = tokens.get("refresh_token") or existing.refresh_token
            await self.store.update_token(user_id, self.provider, values)
            return

        await self.store.insert(
            OAuthToken(
                user_id=user_id,
                provider=self.provider,
                refresh_token=tokens.get("refresh_token"),
                **values,
            )
        )

    @staticmethod
    def _expires_at(tokens: dict[str, Any]):
        expires_in = int(tokens.get("expires_in") or DEFAULT_EXPIRES_IN)
        return utcnow() + timedelta(seconds=expires_in)
