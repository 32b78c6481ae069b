"""Signed OAuth state tokens shared by every provider.

The state parameter round-trips through the provider's consent screen and
comes back on the callback, which carries no caller credential. It is an
HS256 JWT whose audience is the provider, so a token minted for Google is
rejected by the DocuSign callback and vice versa. Each token carries a
nonce recorded in Redis at issue time and consumed on first use.
"""

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import jwt

from eventdesk.core.errors import ConfigurationError, InvalidState
from eventdesk.core.logging import get_logger
from eventdesk.models import OAuthProvider

if TYPE_CHECKING:
    import redis.asyncio as redis

logger = get_logger(__name__)

STATE_ALGORITHM = "HS256"
STATE_ISSUER = "eventdesk"
NONCE_KEY_PREFIX = "oauth:state"


@dataclass(frozen=True)
class OAuthState:
    """Verified contents of a state token."""

    user_id: str
    client_origin: str
    provider: OAuthProvider
    nonce: str


class OAuthStateCodec:
    """Issues and verifies signed state tokens."""

    def __init__(
        self,
        secret: str | None,
        ttl_seconds: int = 900,
        redis_client: "redis.Redis | None" = None,
    ):
        self._secret = secret
        self._ttl_seconds = ttl_seconds
        self._redis = redis_client

    def _require_secret(self) -> str:
        if not self._secret:
            raise ConfigurationError("OAuth state", ["OAUTH_STATE_SECRET"])
        return self._secret

    async def issue(self, provider: OAuthProvider, user_id: str, client_origin: str) -> str:
        """Mint a state token for one authorization attempt."""
        secret = self._require_secret()
        nonce = secrets.token_urlsafe(16)
        now = datetime.now(UTC)
        token = jwt.encode(
            {
                "sub": user_id,
                "origin": client_origin,
                "nonce": nonce,
                "aud": provider.value,
                "iss": STATE_ISSUER,
                "iat": now,
                "exp": now + timedelta(seconds=self._ttl_seconds),
            },
            secret,
            algorithm=STATE_ALGORITHM,
        )
        if self._redis is not None:
            await self._redis.set(
                f"{NONCE_KEY_PREFIX}:{nonce}", user_id, ex=self._ttl_seconds
            )
        return token

    async def verify(self, provider: OAuthProvider, state: str) -> OAuthState:
        """Check signature, audience, expiry and single use of a state token.

        Raises:
            InvalidState: If any check fails.
        """
        secret = self._require_secret()
        try:
            claims = jwt.decode(
                state,
                secret,
                algorithms=[STATE_ALGORITHM],
                audience=provider.value,
                issuer=STATE_ISSUER,
                options={"require": ["sub", "exp", "aud", "nonce"]},
            )
        except jwt.InvalidTokenError as exc:
            logger.warning("oauth_state_rejected", provider=provider.value, error=str(exc))
            raise InvalidState("Invalid state parameter") from exc

        nonce = claims["nonce"]
        if self._redis is not None:
            consumed = await self._redis.delete(f"{NONCE_KEY_PREFIX}:{nonce}")
            if not consumed:
                logger.warning("oauth_state_replayed", provider=provider.value)
                raise InvalidState("Invalid state parameter")

        return OAuthState(
            user_id=claims["sub"],
            client_origin=claims.get("origin") or "",
            provider=provider,
            nonce=nonce,
        )
