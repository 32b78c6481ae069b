"""FastAPI dependency injection for identity, storage and provider clients."""

from typing import Annotated

import httpx
import jwt
from fastapi import Depends, Header, Request
from redis.asyncio import Redis

from eventdesk.core.config import Settings, settings
from eventdesk.core.errors import ConfigurationError, Unauthenticated
from eventdesk.core.logging import get_logger, user_id_ctx
from eventdesk.integrations.docusign import DocuSignClient, DocuSignTokenBroker
from eventdesk.integrations.google_calendar import GoogleCalendarClient, GoogleTokenBroker
from eventdesk.integrations.oauth_state import OAuthStateCodec
from eventdesk.lifecycle import InquiryLifecycleEngine
from eventdesk.store import Store

logger = get_logger(__name__)


def get_settings() -> Settings:
    """Application settings; overridden in tests."""
    return settings


def get_store(request: Request) -> Store:
    """Store over the app's session factory."""
    return Store(request.app.state.async_session)


async def get_redis(request: Request) -> Redis | None:
    """Get Redis connection pool from app state.

    Args:
        request: FastAPI request containing app state.

    Returns:
        Redis connection pool, or None when the app runs without one.
    """
    return getattr(request.app.state, "redis", None)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared outbound HTTP client for provider calls."""
    return request.app.state.http


async def get_optional_user(
    config: Annotated[Settings, Depends(get_settings)],
    authorization: str | None = Header(default=None),
) -> str | None:
    """Verify a Supabase bearer token if one was sent.

    Returns:
        The caller's user id (`sub` claim), or None without a header.

    Raises:
        Unauthenticated: If the header is present but the token is invalid.
        ConfigurationError: If no JWT secret is configured.
    """
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise Unauthenticated("Unauthorized")
    if not config.supabase_jwt_secret:
        raise ConfigurationError("authentication", ["SUPABASE_JWT_SECRET"])
    try:
        claims = jwt.decode(
            token,
            config.supabase_jwt_secret,
            algorithms=["HS256"],
            audience=config.supabase_jwt_audience,
            options={"require": ["sub", "exp"]},
        )
    except jwt.InvalidTokenError as exc:
        logger.warning("jwt_verification_failed", error=str(exc))
        raise Unauthenticated("Unauthorized") from exc

    user_id = claims["sub"]
    user_id_ctx.set(user_id)
    return user_id


async def get_current_user(
    user_id: Annotated[str | None, Depends(get_optional_user)],
) -> str:
    """Require a verified caller."""
    if not user_id:
        raise Unauthenticated("User not authenticated")
    return user_id


def get_state_codec(
    config: Annotated[Settings, Depends(get_settings)],
    redis_pool: Annotated[Redis | None, Depends(get_redis)],
) -> OAuthStateCodec:
    return OAuthStateCodec(
        config.oauth_state_secret, config.oauth_state_ttl_seconds, redis_pool
    )


def get_google_broker(
    store: Annotated[Store, Depends(get_store)],
    codec: Annotated[OAuthStateCodec, Depends(get_state_codec)],
    http: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    config: Annotated[Settings, Depends(get_settings)],
) -> GoogleTokenBroker:
    return GoogleTokenBroker(store, codec, http, config)


def get_docusign_broker(
    store: Annotated[Store, Depends(get_store)],
    codec: Annotated[OAuthStateCodec, Depends(get_state_codec)],
    http: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    config: Annotated[Settings, Depends(get_settings)],
) -> DocuSignTokenBroker:
    return DocuSignTokenBroker(store, codec, http, config)


def get_calendar_client(
    broker: Annotated[GoogleTokenBroker, Depends(get_google_broker)],
    http: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> GoogleCalendarClient:
    return GoogleCalendarClient(broker, http)


def get_docusign_client(
    broker: Annotated[DocuSignTokenBroker, Depends(get_docusign_broker)],
    http: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> DocuSignClient:
    return DocuSignClient(broker, http)


def get_engine(
    store: Annotated[Store, Depends(get_store)],
    calendar: Annotated[GoogleCalendarClient, Depends(get_calendar_client)],
) -> InquiryLifecycleEngine:
    """Lifecycle engine that books promoted events on the user's calendar."""
    return InquiryLifecycleEngine(store, calendar_sync=calendar.sync_event)
