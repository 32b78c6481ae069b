"""Pytest configuration and shared fixtures for tests."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import httpx
import jwt
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventdesk.api.deps import get_settings
from eventdesk.core.config import Settings
from eventdesk.core.database import create_all, create_engine, create_session_factory
from eventdesk.integrations.docusign import DocuSignTokenBroker
from eventdesk.integrations.google_calendar import GoogleTokenBroker
from eventdesk.integrations.oauth_state import OAuthStateCodec
from eventdesk.lifecycle import InquiryLifecycleEngine
from eventdesk.main import app
from eventdesk.models import OAuthProvider, OAuthToken
from eventdesk.store import Store, utcnow

USER_ID = "7d9c1e52-3f0a-4b7e-9a41-0c2f5e8d6b13"
OTHER_USER_ID = "b1e0f4a7-55c2-4d38-8f6e-2a9c7d01e4f6"
JWT_SECRET = "test-supabase-jwt-secret-with-enough-bytes"
STATE_SECRET = "test-oauth-state-secret-with-enough-bytes"


class FakeRedis:
    """In-memory stand-in for the subset of redis.asyncio the app uses."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.expiry: dict[str, int] = {}

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.values[key] = value
        if ex is not None:
            self.expiry[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                removed += 1
        return removed

    async def ping(self) -> bool:
        return True


class ProviderStub:
    """Routes outbound provider calls to canned responses and records them."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], list[httpx.Response]] = {}

    def add(self, method: str, url: str, response: httpx.Response) -> None:
        self.routes.setdefault((method, url), []).append(response)

    def calls_to(self, url: str) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if str(request.url).split("?")[0] == url
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, str(request.url).split("?")[0])
        queue = self.routes.get(key)
        if not queue:
            return httpx.Response(404, json={"error": f"no stub for {key}"})
        return queue.pop(0) if len(queue) > 1 else queue[0]


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests.

    Returns:
        Backend name string.
    """
    return "asyncio"


@pytest.fixture
def test_settings() -> Settings:
    """Settings with every provider configured."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        supabase_jwt_secret=JWT_SECRET,
        oauth_state_secret=STATE_SECRET,
        google_oauth_client_id="google-client-id",
        google_oauth_client_secret="google-client-secret",
        google_redirect_uri="https://api.example.com/google-calendar/callback",
        docusign_client_id="docusign-client-id",
        docusign_client_secret="docusign-client-secret",
        docusign_account_id="acct-123",
        docusign_redirect_uri="https://api.example.com/docusign/callback",
    )


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create sqlite-backed session factory with every table."""
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await create_all(engine)
    try:
        yield create_session_factory(engine)
    finally:
        await engine.dispose()


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> Store:
    return Store(session_factory)


@pytest.fixture
def engine(store: Store) -> InquiryLifecycleEngine:
    return InquiryLifecycleEngine(store)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def provider() -> ProviderStub:
    return ProviderStub()


@pytest_asyncio.fixture
async def http_client(provider: ProviderStub) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(provider)) as client:
        yield client


@pytest.fixture
def state_codec(test_settings: Settings, fake_redis: FakeRedis) -> OAuthStateCodec:
    return OAuthStateCodec(STATE_SECRET, test_settings.oauth_state_ttl_seconds, fake_redis)


@pytest.fixture
def google_broker(
    store: Store,
    state_codec: OAuthStateCodec,
    http_client: httpx.AsyncClient,
    test_settings: Settings,
) -> GoogleTokenBroker:
    return GoogleTokenBroker(store, state_codec, http_client, test_settings)


@pytest.fixture
def docusign_broker(
    store: Store,
    state_codec: OAuthStateCodec,
    http_client: httpx.AsyncClient,
    test_settings: Settings,
) -> DocuSignTokenBroker:
    return DocuSignTokenBroker(store, state_codec, http_client, test_settings)


@pytest.fixture
def connect(store: Store) -> Callable[..., Awaitable[OAuthToken]]:
    """Store a provider token row as if the user had completed OAuth."""

    async def _connect(
        provider: OAuthProvider,
        user_id: str = USER_ID,
        access_token: str = "access-current",
        refresh_token: str | None = "refresh-current",
        expires_in: int = 3600,
    ) -> OAuthToken:
        return await store.insert(
            OAuthToken(
                user_id=user_id,
                provider=provider,
                access_token=access_token,
                refresh_token=refresh_token,
                expires_at=utcnow() + timedelta(seconds=expires_in),
            )
        )

    return _connect


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Mint Supabase-style access tokens for the API tests."""

    def _make(
        sub: str = USER_ID,
        secret: str = JWT_SECRET,
        audience: str = "authenticated",
        expires_in: int = 3600,
    ) -> str:
        now = datetime.now(UTC)
        return jwt.encode(
            {
                "sub": sub,
                "aud": audience,
                "role": "authenticated",
                "iat": now,
                "exp": now + timedelta(seconds=expires_in),
            },
            secret,
            algorithm="HS256",
        )

    return _make


@pytest.fixture
def auth_headers(make_token: Callable[..., str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}


@pytest_asyncio.fixture
async def api_client(
    session_factory: async_sessionmaker[AsyncSession],
    http_client: httpx.AsyncClient,
    fake_redis: FakeRedis,
    test_settings: Settings,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """API client over the real app with sqlite, fake Redis and stubbed providers."""
    app.state.async_session = session_factory
    app.state.redis = fake_redis
    app.state.http = http_client
    app.dependency_overrides[get_settings] = lambda: test_settings
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """Create a mock database session.

    Returns:
        AsyncMock configured to simulate database session.
    """
    session = AsyncMock()
    session.execute.return_value = MagicMock()
    return session


@pytest.fixture
def mock_db_session_failing() -> AsyncMock:
    """Create a mock database session that fails on execute.

    Returns:
        AsyncMock configured to raise exception on execute.
    """
    session = AsyncMock()
    session.execute.side_effect = Exception("Database connection failed")
    return session


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Create a mock Redis connection that succeeds.

    Returns:
        AsyncMock configured to simulate healthy Redis.
    """
    redis_mock = AsyncMock()
    redis_mock.ping.return_value = True
    return redis_mock


@pytest.fixture
def mock_redis_failing() -> AsyncMock:
    """Create a mock Redis connection that fails.

    Returns:
        AsyncMock configured to raise exception on ping.
    """
    redis_mock = AsyncMock()
    redis_mock.ping.side_effect = Exception("Redis connection refused")
    return redis_mock
