"""Tests for signed OAuth state tokens."""

import pytest

from eventdesk.core.errors import ConfigurationError, InvalidState
from eventdesk.integrations.oauth_state import NONCE_KEY_PREFIX, OAuthStateCodec
from eventdesk.models import OAuthProvider
from tests.conftest import STATE_SECRET, USER_ID, FakeRedis


@pytest.mark.asyncio
async def test_issue_then_verify(state_codec: OAuthStateCodec, fake_redis: FakeRedis) -> None:
    token = await state_codec.issue(OAuthProvider.GOOGLE, USER_ID, "https://app.example.com")

    assert len(fake_redis.values) == 1
    key = next(iter(fake_redis.values))
    assert key.startswith(f"{NONCE_KEY_PREFIX}:")
    assert fake_redis.expiry[key] == 900

    state = await state_codec.verify(OAuthProvider.GOOGLE, token)

    assert state.user_id == USER_ID
    assert state.client_origin == "https://app.example.com"
    assert state.provider == OAuthProvider.GOOGLE
    assert fake_redis.values == {}


@pytest.mark.asyncio
async def test_state_is_single_use(state_codec: OAuthStateCodec) -> None:
    token = await state_codec.issue(OAuthProvider.GOOGLE, USER_ID, "https://app.example.com")
    await state_codec.verify(OAuthProvider.GOOGLE, token)

    with pytest.raises(InvalidState, match="Invalid state parameter"):
        await state_codec.verify(OAuthProvider.GOOGLE, token)


@pytest.mark.asyncio
async def test_state_is_bound_to_provider(state_codec: OAuthStateCodec) -> None:
    token = await state_codec.issue(OAuthProvider.GOOGLE, USER_ID, "https://app.example.com")

    with pytest.raises(InvalidState):
        await state_codec.verify(OAuthProvider.DOCUSIGN, token)


@pytest.mark.asyncio
async def test_expired_state_is_rejected(fake_redis: FakeRedis) -> None:
    codec = OAuthStateCodec(STATE_SECRET, ttl_seconds=-5, redis_client=fake_redis)
    token = await codec.issue(OAuthProvider.DOCUSIGN, USER_ID, "")

    with pytest.raises(InvalidState):
        await codec.verify(OAuthProvider.DOCUSIGN, token)


@pytest.mark.asyncio
async def test_forged_state_is_rejected(state_codec: OAuthStateCodec) -> None:
    forger = OAuthStateCodec("some-other-secret-of-sufficient-length")
    token = await forger.issue(OAuthProvider.GOOGLE, USER_ID, "https://evil.example.com")

    with pytest.raises(InvalidState):
        await state_codec.verify(OAuthProvider.GOOGLE, token)


@pytest.mark.asyncio
async def test_garbage_state_is_rejected(state_codec: OAuthStateCodec) -> None:
    with pytest.raises(InvalidState):
        await state_codec.verify(OAuthProvider.GOOGLE, USER_ID)


@pytest.mark.asyncio
async def test_missing_secret_is_a_configuration_error() -> None:
    codec = OAuthStateCodec(None)

    with pytest.raises(ConfigurationError) as exc_info:
        await codec.issue(OAuthProvider.GOOGLE, USER_ID, "")

    assert exc_info.value.missing == ["OAUTH_STATE_SECRET"]


@pytest.mark.asyncio
async def test_without_redis_nonce_is_not_tracked() -> None:
    codec = OAuthStateCodec(STATE_SECRET)
    token = await codec.issue(OAuthProvider.GOOGLE, USER_ID, "")

    first = await codec.verify(OAuthProvider.GOOGLE, token)
    second = await codec.verify(OAuthProvider.GOOGLE, token)

    assert first.nonce == second.nonce
