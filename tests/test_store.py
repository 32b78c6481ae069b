"""Tests for the owner-scoped store."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from eventdesk.core.errors import NotFound, StoreError
from eventdesk.models import Client, Lead, OAuthProvider
from eventdesk.store import Store, utcnow
from tests.conftest import OTHER_USER_ID, USER_ID


def _client(user_id: str = USER_ID, **overrides) -> Client:
    values = {"fraternity": "Sigma Chi", "school": "UGA", "main_contact_name": "Jake"}
    values.update(overrides)
    return Client(user_id=user_id, **values)


@pytest.mark.asyncio
async def test_insert_assigns_id_and_defaults(store: Store) -> None:
    client = await store.insert(_client())

    assert client.id is not None
    assert client.number_of_events == 0
    assert client.instagram_handle == "N/A"
    assert client.created_at is not None


@pytest.mark.asyncio
async def test_rows_are_scoped_by_owner(store: Store) -> None:
    mine = await store.insert(_client())
    await store.insert(_client(OTHER_USER_ID))

    assert [row.id for row in await store.select(Client, USER_ID)] == [mine.id]
    with pytest.raises(NotFound):
        await store.get(Client, OTHER_USER_ID, mine.id)


@pytest.mark.asyncio
async def test_update_and_delete_respect_owner(store: Store) -> None:
    client = await store.insert(_client())

    with pytest.raises(NotFound):
        await store.update(Client, OTHER_USER_ID, client.id, {"school": "Auburn"})
    with pytest.raises(NotFound):
        await store.delete(Client, OTHER_USER_ID, client.id)

    updated = await store.update(Client, USER_ID, client.id, {"school": "Georgia"})
    assert updated.school == "Georgia"
    assert updated.updated_at is not None

    await store.delete(Client, USER_ID, client.id)
    assert await store.select(Client, USER_ID) == []


@pytest.mark.asyncio
async def test_update_if_applies_only_while_condition_holds(store: Store) -> None:
    client = await store.insert(_client())

    first = await store.update_if(
        Client, USER_ID, client.id, Client.number_of_events == 0, {"number_of_events": 1}
    )
    second = await store.update_if(
        Client, USER_ID, client.id, Client.number_of_events == 0, {"number_of_events": 2}
    )

    assert (first, second) == (True, False)
    assert (await store.get(Client, USER_ID, client.id)).number_of_events == 1
    assert not await store.update_if(
        Client, OTHER_USER_ID, client.id, Client.number_of_events == 1, {"school": "X"}
    )


@pytest.mark.asyncio
async def test_select_filters_and_order(store: Store) -> None:
    await store.insert(Lead(user_id=USER_ID, name="Zed", school="UGA"))
    await store.insert(Lead(user_id=USER_ID, name="Amy", school="UGA"))
    await store.insert(Lead(user_id=USER_ID, name="Bo", school="Auburn"))

    rows = await store.select(Lead, USER_ID, Lead.school == "UGA", order_by=Lead.name)

    assert [row.name for row in rows] == ["Amy", "Zed"]


@pytest.mark.asyncio
async def test_insert_many(store: Store) -> None:
    rows = await store.insert_many(
        [Lead(user_id=USER_ID, name="A"), Lead(user_id=USER_ID, name="B")]
    )

    assert all(row.id is not None for row in rows)
    assert await store.insert_many([]) == []


@pytest.mark.asyncio
async def test_find_client_ignores_case_and_whitespace(store: Store) -> None:
    client = await store.insert(_client())

    found = await store.find_client(USER_ID, "  SIGMA chi ", "uga")

    assert found.id == client.id
    assert await store.find_client(OTHER_USER_ID, "Sigma Chi", "UGA") is None
    assert await store.find_client(USER_ID, "Sigma Nu", "UGA") is None


@pytest.mark.asyncio
async def test_token_lookup_and_update(store: Store, connect) -> None:
    await connect(OAuthProvider.DOCUSIGN)

    assert await store.get_token(USER_ID, OAuthProvider.GOOGLE) is None

    expires = utcnow() + timedelta(hours=2)
    await store.update_token(
        USER_ID, OAuthProvider.DOCUSIGN, {"access_token": "rotated", "expires_at": expires}
    )

    row = await store.get_token(USER_ID, OAuthProvider.DOCUSIGN)
    assert row.access_token == "rotated"
    assert row.refresh_token == "refresh-current"
    assert row.updated_at is not None


@pytest.mark.asyncio
async def test_database_failure_becomes_store_error(
    store: Store, monkeypatch: pytest.MonkeyPatch
) -> None:
    def broken_factory():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(store, "_session_factory", broken_factory)

    with pytest.raises(StoreError, match="Failed to select Client"):
        await store.select(Client, USER_ID)
