"""Tests for clients API endpoints."""

import httpx
import pytest

from tests.conftest import OTHER_USER_ID


async def _create(api_client: httpx.AsyncClient, headers: dict[str, str], **fields) -> dict:
    payload = {"fraternity": "Sigma Chi", "school": "UGA", "mainContactName": "Jake Morrow"}
    payload.update(fields)
    response = await api_client.post("/api/clients", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_and_get_client(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    """Create client and fetch it by ID."""
    created = await _create(api_client, auth_headers, averageEventSize=6000)

    assert created["numberOfEvents"] == 0
    assert created["clientScore"] == 0
    assert created["instagramHandle"] == "N/A"

    response = await api_client.get(f"/api/clients/{created['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == created


@pytest.mark.asyncio
async def test_list_clients_filters_and_sorts(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    await _create(api_client, auth_headers, school="Georgia Tech", averageEventSize=3000)
    await _create(api_client, auth_headers, fraternity="SAE", school="Georgia", averageEventSize=9000)
    await _create(api_client, auth_headers, fraternity="KA", school="Auburn")

    response = await api_client.get(
        "/api/clients",
        params={"school": "georgia", "sortBy": "average_event_size", "order": "desc"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert [client["school"] for client in response.json()] == ["Georgia", "Georgia Tech"]


@pytest.mark.asyncio
async def test_invalid_sort_key_is_bad_request(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    response = await api_client.get(
        "/api/clients", params={"sortBy": "secret"}, headers=auth_headers
    )

    assert response.status_code == 400
    assert "sortBy" in response.json()["error"]


@pytest.mark.asyncio
async def test_update_client_recomputes_score(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    created = await _create(api_client, auth_headers)

    response = await api_client.put(
        f"/api/clients/{created['id']}",
        json={
            "fraternity": "Sigma Chi",
            "school": "UGA",
            "instagramHandle": "@ugasigmachi",
            "averageEventSize": 7000,
        },
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["instagramHandle"] == "@ugasigmachi"
    assert body["clientScore"] == 0


@pytest.mark.asyncio
async def test_create_client_requires_fraternity(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    response = await api_client.post(
        "/api/clients", json={"school": "UGA"}, headers=auth_headers
    )

    assert response.status_code == 400
    assert "fraternity" in response.json()["error"]


@pytest.mark.asyncio
async def test_get_missing_client_returns_404(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    """Return 404 when client does not exist."""
    response = await api_client.get("/api/clients/999", headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"error": "Client 999 not found"}


@pytest.mark.asyncio
async def test_other_users_clients_are_invisible(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str], make_token
) -> None:
    created = await _create(api_client, auth_headers)
    other = {"Authorization": f"Bearer {make_token(sub=OTHER_USER_ID)}"}

    listed = await api_client.get("/api/clients", headers=other)
    fetched = await api_client.get(f"/api/clients/{created['id']}", headers=other)

    assert listed.json() == []
    assert fetched.status_code == 404
