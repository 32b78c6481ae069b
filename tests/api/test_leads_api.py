"""Tests for lead endpoints."""

import httpx
import pytest


async def _create(api_client: httpx.AsyncClient, headers: dict[str, str], **fields) -> dict:
    payload = {"name": "Tyler Brooks", "school": "Ole Miss", "fraternity": "Phi Delt"}
    payload.update(fields)
    response = await api_client.post("/api/leads", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_lead_defaults_to_general(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    lead = await _create(api_client, auth_headers, instagramHandle="@tb")

    assert lead["status"] == "General"
    assert lead["instagramHandle"] == "@tb"
    assert lead["createdAt"]


@pytest.mark.asyncio
async def test_list_leads_with_filters(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    await _create(api_client, auth_headers, name="Zack", school="UGA", fraternity="SAE")
    await _create(api_client, auth_headers, name="Aaron", school="UGA", fraternity="Sigma Nu")
    await _create(api_client, auth_headers)

    response = await api_client.get(
        "/api/leads", params={"school": "uga", "sortBy": "name"}, headers=auth_headers
    )

    assert [lead["name"] for lead in response.json()] == ["Aaron", "Zack"]


@pytest.mark.asyncio
async def test_patch_and_delete_lead(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    lead = await _create(api_client, auth_headers)

    patched = await api_client.patch(
        f"/api/leads/{lead['id']}",
        json={"status": "Not Interested", "notes": "Try again in spring"},
        headers=auth_headers,
    )
    assert patched.status_code == 200
    assert patched.json()["status"] == "Not Interested"
    assert patched.json()["school"] == "Ole Miss"

    deleted = await api_client.delete(f"/api/leads/{lead['id']}", headers=auth_headers)
    assert deleted.status_code == 204

    missing = await api_client.get(f"/api/leads/{lead['id']}", headers=auth_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_import_leads_csv(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    content = b"Name,School,Fraternity,Status\nTyler,Ole Miss,Phi Delt,Interested\nSam,UGA,,\n"

    response = await api_client.post(
        "/api/leads/import",
        files={"file": ("leads.csv", content, "text/csv")},
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["imported"] == 2
    assert [lead["status"] for lead in body["items"]] == ["Interested", "General"]
    assert body["items"][1]["fraternity"] is None


@pytest.mark.asyncio
async def test_import_leads_without_name_column(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    response = await api_client.post(
        "/api/leads/import",
        files={"file": ("leads.csv", b"school\nUGA\n", "text/csv")},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json() == {
        "error": "Missing required CSV header: 'name' or 'main_contact'."
    }


@pytest.mark.asyncio
async def test_import_non_utf8_csv_is_rejected(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    content = "Name,School\nJosé,Ole Miss\n".encode("cp1252")

    response = await api_client.post(
        "/api/leads/import",
        files={"file": ("leads.csv", content, "text/csv")},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert "UTF-8" in response.json()["error"]


@pytest.mark.asyncio
async def test_convert_lead(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    lead = await _create(api_client, auth_headers, phoneNumber="662-555-0110")

    response = await api_client.post(
        f"/api/leads/{lead['id']}/convert",
        json={"inquiryDate": "2026-09-12", "inquiryTime": "20:00", "budget": 6500},
        headers=auth_headers,
    )

    assert response.status_code == 201
    inquiry = response.json()
    assert inquiry["mainContact"] == "Tyler Brooks"
    assert inquiry["phoneNumber"] == "662-555-0110"
    assert inquiry["budget"] == 6500

    refreshed = await api_client.get(f"/api/leads/{lead['id']}", headers=auth_headers)
    assert refreshed.json()["status"] == "Interested"


@pytest.mark.asyncio
async def test_convert_lead_without_fraternity(
    api_client: httpx.AsyncClient, auth_headers: dict[str, str]
) -> None:
    lead = await _create(api_client, auth_headers, fraternity=None)

    response = await api_client.post(
        f"/api/leads/{lead['id']}/convert",
        json={"inquiryDate": "2026-09-12"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert "school and fraternity" in response.json()["error"]
