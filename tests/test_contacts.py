import pytest
from httpx import AsyncClient

from database import CONTACTS


async def submit(client: AsyncClient, payload):
    response = await client.post("/api/contacts", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_public_submission(client: AsyncClient, contact_data):
    created = await submit(client, contact_data)

    assert created["name"] == contact_data["name"]
    assert created["email"] == contact_data["email"]
    assert created["read"] is False


@pytest.mark.asyncio
async def test_submission_cannot_set_read_flag(client: AsyncClient, contact_data, database):
    await submit(client, dict(contact_data, read=True, _id="5f1d7f1e2a3b4c5d6e7f8091"))

    stored = database.get_documents(CONTACTS)
    assert len(stored) == 1
    assert stored[0]["read"] is False
    assert str(stored[0]["_id"]) != "5f1d7f1e2a3b4c5d6e7f8091"


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["name", "email", "message"])
async def test_submission_requires_every_field(client: AsyncClient, contact_data, missing):
    payload = dict(contact_data)
    payload.pop(missing)

    response = await client.post("/api/contacts", json=payload)

    assert response.status_code == 400
    assert response.json()["fields"] == [missing]


@pytest.mark.asyncio
async def test_submission_rejects_blank_message(client: AsyncClient, contact_data):
    response = await client.post("/api/contacts", json=dict(contact_data, message="   "))

    assert response.status_code == 400
    assert response.json()["fields"] == ["message"]


@pytest.mark.asyncio
async def test_inbox_requires_auth(client: AsyncClient, contact_data):
    await submit(client, contact_data)

    response = await client.get("/api/contacts")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_inbox_lists_newest_first(client: AsyncClient, auth_headers, contact_data):
    await submit(client, dict(contact_data, name="First"))
    await submit(client, dict(contact_data, name="Second"))

    response = await client.get("/api/contacts", headers=auth_headers)

    data = response.json()
    assert data["total"] == 2
    assert [item["name"] for item in data["data"]] == ["Second", "First"]


@pytest.mark.asyncio
async def test_mark_read(client: AsyncClient, auth_headers, contact_data):
    created = await submit(client, contact_data)

    response = await client.put(f"/api/contacts/{created['_id']}/read", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["read"] is True

    # marking twice leaves it read
    response = await client.put(f"/api/contacts/{created['_id']}/read", headers=auth_headers)
    assert response.json()["data"]["read"] is True


@pytest.mark.asyncio
async def test_mark_read_requires_auth(client: AsyncClient, contact_data, database):
    created = await submit(client, contact_data)

    response = await client.put(f"/api/contacts/{created['_id']}/read")

    assert response.status_code == 401
    assert database.get_documents(CONTACTS)[0]["read"] is False


@pytest.mark.asyncio
async def test_delete_contact(client: AsyncClient, auth_headers, contact_data, database):
    created = await submit(client, contact_data)

    response = await client.delete(f"/api/contacts/{created['_id']}", headers=auth_headers)

    assert response.status_code == 200
    assert database.count_documents(CONTACTS) == 0


@pytest.mark.asyncio
async def test_unknown_contact(client: AsyncClient, auth_headers):
    response = await client.delete("/api/contacts/not-an-id", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["code"] == "CONTACT_NOT_FOUND"
