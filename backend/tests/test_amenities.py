"""
Tests for the amenity catalogue.
"""

import pytest
from httpx import AsyncClient

from app.services import amenity_service


@pytest.mark.asyncio
async def test_create_amenity(client: AsyncClient):
    response = await client.post(
        "/api/v1/amenities",
        json={"name": "Sound System", "icon": "speaker", "category": "technical"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Sound System"
    assert data["category"] == "technical"
    assert "id" in data


@pytest.mark.asyncio
async def test_create_amenity_defaults_to_basic(client: AsyncClient):
    response = await client.post("/api/v1/amenities", json={"name": "Wi-Fi"})
    assert response.status_code == 201
    assert response.json()["category"] == "basic"


@pytest.mark.asyncio
async def test_create_duplicate_amenity(client: AsyncClient, test_amenity):
    response = await client.post("/api/v1/amenities", json={"name": "Projector"})
    assert response.status_code == 409
    assert response.json() == {"error": "Amenity already exists"}


@pytest.mark.asyncio
async def test_create_amenity_invalid_category(client: AsyncClient):
    response = await client.post("/api/v1/amenities", json={"name": "Helipad", "category": "aviation"})
    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_list_amenities(client: AsyncClient, test_amenity):
    await client.post("/api/v1/amenities", json={"name": "Bar", "category": "catering"})

    response = await client.get("/api/v1/amenities")
    assert response.status_code == 200
    # Ordered by category, then name
    assert [a["name"] for a in response.json()] == ["Bar", "Projector"]


@pytest.mark.asyncio
async def test_list_amenities_by_category(client: AsyncClient, test_amenity):
    await client.post("/api/v1/amenities", json={"name": "Bar", "category": "catering"})

    response = await client.get("/api/v1/amenities/category/technical")
    assert [a["name"] for a in response.json()] == ["Projector"]

    empty = await client.get("/api/v1/amenities/category/luxury")
    assert empty.json() == []


@pytest.mark.asyncio
async def test_list_amenities_unknown_category(client: AsyncClient):
    response = await client.get("/api/v1/amenities/category/aviation")
    assert response.status_code == 400
    assert response.json()["error"].startswith("Unknown category 'aviation'")


@pytest.mark.asyncio
async def test_concurrent_duplicate_amenity_is_conflict(client: AsyncClient, test_amenity, monkeypatch):
    """Another request inserts the same name between the lookup and our insert."""

    async def not_found_yet(db, name):
        return None

    monkeypatch.setattr(amenity_service, "find_amenity_by_name", not_found_yet)

    response = await client.post("/api/v1/amenities", json={"name": "Projector"})
    assert response.status_code == 409
    assert response.json() == {"error": "Amenity already exists"}

    listing = await client.get("/api/v1/amenities")
    assert [a["name"] for a in listing.json()] == ["Projector"]
