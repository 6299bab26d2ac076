"""Shared request helpers for API tests."""

from typing import Optional

from httpx import AsyncClient


async def book(
    client: AsyncClient,
    venue_id: int,
    start: str,
    end: str,
    headers: Optional[dict] = None,
    **extra,
):
    """POST a booking and return the response."""
    return await client.post(
        "/api/v1/bookings",
        json={"venueId": venue_id, "startDate": start, "endDate": end, **extra},
        headers=headers,
    )


async def reschedule(client: AsyncClient, booking_id: int, start: str, end: str):
    return await client.put(
        f"/api/v1/bookings/{booking_id}/reschedule",
        json={"startDate": start, "endDate": end},
    )


async def check(client: AsyncClient, venue_id: int, start: str, end: str):
    return await client.get(
        "/api/v1/bookings/check-availability",
        params={"venueId": venue_id, "startDate": start, "endDate": end},
    )
