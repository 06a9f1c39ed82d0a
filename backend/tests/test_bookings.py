"""
Tests for the booking workflow and booking queries.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError

from app.models.booking import TouristEventBooking
from app.models.event import PriceCategory
from app.services import booking_service

BOOK_URL = "/api/v1/tourist/eventBooking"


async def _booked_total(db_session, event_id: int) -> int:
    result = await db_session.execute(
        select(func.coalesce(func.sum(TouristEventBooking.ticket_count), 0)).where(
            TouristEventBooking.event_id == event_id
        )
    )
    return result.scalar()


async def _booking_count(db_session) -> int:
    return (await db_session.execute(select(func.count()).select_from(TouristEventBooking))).scalar()


@pytest.mark.asyncio
async def test_book_event(client: AsyncClient, db_session, tourist_headers, tourist_user, test_event, general_price_id):
    """Successful booking records the tickets and payment."""
    response = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 7, "paymentAmount": 35},
        headers=tourist_headers,
    )
    assert response.status_code == 201
    assert response.json() == {"status": True, "message": "Booking Success"}

    booking = (await db_session.execute(select(TouristEventBooking))).scalar_one()
    assert booking.tourist_id == tourist_user.id
    assert booking.event_id == test_event.id
    assert booking.ticket_count == 7
    assert Decimal(booking.payment_amount) == Decimal("35")
    assert booking.status == "success"
    assert await _booked_total(db_session, test_event.id) == 7


@pytest.mark.asyncio
async def test_capacity_scenario(
    client: AsyncClient, db_session, tourist_headers, other_tourist_headers, test_event, general_price_id
):
    """7 of 10 booked, same tourist again -> 409, another tourist asking 5 -> 'Only 3 left.'"""
    first = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 7, "paymentAmount": 35},
        headers=tourist_headers,
    )
    assert first.status_code == 201

    again = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 1, "paymentAmount": 5},
        headers=tourist_headers,
    )
    assert again.status_code == 409
    assert again.json() == {"status": False, "message": "Event already booked by this user"}

    too_many = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 5, "paymentAmount": 25},
        headers=other_tourist_headers,
    )
    assert too_many.status_code == 400
    assert too_many.json()["message"] == "Not enough tickets available. Only 3 left."

    assert await _booked_total(db_session, test_event.id) == 7
    assert await _booking_count(db_session) == 1


@pytest.mark.asyncio
async def test_booking_exactly_fills_capacity(
    client: AsyncClient, db_session, tourist_headers, other_tourist_headers, test_event, general_price_id
):
    await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 7, "paymentAmount": 35},
        headers=tourist_headers,
    )
    response = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 3, "paymentAmount": 15},
        headers=other_tourist_headers,
    )
    assert response.status_code == 201
    assert await _booked_total(db_session, test_event.id) == test_event.maximum_count


@pytest.mark.asyncio
async def test_duplicate_booking_rejected_for_any_category(
    client: AsyncClient, tourist_headers, test_event, general_price_id, vip_price_id
):
    """A second booking for the same event conflicts regardless of tier or count."""
    await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 1, "paymentAmount": 5},
        headers=tourist_headers,
    )
    response = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": vip_price_id, "ticketCount": 2, "paymentAmount": 25},
        headers=tourist_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_incorrect_payment_amount(client: AsyncClient, db_session, tourist_headers, test_event, vip_price_id):
    """Payment must equal price x tickets exactly; message states both amounts."""
    response = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": vip_price_id, "ticketCount": 2, "paymentAmount": 24.99},
        headers=tourist_headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Incorrect payment amount. Expected 25.00, got 24.99"
    assert await _booking_count(db_session) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("amount, shown", [(35.001, "35.001"), (-35, "-35.00"), ("35.005", "35.005")])
async def test_off_by_fraction_or_negative_payment(
    client: AsyncClient, db_session, tourist_headers, test_event, general_price_id, amount, shown
):
    """Sub-cent and negative amounts reach the exact-amount check instead of schema validation."""
    response = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 7, "paymentAmount": amount},
        headers=tourist_headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == f"Incorrect payment amount. Expected 35.00, got {shown}"
    assert await _booking_count(db_session) == 0


@pytest.mark.asyncio
async def test_decimal_payment_amount_accepted(client: AsyncClient, tourist_headers, test_event, vip_price_id):
    response = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": vip_price_id, "ticketCount": 3, "paymentAmount": "37.50"},
        headers=tourist_headers,
    )
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_price_category_from_other_event(
    client: AsyncClient, db_session, tourist_headers, test_event, other_event
):
    """A price category must belong to the booked event."""
    foreign_id = (
        await db_session.execute(select(PriceCategory.id).where(PriceCategory.event_id == other_event.id))
    ).scalar_one()

    response = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": foreign_id, "ticketCount": 1, "paymentAmount": 20},
        headers=tourist_headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid price category for the selected event."


@pytest.mark.asyncio
async def test_book_nonexistent_event(client: AsyncClient, tourist_headers, tourist_user):
    response = await client.post(
        BOOK_URL,
        json={"eventId": 99999, "priceCategoryId": 1, "ticketCount": 1, "paymentAmount": 5},
        headers=tourist_headers,
    )
    assert response.status_code == 404
    assert response.json() == {"status": False, "message": "Event not found"}


@pytest.mark.asyncio
async def test_business_cannot_book(client: AsyncClient, business_headers, test_event, general_price_id):
    response = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 1, "paymentAmount": 5},
        headers=business_headers,
    )
    assert response.status_code == 403
    assert response.json()["message"] == "Only tourist users can book events"


@pytest.mark.asyncio
async def test_book_unauthenticated(client: AsyncClient, test_event, general_price_id):
    response = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 1, "paymentAmount": 5},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_zero_tickets_rejected_by_schema(client: AsyncClient, tourist_headers, test_event, general_price_id):
    response = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 0, "paymentAmount": 0},
        headers=tourist_headers,
    )
    assert response.status_code == 402


@pytest.mark.asyncio
async def test_booking_sends_confirmation_email(
    client: AsyncClient, notifier, tourist_headers, test_event, general_price_id
):
    await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 2, "paymentAmount": 10},
        headers=tourist_headers,
    )
    assert len(notifier.sent) == 1
    email = notifier.sent[0]
    assert email["to"] == "tourist@example.com"
    assert "Harbour Concert" in email["subject"]
    assert "10.00" in email["content"]


@pytest.mark.asyncio
async def test_rejected_booking_sends_no_email(client: AsyncClient, notifier, tourist_headers, test_event, general_price_id):
    await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 2, "paymentAmount": 11},
        headers=tourist_headers,
    )
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_duplicate_booking_race_hits_unique_constraint(
    client: AsyncClient, db_session, monkeypatch, tourist_headers, test_event, general_price_id, vip_price_id
):
    """A second request that slips past the existence query is stopped by uq_tourist_event_booking."""
    first = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 1, "paymentAmount": 5},
        headers=tourist_headers,
    )
    assert first.status_code == 201

    async def never_booked(db, tourist_id, event_id):
        return False

    monkeypatch.setattr(booking_service, "_has_booking", never_booked)

    second = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": vip_price_id, "ticketCount": 1, "paymentAmount": 12.5},
        headers=tourist_headers,
    )
    assert second.status_code == 409
    assert second.json() == {"status": False, "message": "Event already booked by this user"}
    assert await _booking_count(db_session) == 1


@pytest.mark.asyncio
async def test_failed_commit_sends_no_confirmation(
    client: AsyncClient, db_session, monkeypatch, notifier, tourist_headers, test_event, general_price_id
):
    """The confirmation email is only dispatched once the booking is committed."""

    async def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("could not serialize access"))

    monkeypatch.setattr(db_session, "commit", failing_commit)

    response = await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 2, "paymentAmount": 10},
        headers=tourist_headers,
    )
    assert response.status_code == 500
    assert response.json() == {"status": False, "message": "could not serialize access"}
    assert notifier.sent == []


# --- Booking queries ---


@pytest.mark.asyncio
async def test_get_bookings_paginated(
    client: AsyncClient, tourist_headers, test_event, other_event, general_price_id, db_session
):
    other_price_id = (
        await db_session.execute(select(PriceCategory.id).where(PriceCategory.event_id == other_event.id))
    ).scalar_one()
    await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 1, "paymentAmount": 5},
        headers=tourist_headers,
    )
    await client.post(
        BOOK_URL,
        json={"eventId": other_event.id, "priceCategoryId": other_price_id, "ticketCount": 2, "paymentAmount": 40},
        headers=tourist_headers,
    )

    response = await client.get("/api/v1/tourist/getBookings?page=1&limit=1", headers=tourist_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] is True
    assert data["currentPage"] == 1
    assert data["total"] == 2
    assert data["totalPages"] == 2
    assert len(data["bookings"]) == 1
    # Newest payment first
    assert data["bookings"][0]["eventId"] == other_event.id

    page_two = (await client.get("/api/v1/tourist/getBookings?page=2&limit=1", headers=tourist_headers)).json()
    assert page_two["bookings"][0]["eventId"] == test_event.id

    page_three = (await client.get("/api/v1/tourist/getBookings?page=3&limit=1", headers=tourist_headers)).json()
    assert page_three["bookings"] == []


@pytest.mark.asyncio
async def test_get_bookings_empty(client: AsyncClient, tourist_headers):
    response = await client.get("/api/v1/tourist/getBookings", headers=tourist_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 0
    assert data["totalPages"] == 0
    assert data["bookings"] == []


@pytest.mark.asyncio
async def test_get_bookings_requires_tourist(client: AsyncClient, business_headers):
    response = await client.get("/api/v1/tourist/getBookings", headers=business_headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Only tourists can view bookings."


@pytest.mark.asyncio
async def test_get_booking_by_id_with_joins(
    client: AsyncClient, db_session, tourist_headers, tourist_user, test_event, general_price_id
):
    await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 2, "paymentAmount": 10},
        headers=tourist_headers,
    )
    booking_id = (await db_session.execute(select(TouristEventBooking.id))).scalar_one()

    response = await client.get(f"/api/v1/tourist/getBooking/{booking_id}", headers=tourist_headers)
    assert response.status_code == 200
    booking = response.json()["booking"]
    assert booking["id"] == booking_id
    assert booking["event"]["name"] == "Harbour Concert"
    assert booking["priceCategory"]["price"] == 5.0
    assert booking["tourist"]["user"]["email"] == tourist_user.email
    assert "hashedPassword" not in booking["tourist"]["user"]


@pytest.mark.asyncio
async def test_get_booking_invalid_id(client: AsyncClient, tourist_headers):
    response = await client.get("/api/v1/tourist/getBooking/abc", headers=tourist_headers)
    assert response.status_code == 400
    assert response.json() == {"status": False, "message": "Invalid booking ID"}


@pytest.mark.asyncio
async def test_get_booking_not_found(client: AsyncClient, tourist_headers):
    response = await client.get("/api/v1/tourist/getBooking/424242", headers=tourist_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Booking not found"


@pytest.mark.asyncio
async def test_get_bookings_by_tourist_id(
    client: AsyncClient, tourist_headers, tourist_user, test_event, general_price_id
):
    await client.post(
        BOOK_URL,
        json={"eventId": test_event.id, "priceCategoryId": general_price_id, "ticketCount": 4, "paymentAmount": 20},
        headers=tourist_headers,
    )
    response = await client.get(
        f"/api/v1/tourist/getBookingByTouristId/{tourist_user.id}", headers=tourist_headers
    )
    assert response.status_code == 200
    bookings = response.json()["bookings"]
    assert len(bookings) == 1
    assert bookings[0]["ticketCount"] == 4
    assert bookings[0]["event"]["id"] == test_event.id
    assert bookings[0]["priceCategory"]["name"] == "General"


@pytest.mark.asyncio
async def test_get_bookings_by_tourist_id_none_is_404(client: AsyncClient, tourist_headers, tourist_user):
    response = await client.get(
        f"/api/v1/tourist/getBookingByTouristId/{tourist_user.id}", headers=tourist_headers
    )
    assert response.status_code == 404
    assert response.json()["message"] == "No bookings found for this tourist"
