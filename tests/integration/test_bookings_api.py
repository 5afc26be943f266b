"""Integration tests for the bookings API."""

import uuid
from datetime import timedelta

import pytest
from libs.auth.models import Role
from services.furniture_service.models import BookingStatus
from tests.factories import (
    BookingFactory,
    CustomerFactory,
    ProductFactory,
    _now,
    persist,
)


def _booking_payload(product, quantity=1):
    return {
        "product_id": str(product.id),
        "quantity": quantity,
        "shipping_address": {
            "street": "12 MG Road",
            "city": "Bengaluru",
            "state": "Karnataka",
            "zip_code": "560001",
        },
        "payment_method": "cod",
    }


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_booking(client, db_session, make_headers, mock_emails):
    customer = CustomerFactory.create(name="Asha")
    product = ProductFactory.create(stock=5)
    await persist(db_session, customer, product)

    response = await client.post(
        "/api/bookings",
        json=_booking_payload(product, quantity=2),
        headers=make_headers(customer.id, Role.CUSTOMER),
    )

    assert response.status_code == 201, response.text
    data = response.json()["data"]
    assert data["booking_code"].startswith("BK-")
    assert data["total_price"] == 1800.0
    assert data["status"] == "pending"
    assert data["payment_status"] == "pending"
    assert data["product"]["id"] == str(product.id)
    assert "delivery_otp" not in data

    await db_session.refresh(product)
    assert product.stock == 3

    mock_emails["send_booking_confirmation_email"].assert_awaited_once()
    args = mock_emails["send_booking_confirmation_email"].await_args.args
    assert args[0] == customer.email
    assert args[2] == data["booking_code"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_booking_insufficient_stock(
    client, db_session, make_headers, mock_emails
):
    customer = CustomerFactory.create()
    product = ProductFactory.create(stock=1)
    await persist(db_session, customer, product)

    response = await client.post(
        "/api/bookings",
        json=_booking_payload(product, quantity=3),
        headers=make_headers(customer.id, Role.CUSTOMER),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Insufficient stock"
    mock_emails["send_booking_confirmation_email"].assert_not_called()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_booking_zero_quantity(client, db_session, make_headers):
    customer = CustomerFactory.create()
    product = ProductFactory.create()
    await persist(db_session, customer, product)

    response = await client.post(
        "/api/bookings",
        json=_booking_payload(product, quantity=0),
        headers=make_headers(customer.id, Role.CUSTOMER),
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_cannot_book(client, db_session, admin_headers):
    product = await persist(db_session, ProductFactory.create())

    response = await client.post(
        "/api/bookings", json=_booking_payload(product), headers=admin_headers
    )
    assert response.status_code == 403


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_my_bookings_newest_first(client, db_session, make_headers):
    customer = CustomerFactory.create()
    other = CustomerFactory.create()
    older = BookingFactory.create(customer, created_at=_now() - timedelta(days=2))
    newer = BookingFactory.create(customer, created_at=_now())
    foreign = BookingFactory.create(other)
    await persist(db_session, customer, other, older, newer, foreign)

    response = await client.get(
        "/api/bookings", headers=make_headers(customer.id, Role.CUSTOMER)
    )

    codes = [b["booking_code"] for b in response.json()["data"]]
    assert codes == [newer.booking_code, older.booking_code]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_booking_visible_to_owner_and_admin_only(
    client, db_session, make_headers, admin_headers
):
    owner = CustomerFactory.create()
    stranger = CustomerFactory.create()
    booking = BookingFactory.create(owner)
    await persist(db_session, owner, stranger, booking)

    url = f"/api/bookings/{booking.id}"
    assert (
        await client.get(url, headers=make_headers(owner.id, Role.CUSTOMER))
    ).status_code == 200
    assert (await client.get(url, headers=admin_headers)).status_code == 200

    denied = await client.get(url, headers=make_headers(stranger.id, Role.CUSTOMER))
    assert denied.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_public_lookup_by_code(client, db_session):
    customer = CustomerFactory.create()
    booking = BookingFactory.create(customer, booking_code="BK-Q1W2E3")
    await persist(db_session, customer, booking)

    found = await client.get("/api/bookings/by-code", params={"booking_code": "bk-q1w2e3"})
    assert found.status_code == 200
    assert found.json()["data"]["id"] == str(booking.id)

    missing = await client.get(
        "/api/bookings/by-code", params={"booking_code": "BK-000000"}
    )
    assert missing.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_booking(client, admin_headers):
    response = await client.get(f"/api/bookings/{uuid.uuid4()}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_list_filters_by_status(client, db_session, admin_headers):
    customer = CustomerFactory.create()
    shipped = BookingFactory.create(customer, status=BookingStatus.SHIPPED)
    pending = BookingFactory.create(customer)
    await persist(db_session, customer, shipped, pending)

    response = await client.get(
        "/api/bookings/admin/all", params={"status": "shipped"}, headers=admin_headers
    )

    data = response.json()["data"]
    assert [b["id"] for b in data["items"]] == [str(shipped.id)]
    assert data["pagination"]["total"] == 1


# ---------------------------------------------------------------------------
# Status changes and cancellation
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_status_update_notifies_customer(
    client, db_session, admin_headers, mock_emails
):
    customer = CustomerFactory.create()
    booking = BookingFactory.create(customer)
    await persist(db_session, customer, booking)

    response = await client.patch(
        f"/api/bookings/{booking.id}/status",
        json={"status": "shipped"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "shipped"
    mock_emails["send_booking_status_email"].assert_awaited_once_with(
        customer.email, customer.name, booking.booking_code, "shipped"
    )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_only_update_sends_no_email(
    client, db_session, admin_headers, mock_emails
):
    customer = CustomerFactory.create()
    booking = BookingFactory.create(customer)
    await persist(db_session, customer, booking)

    response = await client.patch(
        f"/api/bookings/{booking.id}/status",
        json={"payment_status": "completed"},
        headers=admin_headers,
    )

    assert response.json()["data"]["payment_status"] == "completed"
    mock_emails["send_booking_status_email"].assert_not_called()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_status_update_requires_admin(client, db_session, make_headers):
    customer = CustomerFactory.create()
    booking = BookingFactory.create(customer)
    await persist(db_session, customer, booking)

    response = await client.patch(
        f"/api/bookings/{booking.id}/status",
        json={"status": "delivered"},
        headers=make_headers(customer.id, Role.CUSTOMER),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_owner_cancels_and_stock_returns(
    client, db_session, make_headers, mock_emails
):
    customer = CustomerFactory.create()
    product = ProductFactory.create(stock=2)
    booking = BookingFactory.create(customer, product, quantity=3)
    await persist(db_session, customer, product, booking)

    response = await client.patch(
        f"/api/bookings/{booking.id}/cancel",
        headers=make_headers(customer.id, Role.CUSTOMER),
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "cancelled"
    await db_session.refresh(product)
    assert product.stock == 5
    mock_emails["send_booking_status_email"].assert_awaited_once()

    again = await client.patch(
        f"/api/bookings/{booking.id}/cancel",
        headers=make_headers(customer.id, Role.CUSTOMER),
    )
    assert again.status_code == 400
    await db_session.refresh(product)
    assert product.stock == 5


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delivered_booking_cannot_be_cancelled(client, db_session, admin_headers):
    customer = CustomerFactory.create()
    booking = BookingFactory.create(customer, status=BookingStatus.DELIVERED)
    await persist(db_session, customer, booking)

    response = await client.patch(
        f"/api/bookings/{booking.id}/cancel", headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot cancel a delivered booking"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_stranger_cannot_cancel(client, db_session, make_headers):
    owner = CustomerFactory.create()
    stranger = CustomerFactory.create()
    booking = BookingFactory.create(owner)
    await persist(db_session, owner, stranger, booking)

    response = await client.patch(
        f"/api/bookings/{booking.id}/cancel",
        headers=make_headers(stranger.id, Role.CUSTOMER),
    )
    assert response.status_code == 403
