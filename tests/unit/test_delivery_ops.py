"""Unit tests for doorstep delivery confirmation."""

import uuid

import pytest
from fastapi import HTTPException
from services.furniture_service.models import (
    Booking,
    BookingStatus,
    PaymentMethod,
    PaymentStatus,
)
from services.furniture_service.schemas import DeliveryConfirmRequest
from services.furniture_service.services.delivery_ops import (
    confirm_delivery,
    generate_delivery_otp,
    get_for_delivery,
    issue_delivery_otp,
    search_for_delivery,
)
from sqlalchemy import select
from tests.factories import (
    BookingFactory,
    CourierFactory,
    CustomerFactory,
    ProductFactory,
    persist,
)


def _confirm(otp="4321"):
    return DeliveryConfirmRequest(
        otp=otp, courier_name="Ravi", courier_phone="9000000001"
    )


async def _seed_booking(db, **overrides):
    customer = CustomerFactory.create()
    product = ProductFactory.create()
    booking = BookingFactory.create(customer, product, **overrides)
    await persist(db, customer, product, booking)
    return booking


async def _stored_otp(db, booking_id):
    return await db.scalar(select(Booking.delivery_otp).where(Booking.id == booking_id))


# ---------------------------------------------------------------------------
# OTP generation
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_delivery_otp_is_four_digits():
    for _ in range(200):
        otp = generate_delivery_otp()
        assert len(otp) == 4
        assert 1000 <= int(otp) <= 9999


@pytest.mark.asyncio
@pytest.mark.unit
async def test_issue_otp_stores_code(db_session):
    booking = await _seed_booking(db_session, status=BookingStatus.SHIPPED)

    otp = await issue_delivery_otp(db_session, booking)

    assert await _stored_otp(db_session, booking.id) == otp
    assert booking.otp_verified is False


@pytest.mark.asyncio
@pytest.mark.unit
async def test_issue_otp_replaces_previous_code(db_session):
    booking = await _seed_booking(
        db_session, status=BookingStatus.READY_FOR_DELIVERY, delivery_otp="0000"
    )

    otp = await issue_delivery_otp(db_session, booking)

    assert await _stored_otp(db_session, booking.id) == otp


@pytest.mark.asyncio
@pytest.mark.unit
async def test_issue_otp_rejects_delivered_booking(db_session):
    booking = await _seed_booking(db_session, status=BookingStatus.DELIVERED)

    with pytest.raises(HTTPException) as exc:
        await issue_delivery_otp(db_session, booking)

    assert exc.value.status_code == 400
    assert exc.value.detail.endswith("delivered")


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_search_includes_processing(db_session):
    booking = await _seed_booking(db_session, status=BookingStatus.PROCESSING)

    found = await search_for_delivery(db_session, booking.booking_code.lower())
    assert found.id == booking.id

    with pytest.raises(HTTPException) as exc:
        await get_for_delivery(db_session, booking.id)
    assert exc.value.status_code == 400
    assert "processing" in exc.value.detail


@pytest.mark.asyncio
@pytest.mark.unit
async def test_search_rejects_cancelled(db_session):
    booking = await _seed_booking(db_session, status=BookingStatus.CANCELLED)

    with pytest.raises(HTTPException) as exc:
        await search_for_delivery(db_session, booking.booking_code)
    assert exc.value.detail == "Booking is not available for delivery. Status: cancelled"


# ---------------------------------------------------------------------------
# confirm_delivery
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_confirm_marks_delivered_and_settles_cod(db_session):
    courier = CourierFactory.create()
    await persist(db_session, courier)
    booking = await _seed_booking(
        db_session,
        status=BookingStatus.READY_FOR_DELIVERY,
        payment_method=PaymentMethod.COD,
        delivery_otp="4321",
    )

    result = await confirm_delivery(
        db_session, booking.id, _confirm("4321"), courier_id=courier.id
    )

    assert result.status == BookingStatus.DELIVERED
    assert result.otp_verified is True
    assert result.delivered_at is not None
    assert result.payment_status == PaymentStatus.COMPLETED
    assert result.courier_name == "Ravi"
    assert result.courier_phone == "9000000001"
    assert result.courier_id == courier.id
    assert await _stored_otp(db_session, booking.id) is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_confirm_prepaid_leaves_payment_status(db_session):
    booking = await _seed_booking(
        db_session,
        status=BookingStatus.SHIPPED,
        payment_method=PaymentMethod.UPI,
        payment_status=PaymentStatus.PENDING,
        delivery_otp="1111",
    )

    result = await confirm_delivery(db_session, booking.id, _confirm("1111"))

    assert result.status == BookingStatus.DELIVERED
    assert result.payment_status == PaymentStatus.PENDING


@pytest.mark.asyncio
@pytest.mark.unit
async def test_confirm_wrong_otp_changes_nothing(db_session):
    booking = await _seed_booking(
        db_session, status=BookingStatus.SHIPPED, delivery_otp="4321"
    )

    with pytest.raises(HTTPException) as exc:
        await confirm_delivery(db_session, booking.id, _confirm("1234"))

    assert exc.value.status_code == 400
    assert exc.value.detail == "Invalid OTP"
    assert booking.status == BookingStatus.SHIPPED
    assert await _stored_otp(db_session, booking.id) == "4321"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_confirm_without_issued_otp(db_session):
    booking = await _seed_booking(db_session, status=BookingStatus.SHIPPED)

    with pytest.raises(HTTPException) as exc:
        await confirm_delivery(db_session, booking.id, _confirm("1234"))
    assert exc.value.detail == "Invalid OTP"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_confirm_already_delivered_names_status(db_session):
    booking = await _seed_booking(
        db_session, status=BookingStatus.DELIVERED, delivery_otp="4321"
    )

    with pytest.raises(HTTPException) as exc:
        await confirm_delivery(db_session, booking.id, _confirm("4321"))

    assert exc.value.status_code == 400
    assert (
        exc.value.detail == "Cannot confirm delivery for booking with status: delivered"
    )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_confirm_unknown_booking(db_session):
    with pytest.raises(HTTPException) as exc:
        await confirm_delivery(db_session, uuid.uuid4(), _confirm())
    assert exc.value.status_code == 404
