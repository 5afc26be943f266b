"""Unit tests for booking_ops core business logic.

Tests call booking_ops functions directly with the db_session fixture.
No HTTP layer involved.
"""

import re
import uuid
from decimal import Decimal
from unittest.mock import patch

import pytest
from fastapi import HTTPException
from services.furniture_service.models import (
    Booking,
    BookingStatus,
    PaymentMethod,
    PaymentStatus,
)
from services.furniture_service.schemas import (
    Address,
    BookingCreate,
    BookingStatusUpdate,
    CodCartItem,
    CodOrderRequest,
)
from services.furniture_service.services import booking_ops
from services.furniture_service.services.booking_ops import (
    cancel_booking,
    create_booking,
    generate_booking_code,
    get_booking_by_code,
    place_cod_order,
    unit_price,
    update_booking_status,
)
from sqlalchemy import func, select
from tests.factories import BookingFactory, CustomerFactory, ProductFactory, persist

CODE_PATTERN = re.compile(r"^BK-[A-Z0-9]{6}$")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _booking_request(product, quantity=1, **overrides):
    return BookingCreate(
        product_id=product.id,
        quantity=quantity,
        shipping_address=Address(street="12 MG Road", city="Bengaluru"),
        **overrides,
    )


# ---------------------------------------------------------------------------
# Booking codes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_generated_code_matches_format(db_session):
    code = await generate_booking_code(db_session)
    assert CODE_PATTERN.match(code)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_generate_code_resamples_on_collision(db_session):
    """A code already in the table is skipped."""
    customer = CustomerFactory.create()
    existing = BookingFactory.create(customer, booking_code="BK-AAAAAA")
    await persist(db_session, customer, existing)

    with patch.object(
        booking_ops, "_random_code", side_effect=["BK-AAAAAA", "BK-BBBBBB"]
    ):
        code = await generate_booking_code(db_session)

    assert code == "BK-BBBBBB"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_generate_code_skips_reserved(db_session):
    with patch.object(
        booking_ops, "_random_code", side_effect=["BK-CCCCCC", "BK-DDDDDD"]
    ):
        code = await generate_booking_code(db_session, reserved={"BK-CCCCCC"})

    assert code == "BK-DDDDDD"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_booking_by_code_normalizes_input(db_session):
    customer = CustomerFactory.create()
    booking = BookingFactory.create(customer, booking_code="BK-XY12Z9")
    await persist(db_session, customer, booking)

    found = await get_booking_by_code(db_session, "  bk-xy12z9 ")
    assert found.id == booking.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_booking_by_code_unknown(db_session):
    with pytest.raises(HTTPException) as exc:
        await get_booking_by_code(db_session, "BK-NOPE00")
    assert exc.value.status_code == 404


# ---------------------------------------------------------------------------
# create_booking
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_unit_price_prefers_final_price():
    product = ProductFactory.create(price=Decimal("1000"), final_price=Decimal("0"))
    assert unit_price(product) == Decimal("0")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_booking_decrements_stock_and_prices(db_session):
    customer = CustomerFactory.create()
    product = ProductFactory.create(stock=5, final_price=Decimal("900.00"))
    await persist(db_session, customer, product)

    booking = await create_booking(
        db_session, customer=customer, data=_booking_request(product, quantity=2)
    )

    assert CODE_PATTERN.match(booking.booking_code)
    assert booking.total_price == Decimal("1800.00")
    assert booking.status == BookingStatus.PENDING
    assert booking.payment_status == PaymentStatus.PENDING
    assert booking.shipping_address["city"] == "Bengaluru"
    assert product.stock == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_booking_can_take_last_units(db_session):
    customer = CustomerFactory.create()
    product = ProductFactory.create(stock=2)
    await persist(db_session, customer, product)

    await create_booking(
        db_session, customer=customer, data=_booking_request(product, quantity=2)
    )
    assert product.stock == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_booking_insufficient_stock(db_session):
    customer = CustomerFactory.create()
    product = ProductFactory.create(stock=1)
    await persist(db_session, customer, product)

    with pytest.raises(HTTPException) as exc:
        await create_booking(
            db_session, customer=customer, data=_booking_request(product, quantity=2)
        )

    assert exc.value.status_code == 400
    assert exc.value.detail == "Insufficient stock"
    assert product.stock == 1
    count = await db_session.scalar(select(func.count()).select_from(Booking))
    assert count == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_booking_unknown_product(db_session):
    customer = CustomerFactory.create()
    await persist(db_session, customer)

    request = BookingCreate(
        product_id=uuid.uuid4(),
        quantity=1,
        shipping_address=Address(street="Somewhere"),
    )
    with pytest.raises(HTTPException) as exc:
        await create_booking(db_session, customer=customer, data=request)
    assert exc.value.status_code == 404


# ---------------------------------------------------------------------------
# cancel_booking
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cancel_restores_stock(db_session):
    customer = CustomerFactory.create()
    product = ProductFactory.create(stock=3)
    booking = BookingFactory.create(customer, product, quantity=2)
    await persist(db_session, customer, product, booking)

    await cancel_booking(db_session, booking)

    assert booking.status == BookingStatus.CANCELLED
    assert booking.cancelled_at is not None
    assert product.stock == 5


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cancel_delivered_booking_rejected(db_session):
    customer = CustomerFactory.create()
    product = ProductFactory.create(stock=3)
    booking = BookingFactory.create(
        customer, product, status=BookingStatus.DELIVERED
    )
    await persist(db_session, customer, product, booking)

    with pytest.raises(HTTPException) as exc:
        await cancel_booking(db_session, booking)

    assert exc.value.status_code == 400
    assert product.stock == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cancel_twice_does_not_restore_twice(db_session):
    customer = CustomerFactory.create()
    product = ProductFactory.create(stock=3)
    booking = BookingFactory.create(customer, product, quantity=1)
    await persist(db_session, customer, product, booking)

    await cancel_booking(db_session, booking)
    with pytest.raises(HTTPException) as exc:
        await cancel_booking(db_session, booking)

    assert exc.value.detail == "Booking is already cancelled"
    assert product.stock == 4


# ---------------------------------------------------------------------------
# update_booking_status
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_status_update_reports_change(db_session):
    customer = CustomerFactory.create()
    booking = BookingFactory.create(customer)
    await persist(db_session, customer, booking)

    changed = await update_booking_status(
        db_session, booking, BookingStatusUpdate(status=BookingStatus.SHIPPED)
    )
    assert changed is True
    assert booking.status == BookingStatus.SHIPPED

    changed = await update_booking_status(
        db_session,
        booking,
        BookingStatusUpdate(payment_status=PaymentStatus.COMPLETED),
    )
    assert changed is False
    assert booking.payment_status == PaymentStatus.COMPLETED


@pytest.mark.asyncio
@pytest.mark.unit
async def test_status_update_stamps_delivered_at(db_session):
    customer = CustomerFactory.create()
    booking = BookingFactory.create(customer, status=BookingStatus.SHIPPED)
    await persist(db_session, customer, booking)

    await update_booking_status(
        db_session, booking, BookingStatusUpdate(status=BookingStatus.DELIVERED)
    )
    assert booking.delivered_at is not None


# ---------------------------------------------------------------------------
# place_cod_order
# ---------------------------------------------------------------------------


def _cod_request(*lines):
    return CodOrderRequest(
        cart_items=[CodCartItem(product_id=p.id, quantity=q) for p, q in lines],
        shipping_address="  221B Residency Road, Bengaluru  ",
        phone="9876500000",
        first_name="Asha",
        last_name="Rao",
    )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cod_order_creates_one_booking_per_line(db_session):
    customer = CustomerFactory.create()
    chair = ProductFactory.create(
        name="Chair", stock=4, final_price=Decimal("250.00")
    )
    table = ProductFactory.create(
        name="Table", stock=1, final_price=Decimal("1200.00")
    )
    await persist(db_session, customer, chair, table)

    order = await place_cod_order(
        db_session, customer=customer, data=_cod_request((chair, 2), (table, 1))
    )

    assert len(order.bookings) == 2
    assert order.total == Decimal("1700.00")
    assert order.order_id == order.bookings[0].booking_code
    assert len({b.booking_code for b in order.bookings}) == 2
    for booking in order.bookings:
        assert booking.status == BookingStatus.READY_FOR_DELIVERY
        assert booking.payment_method == PaymentMethod.COD
        assert booking.payment_status == PaymentStatus.PENDING
        assert booking.shipping_address == {"street": "221B Residency Road, Bengaluru"}
    assert chair.stock == 2
    assert table.stock == 0
    assert order.items[0] == {"name": "Chair", "quantity": 2, "price": 250.0}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cod_order_rejects_whole_cart_on_short_stock(db_session):
    """A failing line leaves every product untouched."""
    customer = CustomerFactory.create()
    chair = ProductFactory.create(name="Chair", stock=4)
    table = ProductFactory.create(name="Table", stock=1)
    await persist(db_session, customer, chair, table)

    with pytest.raises(HTTPException) as exc:
        await place_cod_order(
            db_session, customer=customer, data=_cod_request((chair, 2), (table, 3))
        )

    assert exc.value.status_code == 400
    assert "Table" in exc.value.detail
    assert chair.stock == 4
    assert table.stock == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cod_order_counts_repeated_lines_together(db_session):
    customer = CustomerFactory.create()
    chair = ProductFactory.create(name="Chair", stock=3)
    await persist(db_session, customer, chair)

    with pytest.raises(HTTPException) as exc:
        await place_cod_order(
            db_session, customer=customer, data=_cod_request((chair, 2), (chair, 2))
        )

    assert exc.value.status_code == 400
    assert chair.stock == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cod_order_unknown_product(db_session):
    customer = CustomerFactory.create()
    await persist(db_session, customer)

    request = CodOrderRequest(
        cart_items=[CodCartItem(product_id=uuid.uuid4(), quantity=1)],
        shipping_address="Somewhere",
        first_name="Asha",
    )
    with pytest.raises(HTTPException) as exc:
        await place_cod_order(db_session, customer=customer, data=request)
    assert exc.value.status_code == 404
