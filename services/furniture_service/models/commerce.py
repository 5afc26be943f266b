"""Booking model: one product line ordered by a customer."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONType
from services.furniture_service.models.enums import (
    BookingStatus,
    PaymentMethod,
    PaymentStatus,
    enum_values,
)
from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Booking(Base):
    """A customer's order for a single product.

    Bookings are never deleted; cancellation is a status change.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_bookings_quantity_positive"),
        Index("ix_bookings_customer_created", "customer_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_code: Mapped[str] = mapped_column(
        String(12), unique=True, index=True, nullable=False
    )  # BK-XXXXXX

    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="SET NULL"), nullable=True
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[BookingStatus] = mapped_column(
        SAEnum(BookingStatus, values_callable=enum_values, name="booking_status_enum"),
        default=BookingStatus.PENDING,
        server_default="pending",
        index=True,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(PaymentStatus, values_callable=enum_values, name="payment_status_enum"),
        default=PaymentStatus.PENDING,
        server_default="pending",
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(PaymentMethod, values_callable=enum_values, name="payment_method_enum"),
        default=PaymentMethod.COD,
        server_default="cod",
    )

    # {"street", "city", "state", "zip_code", "country"}
    shipping_address: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)

    delivery_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    delivered_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Delivery confirmation; the code is never loaded unless asked for
    delivery_otp: Mapped[Optional[str]] = mapped_column(
        String(4), nullable=True, deferred=True
    )
    otp_verified: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    courier_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("couriers.id", ondelete="SET NULL"), nullable=True
    )
    courier_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    courier_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Gateway references
    gateway_order_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    gateway_payment_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    customer = relationship("Customer", lazy="selectin")
    product = relationship("Product", lazy="selectin")

    def __repr__(self):
        return f"<Booking {self.booking_code}>"
