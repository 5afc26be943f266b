"""Pydantic schemas for the furniture service."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from services.furniture_service.models import (
    AdminRole,
    BookingStatus,
    FurnitureCategory,
    PaymentMethod,
    PaymentStatus,
)

# ============================================================================
# IDENTITY SCHEMAS
# ============================================================================


class Address(BaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = "India"


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[Address] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class GoogleLoginRequest(BaseModel):
    credential: str = Field(..., min_length=1)  # Google ID token


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1)


class OTPRequest(BaseModel):
    email: EmailStr


class OTPVerifyRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=1, max_length=6)


class CourierCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=20)
    address: Optional[str] = None


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[dict] = None
    role: str
    is_verified: bool
    is_active: bool
    profile_image: Optional[str] = None
    created_at: datetime


class AdminResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None
    role: AdminRole
    is_verified: bool
    created_at: datetime


class CourierResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    phone: str
    address: Optional[str] = None
    is_active: bool
    created_at: datetime


class SessionResponse(BaseModel):
    """Returned on every successful login."""

    token: str
    role: str
    user: dict


# ============================================================================
# CATALOG SCHEMAS
# ============================================================================


class SpecificationItem(BaseModel):
    key: str
    value: str


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    category: FurnitureCategory
    price: float = Field(..., ge=0)
    discount_percentage: float = Field(0, ge=0, le=100)
    final_price: Optional[float] = Field(None, ge=0)
    image: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    stock: int = Field(0, ge=0)
    is_visible: bool = True
    specifications: list[SpecificationItem] = Field(default_factory=list)
    brand: Optional[str] = Field(None, max_length=100)
    sku: Optional[str] = Field(None, max_length=100)
    weight: Optional[str] = Field(None, max_length=50)
    dimensions: Optional[str] = Field(None, max_length=100)
    material: Optional[str] = Field(None, max_length=100)
    warranty: Optional[str] = Field(None, max_length=100)
    return_policy: Optional[str] = None
    colors: list[str] = Field(default_factory=list)
    finishes: list[str] = Field(default_factory=list)


class ProductCreate(ProductBase):
    slug: Optional[str] = Field(None, max_length=255)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    category: Optional[FurnitureCategory] = None
    price: Optional[float] = Field(None, ge=0)
    discount_percentage: Optional[float] = Field(None, ge=0, le=100)
    final_price: Optional[float] = Field(None, ge=0)
    image: Optional[str] = None
    images: Optional[list[str]] = None
    stock: Optional[int] = Field(None, ge=0)
    is_visible: Optional[bool] = None
    specifications: Optional[list[SpecificationItem]] = None
    brand: Optional[str] = Field(None, max_length=100)
    sku: Optional[str] = Field(None, max_length=100)
    weight: Optional[str] = Field(None, max_length=50)
    dimensions: Optional[str] = Field(None, max_length=100)
    material: Optional[str] = Field(None, max_length=100)
    warranty: Optional[str] = Field(None, max_length=100)
    return_policy: Optional[str] = None
    colors: Optional[list[str]] = None
    finishes: Optional[list[str]] = None


class VisibilityUpdate(BaseModel):
    is_visible: bool


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field("", max_length=2000)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: str
    user_name: str
    rating: int
    comment: str
    created_at: datetime


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    description: str
    category: FurnitureCategory
    price: float
    discount_percentage: float
    final_price: float
    image: str
    images: list[str]
    stock: int
    is_visible: bool
    rating: float
    reviews: list[ReviewResponse] = []
    specifications: list[SpecificationItem] = []
    brand: Optional[str] = None
    sku: Optional[str] = None
    weight: Optional[str] = None
    dimensions: Optional[str] = None
    material: Optional[str] = None
    warranty: Optional[str] = None
    return_policy: Optional[str] = None
    colors: list[str] = []
    finishes: list[str] = []
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProductSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    image: str
    final_price: float


# ============================================================================
# BOOKING SCHEMAS
# ============================================================================


class BookingCreate(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(1, ge=1)
    shipping_address: Address
    payment_method: PaymentMethod = PaymentMethod.COD
    delivery_date: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=1000)


class BookingStatusUpdate(BaseModel):
    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None


class BookingResponse(BaseModel):
    """Booking as seen by its owner and by operators. Never carries the OTP."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    booking_code: str
    customer_id: uuid.UUID
    product_id: Optional[uuid.UUID] = None
    product: Optional[ProductSummary] = None
    quantity: int
    total_price: float
    status: BookingStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    shipping_address: Optional[dict] = None
    delivery_date: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    notes: Optional[str] = None
    otp_verified: bool
    courier_name: Optional[str] = None
    courier_phone: Optional[str] = None
    gateway_order_id: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CustomerContact(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None


class DeliveryBookingResponse(BookingResponse):
    """Booking plus the customer contact a courier needs at the door."""

    customer: Optional[CustomerContact] = None


# ============================================================================
# DELIVERY SCHEMAS
# ============================================================================


class DeliveryConfirmRequest(BaseModel):
    otp: str = Field(..., min_length=1, max_length=4)
    courier_name: str = Field(..., min_length=1, max_length=100)
    courier_phone: str = Field(..., min_length=1, max_length=20)


# ============================================================================
# PAYMENT SCHEMAS
# ============================================================================


class CreateOrderRequest(BaseModel):
    amount: float = Field(..., gt=0)
    receipt: str = Field(..., min_length=1, max_length=40)


class GatewayOrderResponse(BaseModel):
    order_id: str
    amount: int  # paise
    currency: str


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    booking_code: Optional[str] = None


class RefundRequest(BaseModel):
    payment_id: str = Field(..., min_length=1)
    amount: Optional[float] = Field(None, gt=0)


class CodCartItem(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(..., ge=1)


class CodOrderRequest(BaseModel):
    cart_items: list[CodCartItem] = Field(..., min_length=1)
    shipping_address: str = Field(..., min_length=1)
    phone: Optional[str] = Field(None, max_length=20)
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field("", max_length=50)

    @field_validator("shipping_address")
    @classmethod
    def strip_address(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("shipping_address must not be blank")
        return v


class CodOrderResponse(BaseModel):
    order_id: str
    booking_codes: list[str]
    total: float
    status: BookingStatus
    item_count: int
