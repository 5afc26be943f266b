"""Payment router: Razorpay checkout, refunds and cash on delivery."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from libs.auth.dependencies import get_current_user, require_admin, require_customer
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.emails.dispatch import dispatch_email
from libs.common.emails.orders import (
    send_cod_order_admin_email,
    send_cod_order_confirmation_email,
)
from libs.common.logging import get_logger
from libs.common.responses import APIResponse, ok
from libs.db.session import get_async_db
from services.furniture_service.models import PaymentStatus
from services.furniture_service.razorpay_client import (
    get_razorpay_client,
    verify_signature,
)
from services.furniture_service.routers._helpers import (
    ensure_can_view,
    gateway_errors,
    load_customer,
)
from services.furniture_service.schemas import (
    CodOrderRequest,
    CodOrderResponse,
    CreateOrderRequest,
    GatewayOrderResponse,
    RefundRequest,
    VerifyPaymentRequest,
)
from services.furniture_service.services.booking_ops import (
    get_booking_by_code,
    place_cod_order,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/payment", tags=["payment"])
logger = get_logger(__name__)


@router.get("/key", response_model=APIResponse[dict])
async def get_key():
    """Public key id for the checkout widget."""
    key_id = get_settings().RAZORPAY_KEY_ID
    if not key_id:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payment gateway is not configured",
        )
    return ok({"key_id": key_id})


# ============================================================================
# GATEWAY CHECKOUT
# ============================================================================


@router.post("/create-order", response_model=APIResponse[GatewayOrderResponse])
@router.post(
    "/booking/create-order", response_model=APIResponse[GatewayOrderResponse]
)
async def create_order(
    payload: CreateOrderRequest,
    _user: AuthUser = Depends(get_current_user),
):
    with gateway_errors():
        client = get_razorpay_client()
        order = await client.create_order(payload.amount, payload.receipt)
    return ok(
        GatewayOrderResponse(
            order_id=order.order_id, amount=order.amount, currency=order.currency
        )
    )


@router.post("/verify-payment", response_model=APIResponse[dict])
@router.post("/booking/verify", response_model=APIResponse[dict])
async def verify_payment(
    payload: VerifyPaymentRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Check the checkout signature; mark the booking paid when one is named."""
    verified = verify_signature(
        payload.razorpay_order_id,
        payload.razorpay_payment_id,
        payload.razorpay_signature,
    )
    if not verified:
        logger.warning(
            f"Payment signature mismatch for order {payload.razorpay_order_id}"
        )
        return ok({"verified": False}, "Payment verification failed")

    if payload.booking_code:
        booking = await get_booking_by_code(db, payload.booking_code)
        ensure_can_view(booking, current_user)
        booking.payment_status = PaymentStatus.COMPLETED
        booking.gateway_order_id = payload.razorpay_order_id
        booking.gateway_payment_id = payload.razorpay_payment_id
        await db.commit()
        logger.info(f"Booking {booking.booking_code} paid via Razorpay")

    return ok({"verified": True}, "Payment verified")


@router.get("/status/{payment_id}", response_model=APIResponse[dict])
async def payment_status(
    payment_id: str,
    _user: AuthUser = Depends(get_current_user),
):
    with gateway_errors():
        client = get_razorpay_client()
        payment = await client.fetch_payment(payment_id)
    return ok(payment)


@router.post("/refund", response_model=APIResponse[dict])
async def refund(
    payload: RefundRequest,
    admin: AuthUser = Depends(require_admin),
):
    with gateway_errors():
        client = get_razorpay_client()
        result = await client.refund(payload.payment_id, payload.amount)
    logger.info(f"Refund {result.refund_id} requested by {admin.user_id}")
    return ok(
        {
            "refund_id": result.refund_id,
            "status": result.status,
            "amount": result.amount,
        },
        "Refund processed",
    )


# ============================================================================
# CASH ON DELIVERY
# ============================================================================


@router.post("/place-cod-order", response_model=APIResponse[CodOrderResponse])
async def place_cod(
    payload: CodOrderRequest,
    background_tasks: BackgroundTasks,
    current_user: AuthUser = Depends(require_customer),
    db: AsyncSession = Depends(get_async_db),
):
    customer = await load_customer(db, current_user)
    order = await place_cod_order(db, customer=customer, data=payload)

    customer_name = f"{payload.first_name} {payload.last_name}".strip()
    total = float(order.total)
    dispatch_email(
        background_tasks,
        send_cod_order_confirmation_email,
        customer.email,
        customer_name,
        order.order_id,
        order.items,
        total,
        payload.shipping_address,
        payload.phone,
    )
    admin_email = get_settings().ADMIN_EMAIL
    if admin_email:
        dispatch_email(
            background_tasks,
            send_cod_order_admin_email,
            admin_email,
            order.order_id,
            customer_name,
            customer.email,
            order.items,
            total,
            payload.shipping_address,
            payload.phone,
        )

    return ok(
        CodOrderResponse(
            order_id=order.order_id,
            booking_codes=[b.booking_code for b in order.bookings],
            total=total,
            status=order.bookings[0].status,
            item_count=len(order.bookings),
        ),
        "Order placed successfully!",
    )
