"""Authentication router: customers, couriers and the current session."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status
from jose import JWTError
from libs.auth.dependencies import get_current_user, require_admin
from libs.auth.models import AuthUser, Role
from libs.auth.tokens import (
    clear_auth_cookie,
    create_email_verification_token,
    hash_password,
    read_email_verification_token,
    verify_password,
)
from libs.common.emails.accounts import (
    send_courier_login_otp_email,
    send_verification_email,
)
from libs.common.emails.dispatch import dispatch_email
from libs.common.logging import get_logger
from libs.common.responses import APIResponse, ok
from libs.db.session import get_async_db
from services.furniture_service.models import Admin, Courier, Customer
from services.furniture_service.routers._helpers import (
    commit_or_conflict,
    load_customer,
    parse_uuid,
    start_session,
)
from services.furniture_service.schemas import (
    AdminResponse,
    CourierCreate,
    CourierResponse,
    CustomerResponse,
    GoogleLoginRequest,
    LoginRequest,
    OTPRequest,
    OTPVerifyRequest,
    RegisterRequest,
    SessionResponse,
    VerifyEmailRequest,
)
from services.furniture_service.services.google_auth import (
    GoogleAuthError,
    verify_google_id_token,
)
from services.furniture_service.services.login_otp import (
    OTPCheck,
    check_login_otp,
    clear_login_otp,
    issue_login_otp,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


def _customer_session(response: Response, customer: Customer) -> dict:
    token = start_session(response, customer.id, Role.CUSTOMER, customer.email)
    return SessionResponse(
        token=token,
        role=Role.CUSTOMER,
        user=CustomerResponse.model_validate(customer).model_dump(mode="json"),
    ).model_dump()


# ============================================================================
# CUSTOMERS
# ============================================================================


@router.post(
    "/register",
    response_model=APIResponse[SessionResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    payload: RegisterRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_async_db),
):
    """Register a customer with email and password."""
    email = payload.email.lower()
    existing = await db.scalar(select(Customer.id).where(Customer.email == email))
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists with this email",
        )
    if payload.phone:
        phone_taken = await db.scalar(
            select(Customer.id).where(Customer.phone == payload.phone)
        )
        if phone_taken is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User already exists with this phone number",
            )

    customer = Customer(
        name=payload.name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        phone=payload.phone,
        address=payload.address.model_dump() if payload.address else None,
        role=Role.CUSTOMER,
        is_verified=False,
    )
    db.add(customer)
    await commit_or_conflict(
        db, "User already exists with this email or phone number"
    )
    logger.info(f"Registered customer {customer.email}")

    dispatch_email(
        background_tasks,
        send_verification_email,
        customer.email,
        create_email_verification_token(str(customer.id)),
    )
    return ok(
        _customer_session(response, customer),
        "Registration successful. Please verify your email.",
    )


@router.post("/login", response_model=APIResponse[SessionResponse])
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(Customer).where(Customer.email == payload.email.lower())
    )
    customer = result.scalar_one_or_none()
    if customer is None or not verify_password(
        payload.password, customer.password_hash
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not customer.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated"
        )
    return ok(_customer_session(response, customer), "Login successful")


@router.post("/google", response_model=APIResponse[SessionResponse])
async def google_login(
    payload: GoogleLoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
):
    """Sign in with a Google ID token, creating or linking the customer."""
    try:
        identity = await verify_google_id_token(payload.credential)
    except GoogleAuthError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

    result = await db.execute(select(Customer).where(Customer.email == identity.email))
    customer = result.scalar_one_or_none()
    if customer is None:
        customer = Customer(
            name=identity.name,
            email=identity.email,
            google_id=identity.sub,
            profile_image=identity.picture,
            role=Role.CUSTOMER,
            is_verified=True,
        )
        db.add(customer)
        logger.info(f"Created customer {identity.email} from Google sign-in")
    else:
        if not customer.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated"
            )
        customer.google_id = identity.sub
        customer.is_verified = True
        if not customer.profile_image:
            customer.profile_image = identity.picture
    await db.commit()

    return ok(_customer_session(response, customer), "Login successful")


@router.post("/logout", response_model=APIResponse[None])
async def logout(response: Response):
    clear_auth_cookie(response)
    return ok(message="Logged out successfully")


@router.post("/verify-email", response_model=APIResponse[CustomerResponse])
async def verify_email(
    payload: VerifyEmailRequest,
    db: AsyncSession = Depends(get_async_db),
):
    try:
        subject = read_email_verification_token(payload.token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired verification token",
        )

    customer_id = parse_uuid(subject)
    customer = await db.get(Customer, customer_id) if customer_id else None
    if customer is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )
    if not customer.is_verified:
        customer.is_verified = True
        await db.commit()
    return ok(CustomerResponse.model_validate(customer), "Email verified successfully")


@router.get("/me", response_model=APIResponse[dict])
async def me(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Profile of whoever holds the session."""
    if current_user.role == Role.CUSTOMER:
        customer = await load_customer(db, current_user)
        profile = CustomerResponse.model_validate(customer)
    else:
        principal_id = parse_uuid(current_user.user_id)
        model = Courier if current_user.role == Role.COURIER else Admin
        principal = await db.get(model, principal_id) if principal_id else None
        if principal is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
            )
        schema = CourierResponse if model is Courier else AdminResponse
        profile = schema.model_validate(principal)
    return ok({"role": current_user.role, **profile.model_dump(mode="json")})


# ============================================================================
# COURIERS
# ============================================================================


@router.post(
    "/register-courier",
    response_model=APIResponse[CourierResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register_courier(
    payload: CourierCreate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    email = payload.email.lower()
    if await db.scalar(select(Courier.id).where(Courier.email == email)) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Courier already exists with this email",
        )
    courier = Courier(
        name=payload.name.strip(),
        email=email,
        phone=payload.phone,
        address=payload.address,
    )
    db.add(courier)
    await commit_or_conflict(db, "Courier already exists with this email")
    logger.info(f"Registered courier {courier.email}")
    return ok(CourierResponse.model_validate(courier), "Courier registered")


async def _find_active_courier(db: AsyncSession, email: str) -> Courier:
    result = await db.execute(select(Courier).where(Courier.email == email.lower()))
    courier = result.scalar_one_or_none()
    if courier is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Courier not found"
        )
    if not courier.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Courier account is deactivated",
        )
    return courier


@router.post("/courier/request-otp", response_model=APIResponse[None])
async def courier_request_otp(
    payload: OTPRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_async_db),
):
    courier = await _find_active_courier(db, payload.email)
    otp = issue_login_otp(courier)
    await db.commit()

    dispatch_email(background_tasks, send_courier_login_otp_email, courier.email, otp)
    return ok(message="OTP sent to your email")


_COURIER_OTP_ERRORS = {
    OTPCheck.MISSING: "No OTP requested. Please request a new OTP",
    OTPCheck.EXPIRED: "OTP has expired. Please request a new OTP",
    OTPCheck.INVALID: "Invalid OTP",
}


@router.post("/courier/verify-otp", response_model=APIResponse[SessionResponse])
async def courier_verify_otp(
    payload: OTPVerifyRequest,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
):
    courier = await _find_active_courier(db, payload.email)
    outcome = check_login_otp(courier, payload.otp)
    if outcome != OTPCheck.VALID:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_COURIER_OTP_ERRORS[outcome],
        )

    clear_login_otp(courier)
    await db.commit()

    token = start_session(response, courier.id, Role.COURIER, courier.email)
    session = SessionResponse(
        token=token,
        role=Role.COURIER,
        user=CourierResponse.model_validate(courier).model_dump(mode="json"),
    )
    return ok(session, "Login successful")
