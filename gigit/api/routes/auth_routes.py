"""
Authentication Routes

POST /auth/register - Register new user (and role profile when names are given)
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
PUT /auth/user-type - Choose WORKER/BUSINESS before onboarding
POST /auth/forgot-password - Email a password reset link
POST /auth/reset-password - Set a new password with a reset token
"""

import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Depends
from sqlalchemy import text

from gigit.db.database import get_db_session, new_id, utcnow
from gigit.core.auth import (
    hash_password, verify_password, create_access_token, get_current_user,
    create_password_reset_token, verify_password_reset_token
)
from gigit.services.email_service import send_welcome_email, send_password_reset_email
from gigit.schemas.schemas import (
    RegisterRequest, RegisterResponse, RegisteredUser, LoginRequest, TokenResponse,
    UserResponse, UserTypeUpdate, ForgotPasswordRequest, ResetPasswordRequest, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(request: RegisterRequest, background_tasks: BackgroundTasks):
    """
    Register a new user account.

    Workers that send first/last name and businesses that send a company name
    get their profile row right away; everyone else completes onboarding later.
    """
    email = request.email.lower()

    if request.user_type == "WORKER":
        display_name = " ".join(p for p in (request.first_name, request.last_name) if p) or None
    else:
        display_name = request.company_name

    with get_db_session() as db:
        result = db.execute(text("SELECT id FROM users WHERE email = :email"), {"email": email})
        if result.fetchone():
            raise HTTPException(status_code=400, detail="Email already registered")

        user_id = new_id()
        now = utcnow()
        db.execute(
            text("""
                INSERT INTO users (id, email, password_hash, user_type, name, is_active,
                    onboarding_completed, email_verified_at, created_at, updated_at)
                VALUES (:id, :email, :password_hash, :user_type, :name, :active,
                    :onboarded, :now, :now, :now)
            """),
            {
                "id": user_id, "email": email, "password_hash": hash_password(request.password),
                "user_type": request.user_type, "name": display_name,
                "active": True, "onboarded": False, "now": now
            }
        )

        if request.user_type == "WORKER" and request.first_name and request.last_name:
            db.execute(
                text("""
                    INSERT INTO worker_profiles (id, user_id, first_name, last_name, created_at, updated_at)
                    VALUES (:id, :user_id, :first_name, :last_name, :now, :now)
                """),
                {
                    "id": new_id(), "user_id": user_id, "first_name": request.first_name,
                    "last_name": request.last_name, "now": now
                }
            )
        elif request.user_type == "BUSINESS" and request.company_name:
            db.execute(
                text("""
                    INSERT INTO business_profiles (id, user_id, company_name, location_country, created_at, updated_at)
                    VALUES (:id, :user_id, :company_name, 'USA', :now, :now)
                """),
                {"id": new_id(), "user_id": user_id, "company_name": request.company_name, "now": now}
            )

    logger.info("Registered %s account %s", request.user_type, user_id)
    background_tasks.add_task(send_welcome_email, email, display_name)

    return RegisterResponse(user=RegisteredUser(id=user_id, email=email, user_type=request.user_type))


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with get_db_session() as db:
        result = db.execute(
            text("""
                SELECT id, password_hash, user_type, is_active, onboarding_completed
                FROM users WHERE email = :email
            """),
            {"email": request.email.lower()}
        )
        user = result.fetchone()

        if not user:
            raise HTTPException(status_code=401, detail="Invalid email or password")

        user_id, password_hash, user_type, is_active, onboarding_completed = user

        if not verify_password(request.password, password_hash):
            raise HTTPException(status_code=401, detail="Invalid email or password")

        if not is_active:
            raise HTTPException(status_code=403, detail="Account deactivated")

        db.execute(
            text("UPDATE users SET last_login_at = :now WHERE id = :id"),
            {"now": utcnow(), "id": user_id}
        )

    token = create_access_token(data={"sub": user_id, "user_type": user_type})

    return TokenResponse(
        access_token=token, user_id=user_id, user_type=user_type,
        onboarding_completed=bool(onboarding_completed)
    )


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    with get_db_session() as db:
        result = db.execute(
            text("""
                SELECT id, email, name, image, user_type, is_active, onboarding_completed, created_at
                FROM users WHERE id = :id
            """),
            {"id": user["user_id"]}
        )
        row = result.mappings().first()

    return UserResponse(**row)


@router.put("/user-type", response_model=MessageResponse)
async def set_user_type(data: UserTypeUpdate, user: dict = Depends(get_current_user)):
    """Pick a role. Only allowed until onboarding is finished."""
    if user["user_type"] and user["onboarding_completed"]:
        raise HTTPException(status_code=400, detail="User type can no longer be changed")

    with get_db_session() as db:
        db.execute(
            text("UPDATE users SET user_type = :user_type, updated_at = :now WHERE id = :id"),
            {"user_type": data.user_type, "now": utcnow(), "id": user["user_id"]}
        )

    return MessageResponse(message=f"User type set to {data.user_type}")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(data: ForgotPasswordRequest, background_tasks: BackgroundTasks):
    """Always answers the same way so it cannot be used to probe for accounts."""
    with get_db_session() as db:
        row = db.execute(
            text("SELECT id, email, name FROM users WHERE email = :email AND is_active = :active"),
            {"email": data.email.lower(), "active": True}
        ).fetchone()

    if row:
        token = create_password_reset_token(row[0])
        background_tasks.add_task(send_password_reset_email, row[1], token, row[2])
        logger.info("Password reset requested for user %s", row[0])

    return MessageResponse(message="If an account exists for that email, a reset link has been sent")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(data: ResetPasswordRequest):
    user_id = verify_password_reset_token(data.token)
    if not user_id:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    with get_db_session() as db:
        result = db.execute(
            text("UPDATE users SET password_hash = :password_hash, updated_at = :now WHERE id = :id"),
            {"password_hash": hash_password(data.password), "now": utcnow(), "id": user_id}
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    logger.info("Password reset for user %s", user_id)
    return MessageResponse(message="Password has been reset. Please login.")
