"""
Authentication Utility - JWT sessions and password handling.

Provides:
- Password hashing with bcrypt
- JWT session token creation/verification
- Short-lived password reset tokens
- FastAPI dependencies for protected routes
"""

from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import text

from gigit.core.config import get_settings
from gigit.db.database import get_db_session

settings = get_settings()

PASSWORD_RESET_PURPOSE = "password_reset"

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractors
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against hash. Accounts without a password never match."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT session token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def create_password_reset_token(user_id: str) -> str:
    return create_access_token(
        {"sub": user_id, "purpose": PASSWORD_RESET_PURPOSE},
        expires_delta=timedelta(minutes=settings.password_reset_expire_minutes)
    )


def verify_password_reset_token(token: str) -> Optional[str]:
    """Return the user id a reset token was issued for, or None."""
    payload = decode_token(token)
    if not payload or payload.get("purpose") != PASSWORD_RESET_PURPOSE:
        return None
    return payload.get("sub")


def _load_user(user_id: str) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(
            text("""
                SELECT id, email, name, user_type, is_active, onboarding_completed
                FROM users WHERE id = :id
            """),
            {"id": user_id}
        ).mappings().first()
    return dict(row) if row else None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @app.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    payload = decode_token(credentials.credentials)
    # Reset tokens must not double as session tokens
    if not payload or payload.get("purpose"):
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    user = _load_user(user_id)
    if not user:
        raise credentials_exception

    if not user["is_active"]:
        raise HTTPException(status_code=403, detail="Account deactivated")

    return {
        "user_id": user["id"],
        "email": user["email"],
        "name": user["name"],
        "user_type": user["user_type"],
        "onboarding_completed": bool(user["onboarding_completed"]),
    }


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[dict]:
    """Dependency - Current user when a valid token is sent, else None (public routes)."""
    if credentials is None:
        return None
    try:
        return await get_current_user(credentials)
    except HTTPException:
        return None


async def get_current_worker(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require worker role and get worker_id."""
    if user["user_type"] != "WORKER":
        raise HTTPException(status_code=403, detail="Workers only")

    with get_db_session() as db:
        row = db.execute(
            text("SELECT id, first_name, last_name FROM worker_profiles WHERE user_id = :id"),
            {"id": user["user_id"]}
        ).fetchone()

    if not row:
        raise HTTPException(status_code=404, detail="Worker profile not found. Please complete onboarding first.")

    user["worker_id"] = row[0]
    user["worker_name"] = f"{row[1]} {row[2]}".strip()
    return user


async def get_current_business(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require business role and get business_id."""
    if user["user_type"] != "BUSINESS":
        raise HTTPException(status_code=403, detail="Businesses only")

    with get_db_session() as db:
        row = db.execute(
            text("SELECT id, company_name FROM business_profiles WHERE user_id = :id"),
            {"id": user["user_id"]}
        ).fetchone()

    if not row:
        raise HTTPException(status_code=404, detail="Business profile not found")

    user["business_id"] = row[0]
    user["company_name"] = row[1]
    return user
