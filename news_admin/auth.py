"""Authentication and authorization utilities."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from loguru import logger
from passlib.context import CryptContext
from pydantic import BaseModel

from news_admin.config import Settings, get_settings
from news_admin.utils import utcnow

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# HTTP Bearer scheme for JWT, optional so disabled auth needs no header
security = HTTPBearer(auto_error=False)


class LoginRequest(BaseModel):
    """Login request model."""
    username: str
    password: str


class LoginResult(BaseModel):
    """Login response model."""
    success: bool
    error: Optional[str] = None
    access_token: Optional[str] = None
    token_type: str = "bearer"


class AdminSession(BaseModel):
    """
    The authenticated operator for one request or live session.

    Created on login or when a bearer token is decoded, and passed explicitly
    to whatever needs it. Logging out is discarding the token client-side.
    """
    username: str
    expires_at: Optional[datetime] = None

    @property
    def is_authenticated(self) -> bool:
        return self.expires_at is None or self.expires_at > utcnow()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def authenticate_user(username: str, password: str, settings: Settings | None = None) -> bool:
    """Check credentials against the configured admin account."""
    settings = settings or get_settings()
    if username != settings.admin_username:
        return False
    if settings.admin_password_hash:
        return verify_password(password, settings.admin_password_hash)
    return password == settings.admin_password


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    settings: Settings | None = None,
) -> str:
    """Create a JWT access token."""
    settings = settings or get_settings()
    to_encode = data.copy()
    if expires_delta:
        expire = utcnow() + expires_delta
    else:
        expire = utcnow() + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def login(username: str, password: str, settings: Settings | None = None) -> LoginResult:
    """Check credentials and issue a token."""
    settings = settings or get_settings()
    if not authenticate_user(username, password, settings):
        logger.warning(f"[AUTH] Failed login for '{username}'")
        return LoginResult(success=False, error="Invalid credentials")

    token = create_access_token(
        data={"sub": username},
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
        settings=settings,
    )
    logger.info(f"[AUTH] '{username}' logged in")
    return LoginResult(success=True, access_token=token)


def decode_access_token(token: str, settings: Settings | None = None) -> AdminSession:
    """Decode and verify a JWT token."""
    settings = settings or get_settings()
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise credentials_exception

    username = payload.get("sub")
    if username is None:
        raise credentials_exception

    expires_at = payload.get("exp")
    return AdminSession(
        username=username,
        expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc).replace(tzinfo=None) if expires_at else None,
    )


def get_admin_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> AdminSession:
    """Dependency that resolves the bearer token into an ``AdminSession``."""
    # Skip authentication in development mode if ENABLE_AUTH=false
    if not settings.enable_auth:
        return AdminSession(username="dev-user")

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return decode_access_token(credentials.credentials, settings)


# Dependency for protected routes
def require_admin(session: AdminSession = Depends(get_admin_session)) -> AdminSession:
    """Dependency that requires admin authentication."""
    # Any authenticated user is considered an admin
    return session
