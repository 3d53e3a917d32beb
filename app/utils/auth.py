from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from app.config import ADMIN_EMAILS, JWT_ALGORITHM, JWT_SECRET

ACCESS_TOKEN_EXPIRE_MINUTES = 60

# HTTP Bearer scheme for JWT token
bearer_scheme = HTTPBearer(
    scheme_name="JWT",
    description="Enter 'Bearer <your_jwt_token>' in the Value field. Tokens are issued by the auth service.",
)


@dataclass(frozen=True)
class SessionContext:
    """The authenticated caller, passed explicitly to every handler."""

    id: str
    email: Optional[str] = None
    is_admin: bool = False


def create_access_token(data: dict, expires_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES):
    """Create a JWT access token with an expiration time.

    Production tokens come from the auth service; this mints compatible ones
    for local tooling and tests.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def session_from_claims(payload: dict) -> SessionContext:
    user_id = payload.get("sub")
    if not user_id:
        raise ValueError("Token has no subject")
    email = payload.get("email")
    is_admin = payload.get("role") == "admin" or (
        email is not None and email.lower() in ADMIN_EMAILS
    )
    return SessionContext(id=user_id, email=email, is_admin=is_admin)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> SessionContext:
    """Verify JWT token from Bearer header and return the caller's session."""
    try:
        payload = jwt.decode(credentials.credentials, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return session_from_claims(payload)
    except (JWTError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Could not validate credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_admin(current_user: SessionContext = Depends(get_current_user)) -> SessionContext:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can perform this action",
        )
    return current_user
