"""
JWT and password helpers.

Access tokens carry the user's account type and admin tier so role checks can be
logged without a database hit; the user row is still loaded on every request.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
from app.config import settings
import uuid


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


class TokenPayload:
    """Decoded claims of an access or refresh token."""

    def __init__(
        self,
        user_id: str,
        email: str,
        user_type: Optional[str],
        admin_level: Optional[str],
        exp: datetime
    ):
        self.user_id = user_id
        self.email = email
        self.user_type = user_type
        self.admin_level = admin_level
        self.exp = exp

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "TokenPayload":
        # Refresh tokens carry no role claims
        return cls(
            user_id=claims["sub"],
            email=claims["email"],
            user_type=claims.get("user_type"),
            admin_level=claims.get("admin_level"),
            exp=datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
        )


def _encode(claims: Dict[str, Any], token_type: str, lifetime: timedelta) -> str:
    issued_at = datetime.now(timezone.utc)
    return jwt.encode(
        {**claims, "type": token_type, "iat": issued_at, "exp": issued_at + lifetime},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    user_type: str,
    admin_level: Optional[str] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Issue a short-lived access token.

    Args:
        user_id: User's UUID
        email: User's email address
        user_type: agent, landlord, owner or admin
        admin_level: super, owner or basic for admin accounts
        expires_delta: Override for the configured lifetime
    """
    claims = {"sub": str(user_id), "email": email, "user_type": user_type, "admin_level": admin_level}
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(claims, ACCESS_TOKEN, lifetime)


def create_refresh_token(
    user_id: uuid.UUID,
    email: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    lifetime = expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode({"sub": str(user_id), "email": email}, REFRESH_TOKEN, lifetime)


def verify_token(token: str, token_type: str = ACCESS_TOKEN) -> TokenPayload:
    """
    Decode a token and check its type.

    Raises:
        JWTError: On a bad signature, expiry (ExpiredSignatureError), wrong type or missing claims
    """
    claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])

    if claims.get("type") != token_type:
        raise JWTError(f"Invalid token type. Expected {token_type}")
    if not claims.get("sub") or not claims.get("email"):
        raise JWTError("Invalid token payload")

    return TokenPayload.from_claims(claims)


def hash_password(password: str) -> str:
    """
    Raises:
        ValueError: If the password is shorter than 8 characters
    """
    if not password or len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)
