"""
Security utilities for Coursehub.

Handles password hashing and JWT token creation/verification. The verified
claim (account id, e-mail, role) is what the core trusts for every request.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import Settings


# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class Identity:
    """Verified claim attached to an authorized request."""
    account_id: str
    email: str
    role: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        bool: True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: The plain text password to hash

    Returns:
        str: The hashed password
    """
    return pwd_context.hash(password)


def create_access_token(
    settings: Settings,
    subject: str,
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[Dict[str, Any]] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        settings: Settings carrying the signing key and algorithm
        subject: The subject of the token (the account id)
        expires_delta: Optional custom expiration time
        additional_claims: Optional additional claims to include in the token

    Returns:
        str: The encoded JWT token
    """
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode: Dict[str, Any] = {"exp": expire, "sub": subject, "iat": now}

    # Add additional claims if provided
    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def create_identity_token(settings: Settings, identity: Identity) -> str:
    return create_access_token(
        settings,
        subject=identity.account_id,
        additional_claims={"email": identity.email, "role": identity.role}
    )


def verify_token(settings: Settings, token: str) -> Optional[Dict[str, Any]]:
    """
    Verify and decode a JWT token.

    Returns:
        Optional[Dict[str, Any]]: The decoded token payload if valid, None otherwise
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        return None


def identity_from_token(settings: Settings, token: str) -> Optional[Identity]:
    """Decode a bearer token into an Identity, or None if it is not usable."""
    payload = verify_token(settings, token)
    if payload is None:
        return None

    account_id = payload.get("sub")
    email = payload.get("email")
    role = payload.get("role")
    if not account_id or not email or not role:
        return None
    return Identity(account_id=account_id, email=email, role=role)
