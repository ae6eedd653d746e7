"""
Security utilities for the portal.

- Argon2id password hashes (passlib). Plaintext passwords are never stored.
- Bearer tokens: HS256 JWTs signed with SECRET_KEY, carrying the user id in
  "sub" and expiring after ACCESS_TOKEN_EXPIRE_MINUTES.
- Fernet encryption of card numbers, CVVs and SSNs with CARD_ENCRYPTION_KEY.
  Columns holding these values are LargeBinary.
- Random URL-safe tokens for password-reset links; the server-side row is
  what gives a token meaning.
"""

import secrets
import uuid
from datetime import datetime, timedelta, timezone

from cryptography.fernet import Fernet
from jose import jwt
from passlib.context import CryptContext

from bank_portal.config import settings


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# ---------------------------------------------------------------------------
# Bearer tokens
# ---------------------------------------------------------------------------


def create_access_token(user_id: uuid.UUID, expires_in: timedelta | None = None) -> str:
    """Issue a signed token for `user_id`, valid for `expires_in` (default from settings)."""
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_in or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> uuid.UUID:
    """
    Verify a token and return the user id it was issued for.

    Raises:
        JWTError: Bad signature, malformed or expired token.
        ValueError: The "sub" claim is missing or not a UUID.
    """
    claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    subject = claims.get("sub")
    if not subject:
        raise ValueError("Token has no subject")
    return uuid.UUID(subject)


# ---------------------------------------------------------------------------
# Encryption at rest
# ---------------------------------------------------------------------------

_fernet = Fernet(settings.CARD_ENCRYPTION_KEY.encode())


def encrypt_value(plaintext: str) -> bytes:
    return _fernet.encrypt(plaintext.encode())


def decrypt_value(ciphertext: bytes) -> str:
    """Raises cryptography.fernet.InvalidToken if the key or data is wrong."""
    return _fernet.decrypt(ciphertext).decode()


# ---------------------------------------------------------------------------
# Password-reset tokens
# ---------------------------------------------------------------------------


def generate_reset_token() -> str:
    """43 URL-safe characters (32 random bytes)."""
    return secrets.token_urlsafe(32)
