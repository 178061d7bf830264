"""
Credential and session token utilities
Password hashing uses bcrypt through passlib; session tokens are HS256 JWTs
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError
from jose import jwt as jose_jwt

# Password hashing
from passlib.context import CryptContext

from .config import ACCESS_TOKEN_EXPIRE_MINUTES, PASSWORD_HASH_ROUNDS, SECRET_KEY
from .exceptions import CredentialOperationError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=PASSWORD_HASH_ROUNDS)


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt (salted, cost factor >= 12)

    Raises:
        CredentialOperationError: If the hashing backend fails
    """
    try:
        return pwd_context.hash(password)
    except Exception as e:
        logger.error(f"❌ Password hashing failed: {e}")
        raise CredentialOperationError("credential operation failed") from e


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against bcrypt hash; any failure counts as a mismatch"""
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


# ============================================================================
# SESSION TOKENS
# ============================================================================


def create_access_token(account_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed session token for an account

    Args:
        account_id: Account the token authenticates
        expires_delta: Token lifetime (default ACCESS_TOKEN_EXPIRE_MINUTES)
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": account_id, "exp": expire}
    return jose_jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode a session token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        payload = jose_jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None
    if not payload.get("sub"):
        logger.warning("JWT verification failed: missing subject")
        return None
    return payload


def mask_email(email: Optional[str]) -> str:
    """Mask an email address for logging (jo***@example.com)"""
    if not email or "@" not in email:
        return "***"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"
