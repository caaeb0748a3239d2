from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from portal.core.config import get_settings


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token for a user.

    Token issuance belongs to the identity provider; this helper exists for
    operators and tests.
    """
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {
        "sub": str(user_id),
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> Optional[int]:
    """Decode and validate a JWT token. Returns the user id if valid."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    user_id = payload.get("sub")
    if user_id is None or payload.get("type", "access") != "access":
        return None
    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None
