"""
Access token verification.

Tokens are issued by the account service with the shared SECRET_KEY; this
backend only checks them. `sub` carries the user id and `type` must be
"access" so refresh tokens cannot be replayed against the API.
"""
from typing import Optional, Any

from jose import JWTError, jwt

from app.config import settings

ACCESS_TOKEN_TYPE = "access"


def decode_token(token: str) -> Optional[dict[str, Any]]:
    """Signature and expiry checked; None for anything invalid."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def verify_access_token(token: str) -> Optional[str]:
    """Return the user id of a valid access token, else None."""
    claims = decode_token(token)
    if not claims or claims.get("type") != ACCESS_TOKEN_TYPE:
        return None
    return claims.get("sub")
