# habitflow/core/security.py
"""
Verification of identity-provider tokens.

Users authenticate against an external identity provider, which hands the
client a signed JWT. The API only verifies the signature and reads the
claims; the ``sub`` claim is the stable opaque user identifier.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from habitflow.core.config import settings
from habitflow.core.exceptions import NotAuthenticatedException

ALGORITHM = settings.JWT_ALGORITHM


class IdentityClaims(BaseModel):
    sub: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """Mint a token the way the identity provider does (used by scripts and tests)."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode: Dict[str, Any] = {"exp": expire, "sub": str(subject)}
    if settings.JWT_AUDIENCE:
        to_encode["aud"] = settings.JWT_AUDIENCE
    if extra_claims:
        to_encode.update(extra_claims)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_identity_token(token: str) -> IdentityClaims:
    """
    Verify ``token`` and return its identity claims.

    Raises:
        NotAuthenticatedException: bad signature, expired token or missing subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options={"verify_aud": settings.JWT_AUDIENCE is not None},
        )
        return IdentityClaims(**payload)
    except (JWTError, ValidationError):
        raise NotAuthenticatedException("Could not validate credentials")
