from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from jose.exceptions import ExpiredSignatureError
from fastapi import HTTPException, status
from typing import Optional, Dict
import logging

from ..config.settings import JWT_SECRET_KEY, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES

logger = logging.getLogger(__name__)


def _unauthorized(reason: str) -> HTTPException:
    logger.warning(f"Rejected bearer token: {reason}")
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=reason,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(
    subject: str,
    extra_claims: Optional[Dict] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Sign a bearer token for `subject`.

    Production tokens come from the login service that shares JWT_SECRET_KEY;
    this is used by create_admin_token.py and the tests.

    Args:
        subject: User id, stored as the "sub" claim
        extra_claims: Additional claims such as {"role": "admin"}
        expires_delta: Lifetime, ACCESS_TOKEN_EXPIRE_MINUTES when omitted
    """
    if not subject:
        raise ValueError("subject must be provided")

    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {**(extra_claims or {}), "sub": subject, "iat": issued_at, "exp": issued_at + lifetime}
    return jwt.encode(claims, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> Dict:
    """
    Decode a bearer token and return its claims.

    Raises:
        HTTPException: 401 when the token is expired, badly signed or has no subject
    """
    try:
        claims = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.debug(f"JWT decode error: {str(e)}")
        raise _unauthorized("Invalid token")

    if not claims.get("sub"):
        raise _unauthorized("Token missing required claims")
    return claims
