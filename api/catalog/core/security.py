from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi import Depends, HTTPException, status
from typing import Optional, Dict
import logging

from ..auth.jwt_utils import verify_token
from ..config.settings import ADMIN_ROLE

logger = logging.getLogger(__name__)

_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    cred: Optional[HTTPAuthorizationCredentials] = Depends(_scheme)
) -> Optional[Dict]:
    """The authenticated caller as {"id": ..., "role": ...}, or None.

    Anonymous or badly authenticated callers are not rejected here; routes
    that need a user depend on require_admin instead.
    """
    if cred is None:
        return None
    try:
        payload = verify_token(cred.credentials)
    except HTTPException:
        return None
    return {"id": payload["sub"], "role": payload.get("role"), "email": payload.get("email")}


def require_admin(
    current_user: Optional[Dict] = Depends(get_current_user)
) -> Dict:
    """Dependency that only lets authenticated administrators through"""
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if current_user.get("role") != ADMIN_ROLE:
        logger.warning(f"User {current_user['id']} with role {current_user.get('role')!r} denied admin access")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"User role '{current_user.get('role')}' not permitted. Allowed roles: ['{ADMIN_ROLE}']"
        )
    return current_user
