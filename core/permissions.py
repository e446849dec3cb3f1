# app/core/permissions.py
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status

from core.constants import ROLES
from core.exceptions import PermissionDeniedError
from core.security import decode_token
import logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """Caller identity taken from the bearer token"""
    id: str
    email: str
    role: str
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"


async def get_current_user(payload: Dict[str, Any] = Depends(decode_token)) -> Actor:
    role = str(payload.get("role", "")).upper()
    if role not in ROLES:
        logger.warning(f"Token for {payload.get('sub')} carries unknown role {role!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not authenticated",
        )

    return Actor(
        id=str(payload["sub"]),
        email=payload.get("email") or "",
        role=role,
        name=payload.get("name"),
    )


def require_roles(*roles_allowed):
    def wrapper(user: Actor = Depends(get_current_user)) -> Actor:
        if user.role not in roles_allowed:
            raise PermissionDeniedError(f"Role {user.role} is not allowed here")
        return user
    return wrapper
