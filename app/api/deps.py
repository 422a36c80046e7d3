"""
Request dependencies

The acting user comes from the X-User-Id header and is looked up in the
users table; authentication itself happens upstream.
"""
from typing import Optional
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import UnauthorizedException, ForbiddenException
from app.crud import user_crud
from app.models.user import User


async def get_current_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """None for anonymous callers (missing, unknown or inactive id)"""
    if not x_user_id:
        return None
    user = await user_crud.get(db, x_user_id)
    if user is None or not user.is_active:
        return None
    return user


async def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise UnauthorizedException("Sign in to continue")
    return user


async def require_admin(user: User = Depends(require_user)) -> User:
    if not user.is_admin:
        raise ForbiddenException("Only admins can perform this action")
    return user
