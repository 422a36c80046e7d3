"""
User management API
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin, require_user
from app.core.database import get_db
from app.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    MessageResponse,
)
from app.core.exceptions import NotFoundException, ConflictException, BadRequestException
from app.crud import user_crud
from app.models.user import User, UserCreate, UserUpdate, UserResponse
from app.services.audit import log_audit_event

router = APIRouter()


@router.get("/me", summary="Current user", response_model=ResponseModel[UserResponse])
async def get_me(user: User = Depends(require_user)):
    return success_response(data=UserResponse.model_validate(user).model_dump())


@router.get("", summary="List users", response_model=PagedResponseModel[UserResponse])
async def get_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    role: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    skip = (page - 1) * page_size
    conditions = [User.role == role] if role else []
    users = await user_crud.get_multi(db, skip=skip, limit=page_size, conditions=conditions)
    total = await user_crud.count(db, conditions=conditions)
    items = [UserResponse.model_validate(u).model_dump() for u in users]
    return paged_response(items, total, page, page_size)


@router.post("", summary="Create user", response_model=ResponseModel[UserResponse])
async def create_user(
    data: UserCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    email = str(data.email).lower()
    if await user_crud.get_by_email(db, email):
        raise ConflictException(f"E-mail already registered: {email}")

    user = await user_crud.create(db, obj_in={
        "email": email,
        "full_name": data.full_name,
        "role": data.role,
    })
    await log_audit_event(
        db,
        action="ROLE_ASSIGN",
        resource_type="user",
        resource_id=user.id,
        payload={"role": user.role, "email": user.email},
        actor=admin,
        request=request,
    )
    return success_response(
        data=UserResponse.model_validate(user).model_dump(),
        message="User created"
    )


@router.get("/{user_id}", summary="Get user", response_model=ResponseModel[UserResponse])
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = await user_crud.get(db, user_id)
    if not user:
        raise NotFoundException(f"User not found: {user_id}")
    return success_response(data=UserResponse.model_validate(user).model_dump())


@router.patch("/{user_id}", summary="Update user", response_model=ResponseModel[UserResponse])
async def update_user(
    user_id: str,
    data: UserUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """
    Update a user; a role change is audited as a revoke of the old role
    followed by an assignment of the new one
    """
    user = await user_crud.get(db, user_id)
    if not user:
        raise NotFoundException(f"User not found: {user_id}")

    old_role = user.role
    user = await user_crud.update(db, db_obj=user, obj_in=data)

    if user.role != old_role:
        for action, role in (("ROLE_REVOKE", old_role), ("ROLE_ASSIGN", user.role)):
            await log_audit_event(
                db,
                action=action,
                resource_type="user",
                resource_id=user.id,
                payload={"role": role, "email": user.email},
                actor=admin,
                request=request,
            )

    return success_response(
        data=UserResponse.model_validate(user).model_dump(),
        message="User updated"
    )


@router.delete("/{user_id}", summary="Delete user", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if user_id == admin.id:
        raise BadRequestException("You cannot delete your own account")
    if not await user_crud.delete(db, id=user_id):
        raise NotFoundException(f"User not found: {user_id}")
    return success_response(message="User deleted")
