"""Profile management.

GET/PATCH  /me                  the caller's own profile
GET/POST   /admin/users
GET/PATCH/DELETE /admin/users/{id}
"""

import logging
import uuid
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from donation_hub.core.dependencies import get_current_profile, get_db, require_admin
from donation_hub.core.exceptions import FieldValidationError, ProblemDetailError
from donation_hub.models.profile import Profile
from donation_hub.repositories.profiles import ProfileRepository
from donation_hub.schemas.common import PageResponse
from donation_hub.schemas.user import ProfileUpdate, Role, UserCreate, UserResponse, UserUpdate

logger = logging.getLogger(__name__)

me_router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(require_admin)])


@me_router.get("", response_model=UserResponse)
async def get_me(profile: Profile = Depends(get_current_profile)) -> UserResponse:
    return UserResponse.model_validate(profile)


@me_router.patch("", response_model=UserResponse)
async def update_me(
    body: ProfileUpdate,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    profile.full_name = body.full_name
    await ProfileRepository(db).save(profile)
    return UserResponse.model_validate(profile)


@admin_router.get("", response_model=PageResponse[UserResponse])
async def list_users(
    q: str | None = Query(None, min_length=1, max_length=120),
    role: Role | None = Query(None),
    sort_by: Literal["created_at", "name", "email"] = Query("created_at"),
    order: Literal["asc", "desc"] = Query("desc"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> PageResponse[UserResponse]:
    profiles, total = await ProfileRepository(db).find(
        q=q.strip() if q else None,
        role=role,
        sort_by=sort_by,
        order=order,
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return PageResponse(
        items=[UserResponse.model_validate(p) for p in profiles],
        total=total,
        page=page,
        page_size=page_size,
    )


@admin_router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    body: UserCreate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Pre-register a profile; it is bound to an identity on first sign-in."""
    repo = ProfileRepository(db)
    if await repo.by_email(body.email) is not None:
        raise ProblemDetailError(
            status=409, title="Conflict", detail="A user with this email already exists"
        )
    profile = await repo.create(
        Profile(email=body.email, full_name=body.full_name, role=body.role)
    )
    logger.info("User %s created by %s with role %s", profile.id, admin.id, profile.role)
    return UserResponse.model_validate(profile)


@admin_router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    return UserResponse.model_validate(await ProfileRepository(db).require(user_id))


@admin_router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    repo = ProfileRepository(db)
    profile = await repo.require(user_id)
    if profile.id == admin.id and body.role is not None and body.role != "admin":
        raise FieldValidationError.single("role", "You cannot remove your own admin role")

    if body.full_name is not None:
        profile.full_name = body.full_name
    if body.role is not None and body.role != profile.role:
        logger.info("User %s role %s -> %s by %s", profile.id, profile.role, body.role, admin.id)
        profile.role = body.role
    await repo.save(profile)
    return UserResponse.model_validate(profile)


@admin_router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: uuid.UUID,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    if user_id == admin.id:
        raise FieldValidationError.single("id", "You cannot delete your own account")
    repo = ProfileRepository(db)
    profile = await repo.require(user_id)
    try:
        await repo.delete(profile)
    except IntegrityError as exc:
        raise ProblemDetailError(
            status=409,
            title="Conflict",
            detail="User still owns accountability records",
        ) from exc
    logger.info("User %s deleted by %s", user_id, admin.id)
