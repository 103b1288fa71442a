"""Profile API router: the caller's own account."""

import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.api.deps import get_current_user, get_db
from beachvillas.models.user import User, UserProfile
from beachvillas.schemas.auth import ProfileResponse, ProfileUpdate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["profile"])

_PROFILE_FIELDS = ("about", "locale")


def profile_response(user: User) -> ProfileResponse:
    profile = user.profile
    return ProfileResponse.model_validate(user).model_copy(
        update={
            "about": profile.about if profile else None,
            "locale": profile.locale if profile else None,
        }
    )


async def _reload(db: AsyncSession, user_id: uuid.UUID) -> User:
    result = await db.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


@router.get("/me", response_model=ProfileResponse)
async def get_me(current_user: User = Depends(get_current_user)) -> ProfileResponse:
    """Return the authenticated user's account and profile."""
    return profile_response(current_user)


@router.patch("/me", response_model=ProfileResponse)
async def update_me(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProfileResponse:
    """Update whitelisted account and profile fields. Unknown fields are rejected."""
    update_data = body.model_dump(exclude_unset=True)

    profile_data = {key: update_data.pop(key) for key in _PROFILE_FIELDS if key in update_data}
    for field, value in update_data.items():
        if value is None and field in ("name", "notification_settings"):
            continue
        setattr(current_user, field, value)

    if profile_data:
        profile = current_user.profile
        if profile is None:
            profile = UserProfile(user_id=current_user.id)
            db.add(profile)
        for field, value in profile_data.items():
            setattr(profile, field, value)

    await db.flush()
    logger.info("User %s updated %s", current_user.id, ", ".join(sorted(body.model_fields_set)) or "nothing")
    return profile_response(await _reload(db, current_user.id))
