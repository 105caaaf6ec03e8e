from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool
from studycards.auth import get_current_user, get_store
from studycards.database import SupabaseStore
from studycards.errors import StorageError
from studycards.models import Plan, Profile, ProfileUpdate, User
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# Router setup
profile_router = APIRouter()


def _clean_url(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


@profile_router.get("", response_model=Profile, tags=["Profile"])
async def get_profile(
    current_user: User = Depends(get_current_user),
    store: SupabaseStore = Depends(get_store),
):
    """Plan and card background settings for the current user"""
    try:
        row = await run_in_threadpool(store.get_profile, current_user.id) or {}
    except Exception as e:
        logger.error(f"Get profile error: {e}")
        raise StorageError(error="Failed to load profile")

    return Profile(
        email=current_user.email,
        plan=Plan.PREMIUM if row.get("plan") == Plan.PREMIUM.value else Plan.FREE,
        front_bg_url=row.get("front_bg_url") or None,
        back_bg_url=row.get("back_bg_url") or None,
    )


@profile_router.put("", response_model=Profile, tags=["Profile"])
async def update_profile(
    profile_update: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    store: SupabaseStore = Depends(get_store),
):
    """Save front/back background image URLs; blank values clear them"""
    try:
        row = await run_in_threadpool(store.upsert_profile, current_user.id, {
            "front_bg_url": _clean_url(profile_update.front_bg_url),
            "back_bg_url": _clean_url(profile_update.back_bg_url),
        })
    except Exception as e:
        logger.error(f"Profile update error: {e}")
        raise StorageError(error="Failed to save settings.")

    return Profile(
        email=current_user.email,
        plan=Plan.PREMIUM if row.get("plan") == Plan.PREMIUM.value else Plan.FREE,
        front_bg_url=row.get("front_bg_url"),
        back_bg_url=row.get("back_bg_url"),
    )
