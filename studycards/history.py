from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool
from studycards.auth import get_current_user, get_store
from studycards.config import Settings, get_settings
from studycards.database import SupabaseStore
from studycards.errors import FlashcardServiceError, NotFoundError, StorageError
from studycards.models import GenerationDetail, HistoryItem, User
from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)

# Router setup
history_router = APIRouter()


def _with_display_defaults(row: Dict[str, Any]) -> Dict[str, Any]:
    """Fill blank title/mode/style the way the history list shows them"""
    return {
        **row,
        "title": row.get("title") or "Flashcards",
        "mode": row.get("mode") or "auto",
        "style": row.get("style") or "balanced",
    }


@history_router.get("", response_model=List[HistoryItem], tags=["History"])
async def get_history(
    current_user: User = Depends(get_current_user),
    store: SupabaseStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Last flashcard generations saved to the user's account, newest first"""
    try:
        rows = await run_in_threadpool(store.get_user_generations, current_user.id, limit=settings.history_limit)
        return [_with_display_defaults(row) for row in rows]

    except Exception as e:
        logger.error(f"Get history error: {e}")
        raise StorageError(error="Failed to retrieve history")


@history_router.get("/{generation_id}", response_model=GenerationDetail, tags=["History"])
async def get_generation(
    generation_id: str,
    current_user: User = Depends(get_current_user),
    store: SupabaseStore = Depends(get_store),
):
    """A single generation with its input and flashcards"""
    try:
        row = await run_in_threadpool(store.get_generation, current_user.id, generation_id)
        if not row:
            raise NotFoundError(error="Generation not found")
        return _with_display_defaults(row)

    except FlashcardServiceError:
        raise
    except Exception as e:
        logger.error(f"Get generation error: {e}")
        raise StorageError(error="Failed to retrieve generation")
