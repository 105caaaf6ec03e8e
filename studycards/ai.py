"""
Study Cards Backend - AI Integration Module
Handles flashcard generation through Groq's OpenAI-compatible API
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from starlette.concurrency import run_in_threadpool
from studycards.auth import authenticate, build_store
from studycards.config import Settings, get_settings
from studycards.database import SupabaseStore, get_store_factory
from studycards.errors import (
    ConfigError,
    EmptyUpstreamResponse,
    FlashcardServiceError,
    MalformedResponse,
    QuotaExceeded,
    UpstreamError,
    ValidationError,
)
from studycards.models import GenerationMode, GenerationRecord, GenerationResponse, Plan
from studycards.parsing import as_text, clean_flashcards, parse_model_output
from studycards.prompts import SYSTEM_PROMPT, build_flashcard_prompt, clamp_count
from typing import Callable
import openai
import time
import logging

logger = logging.getLogger(__name__)

# Router setup
ai_router = APIRouter()


def create_completion_client(settings: Settings) -> openai.OpenAI:
    """Get a Groq client; failed calls are not retried"""
    return openai.OpenAI(
        api_key=settings.groq_api_key,
        base_url=settings.groq_base_url,
        max_retries=0,
    )


def get_completion_factory() -> Callable[[Settings], openai.OpenAI]:
    """Dependency returning the callable that builds a completion client"""
    return create_completion_client


def request_completion(client: openai.OpenAI, prompt: str, settings: Settings) -> str:
    """Send the prompt and return the reply text"""
    try:
        response = client.chat.completions.create(
            model=settings.flashcard_model,
            temperature=settings.flashcard_temperature,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        )
    except openai.APIStatusError as e:
        logger.error(f"Groq request failed with status {e.status_code}")
        raise UpstreamError(status_code=e.status_code, details=e.response.text)

    choices = getattr(response, "choices", None) or []
    content = choices[0].message.content if choices else None
    if not content:
        raise EmptyUpstreamResponse()
    return content


def persist_generation(store: SupabaseStore, record: GenerationRecord, plan: Plan) -> None:
    """Save history and usage after the response has been sent

    Failures are logged and never reach the caller.
    """
    try:
        saved = store.create_generation(record)
        logger.info(f"Saved generation {(saved or {}).get('id')} for user {record.user_id}")
    except Exception:
        logger.exception(f"Failed to save generation for user {record.user_id}")

    generated = len(record.output.flashcards)
    if plan != Plan.FREE or generated == 0:
        return
    try:
        total = store.increment_usage(record.user_id, generated)
        logger.info(f"Usage for user {record.user_id} is now {total}")
    except Exception:
        logger.exception(f"Failed to record usage of {generated} flashcards for user {record.user_id}")


@ai_router.post("/generate", response_model=GenerationResponse, tags=["AI Services"])
async def generate_flashcards(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    store_factory: Callable[[Settings], SupabaseStore] = Depends(get_store_factory),
    completion_factory: Callable[[Settings], openai.OpenAI] = Depends(get_completion_factory),
):
    """Generate flashcards from pasted notes or a question bank

    Body: ``{notes, count?, style?, mode?}`` where mode is one of
    auto, questions or short_notes. Free-plan users are limited to a
    lifetime total of ``free_plan_limit`` flashcards.
    """
    try:
        try:
            body = await request.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        notes = as_text(body.get("notes")).strip()
        count = clamp_count(
            body.get("count"),
            default=settings.default_cards,
            low=settings.min_cards,
            high=settings.max_cards,
        )
        style = as_text(body.get("style"), "balanced")
        mode = GenerationMode.coerce(as_text(body.get("mode"), GenerationMode.AUTO.value))

        if not notes:
            raise ValidationError()

        if not settings.has_groq:
            logger.error("Groq is not configured: set GROQ_API_KEY")
            raise ConfigError()
        store = build_store(settings, store_factory)

        user = await run_in_threadpool(authenticate, store, request.headers.get("authorization"))

        plan = await run_in_threadpool(store.get_plan, user.id)
        if plan == Plan.FREE:
            used = await run_in_threadpool(store.get_usage, user.id)
            if used + count > settings.free_plan_limit:
                logger.info(f"User {user.id} over free limit: {used} used, {count} requested")
                raise QuotaExceeded(used=used, limit=settings.free_plan_limit)

        logger.info(f"Generating {count} flashcards for user {user.id} (mode={mode.value}, style={style}, plan={plan.value})")
        start_time = time.time()

        prompt = build_flashcard_prompt(notes, count, style, mode)
        client = completion_factory(settings)
        content = await run_in_threadpool(request_completion, client, prompt, settings)

        parsed = parse_model_output(content)
        if not parsed.ok:
            logger.error(f"Failed to parse model reply ({parsed.reason.value}): {content[:200]}")
            raise MalformedResponse(details=parsed.message)

        result = clean_flashcards(parsed.value, count)
        logger.info(f"Generated {len(result.flashcards)} flashcards in {time.time() - start_time:.2f}s")

        record = GenerationRecord(
            user_id=user.id,
            input=notes,
            mode=mode,
            style=style,
            requested_count=count,
            title=result.title,
            output=result,
        )
        background_tasks.add_task(persist_generation, store, record, plan)

        return result

    except FlashcardServiceError:
        raise
    except Exception as e:
        logger.error(f"Flashcard generation error: {e}")
        raise FlashcardServiceError(error=str(e) or "Unknown error")
