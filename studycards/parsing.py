"""
Study Cards Backend - Model Output Parsing
Recovers JSON from completion text and cleans the generated flashcards
"""

from dataclasses import dataclass
from enum import Enum
from studycards.errors import MalformedResponse
from studycards.models import Flashcard, GenerationResponse
from typing import Any, List, Optional
import json
import logging
import re

logger = logging.getLogger(__name__)

FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
MAX_TAGS = 6
DEFAULT_TITLE = "Flashcards"


class FailureReason(str, Enum):
    """Why no JSON value could be recovered"""
    FENCED_BLOCK_INVALID = "fenced_block_invalid"
    BRACKET_SPAN_INVALID = "bracket_span_invalid"
    NO_JSON_FOUND = "no_json_found"


@dataclass
class ExtractionResult:
    """Either a parsed value or a classified failure"""
    value: Any = None
    reason: Optional[FailureReason] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.reason is None


def _recover_json(text: str) -> ExtractionResult:
    # A found ```json fence is authoritative: no bracket fallback after it
    fenced = FENCED_JSON.search(text)
    if fenced and fenced.group(1):
        try:
            return ExtractionResult(value=json.loads(fenced.group(1)))
        except json.JSONDecodeError as e:
            return ExtractionResult(reason=FailureReason.FENCED_BLOCK_INVALID, message=str(e))

    starts = [pos for pos in (text.find("["), text.find("{")) if pos != -1]
    last = max(text.rfind("]"), text.rfind("}"))
    if starts and last > min(starts):
        try:
            return ExtractionResult(value=json.loads(text[min(starts):last + 1]))
        except json.JSONDecodeError as e:
            return ExtractionResult(reason=FailureReason.BRACKET_SPAN_INVALID, message=str(e))

    return ExtractionResult(reason=FailureReason.NO_JSON_FOUND, message="Model did not return valid JSON")


def parse_model_output(text: str) -> ExtractionResult:
    """Strict JSON parse of the whole reply, then lenient recovery"""
    try:
        return ExtractionResult(value=json.loads(text))
    except json.JSONDecodeError:
        logger.info("Model reply is not bare JSON, trying fenced/bracket recovery")
    return _recover_json(text)


def extract_json(text: str) -> Any:
    """Recover a JSON value from prose or a fenced block

    Raises:
        MalformedResponse: when neither a fenced block nor a bracket span parses
    """
    result = _recover_json(text)
    if not result.ok:
        raise MalformedResponse(details=f"{result.reason.value}: {result.message}")
    return result.value


def as_text(value: Any, default: str = "") -> str:
    """String form of a JSON value, ``default`` for null"""
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def clean_flashcards(parsed: Any, count: int) -> GenerationResponse:
    """Coerce the model's JSON into a title and at most ``count`` valid cards

    Entries with an empty question or answer are dropped without error.
    """
    payload = parsed if isinstance(parsed, dict) else {}

    title = as_text(payload.get("title"), DEFAULT_TITLE)

    raw_cards = payload.get("flashcards")
    if not isinstance(raw_cards, list):
        raw_cards = []

    cleaned: List[Flashcard] = []
    for entry in raw_cards:
        card = entry if isinstance(entry, dict) else {}
        question = as_text(card.get("question")).strip()
        answer = as_text(card.get("answer")).strip()
        if not question or not answer:
            continue

        tags = card.get("tags")
        tags = [as_text(tag) for tag in tags][:MAX_TAGS] if isinstance(tags, list) else []
        cleaned.append(Flashcard(question=question, answer=answer, tags=tags))

    dropped = len(raw_cards) - len(cleaned)
    if dropped > 0:
        logger.info(f"Dropped {dropped} incomplete flashcards from model output")

    return GenerationResponse(title=title, flashcards=cleaned[:count])
