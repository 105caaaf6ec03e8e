"""
Study Cards Backend - Prompt Builder
Turns pasted notes into the instruction sent to the completion model
"""

from studycards.models import GenerationMode
from typing import Any
import math

SYSTEM_PROMPT = "You output only valid JSON."

MODE_RULES = {
    GenerationMode.QUESTIONS: (
        "The input is a QUESTION BANK / practice set. Create flashcards where the FRONT "
        "is the question and the BACK is the correct answer/explanation."
    ),
    GenerationMode.SHORT_NOTES: (
        "The input is SHORT NOTES / summaries. Create flashcards where the FRONT is a short "
        "prompt (term, heading, key idea) and the BACK is the explanation/steps/formula."
    ),
    GenerationMode.AUTO: (
        'Auto-detect: if the input contains many questions ("?", Q:, MCQ, etc.) treat it '
        "as a question bank; otherwise treat it as notes."
    ),
}


def clamp_count(value: Any, default: int = 12, low: int = 3, high: int = 50) -> int:
    """Clamp a requested card count into [low, high]

    Missing or non-numeric values use ``default``; fractions round down.
    """
    if value is None:
        value = default
    try:
        number = float(value)
    except OverflowError:
        # Integers beyond float range
        number = math.inf if value > 0 else -math.inf
    except (TypeError, ValueError):
        number = float(default)
    if math.isnan(number):
        number = float(default)
    return int(max(low, min(high, number)))


def build_flashcard_prompt(user_text: str, count: int, style: str, mode: GenerationMode) -> str:
    """Build the user message for a generation request"""
    mode_rules = MODE_RULES.get(GenerationMode.coerce(mode), MODE_RULES[GenerationMode.AUTO])

    prompt = f"""You are an expert flashcard creator.
Return ONLY valid JSON, no extra text.

Task:
- Create {count} high-quality flashcards.
- Each flashcard MUST feel like a real flashcard: short, testable FRONT and a complete BACK.

{mode_rules}

Output schema (exact):
{{
  "title": string,
  "flashcards": [
    {{ "question": string, "answer": string, "tags": string[] }}
  ]
}}

Quality rules:
- FRONT (question) should be short and specific (max ~140 chars if possible).
- BACK (answer) should be structured and correct; use short bullet-like lines as plain text if needed.
- Avoid duplicate cards.
- If content is formula/steps, include them cleanly.
- Tags: 0-4 short tags per card.
- No markdown, no code fences.
- Style: {style} (balanced = mix of definitions+concepts, exam = more application, simple = easy language)

INPUT:
{user_text}"""

    return prompt.strip()
