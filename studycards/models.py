"""
Study Cards Backend - Shared Models and Schemas
Pydantic models for data validation and serialization
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


class Plan(str, Enum):
    """Subscription plans stored on the profile row"""
    FREE = "free"
    PREMIUM = "premium"


class GenerationMode(str, Enum):
    """How the pasted input should be read"""
    AUTO = "auto"
    QUESTIONS = "questions"  # Question bank / practice set
    SHORT_NOTES = "short_notes"  # Notes and summaries

    @classmethod
    def coerce(cls, value: Any) -> "GenerationMode":
        """Map any request value onto a mode, falling back to auto"""
        try:
            return cls(str(value))
        except ValueError:
            return cls.AUTO


# User Models
class User(BaseModel):
    """Identity record resolved from an access token"""
    id: str
    email: Optional[str] = None


# Flashcard Models
class Flashcard(BaseModel):
    """Cleaned flashcard embedded in a generation's output"""
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)


class GenerationResponse(BaseModel):
    """Successful generation payload"""
    title: str
    flashcards: List[Flashcard]


class GenerationRecord(BaseModel):
    """Row written to the generations table"""
    user_id: str
    input: str
    mode: GenerationMode
    style: str
    requested_count: int
    title: str
    output: GenerationResponse


# History Models
class HistoryItem(BaseModel):
    """Summary row shown in the history list"""
    id: str
    created_at: Optional[datetime] = None
    title: str = "Flashcards"
    requested_count: Optional[int] = None
    style: str = "balanced"
    mode: str = "auto"


class GenerationDetail(HistoryItem):
    """Full generation row including its input and output"""
    input: Optional[str] = None
    output: Optional[Dict[str, Any]] = None


# Profile Models
class ProfileUpdate(BaseModel):
    """Card background settings sent by the profile page"""
    front_bg_url: Optional[str] = None
    back_bg_url: Optional[str] = None


class Profile(BaseModel):
    """Profile settings for the signed-in user"""
    email: Optional[str] = None
    plan: Plan = Plan.FREE
    front_bg_url: Optional[str] = None
    back_bg_url: Optional[str] = None

