"""
Study Cards Backend - Error Types
Each failure cause maps to a fixed status code and a short message
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class FlashcardServiceError(Exception):
    """Base error rendered as ``{"error": ..., "details": ...}``"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Unknown error"

    def __init__(
        self,
        error: Optional[str] = None,
        details: Optional[str] = None,
        status_code: Optional[int] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        if error is not None:
            self.error = error
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        self.extra = extra or {}
        super().__init__(self.error)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        body.update(self.extra)
        return body


class ValidationError(FlashcardServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Notes are required"


class ConfigError(FlashcardServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Server misconfigured"


class AuthError(FlashcardServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"


class QuotaExceeded(FlashcardServiceError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    error = "Free plan limit reached"

    def __init__(self, used: int, limit: int):
        super().__init__(
            details=f"Free users can generate up to {limit} flashcards. You have {used} used.",
            extra={"used": used, "limit": limit},
        )
        self.used = used
        self.limit = limit


class UpstreamError(FlashcardServiceError):
    """Completion service answered with a non-2xx status; mirrored to the caller"""

    error = "Groq request failed"


class EmptyUpstreamResponse(FlashcardServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY
    error = "No response from Groq"


class MalformedResponse(FlashcardServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Model did not return valid JSON"


class NotFoundError(FlashcardServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not found"


class StorageError(FlashcardServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Storage request failed"


async def flashcard_error_handler(request: Request, exc: FlashcardServiceError) -> JSONResponse:
    """Render domain errors with their status code"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error} ({exc.details})")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
