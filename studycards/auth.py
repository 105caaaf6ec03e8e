"""
Study Cards Backend - Authentication Module
Resolves bearer tokens to users through Supabase Auth
"""

from fastapi import Depends, Request
from starlette.concurrency import run_in_threadpool
from studycards.config import Settings, get_settings
from studycards.database import SupabaseStore, get_store_factory
from studycards.errors import AuthError, ConfigError
from studycards.models import User
from typing import Callable, Optional
import logging

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token from an ``Authorization: Bearer`` header, or an empty string"""
    header = authorization or ""
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return ""


def build_store(settings: Settings, factory: Callable[[Settings], SupabaseStore]) -> SupabaseStore:
    """Create a store, failing with a config error when credentials are missing"""
    if not settings.has_supabase:
        logger.error("Supabase is not configured: set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY")
        raise ConfigError()
    return factory(settings)


def authenticate(store: SupabaseStore, authorization: Optional[str]) -> User:
    """Resolve the request's bearer token to a user"""
    token = extract_bearer_token(authorization)
    if not token:
        raise AuthError()

    user = store.get_user(token)
    if user is None:
        raise AuthError()
    return user


async def get_store(
    settings: Settings = Depends(get_settings),
    factory: Callable[[Settings], SupabaseStore] = Depends(get_store_factory),
) -> SupabaseStore:
    """Dependency to get a configured store"""
    return build_store(settings, factory)


async def get_current_user(request: Request, store: SupabaseStore = Depends(get_store)) -> User:
    """Get current authenticated user from the bearer token"""
    return await run_in_threadpool(authenticate, store, request.headers.get("authorization"))
