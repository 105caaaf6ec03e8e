from fastapi.testclient import TestClient
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
import json
import pytest
import time

from main import app
from studycards.ai import get_completion_factory
from studycards.config import Settings, get_settings
from studycards.database import get_store_factory
from studycards.models import GenerationRecord, Plan, User

VALID_TOKEN = "good-token"
USER_ID = "user-1"
AUTH_HEADERS = {"Authorization": f"Bearer {VALID_TOKEN}"}


class FakeStore:
    """In-memory stand-in for SupabaseStore"""

    def __init__(self):
        self.users: Dict[str, User] = {VALID_TOKEN: User(id=USER_ID, email="student@example.com")}
        self.profiles: Dict[str, Dict[str, Any]] = {}
        self.usage: Dict[str, int] = {}
        self.generations: List[Dict[str, Any]] = []
        self.calls: List[str] = []
        self.fail_writes = False

    def get_user(self, access_token: str) -> Optional[User]:
        self.calls.append("get_user")
        return self.users.get(access_token)

    def get_profile(self, user_id: str):
        self.calls.append("get_profile")
        return self.profiles.get(user_id)

    def get_plan(self, user_id: str) -> Plan:
        self.calls.append("get_plan")
        profile = self.profiles.get(user_id) or {}
        return Plan.PREMIUM if profile.get("plan") == "premium" else Plan.FREE

    def upsert_profile(self, user_id: str, update_data: Dict[str, Any]):
        self.calls.append("upsert_profile")
        if self.fail_writes:
            raise RuntimeError("write failed")
        row = {**self.profiles.get(user_id, {}), "id": user_id, **update_data}
        self.profiles[user_id] = row
        return row

    def get_usage(self, user_id: str) -> int:
        self.calls.append("get_usage")
        return self.usage.get(user_id, 0)

    def increment_usage(self, user_id: str, amount: int) -> int:
        self.calls.append("increment_usage")
        if self.fail_writes:
            raise RuntimeError("write failed")
        self.usage[user_id] = self.usage.get(user_id, 0) + amount
        return self.usage[user_id]

    def create_generation(self, record: GenerationRecord):
        self.calls.append("create_generation")
        if self.fail_writes:
            raise RuntimeError("write failed")
        row = record.model_dump(mode="json")
        row["id"] = f"gen-{len(self.generations) + 1}"
        row["created_at"] = f"2026-01-01T00:00:{len(self.generations):02d}+00:00"
        self.generations.append(row)
        return row

    def get_user_generations(self, user_id: str, limit: int = 50):
        self.calls.append("get_user_generations")
        rows = [row for row in self.generations if row["user_id"] == user_id]
        rows.sort(key=lambda row: row["created_at"], reverse=True)
        return rows[:limit]

    def get_generation(self, user_id: str, generation_id: str):
        self.calls.append("get_generation")
        for row in self.generations:
            if row["id"] == generation_id and row["user_id"] == user_id:
                return row
        return None


class FakeCompletions:
    def __init__(self, owner: "FakeCompletionClient"):
        self.owner = owner

    def create(self, **kwargs):
        self.owner.calls.append(kwargs)
        if self.owner.delay:
            time.sleep(self.owner.delay)
        if self.owner.error is not None:
            raise self.owner.error
        if self.owner.content is None:
            return SimpleNamespace(choices=[])
        message = SimpleNamespace(content=self.owner.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeCompletionClient:
    """Mimics ``openai.OpenAI().chat.completions.create``"""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.content: Optional[str] = None
        self.error: Optional[Exception] = None
        self.delay = 0.0
        self.chat = SimpleNamespace(completions=FakeCompletions(self))

    def reply_with_cards(self, count: int, title: str = "Biology"):
        cards = [
            {"question": f"Question {i}?", "answer": f"Answer {i}", "tags": ["bio"]}
            for i in range(1, count + 1)
        ]
        self.content = json.dumps({"title": title, "flashcards": cards})


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        groq_api_key="test-groq-key",
        supabase_url="https://example.supabase.co",
        supabase_service_role_key="test-service-key",
    )


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def completion():
    fake = FakeCompletionClient()
    fake.reply_with_cards(12)
    return fake


@pytest.fixture
def overrides(settings, store, completion):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_store_factory] = lambda: (lambda _settings: store)
    app.dependency_overrides[get_completion_factory] = lambda: (lambda _settings: completion)
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(overrides):
    with TestClient(overrides) as test_client:
        yield test_client


@pytest.fixture
def anyio_backend():
    return "asyncio"
