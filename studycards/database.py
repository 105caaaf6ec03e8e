from supabase import create_client, Client
from studycards.config import Settings
from studycards.models import GenerationRecord, Plan, User
from typing import Optional, Dict, Any, List
import logging

logger = logging.getLogger(__name__)


class SupabaseStore:
    """Supabase wrapper for identity lookups and the profiles, usage and generations tables

    Uses the service role key, so every query filters by user id explicitly.
    """

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseStore":
        return cls(create_client(settings.supabase_url, settings.supabase_service_role_key))

    # Identity
    def get_user(self, access_token: str) -> Optional[User]:
        """Resolve an access token to a user, None if it is invalid"""
        try:
            response = self.client.auth.get_user(access_token)
        except Exception as e:
            logger.warning(f"Token lookup failed: {e}")
            return None
        if not response or not response.user:
            return None
        return User(id=response.user.id, email=response.user.email)

    # Profile operations
    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.client.table("profiles").select("*").eq("id", user_id).limit(1).execute()
        return result.data[0] if result.data else None

    def get_plan(self, user_id: str) -> Plan:
        """Premium only when the stored plan says so; lookup errors count as free"""
        try:
            result = self.client.table("profiles").select("plan").eq("id", user_id).limit(1).execute()
        except Exception as e:
            logger.error(f"Error getting plan for {user_id}: {e}")
            return Plan.FREE
        profile = result.data[0] if result.data else None
        if profile and profile.get("plan") == Plan.PREMIUM.value:
            return Plan.PREMIUM
        return Plan.FREE

    def upsert_profile(self, user_id: str, update_data: Dict[str, Any]) -> Dict[str, Any]:
        row = {"id": user_id, **update_data}
        result = self.client.table("profiles").upsert(row, on_conflict="id").execute()
        return result.data[0] if result.data else row

    # Usage operations
    def get_usage(self, user_id: str) -> int:
        """Flashcards generated so far on the free plan, 0 when no row exists"""
        try:
            result = self.client.table("usage").select("flashcards_used").eq("user_id", user_id).limit(1).execute()
        except Exception as e:
            logger.error(f"Error getting usage for {user_id}: {e}")
            return 0
        row = result.data[0] if result.data else None
        return int((row or {}).get("flashcards_used") or 0)

    def increment_usage(self, user_id: str, amount: int) -> int:
        """Atomically add ``amount`` to the user's counter and return the new total"""
        result = self.client.rpc(
            "increment_flashcards_used",
            {"p_user_id": user_id, "p_amount": amount},
        ).execute()
        return int(result.data or 0)

    # Generation operations
    def create_generation(self, record: GenerationRecord) -> Optional[Dict[str, Any]]:
        data = record.model_dump(mode="json")
        result = self.client.table("generations").insert(data).execute()
        return result.data[0] if result.data else None

    def get_user_generations(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        """Most recent generations first"""
        result = (
            self.client.table("generations")
            .select("id,created_at,title,requested_count,style,mode")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return result.data or []

    def get_generation(self, user_id: str, generation_id: str) -> Optional[Dict[str, Any]]:
        result = (
            self.client.table("generations")
            .select("*")
            .eq("id", generation_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        return result.data[0] if result.data else None


def get_store_factory():
    """Dependency returning the callable that builds a store from settings"""
    return SupabaseStore.from_settings
