from supabase import create_client, Client
from filmroom.config import settings
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """service_role client for the retention job and back office; falls back to the anon client."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()


def film_bucket(supabase: Client):
    """Storage bucket holding game film when S3 is not configured."""
    return supabase.storage.from_(settings.film_bucket)


def check_database(supabase: Client) -> bool:
    """Readiness check: tier_config is seeded at deploy time, so one row proves the connection."""
    try:
        result = supabase.table("tier_config").select("tier_key").limit(1).execute()
    except Exception as e:
        logger.error(f"Database readiness check failed: {e}")
        return False
    return bool(result.data)
