"""User and wallet store."""

from remifi.config import get_settings
from remifi.store.base import MemoryUserStore, UserProfile, UserStore
from remifi.store.supabase import SupabaseUserStore

# Singleton instance
_store_instance: UserStore | None = None


def get_user_store() -> UserStore:
    """Get the configured store (Supabase, or in-memory when unset)."""
    global _store_instance

    if _store_instance is not None:
        return _store_instance

    settings = get_settings()
    if settings.has_store:
        _store_instance = SupabaseUserStore(settings.supabase_url, settings.supabase_key)
    else:
        _store_instance = MemoryUserStore()

    return _store_instance


def reset_user_store() -> None:
    """Reset store instance (useful for testing)."""
    global _store_instance
    _store_instance = None


__all__ = [
    "MemoryUserStore",
    "SupabaseUserStore",
    "UserProfile",
    "UserStore",
    "get_user_store",
    "reset_user_store",
]
