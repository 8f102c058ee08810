"""Data collaborator implementations."""

from .supabase_client import SupabaseDataClient, translate_api_error

__all__ = ["SupabaseDataClient", "translate_api_error"]
