"""
Builds the backend client selected in settings.
"""

from rfi_tracker.backend.base import BackendClient
from rfi_tracker.backend.local import LocalBackend
from rfi_tracker.backend.supabase import SupabaseClient
from rfi_tracker.core.config import Settings


def create_backend_client(settings: Settings) -> BackendClient:
    if settings.backend == "supabase":
        return SupabaseClient.from_settings(settings)
    if settings.backend == "local":
        if not settings.secret_key:
            raise ValueError("secret_key is required for the local backend")
        return LocalBackend.from_settings(settings)
    raise ValueError(f"Unknown backend: {settings.backend}")
