"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from patrol_tracker.adapters.supabase_directory_repository import (
    SupabaseDirectoryRepository,
)
from patrol_tracker.adapters.supabase_patrol_repository import (
    SupabasePatrolRepository,
)
from patrol_tracker.config import Settings
from patrol_tracker.services.directory import DirectoryService
from patrol_tracker.services.patrols import PatrolRegistry, PatrolSessionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    directory_service: DirectoryService
    patrol_service: PatrolSessionService
    patrol_registry: PatrolRegistry
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    directory_service = DirectoryService(SupabaseDirectoryRepository(supabase_client))
    patrol_service = PatrolSessionService(
        patrol_repository=SupabasePatrolRepository(supabase_client),
        directory_service=directory_service,
        autosave_interval_seconds=resolved_settings.autosave_interval_seconds,
        location_timeout_seconds=resolved_settings.location_timeout_seconds,
    )
    patrol_registry = PatrolRegistry()

    async def close_resources() -> None:
        await patrol_registry.close()

    return AppContainer(
        settings=resolved_settings,
        directory_service=directory_service,
        patrol_service=patrol_service,
        patrol_registry=patrol_registry,
        close_resources=close_resources,
    )
