"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_ledger.adapters.supabase_document_store import SupabaseDocumentStore
from nutrition_ledger.config import Settings, parse_timezone
from nutrition_ledger.services.food_log import FoodLogService
from nutrition_ledger.services.ledger import DailyMacroLedger
from nutrition_ledger.services.profiles import ProfileService
from nutrition_ledger.services.progress import ProgressService
from nutrition_ledger.services.store import DocumentStore, InMemoryDocumentStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: DocumentStore
    ledger: DailyMacroLedger
    profile_service: ProfileService
    progress_service: ProgressService
    food_log_service: FoodLogService
    close_resources: Callable[[], Awaitable[None]]


def build_store(settings: Settings) -> DocumentStore:
    """Create the document store selected by settings."""
    if settings.store_backend == "memory":
        return InMemoryDocumentStore()
    if settings.store_backend != "supabase":
        raise ValueError(f"Unknown store backend: {settings.store_backend}")
    if not settings.supabase_url or not settings.supabase_service_key:
        raise ValueError("Supabase URL and service key are required")
    client = create_client(settings.supabase_url, settings.supabase_service_key)
    return SupabaseDocumentStore(client, table=settings.documents_table)


def build_container(
    settings: Settings | None = None, store: DocumentStore | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    resolved_store = store or build_store(resolved_settings)
    ledger = DailyMacroLedger(
        store=resolved_store,
        timezone_name=parse_timezone(resolved_settings.timezone),
    )
    profile_service = ProfileService(
        store=resolved_store,
        mirror_legacy_target_macros=resolved_settings.mirror_legacy_target_macros,
    )
    progress_service = ProgressService(ledger=ledger, profiles=profile_service)
    food_log_service = FoodLogService(store=resolved_store, ledger=ledger)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        store=resolved_store,
        ledger=ledger,
        profile_service=profile_service,
        progress_service=progress_service,
        food_log_service=food_log_service,
        close_resources=close_resources,
    )
