"""Dependency container wiring for the server and the client session."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from nutrition_sync.adapters.file_storage import JsonFileStorage
from nutrition_sync.adapters.openai_assistant_client import OpenAIAssistantClient
from nutrition_sync.adapters.remote_store_client import HttpxRemoteStoreClient
from nutrition_sync.adapters.supabase_document_repository import (
    SupabaseDocumentRepository,
)
from nutrition_sync.app_logging import configure_logging
from nutrition_sync.config import ClientSettings, ServerSettings
from nutrition_sync.services.assistant import AssistantService
from nutrition_sync.services.documents import SyncDocumentService
from nutrition_sync.services.local_cache import LocalCache
from nutrition_sync.services.session import TrackerSession


@dataclass
class ServerContainer:
    """Holds dependencies of the sync document server."""

    settings: ServerSettings
    document_service: SyncDocumentService
    close_resources: Callable[[], Awaitable[None]]


@dataclass
class ClientContainer:
    """Holds dependencies of a tracker client session."""

    settings: ClientSettings
    session: TrackerSession
    close_resources: Callable[[], Awaitable[None]]


def build_server_container(settings: ServerSettings | None = None) -> ServerContainer:
    """Create the default server container."""
    resolved_settings = settings or ServerSettings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    document_service = SyncDocumentService(
        repository=SupabaseDocumentRepository(supabase_client),
        document_id=resolved_settings.sync_document_id,
    )

    async def close_resources() -> None:
        return None

    return ServerContainer(
        settings=resolved_settings,
        document_service=document_service,
        close_resources=close_resources,
    )


def build_client_container(settings: ClientSettings | None = None) -> ClientContainer:
    """Create the default client container."""
    resolved_settings = settings or ClientSettings()
    configure_logging(resolved_settings.log_level)
    cache = LocalCache(JsonFileStorage(Path(resolved_settings.storage_path)))
    remote_client = HttpxRemoteStoreClient.create(
        resolved_settings.sync_base_url,
        timeout=resolved_settings.http_timeout_seconds,
    )
    assistant_service = None
    if resolved_settings.openai_api_key:
        assistant_service = AssistantService(
            client=OpenAIAssistantClient.create(resolved_settings.openai_api_key),
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        )
    session = TrackerSession(
        cache=cache,
        remote=remote_client,
        assistant=assistant_service,
        debounce_seconds=resolved_settings.sync_debounce_seconds,
        success_display_seconds=resolved_settings.sync_success_display_seconds,
    )

    async def close_resources() -> None:
        await session.close()
        await remote_client.close()

    return ClientContainer(
        settings=resolved_settings,
        session=session,
        close_resources=close_resources,
    )
