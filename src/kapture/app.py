"""
Composition root: builds every long-lived object once and wires them together.

Nothing in the package reaches for a process-wide store or engine; the
entrypoints (`python -m kapture`, the FastAPI app) call build_services() and
pass the resulting handles down.
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine

from kapture.capture import CaptureService
from kapture.config import Settings, get_settings
from kapture.db.engine import build_engine
from kapture.notion.auth import TokenAuthenticator
from kapture.notion.client import NotionClient
from kapture.notion.destinations import DestinationDirectory
from kapture.routing.ranker import SuggestionRanker
from kapture.storage.entry_store import EntryStore
from kapture.storage.preference_store import PreferenceStore
from kapture.storage.sync_log import SyncLogStore
from kapture.sync.connectivity import HttpConnectivityProbe
from kapture.sync.engine import SyncEngine


@dataclass
class Services:
    settings: Settings
    engine: Engine
    entries: EntryStore
    preferences: PreferenceStore
    sync_log: SyncLogStore
    sync_engine: SyncEngine
    directory: DestinationDirectory
    ranker: SuggestionRanker
    capture: CaptureService


def build_services(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[Engine] = None,
    remote=None,
    probe=None,
) -> Services:
    """Wire stores, Notion client, sync engine and ranker from settings.

    ``engine``, ``remote`` and ``probe`` may be supplied to replace the
    database or network collaborators (tests, alternative backends).
    """
    settings = settings or get_settings()
    engine = engine or build_engine(settings.database_url)

    notion = remote or NotionClient(
        TokenAuthenticator(tokens_dir=settings.token_dir),
        base_url=settings.notion_api_base_url,
        notion_version=settings.notion_version,
        timeout=settings.notion_timeout_seconds,
    )
    probe = probe or HttpConnectivityProbe(
        settings.connectivity_url, timeout=settings.connectivity_timeout_seconds
    )

    entries = EntryStore(engine, max_attempts=settings.max_sync_attempts)
    preferences = PreferenceStore(engine)
    sync_log = SyncLogStore(engine)
    sync_engine = SyncEngine(
        entries,
        notion,
        probe,
        max_attempts=settings.max_sync_attempts,
        sync_log=sync_log,
    )
    directory = DestinationDirectory(
        notion,
        cache_seconds=settings.destination_cache_seconds,
    )
    ranker = SuggestionRanker(
        preferences,
        directory,
        window_hours=settings.suggestion_window_hours,
        candidates=settings.suggestion_candidates,
    )
    return Services(
        settings=settings,
        engine=engine,
        entries=entries,
        preferences=preferences,
        sync_log=sync_log,
        sync_engine=sync_engine,
        directory=directory,
        ranker=ranker,
        capture=CaptureService(sync_engine, ranker),
    )
