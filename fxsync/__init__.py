"""
Sliding-window fixture/odds sync for API-Football.

Exports the client, provider, odds selector, store and sync engine used by the
command entrypoints in ``fxsync.cli`` and ``scripts/``.
"""

from .api import ApiFootballClient, ApiFootballError, RateLimiter, SeasonNotFoundError
from .db import ensure_schema, get_engine, get_session
from .leagues import CatalogLeagueSource, StaticLeagueSource
from .models import Base, CurrentStanding, Fixture, LeagueCatalog, Result, Standing
from .odds import OddsQuote, OddsSelector
from .provider import FixtureProvider
from .store import FixtureStore, FixtureStoreError, ReconcileError, ReconcileResult
from .sync import SyncDeadlineExceeded, SyncError, SyncReport, WindowSyncEngine
from .window import SyncWindow, compute_window

__all__ = [
    "ApiFootballClient",
    "ApiFootballError",
    "RateLimiter",
    "SeasonNotFoundError",
    "ensure_schema",
    "get_engine",
    "get_session",
    "CatalogLeagueSource",
    "StaticLeagueSource",
    "Base",
    "CurrentStanding",
    "Fixture",
    "LeagueCatalog",
    "Result",
    "Standing",
    "OddsQuote",
    "OddsSelector",
    "FixtureProvider",
    "FixtureStore",
    "FixtureStoreError",
    "ReconcileError",
    "ReconcileResult",
    "SyncDeadlineExceeded",
    "SyncError",
    "SyncReport",
    "WindowSyncEngine",
    "SyncWindow",
    "compute_window",
]
