from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Optional

import typer
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .api import ApiFootballClient, RateLimiter
from .backfill import (
    catalog_leagues,
    load_league_catalog,
    read_leagues_file,
    refresh_current_standings,
    sync_results,
    sync_standings,
)
from .config import Settings, bookmaker_ids_from_settings, settings
from .db import ensure_schema, get_engine
from .leagues import league_source_from_settings
from .logging_utils import configure_logging
from .odds import OddsSelector
from .provider import FixtureProvider
from .store import FixtureStore, FixtureStoreError
from .sync import SyncError, WindowSyncEngine

app = typer.Typer(add_completion=False)
log = logging.getLogger("fxsync.cli")


def get_store_engine(cfg: Settings) -> Engine:
    engine = get_engine(cfg.database_url)
    ensure_schema(engine)
    return engine


def get_provider(cfg: Settings) -> FixtureProvider:
    if not cfg.api_football_key:
        raise typer.BadParameter("API_FOOTBALL_KEY is missing (set env or .env)")
    client = ApiFootballClient(
        api_key=cfg.api_football_key,
        base_url=cfg.api_football_base_url,
        timeout=cfg.request_timeout,
        rate_limiter=RateLimiter.from_delay_ms(cfg.request_delay_ms),
    )
    return FixtureProvider(client, timezone=cfg.sync_timezone, fallback_next_count=cfg.fallback_next_count)


def build_sync_engine(cfg: Settings, engine: Engine, provider: FixtureProvider) -> WindowSyncEngine:
    return WindowSyncEngine(
        provider=provider,
        store=FixtureStore(engine),
        selector=OddsSelector(bookmaker_ids_from_settings(cfg)),
        league_source=league_source_from_settings(cfg, engine),
        timezone=cfg.sync_timezone,
        window_days=cfg.window_days,
        deadline_seconds=cfg.run_deadline_seconds,
        preflight=cfg.preflight_check,
    )


def run_window_sync(cfg: Optional[Settings] = None) -> int:
    """
    One scheduler cycle. Returns the process exit code (0 ok, 1 fatal).
    """
    cfg = cfg or settings
    configure_logging(cfg.log_level)
    if not cfg.api_football_key:
        log.error("API_FOOTBALL_KEY is missing (set env or .env)")
        return 1
    provider = get_provider(cfg)
    try:
        engine = get_store_engine(cfg)
        build_sync_engine(cfg, engine, provider).run()
    except (SyncError, FixtureStoreError, SQLAlchemyError, ValueError) as exc:
        log.exception("Fatal error: %s", exc)
        return 1
    log.info("Done.")
    return 0


def _season_range(from_season: Optional[int], to_season: Optional[int], default_from: int) -> list[int]:
    end = to_season or date.today().year
    start = from_season or default_from
    if start > end:
        raise typer.BadParameter(f"from-season {start} is after to-season {end}")
    return list(range(start, end + 1))


@app.callback()
def main() -> None:
    configure_logging(settings.log_level)


@app.command("sync-fixtures")
def sync_fixtures() -> None:
    """
    Sync today..+N days fixtures and 1X2 odds; delete everything else for the selected leagues.
    """
    code = run_window_sync(settings)
    if code:
        raise typer.Exit(code=code)


@app.command("load-leagues")
def load_leagues(path: Path = typer.Argument(Path("leagues.json"), help="JSON list of {id, name, country}")) -> None:
    """
    Upsert the league catalog from a JSON file.
    """
    engine = get_store_engine(settings)
    count = load_league_catalog(engine, read_leagues_file(path))
    typer.echo(f"league_catalog rows upserted: {count}")


@app.command("sync-standings")
def sync_standings_cmd(
    from_season: int = typer.Option(1995, help="First season to backfill"),
    to_season: Optional[int] = typer.Option(None, help="Last season (default: current year)"),
) -> None:
    """
    Backfill standings for every catalog league over a season range.
    """
    seasons = _season_range(from_season, to_season, 1995)
    provider = get_provider(settings)
    engine = get_store_engine(settings)
    leagues = catalog_leagues(engine)
    typer.echo(f"Loaded {len(leagues)} leagues from league_catalog")
    rows = sync_standings(provider, engine, leagues, seasons)
    typer.echo(f"standings rows upserted: {rows}")


@app.command("sync-results")
def sync_results_cmd(
    from_season: Optional[int] = typer.Option(None, help="First season (default: current year)"),
    to_season: Optional[int] = typer.Option(None, help="Last season (default: current year)"),
) -> None:
    """
    Upsert season results (goals/status) for every catalog league.
    """
    seasons = _season_range(from_season, to_season, date.today().year)
    provider = get_provider(settings)
    engine = get_store_engine(settings)
    leagues = catalog_leagues(engine)
    typer.echo(f"Loaded {len(leagues)} leagues from league_catalog")
    rows = sync_results(provider, engine, leagues, seasons)
    typer.echo(f"results rows upserted: {rows}")


@app.command("refresh-current-standings")
def refresh_current_standings_cmd() -> None:
    """
    Rebuild current_standings for the selected leagues (current season only).
    """
    provider = get_provider(settings)
    engine = get_store_engine(settings)
    league_ids = league_source_from_settings(settings, engine).league_ids()
    typer.echo(f"Processing {len(league_ids)} leagues")
    rows = refresh_current_standings(provider, engine, league_ids)
    typer.echo(f"current_standings rows inserted: {rows}")


if __name__ == "__main__":
    app()
