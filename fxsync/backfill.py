"""
Catalog-driven companion jobs: league catalog load, standings and results
backfill, and the current-standings rebuild.

Provider failures skip the affected league/season; store failures propagate.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from .api import ApiFootballError
from .db import get_session
from .models import CurrentStanding, LeagueCatalog, Result, Standing
from .provider import FixtureProvider, kickoff_of
from .utils import as_dict, safe_int, utcnow

log = logging.getLogger(__name__)

CATALOG_CHUNK = 500

LeagueRef = Tuple[int, Optional[str]]


def _upsert(session: Session, model, data: Dict, key) -> None:
    obj = session.get(model, key)
    if obj:
        for k, v in data.items():
            setattr(obj, k, v)
    else:
        session.add(model(**data))


# --- league catalog ---
def read_leagues_file(path: Path) -> List[Dict[str, Any]]:
    with Path(path).open("r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON list of leagues")
    return [item for item in raw if isinstance(item, dict)]


def load_league_catalog(engine: Engine, leagues: Sequence[Dict[str, Any]]) -> int:
    rows = []
    for item in leagues:
        league_id = safe_int(item.get("id"))
        if league_id is None:
            continue
        rows.append({"league_id": league_id, "league_name": item.get("name"), "country": item.get("country") or None})

    count = 0
    for i in range(0, len(rows), CATALOG_CHUNK):
        chunk = rows[i : i + CATALOG_CHUNK]
        with get_session(engine) as session:
            for data in chunk:
                _upsert(session, LeagueCatalog, data, data["league_id"])
            session.commit()
        count += len(chunk)
    log.info("league_catalog upsert complete: %s rows", count)
    return count


def catalog_leagues(engine: Engine) -> List[LeagueRef]:
    stmt = select(LeagueCatalog.league_id, LeagueCatalog.league_name).order_by(LeagueCatalog.league_id)
    with engine.connect() as conn:
        return [(row[0], row[1]) for row in conn.execute(stmt)]


# --- standings ---
def standing_rows(league_block: Dict, league_id: int, league_name: Optional[str], season: int) -> List[Dict]:
    groups = league_block.get("standings")
    table = groups[0] if isinstance(groups, list) and groups and isinstance(groups[0], list) else []
    rows: Dict[int, Dict] = {}
    for entry in table:
        if not isinstance(entry, dict):
            continue
        team = as_dict(entry.get("team"))
        totals = as_dict(entry.get("all"))
        team_id = safe_int(team.get("id"))
        if team_id is None:
            continue
        rows[team_id] = {
            "league_id": league_id,
            "league_name": league_name,
            "season": season,
            "team_id": team_id,
            "team_name": team.get("name"),
            "rank": safe_int(entry.get("rank")),
            "points": safe_int(entry.get("points")),
            "matches_played": safe_int(totals.get("played")),
            "wins": safe_int(totals.get("win")),
            "draws": safe_int(totals.get("draw")),
            "losses": safe_int(totals.get("lose")),
        }
    return list(rows.values())


def sync_standings(
    provider: FixtureProvider,
    engine: Engine,
    leagues: Iterable[LeagueRef],
    seasons: Sequence[int],
) -> int:
    total = 0
    for league_id, league_name in leagues:
        for season in seasons:
            try:
                block = provider.fetch_standings(league_id, season)
            except ApiFootballError as exc:
                log.error("standings league=%s season=%s status=failed error=%s", league_id, season, exc)
                continue
            rows = standing_rows(block or {}, league_id, league_name, season)
            if not rows:
                log.warning("standings league=%s season=%s status=empty", league_id, season)
                continue
            with get_session(engine) as session:
                for data in rows:
                    _upsert(session, Standing, data, (league_id, season, data["team_id"]))
                session.commit()
            log.info("standings league=%s season=%s rows=%s status=ok", league_id, season, len(rows))
            total += len(rows)
    return total


def refresh_current_standings(provider: FixtureProvider, engine: Engine, league_ids: Iterable[int]) -> int:
    """
    Rebuild ``current_standings`` for the current season of each league.

    Runs as one transaction: readers keep seeing the previous table until the
    commit, and a store failure rolls everything back.
    """
    total = 0
    with get_session(engine) as session:
        try:
            session.execute(delete(CurrentStanding))
            for league_id in league_ids:
                try:
                    season = provider.resolve_season(league_id)
                    if season is None:
                        log.warning("current_standings league=%s status=skipped reason=no_season", league_id)
                        continue
                    block = provider.fetch_standings(league_id, season)
                except ApiFootballError as exc:
                    log.error("current_standings league=%s status=failed error=%s", league_id, exc)
                    continue
                block = block or {}
                league_name = block.get("name") or f"League {league_id}"
                rows = standing_rows(block, league_id, league_name, season)
                if not rows:
                    log.warning("current_standings league=%s season=%s status=empty", league_id, season)
                    continue
                stamp = utcnow()
                session.add_all(CurrentStanding(**data, updated_at=stamp) for data in rows)
                log.info("current_standings league=%s season=%s rows=%s status=ok", league_id, season, len(rows))
                total += len(rows)
            session.commit()
        except Exception:
            session.rollback()
            raise
    return total


# --- results ---
def result_row(record: Dict, league_id: int, league_name: Optional[str], season: int) -> Optional[Dict]:
    fixture = as_dict(record.get("fixture"))
    fixture_id = safe_int(fixture.get("id"))
    if fixture_id is None:
        return None
    teams = as_dict(record.get("teams"))
    home = as_dict(teams.get("home"))
    away = as_dict(teams.get("away"))
    goals = as_dict(record.get("goals"))
    return {
        "fixture_id": fixture_id,
        "league_id": league_id,
        "league_name": league_name,
        "season": season,
        "date": kickoff_of(record),
        "home_team_id": safe_int(home.get("id")),
        "home_team_name": home.get("name"),
        "away_team_id": safe_int(away.get("id")),
        "away_team_name": away.get("name"),
        "home_goals": safe_int(goals.get("home")),
        "away_goals": safe_int(goals.get("away")),
        "status": as_dict(fixture.get("status")).get("short"),
    }


def sync_results(
    provider: FixtureProvider,
    engine: Engine,
    leagues: Iterable[LeagueRef],
    seasons: Sequence[int],
) -> int:
    total = 0
    for league_id, league_name in leagues:
        for season in seasons:
            try:
                records = provider.fetch_season_fixtures(league_id, season)
            except ApiFootballError as exc:
                log.error("results league=%s season=%s status=failed error=%s", league_id, season, exc)
                continue
            mapped = (result_row(rec, league_id, league_name, season) for rec in records)
            rows = list({r["fixture_id"]: r for r in mapped if r}.values())
            if not rows:
                log.warning("results league=%s season=%s status=empty", league_id, season)
                continue
            with get_session(engine) as session:
                for data in rows:
                    _upsert(session, Result, data, data["fixture_id"])
                session.commit()
            log.info("results league=%s season=%s rows=%s status=ok", league_id, season, len(rows))
            total += len(rows)
    return total
