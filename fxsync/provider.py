from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from .api import ApiFootballClient, ApiFootballError, SeasonNotFoundError
from .utils import parse_dt, safe_int
from .window import SyncWindow

log = logging.getLogger(__name__)

FixtureRecord = Dict[str, Any]


def pick_season(seasons: Any) -> Optional[int]:
    """
    Season flagged ``current``; otherwise the last entry; None when there are none.
    """
    if not isinstance(seasons, list):
        return None
    entries = [s for s in seasons if isinstance(s, dict)]
    if not entries:
        return None
    current = next((s for s in entries if s.get("current")), None)
    chosen = current or entries[-1]
    return safe_int(chosen.get("year"))


def kickoff_of(record: FixtureRecord):
    fixture = record.get("fixture") if isinstance(record, dict) else None
    if not isinstance(fixture, dict):
        return None
    return parse_dt(fixture.get("date")) or parse_dt(fixture.get("timestamp"))


class FixtureProvider:
    """
    API-Football access for the window sync. Never retries: every failure is
    raised as ApiFootballError and the caller decides whether to skip.
    """

    def __init__(
        self,
        client: ApiFootballClient,
        timezone: str = "Europe/London",
        fallback_next_count: int = 50,
    ) -> None:
        self.client = client
        self.timezone = timezone
        self.fallback_next_count = fallback_next_count

    def check_reachable(self) -> Dict:
        return self.client.get("status")

    def resolve_season(self, league_id: int) -> Optional[int]:
        items = self.client.get_response("leagues", params={"id": league_id})
        first = items[0] if items and isinstance(items[0], dict) else {}
        return pick_season(first.get("seasons"))

    # --- fixtures ---
    def fetch_fixtures(self, league_id: int, date_from: date, date_to: date) -> List[FixtureRecord]:
        season = self.resolve_season(league_id)
        if season is None:
            raise SeasonNotFoundError(f"No season data for league {league_id}")
        fixtures = self.fetch_ranged(league_id, season, date_from, date_to)
        if fixtures:
            return fixtures
        log.debug("league=%s ranged query empty; falling back to next=%s", league_id, self.fallback_next_count)
        return self.fetch_upcoming_in_range(league_id, season, date_from, date_to)

    def fetch_ranged(self, league_id: int, season: int, date_from: date, date_to: date) -> List[FixtureRecord]:
        params = {
            "league": league_id,
            "season": season,
            "from": date_from.isoformat(),
            "to": date_to.isoformat(),
            "timezone": self.timezone,
        }
        return self._records(self.client.get_response("fixtures", params=params))

    def fetch_upcoming_in_range(
        self, league_id: int, season: int, date_from: date, date_to: date
    ) -> List[FixtureRecord]:
        params = {
            "league": league_id,
            "season": season,
            "next": self.fallback_next_count,
            "timezone": self.timezone,
        }
        records = self._records(self.client.get_response("fixtures", params=params))
        window = SyncWindow(date_from=date_from, date_to=date_to, tz_name=self.timezone)
        in_range = []
        for record in records:
            kickoff = kickoff_of(record)
            if kickoff is not None and window.contains(kickoff):
                in_range.append(record)
        return in_range

    # --- odds ---
    def fetch_odds(self, fixture_id: int) -> List[Dict]:
        items = self.client.get_response("odds", params={"fixture": fixture_id, "timezone": self.timezone})
        if not items or not isinstance(items[0], dict):
            return []
        bookmakers = items[0].get("bookmakers")
        return bookmakers if isinstance(bookmakers, list) else []

    # --- standings / results (catalog jobs) ---
    def fetch_standings(self, league_id: int, season: int) -> Optional[Dict]:
        """
        Returns the league block ({name, standings: [[...]]}) or None when absent.
        """
        items = self.client.get_response("standings", params={"league": league_id, "season": season})
        first = items[0] if items and isinstance(items[0], dict) else {}
        league = first.get("league")
        return league if isinstance(league, dict) else None

    def fetch_season_fixtures(self, league_id: int, season: int) -> List[FixtureRecord]:
        return self._records(self.client.get_response("fixtures", params={"league": league_id, "season": season}))

    @staticmethod
    def _records(items: List[Any]) -> List[FixtureRecord]:
        return [item for item in items if isinstance(item, dict)]


__all__ = ["FixtureProvider", "FixtureRecord", "ApiFootballError", "pick_season", "kickoff_of"]
