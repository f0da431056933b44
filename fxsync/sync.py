from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from .api import ApiFootballError
from .leagues import LeagueSource
from .odds import EMPTY_QUOTE, OddsQuote, OddsSelector
from .provider import FixtureProvider, FixtureRecord, kickoff_of
from .store import FixtureStore, ReconcileResult
from .utils import as_dict, safe_int, to_utc_naive, utcnow
from .window import DEFAULT_WINDOW_DAYS, SyncWindow, compute_window

log = logging.getLogger(__name__)


class SyncError(Exception):
    pass


class SyncDeadlineExceeded(SyncError):
    pass


class RunDeadline:
    """
    Wall-clock limit for one run; ``seconds <= 0`` disables it.
    """

    def __init__(self, seconds: float, clock: Optional[Callable[[], float]] = None) -> None:
        self.seconds = seconds
        self._clock = clock or time.monotonic
        self._started = self._clock()

    @property
    def remaining(self) -> Optional[float]:
        if self.seconds <= 0:
            return None
        return self.seconds - (self._clock() - self._started)

    def check(self, stage: str) -> None:
        remaining = self.remaining
        if remaining is not None and remaining <= 0:
            raise SyncDeadlineExceeded(f"Run deadline of {self.seconds}s exceeded during {stage}")


@dataclass
class SyncReport:
    window: SyncWindow
    leagues_requested: List[int] = field(default_factory=list)
    leagues_processed: List[int] = field(default_factory=list)
    leagues_failed: List[int] = field(default_factory=list)
    fixtures_fetched: int = 0
    fixtures_upserted: int = 0
    odds_failed: int = 0
    reconcile: Optional[ReconcileResult] = None


def map_fixture(record: FixtureRecord, quote: OddsQuote, updated_at: datetime) -> Dict:
    fixture = as_dict(record.get("fixture"))
    league = as_dict(record.get("league"))
    teams = as_dict(record.get("teams"))
    home = as_dict(teams.get("home"))
    away = as_dict(teams.get("away"))
    return {
        "fixture_id": safe_int(fixture.get("id")),
        "league_id": safe_int(league.get("id")),
        "league_name": league.get("name"),
        "season": safe_int(league.get("season")),
        "date": kickoff_of(record),
        "status": as_dict(fixture.get("status")).get("short"),
        "venue": as_dict(fixture.get("venue")).get("name"),
        "home_team_id": safe_int(home.get("id")),
        "home_team_name": home.get("name"),
        "away_team_id": safe_int(away.get("id")),
        "away_team_name": away.get("name"),
        "home_odds": quote.home,
        "draw_odds": quote.draw,
        "away_odds": quote.away,
        "updated_at": updated_at,
    }


def dedupe_rows(rows: Iterable[Dict]) -> List[Dict]:
    """
    One row per fixture_id; the last occurrence wins.
    """
    by_id: Dict[int, Dict] = {}
    for row in rows:
        if row.get("fixture_id") is None:
            continue
        by_id.pop(row["fixture_id"], None)
        by_id[row["fixture_id"]] = row
    return list(by_id.values())


class WindowSyncEngine:
    """
    Keep the fixtures table equal to provider truth for [today, today+N days]
    across the selected leagues.

    Per-league and per-fixture provider errors are logged and skipped; store
    errors and deadline overruns abort the run before or during the write phase.
    """

    def __init__(
        self,
        provider: FixtureProvider,
        store: FixtureStore,
        selector: OddsSelector,
        league_source: LeagueSource,
        timezone: str = "Europe/London",
        window_days: int = DEFAULT_WINDOW_DAYS,
        deadline_seconds: float = 0,
        preflight: bool = True,
    ) -> None:
        self.provider = provider
        self.store = store
        self.selector = selector
        self.league_source = league_source
        self.timezone = timezone
        self.window_days = window_days
        self.deadline_seconds = deadline_seconds
        self.preflight = preflight

    def run(self, now: Optional[datetime] = None) -> SyncReport:
        deadline = RunDeadline(self.deadline_seconds)
        window = compute_window(self.timezone, self.window_days, now=now)
        log.info("Fetching fixtures window=%s", window)

        if self.preflight:
            try:
                self.provider.check_reachable()
            except ApiFootballError as exc:
                raise SyncError(f"Provider unreachable: {exc}") from exc

        report = SyncReport(window=window, leagues_requested=self.league_source.league_ids())
        records = self._fetch_leagues(window, deadline, report)
        processed = report.leagues_processed

        if not records:
            log.info("No fixtures returned for the window; enforcing window anyway")
            with self.store.window_lock(processed):
                report.reconcile = self.store.reconcile_window(window, processed, set())
            return report

        rows, keep_ids = self._build_rows(records, deadline, report, now)
        rows = dedupe_rows(rows)
        deadline.check("upsert")

        with self.store.window_lock(processed):
            report.fixtures_upserted = self.store.upsert(rows)
            report.reconcile = self.store.reconcile_window(window, processed, keep_ids)

        log.info(
            "Sync complete leagues=%s/%s fixtures=%s odds_failed=%s",
            len(processed),
            len(report.leagues_requested),
            report.fixtures_upserted,
            report.odds_failed,
        )
        return report

    def _fetch_leagues(self, window: SyncWindow, deadline: RunDeadline, report: SyncReport) -> List[FixtureRecord]:
        records: List[FixtureRecord] = []
        for league_id in report.leagues_requested:
            deadline.check(f"league {league_id}")
            try:
                fixtures = self.provider.fetch_fixtures(league_id, window.date_from, window.date_to)
            except ApiFootballError as exc:
                log.warning("league=%s status=failed error=%s", league_id, exc)
                report.leagues_failed.append(league_id)
                continue
            log.info("league=%s fixtures=%s status=ok", league_id, len(fixtures))
            records.extend(fixtures)
            report.leagues_processed.append(league_id)
        report.fixtures_fetched = len(records)
        return records

    def _build_rows(
        self,
        records: List[FixtureRecord],
        deadline: RunDeadline,
        report: SyncReport,
        now: Optional[datetime],
    ) -> Tuple[List[Dict], Set[int]]:
        rows: List[Dict] = []
        keep_ids: Set[int] = set()
        for record in records:
            fixture_id = safe_int(as_dict(record.get("fixture")).get("id"))
            if fixture_id is None:
                log.warning("Skipping fixture record without id: league=%s", as_dict(record.get("league")).get("id"))
                continue
            deadline.check(f"odds for fixture {fixture_id}")
            quote = EMPTY_QUOTE
            try:
                quote = self.selector.select(self.provider.fetch_odds(fixture_id))
            except ApiFootballError as exc:
                log.warning("fixture=%s odds=unavailable error=%s", fixture_id, exc)
                report.odds_failed += 1
            updated_at = to_utc_naive(now) if now else utcnow()
            rows.append(map_fixture(record, quote, updated_at))
            keep_ids.add(fixture_id)
        return rows, keep_ids
