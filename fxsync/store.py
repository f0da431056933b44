from __future__ import annotations

import logging
import zlib
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set

from sqlalchemy import delete, func, or_, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .db import make_session_factory
from .models import FIXTURE_COLUMNS, Fixture
from .window import SyncWindow

log = logging.getLogger(__name__)

PRELOAD_CHUNK = 500


class FixtureStoreError(Exception):
    pass


@dataclass
class ReconcileResult:
    deleted_in_window: int = 0
    deleted_outside: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class ReconcileError(FixtureStoreError):
    def __init__(self, message: str, result: ReconcileResult) -> None:
        super().__init__(message)
        self.result = result


def advisory_key(league_ids: Iterable[int]) -> int:
    ids = ",".join(str(i) for i in sorted(set(league_ids)))
    return zlib.crc32(f"fxsync.fixtures:{ids}".encode("utf-8"))


def _chunks(items: Sequence[int], size: int) -> Iterator[Sequence[int]]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


class FixtureStore:
    """
    Persistence boundary for the ``fixtures`` table.

    ``upsert`` is all-or-nothing and raises on failure. ``reconcile_window`` runs
    two independent deletes scoped to the given leagues; a failing delete is
    logged, the other still runs, and the failure is raised once both are done.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = make_session_factory(engine)

    # --- writes ---
    def upsert(self, rows: Iterable[Dict]) -> int:
        by_id: Dict[int, Dict] = {}
        for row in rows:
            fixture_id = row.get("fixture_id")
            if fixture_id is None:
                continue
            by_id[fixture_id] = row
        if not by_id:
            return 0

        session = self._session_factory()
        try:
            existing: Dict[int, Fixture] = {}
            for chunk in _chunks(list(by_id), PRELOAD_CHUNK):
                stmt = select(Fixture).where(Fixture.fixture_id.in_(chunk))
                for obj in session.execute(stmt).scalars():
                    existing[obj.fixture_id] = obj
            for fixture_id, row in by_id.items():
                # whole-row replace: columns absent from the row become NULL
                data = {col: row.get(col) for col in FIXTURE_COLUMNS}
                obj = existing.get(fixture_id)
                if obj:
                    for k, v in data.items():
                        setattr(obj, k, v)
                else:
                    session.add(Fixture(**data))
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise FixtureStoreError(f"Upsert of {len(by_id)} fixtures failed: {exc}") from exc
        finally:
            session.close()
        log.info("Upserted fixtures: %s", len(by_id))
        return len(by_id)

    def reconcile_window(
        self,
        window: SyncWindow,
        league_ids: Iterable[int],
        keep_ids: Iterable[int],
    ) -> ReconcileResult:
        result = ReconcileResult()
        leagues = sorted(set(league_ids))
        if not leagues:
            log.info("Reconcile skipped: no leagues in scope")
            return result
        keep = sorted(set(keep_ids))
        start, end = window.bounds()

        # undated rows are treated as in-window
        inside = delete(Fixture).where(
            Fixture.league_id.in_(leagues),
            or_(Fixture.date.is_(None), Fixture.date.between(start, end)),
        )
        if keep:
            inside = inside.where(Fixture.fixture_id.not_in(keep))
        outside = delete(Fixture).where(
            Fixture.league_id.in_(leagues),
            or_(Fixture.date < start, Fixture.date > end),
        )

        deleted = self._run_delete("inside window", inside, result)
        if deleted is not None:
            result.deleted_in_window = deleted
        deleted = self._run_delete("outside window", outside, result)
        if deleted is not None:
            result.deleted_outside = deleted

        if not result.ok:
            raise ReconcileError(f"Window cleanup failed: {'; '.join(result.errors)}", result)
        log.info(
            "Window enforced window=%s leagues=%s keep=%s deleted_in_window=%s deleted_outside=%s",
            window,
            len(leagues),
            len(keep),
            result.deleted_in_window,
            result.deleted_outside,
        )
        return result

    def _run_delete(self, label: str, stmt, result: ReconcileResult) -> Optional[int]:
        try:
            with self.engine.begin() as conn:
                return conn.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            log.error("Cleanup (%s) failed: %s", label, exc)
            result.errors.append(f"{label}: {exc}")
            return None

    @contextmanager
    def window_lock(self, league_ids: Iterable[int]) -> Iterator[None]:
        """
        Serialize upsert+reconcile across concurrent runs for the same league set.
        PostgreSQL only (session advisory lock); other backends rely on their own write locking.
        """
        if self.engine.dialect.name != "postgresql":
            yield
            return
        key = advisory_key(league_ids)
        with self.engine.connect() as conn:
            conn.execute(text("select pg_advisory_lock(:key)"), {"key": key})
            try:
                yield
            finally:
                conn.execute(text("select pg_advisory_unlock(:key)"), {"key": key})

    # --- reads ---
    def fixture_ids(self, league_ids: Optional[Iterable[int]] = None) -> Set[int]:
        stmt = select(Fixture.fixture_id)
        if league_ids is not None:
            stmt = stmt.where(Fixture.league_id.in_(sorted(set(league_ids))))
        with self.engine.connect() as conn:
            return {row[0] for row in conn.execute(stmt)}

    def get(self, fixture_id: int) -> Optional[Fixture]:
        with self._session_factory() as session:
            return session.get(Fixture, fixture_id)

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(Fixture)).scalar_one()
