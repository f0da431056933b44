from __future__ import annotations

from typing import List, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.engine import Engine

from .config import Settings, league_ids_from_settings
from .models import LeagueCatalog


class LeagueSource(Protocol):
    def league_ids(self) -> List[int]:
        ...


class StaticLeagueSource:
    def __init__(self, league_ids: Sequence[int]) -> None:
        self._ids = list(dict.fromkeys(int(i) for i in league_ids))

    def league_ids(self) -> List[int]:
        return list(self._ids)


class CatalogLeagueSource:
    """
    Active leagues from the ``league_catalog`` table, ordered by id.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def league_ids(self) -> List[int]:
        stmt = (
            select(LeagueCatalog.league_id)
            .where(LeagueCatalog.active.is_(True))
            .order_by(LeagueCatalog.league_id)
        )
        with self.engine.connect() as conn:
            return [row[0] for row in conn.execute(stmt)]


def league_source_from_settings(settings: Settings, engine: Engine) -> LeagueSource:
    mode = (settings.league_source or "static").strip().lower()
    if mode == "static":
        return StaticLeagueSource(league_ids_from_settings(settings))
    if mode == "catalog":
        return CatalogLeagueSource(engine)
    raise ValueError(f"Unknown LEAGUE_SOURCE {settings.league_source!r} (expected static|catalog)")
