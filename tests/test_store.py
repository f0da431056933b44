from datetime import date, datetime

import pytest
from sqlalchemy.exc import OperationalError

from fxsync.store import FixtureStore, ReconcileError, advisory_key
from fxsync.window import SyncWindow

WINDOW = SyncWindow(date(2025, 1, 10), date(2025, 1, 17), "UTC")


def row(fixture_id, league_id=39, when=datetime(2025, 1, 12, 15, 0), **extra):
    data = {"fixture_id": fixture_id, "league_id": league_id, "date": when, "home_team_name": "Home FC"}
    data.update(extra)
    return data


class FlakyEngine:
    """Delegates to a real engine but fails the Nth ``begin()``."""

    def __init__(self, engine, fail_on):
        self._engine = engine
        self._calls = 0
        self.fail_on = fail_on

    def begin(self):
        self._calls += 1
        if self._calls == self.fail_on:
            raise OperationalError("DELETE FROM fixtures", {}, Exception("database is locked"))
        return self._engine.begin()

    def __getattr__(self, name):
        return getattr(self._engine, name)


def test_upsert_inserts_and_replaces_whole_row(store):
    assert store.upsert([row(100, home_odds=2.1, draw_odds=3.4, away_odds=3.5, venue="Main Ground")]) == 1
    assert store.get(100).home_odds == 2.1

    store.upsert([row(100, status="PST")])
    replaced = store.get(100)
    assert replaced.status == "PST"
    assert replaced.home_odds is None
    assert replaced.venue is None
    assert store.count() == 1


def test_upsert_same_id_twice_keeps_last(store):
    assert store.upsert([row(100, status="NS"), row(100, status="1H")]) == 1
    assert store.get(100).status == "1H"


def test_upsert_empty_is_noop(store):
    assert store.upsert([]) == 0
    assert store.upsert([{"league_id": 39}]) == 0
    assert store.count() == 0


def test_reconcile_removes_stale_and_out_of_window_rows(store):
    store.upsert(
        [
            row(100),
            row(999, when=datetime(2025, 1, 13, 12, 0)),
            row(50, when=datetime(2025, 1, 1, 12, 0)),
            row(51, when=datetime(2025, 2, 1, 12, 0)),
        ]
    )
    result = store.reconcile_window(WINDOW, [39], {100})
    assert result.ok
    assert result.deleted_in_window == 1
    assert result.deleted_outside == 2
    assert store.fixture_ids() == {100}


def test_reconcile_leaves_other_leagues_alone(store):
    store.upsert([row(100), row(777, league_id=40), row(778, league_id=40, when=datetime(2024, 12, 1))])
    store.reconcile_window(WINDOW, [39], set())
    assert store.fixture_ids() == {777, 778}


def test_reconcile_with_empty_keep_set_clears_window(store):
    store.upsert([row(100), row(101, when=datetime(2025, 1, 17, 23, 59))])
    result = store.reconcile_window(WINDOW, [39], [])
    assert result.deleted_in_window == 2
    assert store.count() == 0


def test_reconcile_without_leagues_is_noop(store):
    store.upsert([row(100, when=datetime(2024, 1, 1))])
    result = store.reconcile_window(WINDOW, [], [])
    assert result.ok
    assert store.count() == 1


def test_undated_rows_survive_only_while_kept(store):
    store.upsert([row(300, when=None), row(301, when=None), row(302, league_id=40, when=None)])
    result = store.reconcile_window(WINDOW, [39], {300})
    assert result.deleted_in_window == 1
    assert store.fixture_ids() == {300, 302}

    store.reconcile_window(WINDOW, [39], set())
    assert store.fixture_ids() == {302}


def test_window_edges_are_inclusive(store):
    store.upsert([row(1, when=datetime(2025, 1, 10, 0, 0)), row(2, when=datetime(2025, 1, 17, 23, 59, 59))])
    store.reconcile_window(WINDOW, [39], {1, 2})
    assert store.fixture_ids() == {1, 2}


def test_failed_delete_does_not_block_the_other(engine):
    store = FixtureStore(engine)
    store.upsert([row(100), row(999, when=datetime(2025, 1, 13)), row(50, when=datetime(2025, 1, 1))])

    store.engine = FlakyEngine(engine, fail_on=1)
    with pytest.raises(ReconcileError) as excinfo:
        store.reconcile_window(WINDOW, [39], {100})

    result = excinfo.value.result
    assert len(result.errors) == 1
    assert "inside window" in result.errors[0]
    assert result.deleted_outside == 1
    store.engine = engine
    assert store.fixture_ids() == {100, 999}


def test_window_lock_is_noop_on_sqlite(store):
    with store.window_lock([39, 40]):
        store.upsert([row(1)])
    assert store.count() == 1


def test_advisory_key_ignores_order_and_duplicates():
    assert advisory_key([40, 39, 39]) == advisory_key([39, 40])
    assert advisory_key([39]) != advisory_key([40])


def test_fixture_ids_filters_by_league(store):
    store.upsert([row(1), row(2, league_id=40)])
    assert store.fixture_ids([40]) == {2}
