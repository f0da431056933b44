import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402

from fxsync.db import ensure_schema, get_engine  # noqa: E402
from fxsync.store import FixtureStore  # noqa: E402


@pytest.fixture
def engine(tmp_path):
    # file-backed: the store opens several connections per run
    eng = get_engine(f"sqlite:///{tmp_path / 'fxsync.sqlite'}")
    ensure_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine):
    return FixtureStore(engine)
