#!/usr/bin/env python3
"""
Scheduler entry point: one fixtures/odds window sync, no arguments.

Configuration comes from the environment (or .env). Exits 0 on success and
1 on a fatal error (missing key, unreachable provider, store failure, deadline).
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fxsync.cli import run_window_sync  # noqa: E402


if __name__ == "__main__":
    sys.exit(run_window_sync())
