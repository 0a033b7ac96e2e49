#!/usr/bin/env python3
"""Create the taskboard tables in the configured database."""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from taskboard.database import init_db  # noqa: E402  - import after sys.path adjustment
from taskboard.logging_config import setup_logging  # noqa: E402

if __name__ == "__main__":
    setup_logging()
    init_db()
    print("Database initialized")
