"""
Test configuration — ensures repo root is in sys.path and pins the clock.

All computations under test take an explicit `now`; fixtures here supply a
fixed instant so results never depend on the wall clock.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import agenda_core without installing
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from tests.fixtures.records import FIXED_NOW  # noqa: E402


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW
