"""Pytest fixtures for the compliance and surveillance tests."""
import sys
from datetime import date
from pathlib import Path

import pytest

# Ensure backend/src is on path
backend_dir = Path(__file__).resolve().parent.parent
src_dir = backend_dir / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from labguard.config import SurveillancePolicy  # noqa: E402

TODAY = date(2024, 6, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def policy():
    return SurveillancePolicy()
