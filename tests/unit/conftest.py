"""
Unit test fixtures. Pure core tests need no DB or LLM; the store tests use the
root in-memory db_session fixture.
"""
from datetime import datetime, timezone

import pytest

from lajan.model import ProgressRecord


@pytest.fixture
def now():
    return datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def empty_record(now):
    return ProgressRecord.empty("user-1", now)
