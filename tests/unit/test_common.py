"""Unit tests for common utils (pure functions only; DB-backed ones need integration)."""
from datetime import datetime, timedelta, timezone
import pytest

from api.models.models import User
from api.utils.common import display_name, error_details, iso_format


@pytest.mark.unit
class TestIsoFormat:
    def test_appends_z(self):
        dt = datetime(2025, 1, 15, 12, 30, 0)
        assert iso_format(dt) == "2025-01-15T12:30:00Z"

    def test_converts_to_utc(self):
        dt = datetime(2025, 1, 15, 7, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert iso_format(dt) == "2025-01-15T12:30:00Z"

    def test_none(self):
        assert iso_format(None) is None


@pytest.mark.unit
class TestDisplayName:
    def test_profile_name_wins(self):
        user = User(email="u@example.com", name="  Ada ", preferences={"name": "Alice"})
        assert display_name(user) == "Ada"

    def test_preferences_name(self):
        user = User(email="u@example.com", name=None, preferences={"name": "Alice"})
        assert display_name(user) == "Alice"

    def test_preferences_full_name(self):
        user = User(email="u@example.com", name="", preferences={"full_name": "Alice Smith"})
        assert display_name(user) == "Alice Smith"

    def test_email_prefix_fallback(self):
        user = User(email="bob@example.com", name=None, preferences=None)
        assert display_name(user) == "bob"


@pytest.mark.unit
def test_error_details_keeps_loc_msg_type():
    errors = [{"loc": ("body", "points", 0), "msg": "bad", "type": "int_parsing", "input": object()}]
    assert error_details(errors) == [{"loc": ["body", "points", "0"], "msg": "bad", "type": "int_parsing"}]
