"""
Common utility functions used across multiple routes.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from api.models.models import User


def iso_format(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime as ISO string with Z suffix. Naive values are taken as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def display_name(user: User) -> str:
    """Get display name from the profile, preferences or email."""
    if isinstance(user.name, str) and user.name.strip():
        return user.name.strip()
    prefs = user.preferences or {}
    name = None
    if isinstance(prefs, dict):
        name = prefs.get("name") or prefs.get("full_name")
    if isinstance(name, str) and name.strip():
        return name.strip()
    # fallback: email prefix
    return user.email.split("@", 1)[0]


def error_details(errors: Iterable[dict]) -> list[dict]:
    """Reduce pydantic error dicts to JSON-safe loc/msg/type entries."""
    return [
        {
            "loc": [str(part) for part in e.get("loc", ())],
            "msg": str(e.get("msg", "")),
            "type": str(e.get("type", "")),
        }
        for e in errors
    ]
