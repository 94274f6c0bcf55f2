"""
Template filling for generator prompts. The api layer owns the template
strings; this module only fills them.
"""

from __future__ import annotations

from typing import Any, Iterable


class _BlankMissing(dict):
    def __missing__(self, key: str) -> str:
        return ""


def build_from_template(template: str, **kwargs: Any) -> str:
    """
    Fill `template` with kwargs via str.format_map. Unknown placeholders and
    None values render as empty strings, so optional sections simply vanish.
    """
    if not template:
        return ""
    values = {k: ("" if v is None else v) for k, v in kwargs.items()}
    return template.format_map(_BlankMissing(values))


def bullets(items: Iterable[str], limit: int | None = None) -> str:
    """`- item` lines for the non-blank items, optionally capped at `limit`."""
    lines = [f"- {item.strip()}" for item in items if isinstance(item, str) and item.strip()]
    if limit is not None:
        lines = lines[:limit]
    return "\n".join(lines)
