"""Map configuration checks for the catalog page."""
from __future__ import annotations

PLACEHOLDER_KEYS = frozenset(
    {
        "your_google_maps_api_key_here",
        "AIzaSyBvOkBwvOkBwvOkBwvOkBwvOkBwvOkBwvOk",
    }
)


def maps_enabled(api_key: str | None) -> bool:
    """Return ``True`` when ``api_key`` looks like a real Maps key.

    Without one the catalog renders its text list of locations instead.
    """

    if not api_key:
        return False
    key = api_key.strip()
    return bool(key) and key not in PLACEHOLDER_KEYS
