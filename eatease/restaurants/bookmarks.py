from __future__ import annotations

from collections import defaultdict

from ..recommendations.models import Restaurant
from .data_store import get_restaurant

# username -> bookmarked restaurant ids, in the order they were added
_bookmarks: dict[str, list[int]] = defaultdict(list)


def toggle_bookmark(user: str, restaurant_id: int) -> bool | None:
    """Flip the bookmark and return whether it is now set. ``None`` for an unknown restaurant."""
    if get_restaurant(restaurant_id) is None:
        return None
    saved = _bookmarks[user]
    if restaurant_id in saved:
        saved.remove(restaurant_id)
        return False
    saved.append(restaurant_id)
    return True


def bookmark_count(restaurant_id: int) -> int:
    return sum(restaurant_id in saved for saved in _bookmarks.values())


def get_bookmarks(user: str) -> list[Restaurant]:
    restaurants = (get_restaurant(rid) for rid in _bookmarks.get(user, []))
    return [r for r in restaurants if r is not None]


def clear_bookmarks() -> None:
    _bookmarks.clear()
