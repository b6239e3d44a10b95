from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pandas as pd

from ..config import DEFAULT_APP_CONFIG
from ..recommendations.models import Restaurant

_restaurants: dict[int, Restaurant] | None = None


def _load(path: Path) -> dict[int, Restaurant]:
    df = pd.read_csv(path, true_values=["true", "True"], false_values=["false", "False"])

    df["address"] = df["address"].fillna("")
    df["cuisine"] = df["cuisine"].fillna("").str.strip()
    df["crowd_level"] = df["crowd_level"].fillna("Moderate").str.strip()
    df["has_promo"] = df["has_promo"].fillna(False).astype(bool)

    loaded_at = datetime.now()
    restaurants: dict[int, Restaurant] = {}
    for record in df.to_dict(orient="records"):
        restaurant = Restaurant(**record, last_updated=loaded_at)
        restaurants[restaurant.id] = restaurant
    return restaurants


def _catalogue() -> dict[int, Restaurant]:
    global _restaurants
    if _restaurants is None:
        _restaurants = _load(DEFAULT_APP_CONFIG.data_path)
    return _restaurants


def get_restaurants() -> list[Restaurant]:
    """Return every restaurant in id order, loading the CSV on first call."""
    return sorted(_catalogue().values(), key=lambda r: r.id)


def get_restaurant(restaurant_id: int) -> Restaurant | None:
    return _catalogue().get(restaurant_id)


def save_restaurant(restaurant: Restaurant) -> Restaurant:
    _catalogue()[restaurant.id] = restaurant
    return restaurant


def get_cuisines() -> list[str]:
    return sorted({r.cuisine for r in _catalogue().values() if r.cuisine})


def reset_restaurants() -> None:
    """Drop in-memory changes; the next access reloads the CSV."""
    global _restaurants
    _restaurants = None
