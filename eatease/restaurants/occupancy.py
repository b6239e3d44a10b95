from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from ..analytics.store import record_event
from ..recommendations.models import Restaurant
from .data_store import get_restaurants, save_restaurant

logger = logging.getLogger(__name__)

# (upper bound exclusive, status, crowd level)
_BANDS = (
    (40, "green", "Low"),
    (75, "yellow", "Moderate"),
)
_FULL_BAND = ("red", "High")


class StatusUpdate(BaseModel):
    status: Literal["green", "yellow", "red"]
    crowd_level: str = Field(..., min_length=1)


class OccupancyUpdate(BaseModel):
    occupancy: int = Field(..., ge=0, le=100)


def classify_occupancy(occupancy: int) -> tuple[str, str]:
    """Map an occupancy percentage to ``(status, crowd_level)``."""
    for upper, status, crowd_level in _BANDS:
        if occupancy < upper:
            return status, crowd_level
    return _FULL_BAND


def estimate_wait_time(occupancy: int) -> int:
    return occupancy // 3


def apply_occupancy(
    restaurant: Restaurant,
    occupancy: int,
    now: datetime | None = None,
    source: str = "manual",
) -> Restaurant:
    """Store a new occupancy reading and the status it implies."""
    occupancy = max(0, min(100, occupancy))
    status, crowd_level = classify_occupancy(occupancy)
    updated = restaurant.model_copy(update={
        "occupancy": occupancy,
        "status": status,
        "crowd_level": crowd_level,
        "wait_time": estimate_wait_time(occupancy),
        "last_updated": now or datetime.now(),
    })
    save_restaurant(updated)

    record_event("occupancy_update", {
        "restaurant_id": updated.id,
        "occupancy": occupancy,
        "crowd_level": crowd_level,
        "source": source,
        "hour": updated.last_updated.hour,
    })
    logger.info(
        "Restaurant %s occupancy %s%% -> %s (%s)",
        updated.id, occupancy, crowd_level, source,
    )
    return updated


def simulate_occupancy(
    restaurant: Restaurant,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> Restaurant:
    """Apply a random sensor reading, as the IoT demo feed does."""
    rng = rng or random.Random()
    return apply_occupancy(restaurant, rng.randrange(100), now=now, source="sensor")


def simulate_all(
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[Restaurant]:
    rng = rng or random.Random()
    return [simulate_occupancy(r, rng, now) for r in get_restaurants()]


def set_status(restaurant: Restaurant, status: str, crowd_level: str) -> Restaurant:
    """Manual override of the status colour and crowd level."""
    updated = restaurant.model_copy(update={
        "status": status,
        "crowd_level": crowd_level,
        "last_updated": datetime.now(),
    })
    return save_restaurant(updated)
