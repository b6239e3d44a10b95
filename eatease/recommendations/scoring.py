"""
Match scoring for restaurant recommendations.

Responsibilities:
- Blend cuisine, crowd, wait-time, time-of-day, promotion and rating
  signals into a single 0-100 match score.
- Explain a match with short, human-readable reasons.

Every function here is pure: it reads only its arguments, so the same
restaurant, preferences and ``now`` always produce the same result.
"""
from __future__ import annotations

from datetime import datetime

from .models import Preferences, Restaurant

MAX_SCORE = 100

CROWD_LEVELS = {"low": 1, "moderate": 2, "high": 3}
TOLERANCE_LEVELS = {"low": 1, "medium": 2, "high": 3}
_DEFAULT_LEVEL = 2

PEAK_HOURS = (range(12, 15), range(18, 21))

FALLBACK_REASON = "Good overall match based on current conditions"


def _normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def _cuisine_matches(restaurant: Restaurant, preferences: Preferences) -> bool:
    # Exact membership; cuisine names are not case-folded.
    return restaurant.cuisine in preferences.cuisine


def is_peak_hour(hour: int) -> bool:
    return any(hour in window for window in PEAK_HOURS)


def cuisine_score(restaurant: Restaurant, preferences: Preferences) -> int:
    """+25 for a preferred cuisine, -10 otherwise, 0 when nothing is preferred."""
    if not preferences.cuisine:
        return 0
    return 25 if _cuisine_matches(restaurant, preferences) else -10


def crowd_score(crowd_level: str, crowd_tolerance: str) -> int:
    restaurant_level = CROWD_LEVELS.get(_normalize(crowd_level), _DEFAULT_LEVEL)
    tolerance_level = TOLERANCE_LEVELS.get(_normalize(crowd_tolerance), _DEFAULT_LEVEL)

    difference = abs(restaurant_level - tolerance_level)
    if difference == 0:
        return 20
    if difference == 1:
        return 10
    return 0


def wait_time_score(wait_time: int, max_wait_time: int) -> int:
    if wait_time <= max_wait_time * 0.5:
        return 20
    if wait_time <= max_wait_time:
        return 15
    if wait_time <= max_wait_time * 1.5:
        return 5
    return 0


def time_of_day_score(crowd_level: str, now: datetime) -> int:
    """Reward quiet places at peak hours and moderate ones off-peak."""
    level = _normalize(crowd_level)
    peak = is_peak_hour(now.hour)

    if level == "low" and peak:
        return 15
    if level == "moderate" and not peak:
        return 10
    return 5


def promo_score(restaurant: Restaurant) -> int:
    return 10 if restaurant.has_promo else 0


def rating_score(rating: float) -> int:
    if rating >= 4.0:
        return 10
    if rating >= 3.0:
        return 5
    return 0


def compute_match_score(
    restaurant: Restaurant,
    preferences: Preferences,
    now: datetime | None = None,
) -> int:
    """Return the 0-100 match score of *restaurant* for *preferences*.

    The partial sum may go negative (cuisine penalty) before it is clamped.
    ``now`` defaults to the current local time.
    """
    if now is None:
        now = datetime.now()

    score = (
        cuisine_score(restaurant, preferences)
        + crowd_score(restaurant.crowd_level, preferences.crowd_tolerance)
        + wait_time_score(restaurant.wait_time, preferences.max_wait_time)
        + time_of_day_score(restaurant.crowd_level, now)
        + promo_score(restaurant)
        + rating_score(restaurant.rating)
    )
    return max(0, min(MAX_SCORE, score))


def explain_match(
    restaurant: Restaurant,
    preferences: Preferences,
    score: int | None = None,
) -> list[str]:
    """Return the reasons behind a match, in a fixed order.

    ``score`` is accepted alongside the restaurant but does not change the
    output; the reasons are derived from the same predicates as the score.
    """
    reasons: list[str] = []

    if preferences.cuisine and _cuisine_matches(restaurant, preferences):
        reasons.append(f"Matches your preferred {restaurant.cuisine} cuisine")

    # Only these two pairings get a crowd sentence.
    level = _normalize(restaurant.crowd_level)
    tolerance = _normalize(preferences.crowd_tolerance)
    if level == "low" and tolerance == "low":
        reasons.append("Perfect quiet atmosphere for your preference")
    elif level == "moderate" and tolerance == "medium":
        reasons.append("Comfortable crowd level matching your preference")

    max_wait = preferences.max_wait_time
    if restaurant.wait_time <= max_wait * 0.5:
        reasons.append(
            f"Short wait time ({restaurant.wait_time}min) - much better than your {max_wait}min limit"
        )
    elif restaurant.wait_time <= max_wait:
        reasons.append(f"Wait time within your {max_wait}min limit")

    if restaurant.has_promo:
        reasons.append("Currently has special promotions")

    if restaurant.rating >= 4.0:
        reasons.append("Highly rated by other diners")

    return reasons or [FALLBACK_REASON]
