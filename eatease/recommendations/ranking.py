from __future__ import annotations

import time
from datetime import datetime
from typing import Iterable

from ..analytics.store import record_event
from ..restaurants.data_store import get_restaurants
from .models import (
    MatchResult,
    Preferences,
    RecommendationRequest,
    RecommendationResponse,
    Restaurant,
)
from .scoring import compute_match_score, explain_match


def match_restaurant(
    restaurant: Restaurant,
    preferences: Preferences,
    now: datetime,
) -> MatchResult:
    score = compute_match_score(restaurant, preferences, now)
    return MatchResult(
        restaurant=restaurant,
        match_score=score,
        reasons=explain_match(restaurant, preferences, score),
    )


def rank_restaurants(
    restaurants: Iterable[Restaurant],
    preferences: Preferences,
    now: datetime | None = None,
    limit: int | None = None,
) -> list[MatchResult]:
    """Score every restaurant against one instant and sort best-first.

    ``sorted`` is stable, so restaurants with equal scores keep their
    input order.
    """
    if now is None:
        now = datetime.now()

    results = [match_restaurant(r, preferences, now) for r in restaurants]
    ranked = sorted(results, key=lambda m: m.match_score, reverse=True)
    return ranked[:limit] if limit is not None else ranked


def get_recommendations(
    request: RecommendationRequest,
    preferences: Preferences,
) -> RecommendationResponse:
    start_time = time.time()
    now = request.at or datetime.now()

    candidates = get_restaurants()
    ranked = rank_restaurants(candidates, preferences, now=now, limit=request.limit)

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event("recommendation", {
        "cuisines": preferences.cuisine,
        "crowd_tolerance": preferences.crowd_tolerance,
        "max_wait_time": preferences.max_wait_time,
        "total_candidates": len(candidates),
        "results_returned": len(ranked),
        "top_score": ranked[0].match_score if ranked else None,
        "response_time_ms": elapsed_ms,
    })

    return RecommendationResponse(
        recommendations=ranked,
        total_candidates=len(candidates),
        evaluated_at=now,
    )
