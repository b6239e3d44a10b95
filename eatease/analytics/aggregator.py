from __future__ import annotations

from collections import Counter, defaultdict
from typing import Any


def _average(values: list[float]) -> float:
    return round(sum(values) / len(values), 1) if values else 0.0


def _occupancy_summary(updates: list[dict[str, Any]]) -> dict[str, Any]:
    by_restaurant: dict[int, list[int]] = defaultdict(list)
    by_hour: dict[int, list[int]] = defaultdict(list)
    for u in updates:
        by_restaurant[u["restaurant_id"]].append(u["occupancy"])
        by_hour[u["hour"]].append(u["occupancy"])

    restaurants = {
        rid: {
            "readings": len(values),
            "average": _average(values),
            "peak": max(values),
            "low": min(values),
        }
        for rid, values in sorted(by_restaurant.items())
    }

    # Busiest hours first
    hourly = sorted(
        ((hour, _average(values)) for hour, values in by_hour.items()),
        key=lambda item: item[1],
        reverse=True,
    )
    peak_hours = [{"hour": h, "average_occupancy": avg} for h, avg in hourly[:3]]

    return {"restaurants": restaurants, "peak_hours": peak_hours}


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "recommendation"]
    total = len(searches)

    # Average response time
    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]

    # Top cuisines
    cuisine_counter: Counter[str] = Counter()
    for s in searches:
        for c in s.get("cuisines", []) or []:
            cuisine_counter[c] += 1
    top_cuisines = [{"name": n, "count": c} for n, c in cuisine_counter.most_common(10)]

    # Crowd tolerance usage
    tolerance_usage = dict(Counter(s.get("crowd_tolerance", "unknown") for s in searches))

    top_scores = [s["top_score"] for s in searches if s.get("top_score") is not None]

    # Reservations
    created = [e for e in events if e["type"] == "reservation_created"]
    cancelled = [e for e in events if e["type"] == "reservation_cancelled"]
    per_restaurant: Counter[int] = Counter(e["restaurant_id"] for e in created)

    updates = [e for e in events if e["type"] == "occupancy_update"]
    reviews = [e for e in events if e["type"] == "review_submitted"]

    return {
        "total_recommendation_requests": total,
        "avg_response_time_ms": _average(times),
        "avg_top_score": _average(top_scores),
        "top_cuisines": top_cuisines,
        "crowd_tolerance_usage": tolerance_usage,
        "reservations": {
            "created": len(created),
            "cancelled": len(cancelled),
            "guests": sum(e["party_size"] for e in created),
            "by_restaurant": dict(per_restaurant),
        },
        "occupancy": _occupancy_summary(updates),
        "reviews": {
            "submitted": len(reviews),
            "avg_rating": _average([e["rating"] for e in reviews]),
        },
    }
