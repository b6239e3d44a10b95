from __future__ import annotations

from datetime import datetime
from unittest.mock import patch

from fastapi.testclient import TestClient

from eatease.app import app
from eatease.recommendations.models import Preferences, Restaurant
from eatease.recommendations.ranking import rank_restaurants
from eatease.restaurants.data_store import reset_restaurants

client = TestClient(app)

THAI_QUIET = {"cuisine": ["Thai"], "crowd_tolerance": "low", "max_wait_time": 20}
LUNCH_PEAK = "2026-10-19T13:00:00"


def _login(c):
    c.post("/auth/login", json={"username": "diner", "password": "diner123"})


def _restaurant(rid: int, **overrides) -> Restaurant:
    fields = {"id": rid, "name": f"R{rid}", "cuisine": "Thai", "crowd_level": "moderate",
              "wait_time": 10, "rating": 3.5}
    fields.update(overrides)
    return Restaurant(**fields)


# ── rank_restaurants ─────────────────────────────────────────────────────


def test_rank_sorts_descending():
    restaurants = [
        _restaurant(1, cuisine="Mexican"),
        _restaurant(2, rating=4.8, has_promo=True),
        _restaurant(3),
    ]
    ranked = rank_restaurants(restaurants, Preferences(**THAI_QUIET), now=datetime(2026, 1, 1, 10))
    assert [m.restaurant.id for m in ranked] == [2, 3, 1]
    scores = [m.match_score for m in ranked]
    assert scores == sorted(scores, reverse=True)


def test_rank_keeps_input_order_for_ties():
    restaurants = [_restaurant(rid) for rid in (5, 3, 9, 1)]
    ranked = rank_restaurants(restaurants, Preferences(), now=datetime(2026, 1, 1, 10))
    assert len({m.match_score for m in ranked}) == 1
    assert [m.restaurant.id for m in ranked] == [5, 3, 9, 1]


def test_rank_respects_limit():
    restaurants = [_restaurant(rid) for rid in range(1, 6)]
    assert len(rank_restaurants(restaurants, Preferences(), limit=2)) == 2


def test_rank_attaches_reasons():
    ranked = rank_restaurants([_restaurant(1)], Preferences(), now=datetime(2026, 1, 1, 10))
    assert ranked[0].reasons


def test_rank_uses_a_single_instant():
    fixed = datetime(2026, 1, 1, 13)
    with patch("eatease.recommendations.ranking.datetime") as mock_dt:
        mock_dt.now.return_value = fixed
        ranked = rank_restaurants([_restaurant(1, crowd_level="low")], Preferences())
    mock_dt.now.assert_called_once()
    # low crowd at peak: 10 crowd (low vs medium) + 20 wait + 15 time + 5 rating
    assert ranked[0].match_score == 50


# ── /recommendations ─────────────────────────────────────────────────────


def test_recommendations_requires_login():
    c = TestClient(app)
    resp = c.post("/recommendations", json={})
    assert resp.status_code == 401


def test_recommendations_ranks_catalogue():
    reset_restaurants()
    _login(client)
    resp = client.post("/recommendations", json={"preferences": THAI_QUIET, "at": LUNCH_PEAK})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_candidates"] == 8
    ids = [item["restaurant"]["id"] for item in body["recommendations"]]
    scores = [item["match_score"] for item in body["recommendations"]]
    assert ids == [4, 1, 8, 6, 2, 3, 7, 5]
    assert scores == [90, 75, 60, 40, 25, 20, 15, 0]


def test_recommendations_top_pick_reasons():
    reset_restaurants()
    _login(client)
    resp = client.post("/recommendations", json={"preferences": THAI_QUIET, "at": LUNCH_PEAK})
    top = resp.json()["recommendations"][0]
    assert top["restaurant"]["name"] == "Siam Garden"
    assert top["reasons"][0] == "Matches your preferred Thai cuisine"


def test_recommendations_every_item_has_reasons():
    reset_restaurants()
    _login(client)
    resp = client.post("/recommendations", json={"preferences": THAI_QUIET, "at": LUNCH_PEAK})
    for item in resp.json()["recommendations"]:
        assert len(item["reasons"]) >= 1
        assert 0 <= item["match_score"] <= 100


def test_recommendations_respects_limit():
    reset_restaurants()
    _login(client)
    resp = client.post("/recommendations", json={"preferences": THAI_QUIET, "limit": 3})
    assert len(resp.json()["recommendations"]) == 3


def test_recommendations_validation_rejects_bad_limit():
    _login(client)
    resp = client.post("/recommendations", json={"limit": 0})
    assert resp.status_code == 422


def test_recommendations_validation_rejects_bad_wait():
    _login(client)
    resp = client.post("/recommendations", json={"preferences": {"max_wait_time": 0}})
    assert resp.status_code == 422


def test_recommendations_use_saved_preferences():
    reset_restaurants()
    c = TestClient(app)
    _login(c)
    saved = c.put("/preferences", json=THAI_QUIET)
    assert saved.status_code == 200
    assert c.get("/preferences").json()["cuisine"] == ["Thai"]

    resp = c.post("/recommendations", json={"at": LUNCH_PEAK})
    assert resp.json()["recommendations"][0]["restaurant"]["id"] == 4


def test_preferences_default_when_unsaved():
    c = TestClient(app)
    _login(c)
    body = c.get("/preferences").json()
    assert body["cuisine"] == []
    assert body["crowd_tolerance"] == "medium"
    assert body["max_wait_time"] == 20


def test_inert_preference_fields_do_not_change_scores():
    reset_restaurants()
    _login(client)
    plain = client.post("/recommendations", json={"preferences": THAI_QUIET, "at": LUNCH_PEAK})
    extra = client.post("/recommendations", json={
        "preferences": {**THAI_QUIET, "budget": "high", "dining_occasion": "date", "group_size": 6},
        "at": LUNCH_PEAK,
    })
    assert [i["match_score"] for i in plain.json()["recommendations"]] == [
        i["match_score"] for i in extra.json()["recommendations"]
    ]
