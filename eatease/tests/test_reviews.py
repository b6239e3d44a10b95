from __future__ import annotations

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from eatease.analytics.aggregator import compute_analytics
from eatease.analytics.store import clear_events, get_events
from eatease.app import app
from eatease.recommendations.models import Preferences
from eatease.recommendations.scoring import compute_match_score, rating_score
from eatease.restaurants.bookmarks import clear_bookmarks
from eatease.restaurants.data_store import get_restaurant, reset_restaurants
from eatease.restaurants.reviews import (
    ReviewCreate,
    average_rating,
    clear_reviews,
    delete_review,
    get_reviews,
    submit_review,
)

client = TestClient(app)

CASA_LUNA = 5  # rated 2.5 in the bundled catalogue
TRATTORIA = 6  # rated 4.1


def _login_user(c):
    c.post("/auth/login", json={"username": "diner", "password": "diner123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def _other_diner(username: str) -> TestClient:
    c = TestClient(app)
    resp = c.post("/auth/signup", json={"username": username, "password": "secret123", "name": "Ana"})
    if resp.status_code == 409:
        c.post("/auth/login", json={"username": username, "password": "secret123"})
    return c


@pytest.fixture(autouse=True)
def _fresh_catalogue():
    clear_reviews()
    clear_bookmarks()
    reset_restaurants()
    yield
    clear_reviews()
    clear_bookmarks()
    reset_restaurants()


# ── Reviews ──────────────────────────────────────────────────────────────


def test_submit_review_updates_catalogue_rating():
    submit_review(TRATTORIA, "diner", ReviewCreate(rating=5))
    assert get_restaurant(TRATTORIA).rating == 5.0

    submit_review(TRATTORIA, "ana", ReviewCreate(rating=2, comment="Slow service"))
    assert average_rating(TRATTORIA) == 3.5
    assert get_restaurant(TRATTORIA).rating == 3.5


def test_average_is_rounded_to_one_decimal():
    for user, rating in (("a", 5), ("b", 4), ("c", 4)):
        submit_review(TRATTORIA, user, ReviewCreate(rating=rating))
    assert average_rating(TRATTORIA) == 4.3


def test_resubmitting_replaces_the_review():
    first = submit_review(TRATTORIA, "diner", ReviewCreate(rating=1))
    second = submit_review(TRATTORIA, "diner", ReviewCreate(rating=4, comment="Better now"))

    assert second.id == first.id
    assert [r.rating for r in get_reviews(TRATTORIA)] == [4]
    assert get_restaurant(TRATTORIA).rating == 4.0


def test_review_for_unknown_restaurant():
    assert submit_review(999, "diner", ReviewCreate(rating=3)) is None
    assert average_rating(999) is None


def test_reviews_listed_newest_first():
    submit_review(TRATTORIA, "a", ReviewCreate(rating=3), now=datetime(2026, 10, 1, 12))
    submit_review(TRATTORIA, "b", ReviewCreate(rating=4), now=datetime(2026, 10, 2, 12))
    assert [r.user for r in get_reviews(TRATTORIA)] == ["b", "a"]


def test_deleting_reviews_recomputes_rating():
    keep = submit_review(TRATTORIA, "a", ReviewCreate(rating=2))
    drop = submit_review(TRATTORIA, "b", ReviewCreate(rating=4))
    delete_review(drop.id)
    assert get_restaurant(TRATTORIA).rating == 2.0

    # The last known rating stays once no reviews remain.
    delete_review(keep.id)
    assert get_restaurant(TRATTORIA).rating == 2.0
    assert delete_review(keep.id) is None


def test_reviews_feed_the_rating_bonus():
    prefs = Preferences(cuisine=["Mexican"], crowd_tolerance="high", max_wait_time=60)
    now = datetime(2026, 10, 19, 10)
    before = compute_match_score(get_restaurant(CASA_LUNA), prefs, now)
    assert rating_score(get_restaurant(CASA_LUNA).rating) == 0

    submit_review(CASA_LUNA, "a", ReviewCreate(rating=5))
    submit_review(CASA_LUNA, "b", ReviewCreate(rating=4))

    assert get_restaurant(CASA_LUNA).rating == 4.5
    assert compute_match_score(get_restaurant(CASA_LUNA), prefs, now) == before + 10


def test_reviews_endpoint_is_public():
    c = TestClient(app)
    resp = c.get(f"/restaurants/{TRATTORIA}/reviews")
    assert resp.status_code == 200
    body = resp.json()
    assert body["reviews"] == []
    assert body["average_rating"] is None
    assert body["total_reviews"] == 0
    assert c.get("/restaurants/999/reviews").status_code == 404


def test_post_review_requires_login():
    c = TestClient(app)
    assert c.post(f"/restaurants/{TRATTORIA}/reviews", json={"rating": 5}).status_code == 401


def test_admin_cannot_post_review():
    c = TestClient(app)
    _login_admin(c)
    assert c.post(f"/restaurants/{TRATTORIA}/reviews", json={"rating": 5}).status_code == 403


@pytest.mark.parametrize("rating", [0, 6])
def test_post_review_rejects_out_of_range_rating(rating):
    _login_user(client)
    resp = client.post(f"/restaurants/{TRATTORIA}/reviews", json={"rating": rating})
    assert resp.status_code == 422


def test_post_review_and_read_back():
    _login_user(client)
    resp = client.post(f"/restaurants/{TRATTORIA}/reviews", json={"rating": 5, "comment": "Great pasta"})
    assert resp.status_code == 200
    assert resp.json()["user"] == "diner"

    body = client.get(f"/restaurants/{TRATTORIA}/reviews").json()
    assert body["total_reviews"] == 1
    assert body["average_rating"] == 5.0
    assert body["reviews"][0]["comment"] == "Great pasta"
    assert client.get(f"/restaurants/{TRATTORIA}").json()["rating"] == 5.0

    assert client.post("/restaurants/999/reviews", json={"rating": 3}).status_code == 404


def test_only_author_or_admin_deletes_review():
    _login_user(client)
    review_id = client.post(f"/restaurants/{TRATTORIA}/reviews", json={"rating": 3}).json()["id"]

    other = _other_diner("ana_reviews")
    assert other.delete(f"/reviews/{review_id}").status_code == 403

    admin = TestClient(app)
    _login_admin(admin)
    assert admin.delete(f"/reviews/{review_id}").status_code == 200
    assert client.delete(f"/reviews/{review_id}").status_code == 404


def test_review_shows_up_in_analytics():
    clear_events()
    submit_review(TRATTORIA, "a", ReviewCreate(rating=4))
    assert len(get_events("review_submitted")) == 1

    summary = compute_analytics(get_events())["reviews"]
    assert summary == {"submitted": 1, "avg_rating": 4.0}


# ── Bookmarks ────────────────────────────────────────────────────────────


def test_bookmarks_require_login():
    c = TestClient(app)
    assert c.get("/bookmarks").status_code == 401
    assert c.post(f"/bookmarks/{TRATTORIA}").status_code == 401


def test_toggle_bookmark():
    c = TestClient(app)
    _login_user(c)

    added = c.post(f"/bookmarks/{TRATTORIA}").json()
    assert added == {"restaurant_id": TRATTORIA, "is_bookmarked": True, "bookmark_count": 1}
    assert [r["id"] for r in c.get("/bookmarks").json()] == [TRATTORIA]

    removed = c.post(f"/bookmarks/{TRATTORIA}").json()
    assert removed["is_bookmarked"] is False
    assert removed["bookmark_count"] == 0
    assert c.get("/bookmarks").json() == []


def test_bookmarks_are_per_user():
    c = TestClient(app)
    _login_user(c)
    c.post(f"/bookmarks/{CASA_LUNA}")

    other = _other_diner("ana_bookmarks")
    assert other.get("/bookmarks").json() == []
    assert other.post(f"/bookmarks/{CASA_LUNA}").json()["bookmark_count"] == 2


def test_bookmark_unknown_restaurant():
    c = TestClient(app)
    _login_user(c)
    assert c.post("/bookmarks/999").status_code == 404
