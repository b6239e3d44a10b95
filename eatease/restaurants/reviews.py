from __future__ import annotations

import logging
from datetime import datetime

from pydantic import BaseModel, Field

from ..analytics.store import record_event
from .data_store import get_restaurant, save_restaurant

logger = logging.getLogger(__name__)


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(default=None, max_length=1000)


class Review(ReviewCreate):
    id: int
    restaurant_id: int
    user: str
    created_at: datetime


class ReviewSummary(BaseModel):
    restaurant_id: int
    reviews: list[Review]
    average_rating: float | None
    total_reviews: int


_reviews: list[Review] = []


def get_reviews(restaurant_id: int) -> list[Review]:
    """Reviews for one restaurant, newest first."""
    found = [r for r in _reviews if r.restaurant_id == restaurant_id]
    return sorted(found, key=lambda r: r.created_at, reverse=True)


def get_review(review_id: int) -> Review | None:
    return next((r for r in _reviews if r.id == review_id), None)


def average_rating(restaurant_id: int) -> float | None:
    ratings = [r.rating for r in _reviews if r.restaurant_id == restaurant_id]
    if not ratings:
        return None
    return round(sum(ratings) / len(ratings), 1)


def summarize(restaurant_id: int) -> ReviewSummary:
    reviews = get_reviews(restaurant_id)
    return ReviewSummary(
        restaurant_id=restaurant_id,
        reviews=reviews,
        average_rating=average_rating(restaurant_id),
        total_reviews=len(reviews),
    )


def _refresh_rating(restaurant_id: int) -> None:
    # The catalogue rating is what the recommendation engine reads.
    restaurant = get_restaurant(restaurant_id)
    average = average_rating(restaurant_id)
    if restaurant is None or average is None:
        return
    if restaurant.rating != average:
        save_restaurant(restaurant.model_copy(update={"rating": average}))


def submit_review(
    restaurant_id: int,
    user: str,
    body: ReviewCreate,
    now: datetime | None = None,
) -> Review | None:
    """Create or replace ``user``'s review. ``None`` if the restaurant doesn't exist.

    Each diner holds at most one review per restaurant; submitting again
    overwrites the rating and comment and keeps the original id.
    """
    if get_restaurant(restaurant_id) is None:
        return None
    now = now or datetime.now()

    existing = next(
        (r for r in _reviews if r.restaurant_id == restaurant_id and r.user == user),
        None,
    )
    if existing is not None:
        review = existing.model_copy(update=body.model_dump())
        _reviews[_reviews.index(existing)] = review
    else:
        review = Review(
            id=max((r.id for r in _reviews), default=0) + 1,
            restaurant_id=restaurant_id,
            user=user,
            created_at=now,
            **body.model_dump(),
        )
        _reviews.append(review)

    _refresh_rating(restaurant_id)
    record_event("review_submitted", {
        "restaurant_id": restaurant_id,
        "rating": review.rating,
        "updated": existing is not None,
    })
    logger.info(
        "Review %s for restaurant %s by %s: %s stars",
        review.id, restaurant_id, user, review.rating,
    )
    return review


def delete_review(review_id: int) -> Review | None:
    review = get_review(review_id)
    if review is None:
        return None
    _reviews.remove(review)
    _refresh_rating(review.restaurant_id)
    logger.info("Deleted review %s for restaurant %s", review_id, review.restaurant_id)
    return review


def clear_reviews() -> None:
    _reviews.clear()
