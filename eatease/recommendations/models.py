from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from ..config import DEFAULT_APP_CONFIG


class Restaurant(BaseModel):
    id: int
    name: str
    cuisine: str
    crowd_level: str = Field(default="moderate", description="low / moderate / high, any case")
    wait_time: int = Field(default=0, ge=0, description="Current wait in minutes")
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    has_promo: bool = False
    address: str = ""
    status: str = "yellow"
    occupancy: int = Field(default=0, ge=0, le=100)
    max_capacity: int = Field(default=50, ge=1)
    last_updated: datetime | None = None


class Preferences(BaseModel):
    cuisine: list[str] = Field(default_factory=list)
    crowd_tolerance: str = Field(default="medium", description="low / medium / high")
    max_wait_time: int = Field(default=20, gt=0)
    # Collected by the preferences form but not used for scoring.
    budget: str | None = "medium"
    dining_occasion: str | None = "casual"
    group_size: int | None = Field(default=2, ge=1)


class MatchResult(BaseModel):
    restaurant: Restaurant
    match_score: int = Field(..., ge=0, le=100)
    reasons: list[str] = Field(..., min_length=1)


class RecommendationRequest(BaseModel):
    preferences: Preferences | None = Field(
        default=None,
        description="Falls back to the preferences saved in the session",
    )
    at: datetime | None = Field(
        default=None, description="Instant to evaluate time-of-day rules at"
    )
    limit: int = Field(default=DEFAULT_APP_CONFIG.default_recommendation_limit, ge=1, le=50)


class RecommendationResponse(BaseModel):
    recommendations: list[MatchResult]
    total_candidates: int
    evaluated_at: datetime
