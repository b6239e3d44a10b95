from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from .data_store import get_restaurant, save_restaurant


class PromotionCreate(BaseModel):
    restaurant_id: int
    title: str = Field(..., min_length=1, max_length=120)
    description: str = ""
    discount: int = Field(default=0, ge=0, le=100, description="Percent off")
    valid_until: date


class Promotion(PromotionCreate):
    id: int
    is_active: bool = True


def _seed() -> list[Promotion]:
    return [
        Promotion(
            id=1,
            restaurant_id=1,
            title="Lunch Special",
            description="20% off all lunch items from 11AM-2PM",
            discount=20,
            valid_until=date(2024, 12, 31),
        ),
        Promotion(
            id=2,
            restaurant_id=3,
            title="Weekend Feast",
            description="Buy 1 get 1 free on selected dishes",
            discount=50,
            valid_until=date(2024, 12, 25),
        ),
    ]


_promotions: list[Promotion] = _seed()


def get_active_promotions(restaurant_id: int | None = None) -> list[Promotion]:
    return [
        p for p in _promotions
        if p.is_active and (restaurant_id is None or p.restaurant_id == restaurant_id)
    ]


def create_promotion(body: PromotionCreate) -> Promotion | None:
    """Add a promotion and flag the restaurant. ``None`` if it doesn't exist."""
    restaurant = get_restaurant(body.restaurant_id)
    if restaurant is None:
        return None

    promotion = Promotion(id=len(_promotions) + 1, **body.model_dump())
    _promotions.append(promotion)
    if not restaurant.has_promo:
        save_restaurant(restaurant.model_copy(update={"has_promo": True}))
    return promotion


def clear_promotions() -> None:
    _promotions.clear()
    _promotions.extend(_seed())
