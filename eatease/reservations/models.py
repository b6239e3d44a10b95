from __future__ import annotations

import datetime as dt
from datetime import date, datetime, time
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from ..config import DEFAULT_APP_CONFIG


class ReservationStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"
    no_show = "no_show"


# Statuses that still hold seats at the restaurant.
HOLDING_STATUSES = frozenset({ReservationStatus.pending, ReservationStatus.confirmed})


class ReservationCreate(BaseModel):
    restaurant_id: int
    party_size: int = Field(..., ge=1, le=DEFAULT_APP_CONFIG.max_party_size)
    reservation_date: date
    reservation_time: time = Field(..., description="Local wall-clock HH:MM")
    special_requests: str | None = Field(default=None, max_length=500)

    @field_validator("reservation_time")
    @classmethod
    def reject_zoned_or_seconds(cls, value: time) -> time:
        if value.tzinfo is not None:
            raise ValueError("reservation_time must not carry a timezone")
        if value.second or value.microsecond:
            raise ValueError("reservation_time must be on the minute (HH:MM)")
        return value


class Reservation(ReservationCreate):
    id: int
    user: str
    status: ReservationStatus = ReservationStatus.pending
    confirmation_code: str
    created_at: datetime

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.reservation_date, self.reservation_time)


class StatusUpdate(BaseModel):
    status: ReservationStatus


class TimeSlot(BaseModel):
    time: dt.time
    formatted_time: str
    available: bool
    available_capacity: int


class Availability(BaseModel):
    restaurant_id: int
    restaurant_name: str
    max_capacity: int
    date: dt.date
    party_size: int
    time_slots: list[TimeSlot]
    has_availability: bool
