"""
Reservation booking rules.

A restaurant takes bookings between its opening and closing time in fixed
slots. Each slot has the restaurant's full seating capacity; pending and
confirmed bookings hold seats until they are cancelled or closed out.
"""
from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, time, timedelta

from ..analytics.store import record_event
from ..config import DEFAULT_APP_CONFIG, AppConfig
from ..restaurants.data_store import get_restaurant
from .models import (
    HOLDING_STATUSES,
    Availability,
    Reservation,
    ReservationCreate,
    ReservationStatus,
    TimeSlot,
)
from .repository import ReservationRepository

logger = logging.getLogger(__name__)


class ReservationError(Exception):
    status_code = 422


class ReservationNotFound(ReservationError):
    status_code = 404


class UnknownRestaurant(ReservationError):
    status_code = 404


class OutsideOpeningHours(ReservationError):
    pass


class ReservationInPast(ReservationError):
    pass


class CapacityExceeded(ReservationError):
    status_code = 409

    def __init__(self, message: str, available_capacity: int) -> None:
        super().__init__(message)
        self.available_capacity = available_capacity


class CancellationNotAllowed(ReservationError):
    pass


def generate_confirmation_code(today: date | None = None) -> str:
    """``RES-<8 hex chars>-<MMDD>``."""
    today = today or date.today()
    return f"RES-{uuid.uuid4().hex[:8].upper()}-{today:%m%d}"


class ReservationService:
    def __init__(
        self,
        repository: ReservationRepository,
        config: AppConfig = DEFAULT_APP_CONFIG,
    ) -> None:
        self.repository = repository
        self.config = config

    # ── Queries ──────────────────────────────────────────────────────────

    def list_reservations(self, user: str) -> list[Reservation]:
        """Newest slot first."""
        return sorted(
            self.repository.list_for_user(user),
            key=lambda r: r.starts_at,
            reverse=True,
        )

    def get_reservation(self, user: str, reservation_id: int) -> Reservation:
        reservation = self.repository.get(reservation_id)
        if reservation is None or reservation.user != user:
            raise ReservationNotFound("Reservation not found")
        return reservation

    def slot_times(self) -> list[time]:
        opening = datetime.combine(date.min, self.config.opening_time)
        closing = datetime.combine(date.min, self.config.closing_time)
        step = timedelta(minutes=self.config.slot_minutes)

        slots: list[time] = []
        current = opening
        while current <= closing:
            slots.append(current.time())
            current += step
        return slots

    def check_availability(
        self, restaurant_id: int, on: date, party_size: int,
    ) -> Availability:
        restaurant = get_restaurant(restaurant_id)
        if restaurant is None:
            raise UnknownRestaurant("Restaurant not found")

        time_slots: list[TimeSlot] = []
        for slot in self.slot_times():
            remaining = restaurant.max_capacity - self.repository.booked_seats(
                restaurant_id, on, slot,
            )
            time_slots.append(TimeSlot(
                time=slot,
                formatted_time=slot.strftime("%I:%M %p").lstrip("0"),
                available=remaining >= party_size,
                available_capacity=remaining,
            ))

        return Availability(
            restaurant_id=restaurant.id,
            restaurant_name=restaurant.name,
            max_capacity=restaurant.max_capacity,
            date=on,
            party_size=party_size,
            time_slots=time_slots,
            has_availability=any(s.available for s in time_slots),
        )

    # ── Commands ─────────────────────────────────────────────────────────

    def create_reservation(
        self,
        user: str,
        body: ReservationCreate,
        now: datetime | None = None,
    ) -> Reservation:
        now = now or datetime.now()

        restaurant = get_restaurant(body.restaurant_id)
        if restaurant is None:
            raise UnknownRestaurant("Restaurant not found")

        if body.party_size > self.config.max_party_size:
            raise ReservationError(
                f"Party size is limited to {self.config.max_party_size} guests"
            )

        if not self.config.opening_time <= body.reservation_time <= self.config.closing_time:
            logger.warning(
                "Rejected booking for restaurant %s at %s: outside opening hours",
                restaurant.id, body.reservation_time,
            )
            raise OutsideOpeningHours(
                f"Restaurant is only open from {self.config.opening_time:%H:%M} "
                f"to {self.config.closing_time:%H:%M}"
            )

        if datetime.combine(body.reservation_date, body.reservation_time) < now:
            raise ReservationInPast("Reservation time is in the past")

        booked = self.repository.booked_seats(
            restaurant.id, body.reservation_date, body.reservation_time,
        )
        if booked + body.party_size > restaurant.max_capacity:
            logger.warning(
                "Rejected booking for restaurant %s: %s seats booked, party of %s",
                restaurant.id, booked, body.party_size,
            )
            raise CapacityExceeded(
                "No available tables for your party size at this time. "
                "Please try another time.",
                available_capacity=restaurant.max_capacity - booked,
            )

        reservation = self.repository.create(Reservation(
            **body.model_dump(),
            id=self.repository.next_id(),
            user=user,
            status=ReservationStatus.confirmed,
            confirmation_code=generate_confirmation_code(now.date()),
            created_at=now,
        ))

        record_event("reservation_created", {
            "restaurant_id": reservation.restaurant_id,
            "party_size": reservation.party_size,
        })
        logger.info(
            "Reservation %s confirmed for %s at restaurant %s (%s)",
            reservation.id, user, reservation.restaurant_id, reservation.confirmation_code,
        )
        return reservation

    def cancel_reservation(
        self,
        user: str,
        reservation_id: int,
        now: datetime | None = None,
    ) -> Reservation:
        now = now or datetime.now()
        reservation = self.get_reservation(user, reservation_id)

        cutoff = timedelta(hours=self.config.cancellation_cutoff_hours)
        if reservation.status not in HOLDING_STATUSES or reservation.starts_at - now < cutoff:
            raise CancellationNotAllowed(
                f"Reservations can only be cancelled at least "
                f"{self.config.cancellation_cutoff_hours} hours in advance."
            )

        cancelled = self.repository.update_status(reservation_id, ReservationStatus.cancelled)
        record_event("reservation_cancelled", {"restaurant_id": reservation.restaurant_id})
        logger.info("Reservation %s cancelled by %s", reservation_id, user)
        return cancelled

    def update_status(
        self, reservation_id: int, status: ReservationStatus,
    ) -> Reservation:
        updated = self.repository.update_status(reservation_id, status)
        if updated is None:
            raise ReservationNotFound("Reservation not found")
        return updated
