from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, time

from .models import HOLDING_STATUSES, Reservation, ReservationStatus


class ReservationRepository(ABC):
    """Storage for reservations. Swap the in-memory one for a real datastore."""

    @abstractmethod
    def next_id(self) -> int:
        ...

    @abstractmethod
    def list_for_user(self, user: str) -> list[Reservation]:
        ...

    @abstractmethod
    def get(self, reservation_id: int) -> Reservation | None:
        ...

    @abstractmethod
    def create(self, reservation: Reservation) -> Reservation:
        ...

    @abstractmethod
    def update_status(
        self, reservation_id: int, status: ReservationStatus,
    ) -> Reservation | None:
        ...

    @abstractmethod
    def booked_seats(self, restaurant_id: int, on: date, at: time) -> int:
        """Seats held by pending or confirmed bookings for one slot."""


class InMemoryReservationRepository(ReservationRepository):
    def __init__(self) -> None:
        self._reservations: dict[int, Reservation] = {}
        self._next_id = 1

    def next_id(self) -> int:
        reservation_id = self._next_id
        self._next_id += 1
        return reservation_id

    def list_for_user(self, user: str) -> list[Reservation]:
        return [r for r in self._reservations.values() if r.user == user]

    def get(self, reservation_id: int) -> Reservation | None:
        return self._reservations.get(reservation_id)

    def create(self, reservation: Reservation) -> Reservation:
        self._reservations[reservation.id] = reservation
        return reservation

    def update_status(
        self, reservation_id: int, status: ReservationStatus,
    ) -> Reservation | None:
        current = self._reservations.get(reservation_id)
        if current is None:
            return None
        updated = current.model_copy(update={"status": status})
        self._reservations[reservation_id] = updated
        return updated

    def booked_seats(self, restaurant_id: int, on: date, at: time) -> int:
        return sum(
            r.party_size
            for r in self._reservations.values()
            if r.restaurant_id == restaurant_id
            and r.reservation_date == on
            and r.reservation_time == at
            and r.status in HOLDING_STATUSES
        )

    def clear(self) -> None:
        self._reservations.clear()
        self._next_id = 1
