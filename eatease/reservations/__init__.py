"""
Reservations package.

Responsibilities:
- Validate bookings against opening hours and seating capacity.
- Store reservations behind a repository interface.
- Enforce the cancellation window and report slot availability.
"""
