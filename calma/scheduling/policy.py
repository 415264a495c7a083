from dataclasses import dataclass


@dataclass(frozen=True)
class BookingPolicy:
    """Booking constraints that vary per deployment or per host."""

    min_notice_minutes: int = 60
    horizon_days: int = 30


DEFAULT_POLICY = BookingPolicy()
