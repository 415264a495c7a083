from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"


@dataclass(frozen=True)
class AvailabilityBlock:
    """A recurring weekly window. day_of_week follows 0=Sunday .. 6=Saturday."""

    day_of_week: int
    start_time: str
    end_time: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AvailabilityBlock":
        return cls(
            day_of_week=int(row["day_of_week"]),
            start_time=str(row["start_time"]),
            end_time=str(row["end_time"]),
        )


@dataclass(frozen=True)
class BookedInterval:
    """An existing booking's absolute time range."""

    start: datetime
    end: datetime
    status: str = STATUS_CONFIRMED

    @property
    def is_active(self) -> bool:
        return self.status != STATUS_CANCELLED

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "BookedInterval":
        return cls(
            start=row["start_time"],
            end=row["end_time"],
            status=row.get("status", STATUS_CONFIRMED),
        )
