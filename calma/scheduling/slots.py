"""Time-slot generation within a single availability window."""

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(value: str) -> int:
    """Convert "HH:MM" (or "HH:MM:SS") to minutes since midnight.

    Seconds are ignored; input is assumed validated upstream.
    """
    parts = value.split(":")
    return int(parts[0]) * 60 + int(parts[1])


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def generate_time_slots(start_time: str, end_time: str, duration_minutes: int) -> list[str]:
    """Candidate start times stepping by the meeting duration.

    Only starts whose whole meeting fits the window are produced, so a
    window of length W yields floor(W / duration) slots. Windows never
    cross midnight.

    >>> generate_time_slots("09:00", "12:00", 60)
    ['09:00', '10:00', '11:00']
    >>> generate_time_slots("09:00", "10:00", 45)
    ['09:00']
    """
    if duration_minutes <= 0:
        return []
    start = parse_hhmm(start_time)
    end = min(parse_hhmm(end_time), MINUTES_PER_DAY)
    slots: list[str] = []
    current = start
    while current + duration_minutes <= end:
        slots.append(format_hhmm(current))
        current += duration_minutes
    return slots
