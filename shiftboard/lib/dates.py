"""
Date helpers for the shift board.

All arithmetic happens on local naive datetimes. Stored timestamps may be
naive local ISO strings or offset-aware ISO strings (e.g. "...Z"); both are
normalized by `parse_timestamp`.
"""

from datetime import date, datetime, timedelta

# Python weekday() is Mon=0; stored routine weekdays use Sun=0
KOREAN_WEEKDAYS = ["월요일", "화요일", "수요일", "목요일", "금요일", "토요일", "일요일"]


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO timestamp into a local naive datetime.

    Raises:
        ValueError: if the value is not ISO-8601
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def to_timestamp(moment: datetime) -> str:
    """Format a datetime for storage."""
    return moment.isoformat()


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


def calendar_days_between(earlier: datetime, later: datetime) -> int:
    """Whole calendar days from `earlier` to `later`, both truncated to midnight."""
    return (start_of_day(later) - start_of_day(earlier)).days


def sunday_weekday(moment: date) -> int:
    """Day of week with Sunday=0 .. Saturday=6."""
    return (moment.weekday() + 1) % 7


def week_range(moment: datetime) -> tuple[datetime, datetime]:
    """Sunday 00:00 through Saturday 23:59:59 of the week containing `moment`."""
    start = start_of_day(moment) - timedelta(days=sunday_weekday(moment))
    end = end_of_day(start + timedelta(days=6))
    return start, end


def format_korean_long(moment: date) -> str:
    """"10월 24일 목요일" style date."""
    return f"{moment.month}월 {moment.day}일 {KOREAN_WEEKDAYS[moment.weekday()]}"


def format_korean_short(moment: date) -> str:
    """"2026. 10. 19." style date."""
    return f"{moment.year}. {moment.month}. {moment.day}."


def format_month_day(moment: date) -> str:
    """"10. 19." style key used for activity-by-date aggregation."""
    return f"{moment.month}. {moment.day}."
