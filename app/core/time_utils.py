from __future__ import annotations

import calendar
from datetime import date, datetime

DISPLAY_DATE_FORMAT = "%m/%d/%Y"
DATE_ONLY_LENGTH = 10


def _parse_date_string(cleaned: str) -> date:
    if len(cleaned) < DATE_ONLY_LENGTH or cleaned[4] != "-" or cleaned[7] != "-":
        raise ValueError(
            "Invalid date format. Expected 'YYYY-MM-DD' with an optional time part."
        )

    if len(cleaned) == DATE_ONLY_LENGTH:
        try:
            return date.fromisoformat(cleaned)
        except ValueError as exc:
            raise ValueError(f"Invalid calendar date: {cleaned}") from exc

    candidate = cleaned
    if candidate.endswith(("Z", "z")):
        candidate = f"{candidate[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError(f"Invalid calendar date: {cleaned}") from exc
    return _local_date(parsed)


def _local_date(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.date()


def parse_calendar_date(value: object) -> date:
    if isinstance(value, datetime):
        return _local_date(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Date must be a non-empty string or a date value.")
    return _parse_date_string(value.strip())


def try_parse_calendar_date(value: object) -> date | None:
    try:
        return parse_calendar_date(value)
    except ValueError:
        return None


def format_display_date(value: object) -> str:
    if value is None or value == "":
        return ""
    parsed = try_parse_calendar_date(value)
    if parsed is None:
        return "Invalid Date"
    return parsed.strftime(DISPLAY_DATE_FORMAT)


def subtract_months(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month_zero_based = divmod(month_index, 12)
    month = month_zero_based + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))
