from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext


@dataclass(frozen=True)
class RewardPolicy:
    high_threshold: int = 100
    low_threshold: int = 50
    high_multiplier: int = 2
    low_multiplier: int = 1


DEFAULT_POLICY = RewardPolicy()

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

LAST_THREE_MONTHS = "last3"
DEFAULT_MONTH = LAST_THREE_MONTHS
DEFAULT_YEAR = "2025"

MONTH_OPTIONS = [{"value": LAST_THREE_MONTHS, "label": "Last 3 Months (Default)"}] + [
    {"value": f"{number:02d}", "label": name}
    for number, name in enumerate(MONTH_NAMES, start=1)
]
YEAR_OPTIONS = ["2025", "2024", "2023", "2022", "2021"]

CENT = Decimal("0.01")


def month_name(month_number: int | str) -> str:
    try:
        index = int(month_number)
    except (TypeError, ValueError):
        return "Unknown"
    if 1 <= index <= len(MONTH_NAMES):
        return MONTH_NAMES[index - 1]
    return "Unknown"


def format_currency(amount: object) -> str:
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return "$0.00"
    if isinstance(amount, float) and not math.isfinite(amount):
        return "$0.00"
    value = Decimal(str(amount))
    with localcontext() as context:
        context.prec = max(context.prec, value.adjusted() + 3)
        value = value.quantize(CENT, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_points_breakdown(breakdown: dict, policy: RewardPolicy = DEFAULT_POLICY) -> str:
    parts: list[str] = []
    low_tier = breakdown.get("lowTier", 0)
    high_tier = breakdown.get("highTier", 0)
    if low_tier > 0:
        parts.append(f"{low_tier} (from ${policy.low_threshold}-${policy.high_threshold})")
    if high_tier > 0:
        parts.append(f"{high_tier} (from >${policy.high_threshold})")
    return " + ".join(parts) if parts else "0 points"
