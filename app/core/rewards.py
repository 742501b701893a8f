from __future__ import annotations

import logging
import math
import numbers
import re
from collections.abc import Mapping, Sequence
from decimal import Decimal

from app.core.catalog import DEFAULT_POLICY, RewardPolicy, month_name
from app.core.time_utils import try_parse_calendar_date

logger = logging.getLogger(__name__)

MONTH_KEY_PATTERN = re.compile(r"(\d{4})-(\d{2})")
INVALID_DATE_DISPLAY = "Invalid Date"


class RewardsError(ValueError):
    pass


class InvalidAmountError(RewardsError):
    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid transaction amount: {value}")
        self.value = value


class InvalidInputError(RewardsError):
    pass


def is_valid_amount(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    if isinstance(value, Decimal) and not value.is_finite():
        return False
    return value >= 0


def _tier_points(amount: float, policy: RewardPolicy) -> tuple[int, int]:
    high_portion = max(0, amount - policy.high_threshold)
    high_points = math.floor(high_portion * policy.high_multiplier)

    low_portion = min(amount, policy.high_threshold) - policy.low_threshold
    low_points = math.floor(low_portion * policy.low_multiplier) if low_portion > 0 else 0
    return high_points, low_points


def compute_points(amount: object, policy: RewardPolicy = DEFAULT_POLICY) -> int:
    """Points earned by one purchase.

    Each tier is floored on its own before the two are added, so
    ``125.75`` earns ``floor(51.5) + 50 == 101``.
    """
    if not is_valid_amount(amount):
        logger.error("Invalid transaction amount: %r", amount)
        raise InvalidAmountError(amount)

    high_points, low_points = _tier_points(amount, policy)
    logger.debug(
        "amount=%s high_tier=%s low_tier=%s", amount, high_points, low_points
    )
    return high_points + low_points


def compute_breakdown(amount: object, policy: RewardPolicy = DEFAULT_POLICY) -> dict:
    if not is_valid_amount(amount):
        return {"highTier": 0, "lowTier": 0}
    high_points, low_points = _tier_points(amount, policy)
    return {"highTier": high_points, "lowTier": low_points}


def _require_sequence(transactions: object, operation: str) -> Sequence:
    if isinstance(transactions, (str, bytes, bytearray, Mapping)) or not isinstance(
        transactions, Sequence
    ):
        logger.error("%s received a non-sequence argument: %r", operation, type(transactions))
        raise InvalidInputError("Transactions must be a sequence.")
    return transactions


def _amount_of(transaction: object) -> object:
    if not isinstance(transaction, Mapping):
        return None
    return transaction.get("amount")


def month_key(value: object) -> str | None:
    parsed = try_parse_calendar_date(value)
    if parsed is None:
        return None
    return f"{parsed.year:04d}-{parsed.month:02d}"


def compute_total(transactions: object, policy: RewardPolicy = DEFAULT_POLICY) -> int:
    items = _require_sequence(transactions, "compute_total")
    if not items:
        logger.info("No transactions provided, returning 0 points")
        return 0

    total_points = 0
    valid_count = 0
    for transaction in items:
        amount = _amount_of(transaction)
        if not is_valid_amount(amount):
            logger.warning("Skipping invalid transaction: %r", transaction)
            continue
        total_points += compute_points(amount, policy)
        valid_count += 1

    logger.info(
        "Calculated total points: %s from %s valid transactions", total_points, valid_count
    )
    return total_points


def compute_monthly_breakdown(
    transactions: object, policy: RewardPolicy = DEFAULT_POLICY
) -> dict[str, dict]:
    items = _require_sequence(transactions, "compute_monthly_breakdown")
    buckets: dict[str, dict] = {}

    for transaction in items:
        amount = _amount_of(transaction)
        if not is_valid_amount(amount) or not transaction.get("date"):
            logger.warning("Skipping invalid transaction in monthly breakdown: %r", transaction)
            continue

        key = month_key(transaction["date"])
        if key is None:
            logger.warning("Skipping transaction with invalid date: %r", transaction)
            continue

        points = compute_points(amount, policy)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = {"points": 0, "transactionCount": 0, "totalAmount": 0}
            buckets[key] = bucket
        bucket["points"] += points
        bucket["transactionCount"] += 1
        bucket["totalAmount"] += amount

    logger.info("Generated monthly breakdown for %s months", len(buckets))
    return buckets


def annotate_with_points(
    transactions: object, policy: RewardPolicy = DEFAULT_POLICY
) -> list[dict]:
    """Copy each record with ``points`` and ``pointsBreakdown`` attached.

    Unlike the aggregates, nothing is dropped: a record with a bad amount is
    still returned, zero-filled, so the output lines up with the input.
    """
    items = _require_sequence(transactions, "annotate_with_points")
    annotated: list[dict] = []

    for transaction in items:
        fields = dict(transaction) if isinstance(transaction, Mapping) else {}
        amount = fields.get("amount")
        if is_valid_amount(amount):
            fields["points"] = compute_points(amount, policy)
            fields["pointsBreakdown"] = compute_breakdown(amount, policy)
        else:
            logger.warning("Zero points for invalid transaction: %r", transaction)
            fields["points"] = 0
            fields["pointsBreakdown"] = {"highTier": 0, "lowTier": 0}
        annotated.append(fields)

    logger.info("Calculated points details for %s transactions", len(annotated))
    return annotated


def format_month_key(key: object) -> str:
    if not isinstance(key, str):
        return INVALID_DATE_DISPLAY
    match = MONTH_KEY_PATTERN.fullmatch(key)
    if match is None:
        return INVALID_DATE_DISPLAY

    year, month = match.groups()
    return f"{month_name(month)} {year}"
