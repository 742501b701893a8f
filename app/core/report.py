from __future__ import annotations

import logging
from datetime import date

from app.core.catalog import DEFAULT_POLICY, RewardPolicy, format_currency, format_points_breakdown
from app.core.data_service import TransactionStore, filter_display_text, validate_filters
from app.core.pagination import paginate
from app.core.rewards import (
    annotate_with_points,
    compute_monthly_breakdown,
    compute_total,
    format_month_key,
    month_key,
)
from app.core.time_utils import format_display_date

logger = logging.getLogger(__name__)


def _monthly_cards(breakdown: dict[str, dict]) -> list[dict]:
    return [
        {
            "monthKey": key,
            "display": format_month_key(key),
            "points": breakdown[key]["points"],
            "transactionCount": breakdown[key]["transactionCount"],
            "totalAmount": breakdown[key]["totalAmount"],
            "totalAmountDisplay": format_currency(breakdown[key]["totalAmount"]),
        }
        for key in sorted(breakdown)
    ]


def _transaction_row(transaction: dict, policy: RewardPolicy) -> dict:
    row = dict(transaction)
    row["displayDate"] = format_display_date(transaction.get("date"))
    row["amountDisplay"] = format_currency(transaction.get("amount"))
    row["breakdownText"] = format_points_breakdown(transaction["pointsBreakdown"], policy)
    return row


def build_customer_report(
    store: TransactionStore,
    customer_id: str,
    month: str | None = None,
    year: str | None = None,
    *,
    page: int = 1,
    per_page: int = 10,
    focus_month: str | None = None,
    today: date | None = None,
    policy: RewardPolicy = DEFAULT_POLICY,
) -> dict:
    if not validate_filters(month, year):
        raise ValueError(f"Invalid filters: month={month!r} year={year!r}")

    customer = store.get_customer_by_id(customer_id)
    if customer is None:
        raise LookupError(f"Customer not found: {customer_id}")

    transactions = store.get_transactions_for_customer(customer_id, month, year, today=today)
    total_points = compute_total(transactions, policy)
    monthly = compute_monthly_breakdown(transactions, policy)

    detail_source = transactions
    if focus_month:
        detail_source = [tx for tx in transactions if month_key(tx.get("date")) == focus_month]
    annotated = annotate_with_points(detail_source, policy)
    page_data = paginate(
        [_transaction_row(tx, policy) for tx in annotated], page=page, per_page=per_page
    )

    logger.info(
        "Built rewards report for customer %s: points=%s transactions=%s",
        customer_id,
        total_points,
        len(transactions),
    )
    return {
        "customer": customer,
        "period": filter_display_text(month, year),
        "totalPoints": total_points,
        "transactionCount": len(transactions),
        "monthly": _monthly_cards(monthly),
        "transactions": page_data,
    }
