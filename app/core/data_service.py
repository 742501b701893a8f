from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path

from app.core.catalog import LAST_THREE_MONTHS, MONTH_OPTIONS, YEAR_OPTIONS, month_name
from app.core.time_utils import subtract_months, try_parse_calendar_date

logger = logging.getLogger(__name__)

VALID_MONTH_VALUES = {option["value"] for option in MONTH_OPTIONS}


class DataLoadError(RuntimeError):
    pass


def _read_json_list(path: Path, label: str) -> list:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        raise DataLoadError(f"Failed to load {label} data: {path} not found.") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise DataLoadError(f"Failed to load {label} data: {exc}") from exc

    if not isinstance(data, list):
        raise DataLoadError(f"Invalid {label} data format.")
    return data


def _validate_customers(records: list) -> list[dict]:
    validated: list[dict] = []
    for record in records:
        if not isinstance(record, dict) or not record.get("customerId") or not record.get("name"):
            logger.warning("Invalid customer data found, skipping: %r", record)
            continue
        validated.append(
            {
                "customerId": str(record["customerId"]),
                "name": str(record["name"]),
                "email": str(record["email"]) if record.get("email") else "",
                "joinDate": str(record["joinDate"]) if record.get("joinDate") else "",
            }
        )

    if not validated:
        raise DataLoadError("No valid customer data found.")
    return validated


def _validate_transactions(records: list) -> list[dict]:
    validated: list[dict] = []
    for record in records:
        if (
            not isinstance(record, dict)
            or not record.get("transactionId")
            or not record.get("customerId")
            or isinstance(record.get("amount"), bool)
            or not isinstance(record.get("amount"), (int, float))
            or not record.get("date")
        ):
            logger.warning("Invalid transaction data found, skipping: %r", record)
            continue
        if try_parse_calendar_date(record["date"]) is None:
            logger.warning("Invalid date format in transaction, skipping: %r", record)
            continue
        validated.append(
            {
                "transactionId": str(record["transactionId"]),
                "customerId": str(record["customerId"]),
                "amount": float(record["amount"]),
                "date": str(record["date"]),
            }
        )

    if not validated:
        raise DataLoadError("No valid transaction data found.")
    return validated


def validate_filters(month: str | None, year: str | None) -> bool:
    if month and month not in VALID_MONTH_VALUES:
        logger.warning("Invalid month filter: %s", month)
        return False
    if year and year not in YEAR_OPTIONS:
        logger.warning("Invalid year filter: %s", year)
        return False
    return True


def filter_display_text(month: str | None, year: str | None) -> str:
    if (not month and not year) or month == LAST_THREE_MONTHS:
        return "Last 3 Months"
    if month and year:
        return f"{month_name(month)} {year}"
    if year:
        return f"Year {year}"
    return "Custom Period"


class TransactionStore:
    """Customer and transaction records read from two JSON files.

    Both lists are validated once and then served from memory until
    :meth:`clear_cache` is called.
    """

    def __init__(self, customers_path: Path, transactions_path: Path) -> None:
        self.customers_path = Path(customers_path)
        self.transactions_path = Path(transactions_path)
        self._customers: list[dict] = []
        self._transactions: list[dict] = []

    def load_customers(self) -> list[dict]:
        if self._customers:
            return self._customers
        logger.info("Loading customers data from %s", self.customers_path)
        self._customers = _validate_customers(
            _read_json_list(self.customers_path, "customers")
        )
        logger.info("Successfully loaded %s customers", len(self._customers))
        return self._customers

    def load_transactions(self) -> list[dict]:
        if self._transactions:
            return self._transactions
        logger.info("Loading transactions data from %s", self.transactions_path)
        self._transactions = _validate_transactions(
            _read_json_list(self.transactions_path, "transactions")
        )
        logger.info("Successfully loaded %s transactions", len(self._transactions))
        return self._transactions

    def get_customers(self) -> list[dict]:
        return list(self.load_customers())

    def get_customer_by_id(self, customer_id: str | None) -> dict | None:
        if not customer_id:
            logger.warning("get_customer_by_id called with empty customer_id")
            return None
        for customer in self.load_customers():
            if customer["customerId"] == customer_id:
                return customer
        return None

    def get_transactions_for_customer(
        self,
        customer_id: str | None,
        month: str | None = None,
        year: str | None = None,
        *,
        today: date | None = None,
    ) -> list[dict]:
        if not customer_id:
            logger.warning("get_transactions_for_customer called with empty customer_id")
            return []

        selected = [
            tx for tx in self.load_transactions() if tx["customerId"] == customer_id
        ]
        if month or year:
            selected = self._apply_date_filters(selected, month, year, today or date.today())

        selected.sort(key=lambda tx: try_parse_calendar_date(tx["date"]), reverse=True)
        logger.info("Found %s transactions for customer %s", len(selected), customer_id)
        return selected

    @staticmethod
    def _apply_date_filters(
        transactions: list[dict], month: str | None, year: str | None, today: date
    ) -> list[dict]:
        if month == LAST_THREE_MONTHS:
            window_start = subtract_months(today, 3)
            return [
                tx
                for tx in transactions
                if window_start <= try_parse_calendar_date(tx["date"]) <= today
            ]

        filtered: list[dict] = []
        for tx in transactions:
            tx_date = try_parse_calendar_date(tx["date"])
            if month and f"{tx_date.month:02d}" != month:
                continue
            if year and str(tx_date.year) != year:
                continue
            filtered.append(tx)
        return filtered

    def clear_cache(self) -> None:
        self._customers = []
        self._transactions = []
        logger.info("Data cache cleared")
