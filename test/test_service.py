# Test type: Unit and integration (service layer around the engine)
# Validation: JSON loading/validation, customer and date filters, pagination, display helpers, and rewards report
# Command: pytest -q test/test_service.py

import json
from datetime import date

import pytest

from app.core.catalog import format_currency, format_points_breakdown, month_name
from app.core.data_service import (
    DataLoadError,
    TransactionStore,
    filter_display_text,
    validate_filters,
)
from app.core.pagination import paginate
from app.core.report import build_customer_report
from app.core.settings import DEFAULT_DATA_DIR
from app.core.time_utils import (
    format_display_date,
    parse_calendar_date,
    subtract_months,
    try_parse_calendar_date,
)


def _sample_store():
    return TransactionStore(
        DEFAULT_DATA_DIR / "customers.json",
        DEFAULT_DATA_DIR / "transactions.json",
    )


def _write_json(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_parse_calendar_date_variants():
    assert parse_calendar_date("2025-01-15") == date(2025, 1, 15)
    assert parse_calendar_date(" 2025-01-15 10:30:00 ") == date(2025, 1, 15)
    assert parse_calendar_date("2025-01-15T10:30") == date(2025, 1, 15)

    with pytest.raises(ValueError):
        parse_calendar_date("2025-02-30")
    with pytest.raises(ValueError):
        parse_calendar_date("")
    assert try_parse_calendar_date("15/01/2025") is None


def test_display_date_and_month_arithmetic():
    assert format_display_date("2025-01-15") == "01/15/2025"
    assert format_display_date("") == ""
    assert format_display_date("garbage") == "Invalid Date"

    assert subtract_months(date(2025, 1, 15), 3) == date(2024, 10, 15)
    assert subtract_months(date(2025, 5, 31), 3) == date(2025, 2, 28)


def test_catalog_display_helpers():
    assert month_name("01") == "January"
    assert month_name(13) == "Unknown"
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(99.99) == "$99.99"
    assert format_currency("x") == "$0.00"
    assert format_currency(float("nan")) == "$0.00"
    assert format_currency(10**400).startswith("$1,000,000,")
    assert format_points_breakdown({"highTier": 40, "lowTier": 50}) == (
        "50 (from $50-$100) + 40 (from >$100)"
    )
    assert format_points_breakdown({"highTier": 0, "lowTier": 0}) == "0 points"


def test_paginate_slices_and_reports_bounds():
    page = paginate(list(range(25)), page=3, per_page=10)

    assert page["items"] == [20, 21, 22, 23, 24]
    assert page["totalPages"] == 3
    assert page["startItem"] == 21
    assert page["endItem"] == 25
    assert page["hasNextPage"] is False
    assert page["hasPreviousPage"] is True

    assert paginate(list(range(25)), page=99, per_page=10)["currentPage"] == 3


def test_paginate_empty_and_invalid_page_size():
    page = paginate([], page=1, per_page=10)
    assert page["totalPages"] == 0
    assert page["currentPage"] == 1
    assert page["startItem"] == 0
    assert page["hasNextPage"] is False

    with pytest.raises(ValueError, match="per_page"):
        paginate([1, 2], per_page=0)


def test_store_loads_and_validates_sample_data():
    store = _sample_store()

    customers = store.get_customers()
    assert [customer["customerId"] for customer in customers] == ["C001", "C002", "C003", "C004"]
    assert store.get_customer_by_id("C004")["email"] == ""
    assert store.get_customer_by_id("missing") is None
    assert store.get_customer_by_id("") is None

    # one non-numeric amount and one unparseable date are dropped
    assert [tx["transactionId"] for tx in store.get_transactions_for_customer("C004")] == [
        "T018",
        "T017",
    ]


def test_store_month_year_and_last_three_month_filters():
    store = _sample_store()

    january = store.get_transactions_for_customer("C001", month="01", year="2025")
    assert [tx["transactionId"] for tx in january] == ["T002", "T001"]

    year_2024 = store.get_transactions_for_customer("C001", year="2024")
    assert [tx["transactionId"] for tx in year_2024] == ["T007"]

    recent = store.get_transactions_for_customer("C001", month="last3", today=date(2025, 3, 31))
    assert [tx["transactionId"] for tx in recent] == ["T006", "T005", "T004", "T003", "T002", "T001"]

    assert store.get_transactions_for_customer("") == []


def test_store_errors_for_bad_sources(tmp_path):
    missing = TransactionStore(tmp_path / "nope.json", tmp_path / "nope.json")
    with pytest.raises(DataLoadError, match="not found"):
        missing.load_customers()

    not_a_list = _write_json(tmp_path / "object.json", {"customerId": "C1"})
    with pytest.raises(DataLoadError, match="Invalid customers data format"):
        TransactionStore(not_a_list, not_a_list).load_customers()

    all_invalid = _write_json(tmp_path / "tx.json", [{"transactionId": "T1", "amount": 5}])
    with pytest.raises(DataLoadError, match="No valid transaction data found"):
        TransactionStore(all_invalid, all_invalid).load_transactions()

    broken = tmp_path / "broken.json"
    broken.write_text("[{", encoding="utf-8")
    with pytest.raises(DataLoadError):
        TransactionStore(broken, broken).load_transactions()


def test_store_serves_cache_until_cleared(tmp_path):
    customers = _write_json(tmp_path / "customers.json", [{"customerId": "C1", "name": "Ann"}])
    store = TransactionStore(customers, tmp_path / "transactions.json")

    assert store.get_customers()[0]["name"] == "Ann"
    customers.unlink()
    assert store.get_customer_by_id("C1")["name"] == "Ann"

    store.clear_cache()
    with pytest.raises(DataLoadError):
        store.get_customers()


def test_filter_validation_and_display_text():
    assert validate_filters("last3", "2025") is True
    assert validate_filters("01", None) is True
    assert validate_filters("13", None) is False
    assert validate_filters(None, "1999") is False

    assert filter_display_text(None, None) == "Last 3 Months"
    assert filter_display_text("last3", "2025") == "Last 3 Months"
    assert filter_display_text("01", "2025") == "January 2025"
    assert filter_display_text(None, "2024") == "Year 2024"
    assert filter_display_text("02", None) == "Custom Period"


def test_customer_report_combines_engine_outputs():
    report = build_customer_report(_sample_store(), "C001", year="2025", per_page=4)

    assert report["customer"]["name"] == "Alice Johnson"
    assert report["period"] == "Year 2025"
    assert report["totalPoints"] == 584
    assert report["transactionCount"] == 6
    assert [month["monthKey"] for month in report["monthly"]] == ["2025-01", "2025-02", "2025-03"]
    assert [month["points"] for month in report["monthly"]] == [115, 150, 319]
    assert report["monthly"][0]["display"] == "January 2025"
    assert report["monthly"][1]["totalAmountDisplay"] == "$195.50"

    page = report["transactions"]
    assert page["totalItems"] == 6
    assert page["totalPages"] == 2
    first = page["items"][0]
    assert first["transactionId"] == "T006"
    assert first["points"] == 49
    assert first["breakdownText"] == "49 (from $50-$100)"
    assert first["displayDate"] == "03/27/2025"
    assert first["amountDisplay"] == "$99.99"


def test_customer_report_focus_month_and_errors():
    store = _sample_store()

    report = build_customer_report(store, "C001", year="2025", focus_month="2025-02")
    assert report["totalPoints"] == 584
    assert [tx["transactionId"] for tx in report["transactions"]["items"]] == ["T004", "T003"]

    with pytest.raises(LookupError, match="Customer not found"):
        build_customer_report(store, "C999", year="2025")
    with pytest.raises(ValueError, match="Invalid filters"):
        build_customer_report(store, "C001", month="13")
