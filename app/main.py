from __future__ import annotations

import logging
import os
import threading
import time
from functools import lru_cache

import psutil
from fastapi import Depends, FastAPI, HTTPException, Query, Request

from app.core.catalog import DEFAULT_MONTH, DEFAULT_YEAR, MONTH_OPTIONS, YEAR_OPTIONS
from app.core.data_service import DataLoadError, TransactionStore
from app.core.report import build_customer_report
from app.core.rewards import (
    annotate_with_points,
    compute_breakdown,
    compute_monthly_breakdown,
    compute_points,
    compute_total,
    format_month_key,
)
from app.core.settings import get_settings
from app.models.schemas import (
    AnnotatedTransactionOutput,
    CustomerOutput,
    CustomerRewardsResponse,
    FiltersResponse,
    MonthKeyResponse,
    MonthlyBreakdownResponse,
    PerformanceResponse,
    PointsRequest,
    PointsResponse,
    TotalPointsResponse,
    TransactionsRequest,
)

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Retail Rewards API",
    version="1.0.0",
)

app.state.last_request_ms = 0.0


@lru_cache
def get_store() -> TransactionStore:
    settings = get_settings()
    return TransactionStore(settings.customers_path, settings.transactions_path)


@app.middleware("http")
async def collect_request_metrics(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start_time) * 1000.0
    app.state.last_request_ms = elapsed_ms
    return response


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/rewards/v1/points", response_model=PointsResponse)
def points_for_amount(payload: PointsRequest) -> PointsResponse:
    try:
        points = compute_points(payload.amount)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return PointsResponse(
        amount=payload.amount,
        points=points,
        pointsBreakdown=compute_breakdown(payload.amount),
    )


@app.post("/rewards/v1/transactions:total", response_model=TotalPointsResponse)
def total_points(payload: TransactionsRequest) -> TotalPointsResponse:
    return TotalPointsResponse(totalPoints=compute_total(payload.transactions))


@app.post("/rewards/v1/transactions:monthly", response_model=MonthlyBreakdownResponse)
def monthly_points(payload: TransactionsRequest) -> MonthlyBreakdownResponse:
    breakdown = compute_monthly_breakdown(payload.transactions)
    return MonthlyBreakdownResponse(
        months=[
            {"monthKey": key, "display": format_month_key(key), **breakdown[key]}
            for key in sorted(breakdown)
        ]
    )


@app.post(
    "/rewards/v1/transactions:annotate",
    response_model=list[AnnotatedTransactionOutput],
)
def annotate_transactions(payload: TransactionsRequest) -> list[dict]:
    return annotate_with_points(payload.transactions)


@app.get("/rewards/v1/months/{month_key}", response_model=MonthKeyResponse)
def month_display(month_key: str) -> MonthKeyResponse:
    return MonthKeyResponse(monthKey=month_key, display=format_month_key(month_key))


@app.get("/rewards/v1/filters", response_model=FiltersResponse)
def filter_options() -> FiltersResponse:
    return FiltersResponse(
        months=MONTH_OPTIONS,
        years=YEAR_OPTIONS,
        defaultMonth=DEFAULT_MONTH,
        defaultYear=DEFAULT_YEAR,
    )


@app.get("/rewards/v1/customers", response_model=list[CustomerOutput])
def list_customers(store: TransactionStore = Depends(get_store)) -> list[dict]:
    try:
        return store.get_customers()
    except DataLoadError as exc:
        logger.error("Customer list unavailable: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@app.get(
    "/rewards/v1/customers/{customer_id}/rewards",
    response_model=CustomerRewardsResponse,
)
def customer_rewards(
    customer_id: str,
    month: str | None = None,
    year: str | None = None,
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1, alias="perPage"),
    focus_month: str | None = Query(default=None, alias="focusMonth"),
    store: TransactionStore = Depends(get_store),
) -> dict:
    try:
        return build_customer_report(
            store,
            customer_id,
            month,
            year,
            page=page,
            per_page=per_page or get_settings().transactions_per_page,
            focus_month=focus_month,
        )
    except DataLoadError as exc:
        logger.error("Rewards data unavailable: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get(
    "/rewards/v1/performance",
    response_model=PerformanceResponse,
)
def performance_report() -> PerformanceResponse:
    process = psutil.Process(os.getpid())
    memory_mb = process.memory_info().rss / (1024 * 1024)
    threads = threading.active_count()
    return PerformanceResponse(
        time=f"{app.state.last_request_ms:.3f} ms",
        memory=f"{memory_mb:.2f} MB",
        threads=threads,
    )
