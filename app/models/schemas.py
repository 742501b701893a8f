from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PointsRequest(BaseModel):
    amount: float


class PointsBreakdownOutput(BaseModel):
    highTier: int
    lowTier: int


class PointsResponse(BaseModel):
    amount: float
    points: int
    pointsBreakdown: PointsBreakdownOutput


class TransactionsRequest(BaseModel):
    transactions: list[Any] = Field(default_factory=list)


class TotalPointsResponse(BaseModel):
    totalPoints: int


class MonthlyBucketOutput(BaseModel):
    monthKey: str
    display: str
    points: int
    transactionCount: int
    totalAmount: float


class MonthlyBreakdownResponse(BaseModel):
    months: list[MonthlyBucketOutput]


class AnnotatedTransactionOutput(BaseModel):
    model_config = ConfigDict(extra="allow")

    points: int
    pointsBreakdown: PointsBreakdownOutput


class MonthKeyResponse(BaseModel):
    monthKey: str
    display: str


class FilterOption(BaseModel):
    value: str
    label: str


class FiltersResponse(BaseModel):
    months: list[FilterOption]
    years: list[str]
    defaultMonth: str
    defaultYear: str


class CustomerOutput(BaseModel):
    customerId: str
    name: str
    email: str = ""
    joinDate: str = ""


class MonthlyCardOutput(MonthlyBucketOutput):
    totalAmountDisplay: str


class TransactionRowOutput(BaseModel):
    transactionId: str
    customerId: str
    amount: float
    date: str
    displayDate: str
    amountDisplay: str
    points: int
    pointsBreakdown: PointsBreakdownOutput
    breakdownText: str


class TransactionPageOutput(BaseModel):
    items: list[TransactionRowOutput]
    currentPage: int
    totalPages: int
    totalItems: int
    itemsPerPage: int
    startItem: int
    endItem: int
    hasNextPage: bool
    hasPreviousPage: bool


class CustomerRewardsResponse(BaseModel):
    customer: CustomerOutput
    period: str
    totalPoints: int
    transactionCount: int
    monthly: list[MonthlyCardOutput]
    transactions: TransactionPageOutput


class PerformanceResponse(BaseModel):
    time: str
    memory: str
    threads: int
