"""
Report Building Blocks

Shared expressions and result types for the Gold layer reports.
Date arithmetic follows calendar boundaries: the month difference between
2024-01-31 and 2024-02-01 is 1, the year difference between 2000-12-31 and
2001-01-01 is 1.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Iterable, List, Optional, Union

import polars as pl

from gold_reports.quality.validators import ValidationResult

# Physical Gold layer columns read by the reports
FACT_SALES_COLUMNS = [
    "order_number",
    "product_key",
    "customer_key",
    "order_date",
    "sales",
    "sales_quantity",
]
DIM_PRODUCTS_COLUMNS = ["product_key", "product_name", "category", "subcategory", "product_cost"]
DIM_CUSTOMERS_COLUMNS = ["customer_key", "customer_number", "first_name", "last_name", "birth_date"]

DateLike = Union[date, datetime]


class ReportType(str, Enum):
    """Available reports"""
    PRODUCTS = "report_products"
    CUSTOMERS = "report_customers"


@dataclass
class ReportResult:
    """Result of building one report"""
    report_type: ReportType
    reference_date: date
    input_rows: int
    rows_dropped: int
    output_rows: int
    started_at: datetime
    completed_at: datetime
    duration_seconds: float
    data: pl.DataFrame
    validations: List[ValidationResult] = field(default_factory=list)


def require_columns(df: pl.DataFrame, columns: Iterable[str], frame_name: str) -> None:
    """Raise ValueError if any of the columns is missing from the frame"""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{frame_name} is missing required columns: {missing}")


def as_date(value: Optional[DateLike]) -> date:
    """Normalize a reference date, defaulting to today"""
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


def month_diff(start: pl.Expr, end: pl.Expr) -> pl.Expr:
    """Number of calendar month boundaries crossed from start to end"""
    return (
        (end.dt.year().cast(pl.Int64) - start.dt.year().cast(pl.Int64)) * 12
        + (end.dt.month().cast(pl.Int64) - start.dt.month().cast(pl.Int64))
    )


def months_until(start: pl.Expr, reference_date: date) -> pl.Expr:
    """Calendar month difference between a date column and a fixed date"""
    return (
        (reference_date.year - start.dt.year().cast(pl.Int64)) * 12
        + (reference_date.month - start.dt.month().cast(pl.Int64))
    )


def years_until(start: pl.Expr, reference_date: date) -> pl.Expr:
    """Calendar year difference between a date column and a fixed date"""
    return reference_date.year - start.dt.year().cast(pl.Int64)


def distinct_count(column: str) -> pl.Expr:
    """Distinct non-null values of a column"""
    return pl.col(column).drop_nulls().n_unique()


def safe_ratio(numerator: str, denominator: str, fallback: pl.Expr) -> pl.Expr:
    """numerator / denominator, or fallback when the denominator is 0"""
    return (
        pl.when(pl.col(denominator) == 0)
        .then(fallback)
        .otherwise(pl.col(numerator) / pl.col(denominator))
    )
