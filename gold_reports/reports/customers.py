"""
Customer Report

Customer-level summary built from the Gold layer:
- customer details (number, name, age)
- age range and customer type (VIP, Regular, New)
- order, sales, quantity, product and lifespan aggregates
- recency, average order value and average monthly spend KPIs
"""

from datetime import date
from typing import Optional

import polars as pl
import structlog

from gold_reports.config import ReportSettings, get_settings
from .base import (
    DIM_CUSTOMERS_COLUMNS,
    FACT_SALES_COLUMNS,
    DateLike,
    as_date,
    distinct_count,
    month_diff,
    months_until,
    require_columns,
    safe_ratio,
    years_until,
)

logger = structlog.get_logger(__name__)

CUSTOMER_GRAIN = ["customer_key", "customer_number", "customer_name", "age"]

CUSTOMER_REPORT_COLUMNS = [
    "customer_key",
    "customer_number",
    "customer_name",
    "age",
    "age_group",
    "customer_segment",
    "last_order_date",
    "recency",
    "total_orders",
    "total_sales",
    "total_quantity",
    "total_products",
    "lifespan",
    "avg_order_value",
    "avg_monthly_spend",
]

AGE_GROUPS = ["Under 20", "20-29", "30-39", "40-49", "50 and above"]
CUSTOMER_SEGMENTS = ["VIP", "Regular", "New"]


def age_group_expr(age: pl.Expr) -> pl.Expr:
    """Bucket ages; unknown ages land in the last bucket"""
    return (
        pl.when(age < 20).then(pl.lit("Under 20"))
        .when(age.is_between(20, 29)).then(pl.lit("20-29"))
        .when(age.is_between(30, 39)).then(pl.lit("30-39"))
        .when(age.is_between(40, 49)).then(pl.lit("40-49"))
        .otherwise(pl.lit("50 and above"))
    )


class CustomerReportBuilder:
    """
    Builds the customer report from sales facts and the customer dimension.

    Age and recency are computed against the reference date.
    """

    def __init__(
        self,
        reference_date: Optional[DateLike] = None,
        report_settings: Optional[ReportSettings] = None,
    ):
        self.reference_date: date = as_date(reference_date)
        self.settings = report_settings or get_settings().reports

    def project(self, fact_sales: pl.DataFrame, dim_customers: pl.DataFrame) -> pl.DataFrame:
        """Join sales to customers, derive name and age, drop undated rows"""
        require_columns(fact_sales, FACT_SALES_COLUMNS, "fact_sales")
        require_columns(dim_customers, DIM_CUSTOMERS_COLUMNS, "dim_customers")

        sales = fact_sales.select(
            "order_number",
            "product_key",
            "order_date",
            "customer_key",
            pl.col("sales").alias("sales_amount"),
            pl.col("sales_quantity").alias("quantity"),
        )
        customers = dim_customers.select(
            "customer_key",
            "customer_number",
            # Missing name parts read as ""; unmatched keys still get null after the join
            pl.concat_str(
                [pl.col("first_name").fill_null(""), pl.col("last_name").fill_null("")],
                separator=" ",
            ).alias("customer_name"),
            years_until(pl.col("birth_date"), self.reference_date).alias("age"),
        )

        projected = (
            sales.join(customers, on="customer_key", how="left")
            .filter(pl.col("order_date").is_not_null())
        )

        logger.debug(
            "Projected customer orders",
            input_rows=len(fact_sales),
            projected_rows=len(projected),
        )
        return projected

    def aggregate(self, projected: pl.DataFrame) -> pl.DataFrame:
        """Summarize projected orders at customer grain"""
        return projected.group_by(CUSTOMER_GRAIN).agg([
            distinct_count("order_number").alias("total_orders"),
            pl.col("sales_amount").sum().alias("total_sales"),
            pl.col("quantity").sum().alias("total_quantity"),
            distinct_count("product_key").alias("total_products"),
            pl.col("order_date").max().alias("last_order_date"),
            month_diff(pl.col("order_date").min(), pl.col("order_date").max()).alias("lifespan"),
        ])

    def derive_metrics(self, aggregated: pl.DataFrame) -> pl.DataFrame:
        """Add age group, segment and KPI columns to aggregated customers"""
        long_standing = pl.col("lifespan") >= self.settings.loyal_lifespan_months
        segment = (
            pl.when(long_standing & (pl.col("total_sales") > self.settings.vip_sales))
            .then(pl.lit("VIP"))
            .when(long_standing & (pl.col("total_sales") <= self.settings.vip_sales))
            .then(pl.lit("Regular"))
            .otherwise(pl.lit("New"))
        )
        avg_order_value = (
            pl.when((pl.col("total_orders") == 0) | (pl.col("total_sales") == 0))
            .then(pl.lit(0.0))
            .otherwise(pl.col("total_sales") / pl.col("total_orders"))
        )

        return aggregated.with_columns([
            age_group_expr(pl.col("age")).alias("age_group"),
            segment.alias("customer_segment"),
            months_until(pl.col("last_order_date"), self.reference_date).alias("recency"),
            avg_order_value.alias("avg_order_value"),
            safe_ratio("total_sales", "lifespan", pl.col("total_sales")).alias("avg_monthly_spend"),
        ]).select(CUSTOMER_REPORT_COLUMNS)

    def build(self, fact_sales: pl.DataFrame, dim_customers: pl.DataFrame) -> pl.DataFrame:
        """Run projection, aggregation and derived metrics"""
        report = self.derive_metrics(self.aggregate(self.project(fact_sales, dim_customers)))
        logger.info(
            "Customer report built",
            customers=len(report),
            reference_date=self.reference_date.isoformat(),
        )
        return report.sort("customer_key", nulls_last=True)


def build_customer_report(
    fact_sales: pl.DataFrame,
    dim_customers: pl.DataFrame,
    reference_date: Optional[DateLike] = None,
) -> pl.DataFrame:
    """Convenience function to build the customer report."""
    return CustomerReportBuilder(reference_date=reference_date).build(fact_sales, dim_customers)
