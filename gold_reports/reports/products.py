"""
Product Report

Summarizes product performance from the Gold layer:
- core product details (name, category, subcategory, cost)
- revenue segment (High-Performer, Mid-Range, Low-Performer)
- order, sales, quantity, customer and lifespan aggregates
- recency, average order revenue and average monthly revenue KPIs
"""

from datetime import date
from typing import Optional

import polars as pl
import structlog

from gold_reports.config import ReportSettings, get_settings
from .base import (
    DIM_PRODUCTS_COLUMNS,
    FACT_SALES_COLUMNS,
    DateLike,
    as_date,
    distinct_count,
    month_diff,
    months_until,
    require_columns,
    safe_ratio,
)

logger = structlog.get_logger(__name__)

PRODUCT_GRAIN = ["product_key", "product_name", "category", "subcategory", "cost"]

PRODUCT_REPORT_COLUMNS = [
    "product_key",
    "product_name",
    "category",
    "subcategory",
    "cost",
    "last_sale_date",
    "recency_in_months",
    "product_segment",
    "lifespan",
    "total_orders",
    "total_sales",
    "total_quantity",
    "total_customers",
    "avg_selling_price",
    "avg_order_revenue",
    "avg_monthly_revenue",
]


class ProductReportBuilder:
    """
    Builds the product report from sales facts and the product dimension.

    The reference date stands in for "today" in recency calculations.

    Example:
        builder = ProductReportBuilder(reference_date=date(2025, 6, 30))
        report = builder.build(fact_sales, dim_products)
    """

    def __init__(
        self,
        reference_date: Optional[DateLike] = None,
        report_settings: Optional[ReportSettings] = None,
    ):
        self.reference_date: date = as_date(reference_date)
        self.settings = report_settings or get_settings().reports

    def project(self, fact_sales: pl.DataFrame, dim_products: pl.DataFrame) -> pl.DataFrame:
        """Join sales to products and keep rows with a valid order date"""
        require_columns(fact_sales, FACT_SALES_COLUMNS, "fact_sales")
        require_columns(dim_products, DIM_PRODUCTS_COLUMNS, "dim_products")

        sales = fact_sales.select(
            "order_number",
            "order_date",
            "customer_key",
            "product_key",
            pl.col("sales").alias("sales_amount"),
            pl.col("sales_quantity").alias("quantity"),
        )
        products = dim_products.select(
            "product_key",
            "product_name",
            "category",
            "subcategory",
            pl.col("product_cost").alias("cost"),
        )

        projected = (
            sales.join(products, on="product_key", how="left")
            .filter(pl.col("order_date").is_not_null())
        )

        logger.debug(
            "Projected product sales",
            input_rows=len(fact_sales),
            projected_rows=len(projected),
        )
        return projected

    def aggregate(self, projected: pl.DataFrame) -> pl.DataFrame:
        """Summarize projected sales at product grain"""
        unit_price = (
            pl.when(pl.col("quantity") != 0)
            .then(pl.col("sales_amount").cast(pl.Float64) / pl.col("quantity"))
            .otherwise(None)
        )
        # ROUND() semantics: ties go away from zero
        avg_selling_price = unit_price.mean().round(self.settings.price_decimals, mode="half_away_from_zero")

        return projected.group_by(PRODUCT_GRAIN).agg([
            month_diff(pl.col("order_date").min(), pl.col("order_date").max()).alias("lifespan"),
            pl.col("order_date").max().alias("last_sale_date"),
            distinct_count("order_number").alias("total_orders"),
            distinct_count("customer_key").alias("total_customers"),
            pl.col("sales_amount").sum().alias("total_sales"),
            pl.col("quantity").sum().alias("total_quantity"),
            avg_selling_price.alias("avg_selling_price"),
        ])

    def derive_metrics(self, aggregated: pl.DataFrame) -> pl.DataFrame:
        """Add segment and KPI columns to aggregated products"""
        segment = (
            pl.when(pl.col("total_sales") > self.settings.high_performer_sales)
            .then(pl.lit("High-Performer"))
            .when(pl.col("total_sales") >= self.settings.mid_range_sales)
            .then(pl.lit("Mid-Range"))
            .otherwise(pl.lit("Low-Performer"))
        )

        return aggregated.with_columns([
            months_until(pl.col("last_sale_date"), self.reference_date).alias("recency_in_months"),
            segment.alias("product_segment"),
            safe_ratio("total_sales", "total_orders", pl.lit(0.0)).alias("avg_order_revenue"),
            safe_ratio("total_sales", "lifespan", pl.col("total_sales")).alias("avg_monthly_revenue"),
        ]).select(PRODUCT_REPORT_COLUMNS)

    def build(self, fact_sales: pl.DataFrame, dim_products: pl.DataFrame) -> pl.DataFrame:
        """Run projection, aggregation and derived metrics"""
        report = self.derive_metrics(self.aggregate(self.project(fact_sales, dim_products)))
        logger.info(
            "Product report built",
            products=len(report),
            reference_date=self.reference_date.isoformat(),
        )
        return report.sort("product_key", nulls_last=True)


def build_product_report(
    fact_sales: pl.DataFrame,
    dim_products: pl.DataFrame,
    reference_date: Optional[DateLike] = None,
) -> pl.DataFrame:
    """
    Convenience function to build the product report.

    Args:
        fact_sales: Gold layer sales facts
        dim_products: Gold layer product dimension
        reference_date: Date treated as "today" (defaults to today)

    Returns:
        One row per product with aggregates, segment and KPIs
    """
    return ProductReportBuilder(reference_date=reference_date).build(fact_sales, dim_products)
