"""
Unit Tests - Product Report
"""
from datetime import date

import polars as pl
import pytest

from gold_reports.config import ReportSettings
from gold_reports.reports.products import (
    PRODUCT_REPORT_COLUMNS,
    ProductReportBuilder,
    build_product_report,
)


def _row(report: pl.DataFrame, product_key: int) -> dict:
    rows = report.filter(pl.col("product_key") == product_key).to_dicts()
    assert len(rows) == 1
    return rows[0]


class TestProductProjection:
    """Tests for the join/filter stage"""

    def test_drops_rows_without_order_date(self, fact_sales_df, dim_products_df, reference_date):
        builder = ProductReportBuilder(reference_date)

        projected = builder.project(fact_sales_df, dim_products_df)

        assert len(projected) == len(fact_sales_df) - 1
        assert projected["order_date"].null_count() == 0

    def test_renames_physical_columns(self, fact_sales_df, dim_products_df, reference_date):
        projected = ProductReportBuilder(reference_date).project(fact_sales_df, dim_products_df)

        assert "sales_amount" in projected.columns
        assert "quantity" in projected.columns
        assert "cost" in projected.columns
        assert "sales" not in projected.columns

    def test_missing_dimension_keeps_fact_rows(self, fact_sales_df, dim_products_df, reference_date):
        projected = ProductReportBuilder(reference_date).project(fact_sales_df, dim_products_df)

        orphan = projected.filter(pl.col("product_key") == 4)
        assert len(orphan) == 1
        assert orphan["product_name"][0] is None

    def test_missing_column_raises(self, fact_sales_df, dim_products_df, reference_date):
        with pytest.raises(ValueError, match="sales_quantity"):
            ProductReportBuilder(reference_date).project(
                fact_sales_df.drop("sales_quantity"), dim_products_df
            )


class TestProductReport:
    """Tests for the full product report"""

    def test_output_columns(self, fact_sales_df, dim_products_df, reference_date):
        report = build_product_report(fact_sales_df, dim_products_df, reference_date)

        assert report.columns == PRODUCT_REPORT_COLUMNS

    def test_one_row_per_product(self, fact_sales_df, dim_products_df, reference_date):
        report = build_product_report(fact_sales_df, dim_products_df, reference_date)

        assert report["product_key"].to_list() == [1, 2, 3, 4]

    def test_high_performer_example(self, fact_sales_df, dim_products_df, reference_date):
        report = build_product_report(fact_sales_df, dim_products_df, reference_date)
        row = _row(report, 1)

        assert row["total_sales"] == 55000
        assert row["total_orders"] == 2
        assert row["total_customers"] == 2
        assert row["lifespan"] == 3
        assert row["product_segment"] == "High-Performer"
        assert row["avg_order_revenue"] == pytest.approx(27500)
        assert row["avg_monthly_revenue"] == pytest.approx(18333.33, abs=0.01)
        assert row["last_sale_date"] == date(2025, 4, 5)
        assert row["recency_in_months"] == 2

    def test_distinct_orders_and_zero_quantity(self, fact_sales_df, dim_products_df, reference_date):
        report = build_product_report(fact_sales_df, dim_products_df, reference_date)
        row = _row(report, 2)

        assert row["total_orders"] == 2
        assert row["total_customers"] == 1
        assert row["total_quantity"] == 2
        # The zero-quantity line has no unit price and is left out of the average
        assert row["avg_selling_price"] == pytest.approx(20.0)
        assert row["avg_order_revenue"] == pytest.approx(50.0)

    def test_zero_lifespan_uses_total_sales(self, fact_sales_df, dim_products_df, reference_date):
        report = build_product_report(fact_sales_df, dim_products_df, reference_date)

        for row in report.filter(pl.col("lifespan") == 0).to_dicts():
            assert row["avg_monthly_revenue"] == row["total_sales"]

    def test_null_dated_sales_excluded(self, fact_sales_df, dim_products_df, reference_date):
        report = build_product_report(fact_sales_df, dim_products_df, reference_date)
        row = _row(report, 3)

        assert row["total_sales"] == 12000
        assert row["total_quantity"] == 4
        assert row["total_orders"] == 1
        assert row["product_segment"] == "Mid-Range"
        assert row["recency_in_months"] == 15

    def test_unmatched_product_has_null_details(self, fact_sales_df, dim_products_df, reference_date):
        report = build_product_report(fact_sales_df, dim_products_df, reference_date)
        row = _row(report, 4)

        assert row["product_name"] is None
        assert row["category"] is None
        assert row["total_sales"] == 10
        assert row["product_segment"] == "Low-Performer"
        assert row["recency_in_months"] == 0

    def test_average_of_unit_prices_not_ratio_of_sums(self, sales_frame, products_frame, reference_date):
        fact_sales = sales_frame([
            ("SO1", 1, 10, date(2025, 1, 1), 100.0, 1),
            ("SO2", 1, 10, date(2025, 1, 2), 300.0, 3),
            ("SO3", 1, 10, date(2025, 1, 3), 50.0, 10),
        ])
        products = products_frame([(1, "Chain", "Components", "Chains", 5.0)])

        row = build_product_report(fact_sales, products, reference_date).to_dicts()[0]

        # mean(100, 100, 5) rather than 450 / 14
        assert row["avg_selling_price"] == pytest.approx(68.3)

    def test_price_ties_round_away_from_zero(self, sales_frame, products_frame, reference_date):
        fact_sales = sales_frame([
            ("SO1", 1, 10, date(2025, 1, 1), 0.25, 1),
            ("SO2", 2, 10, date(2025, 1, 1), 2.5, 10),
            ("SO3", 3, 10, date(2025, 1, 1), 12.25, 1),
        ])
        products = products_frame([
            (1, "Chain", "Components", "Chains", 5.0),
            (2, "Cable", "Components", "Cables", 1.0),
            (3, "Pedal", "Components", "Pedals", 8.0),
        ])

        report = build_product_report(fact_sales, products, reference_date)

        assert report["avg_selling_price"].to_list() == pytest.approx([0.3, 0.3, 12.3])

    def test_all_zero_quantities_give_null_price(self, sales_frame, products_frame, reference_date):
        fact_sales = sales_frame([("SO1", 1, 10, date(2025, 1, 1), 100.0, 0)])
        products = products_frame([(1, "Chain", "Components", "Chains", 5.0)])

        row = build_product_report(fact_sales, products, reference_date).to_dicts()[0]

        assert row["avg_selling_price"] is None

    def test_no_order_numbers_gives_zero_order_revenue(self, sales_frame, products_frame, reference_date):
        fact_sales = sales_frame([
            (None, 1, 10, date(2025, 1, 1), 100.0, 1),
            (None, 1, 11, date(2025, 2, 1), 100.0, 1),
        ])
        products = products_frame([(1, "Chain", "Components", "Chains", 5.0)])

        row = build_product_report(fact_sales, products, reference_date).to_dicts()[0]

        assert row["total_orders"] == 0
        assert row["avg_order_revenue"] == 0
        assert row["avg_monthly_revenue"] == pytest.approx(200.0)

    def test_lifespan_counts_month_boundaries(self, sales_frame, products_frame, reference_date):
        fact_sales = sales_frame([
            ("SO1", 1, 10, date(2024, 1, 31), 100.0, 1),
            ("SO2", 1, 10, date(2024, 2, 1), 100.0, 1),
        ])
        products = products_frame([(1, "Chain", "Components", "Chains", 5.0)])

        row = build_product_report(fact_sales, products, reference_date).to_dicts()[0]

        assert row["lifespan"] == 1
        assert row["avg_monthly_revenue"] == pytest.approx(200.0)

    def test_empty_input(self, sales_frame, dim_products_df, reference_date):
        report = build_product_report(sales_frame([]), dim_products_df, reference_date)

        assert len(report) == 0
        assert report.columns == PRODUCT_REPORT_COLUMNS


class TestProductSegments:
    """Tests for revenue segmentation thresholds"""

    @pytest.mark.parametrize(
        "total_sales,expected",
        [
            (50000.01, "High-Performer"),
            (50000.0, "Mid-Range"),
            (10000.0, "Mid-Range"),
            (9999.99, "Low-Performer"),
            (0.0, "Low-Performer"),
        ],
    )
    def test_segment_thresholds(self, sales_frame, products_frame, reference_date, total_sales, expected):
        fact_sales = sales_frame([("SO1", 1, 10, date(2025, 1, 1), total_sales, 1)])
        products = products_frame([(1, "Chain", "Components", "Chains", 5.0)])

        row = build_product_report(fact_sales, products, reference_date).to_dicts()[0]

        assert row["product_segment"] == expected

    def test_thresholds_from_settings(self, sales_frame, products_frame, reference_date):
        fact_sales = sales_frame([("SO1", 1, 10, date(2025, 1, 1), 600.0, 1)])
        products = products_frame([(1, "Chain", "Components", "Chains", 5.0)])
        settings = ReportSettings(high_performer_sales=500, mid_range_sales=100)

        report = ProductReportBuilder(reference_date, settings).build(fact_sales, products)

        assert report["product_segment"][0] == "High-Performer"

    def test_every_product_is_classified(self, fact_sales_df, dim_products_df, reference_date):
        report = build_product_report(fact_sales_df, dim_products_df, reference_date)

        assert report["product_segment"].null_count() == 0
        assert set(report["product_segment"].to_list()) <= {"High-Performer", "Mid-Range", "Low-Performer"}
