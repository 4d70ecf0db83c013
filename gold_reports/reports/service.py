"""
Report Service

Loads Gold layer tables from a source, validates them and builds the
product and customer reports. Reports are recomputed on every call.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

import polars as pl
import structlog

from gold_reports.config import ReportSettings, get_settings
from gold_reports.quality.validators import (
    ValidationResult,
    ValidationSeverity,
    create_dim_customers_validator,
    create_dim_products_validator,
    create_fact_sales_validator,
)
from .base import DateLike, ReportResult, ReportType, as_date
from .customers import CustomerReportBuilder
from .products import ProductReportBuilder

logger = structlog.get_logger(__name__)


class GoldSource(Protocol):
    """Anything that can hand out the Gold layer tables as polars frames"""

    async def load_fact_sales(self) -> pl.DataFrame: ...

    async def load_dim_products(self) -> pl.DataFrame: ...

    async def load_dim_customers(self) -> pl.DataFrame: ...


class ReportService:
    """
    Builds reports from a Gold layer source.

    Source failures are logged and re-raised unchanged.

    Example:
        async with get_db() as session:
            service = ReportService(GoldLayerSource(session))
            result = await service.product_report(reference_date=date(2025, 6, 30))
    """

    def __init__(
        self,
        source: GoldSource,
        report_settings: Optional[ReportSettings] = None,
        enable_validation: Optional[bool] = None,
    ):
        settings = get_settings()
        self.source = source
        self.report_settings = report_settings or settings.reports
        if enable_validation is None:
            enable_validation = settings.data_quality.enable_data_quality_checks
        self.enable_validation = enable_validation

    def _validate(self, fact_sales: pl.DataFrame, dimension: pl.DataFrame, dimension_name: str) -> List[ValidationResult]:
        if not self.enable_validation:
            return []

        if dimension_name == "dim_products":
            dimension_validator = create_dim_products_validator()
            reference_column = "product_key"
        else:
            dimension_validator = create_dim_customers_validator()
            reference_column = "customer_key"

        fact_validator = create_fact_sales_validator().add_referential_integrity_check(
            reference_column,
            dimension,
            reference_column,
            severity=ValidationSeverity.WARNING,
        )
        return [fact_validator.validate(fact_sales), dimension_validator.validate(dimension)]

    async def _load(self, dimension_name: str):
        try:
            fact_sales = await self.source.load_fact_sales()
            if dimension_name == "dim_products":
                dimension = await self.source.load_dim_products()
            else:
                dimension = await self.source.load_dim_customers()
        except Exception as e:
            logger.error(
                "Failed to load Gold layer tables",
                dimension=dimension_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        return fact_sales, dimension

    def _result(
        self,
        report_type: ReportType,
        reference_date,
        fact_sales: pl.DataFrame,
        report: pl.DataFrame,
        started_at: datetime,
        validations: List[ValidationResult],
    ) -> ReportResult:
        completed_at = datetime.now(timezone.utc)
        rows_dropped = fact_sales.filter(pl.col("order_date").is_null()).height
        result = ReportResult(
            report_type=report_type,
            reference_date=reference_date,
            input_rows=len(fact_sales),
            rows_dropped=rows_dropped,
            output_rows=len(report),
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
            data=report,
            validations=validations,
        )
        logger.info(
            "Report ready",
            report=report_type.value,
            input_rows=result.input_rows,
            rows_dropped=rows_dropped,
            output_rows=result.output_rows,
            duration_seconds=round(result.duration_seconds, 3),
        )
        return result

    async def product_report(self, reference_date: Optional[DateLike] = None) -> ReportResult:
        """Build the product report as of the reference date (default today)"""
        started_at = datetime.now(timezone.utc)
        reference_date = as_date(reference_date)

        fact_sales, dim_products = await self._load("dim_products")
        validations = self._validate(fact_sales, dim_products, "dim_products")

        builder = ProductReportBuilder(reference_date, self.report_settings)
        report = builder.build(fact_sales, dim_products)

        return self._result(ReportType.PRODUCTS, reference_date, fact_sales, report, started_at, validations)

    async def customer_report(self, reference_date: Optional[DateLike] = None) -> ReportResult:
        """Build the customer report as of the reference date (default today)"""
        started_at = datetime.now(timezone.utc)
        reference_date = as_date(reference_date)

        fact_sales, dim_customers = await self._load("dim_customers")
        validations = self._validate(fact_sales, dim_customers, "dim_customers")

        builder = CustomerReportBuilder(reference_date, self.report_settings)
        report = builder.build(fact_sales, dim_customers)

        return self._result(ReportType.CUSTOMERS, reference_date, fact_sales, report, started_at, validations)

    async def run_all(self, reference_date: Optional[DateLike] = None) -> Dict[ReportType, ReportResult]:
        """Build both reports against the same reference date"""
        reference_date = as_date(reference_date)
        return {
            ReportType.PRODUCTS: await self.product_report(reference_date),
            ReportType.CUSTOMERS: await self.customer_report(reference_date),
        }
