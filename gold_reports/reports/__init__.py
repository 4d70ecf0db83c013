"""
Gold Layer Reports Module
"""
from .base import ReportResult, ReportType
from .customers import CustomerReportBuilder, build_customer_report
from .products import ProductReportBuilder, build_product_report
from .service import ReportService

__all__ = [
    "ReportResult",
    "ReportType",
    "CustomerReportBuilder",
    "build_customer_report",
    "ProductReportBuilder",
    "build_product_report",
    "ReportService",
]
