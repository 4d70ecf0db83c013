"""
Reports API Endpoints

Serves the product and customer reports, recomputed on every request.
"""

from datetime import date
from typing import List, Optional

import polars as pl
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from gold_reports.config import get_settings
from gold_reports.database.connection import get_db_dependency
from gold_reports.database.source import GoldLayerSource
from gold_reports.reports import ReportService

router = APIRouter()
logger = structlog.get_logger(__name__)
settings = get_settings()



class ProductReportRow(BaseModel):
    """One product in the product report"""
    product_key: Optional[int]
    product_name: Optional[str]
    category: Optional[str]
    subcategory: Optional[str]
    cost: Optional[float]
    last_sale_date: date
    recency_in_months: int
    product_segment: str
    lifespan: int
    total_orders: int
    total_sales: Optional[float]
    total_quantity: Optional[int]
    total_customers: int
    avg_selling_price: Optional[float]
    avg_order_revenue: Optional[float]
    avg_monthly_revenue: Optional[float]


class CustomerReportRow(BaseModel):
    """One customer in the customer report"""
    customer_key: Optional[int]
    customer_number: Optional[str]
    customer_name: Optional[str]
    age: Optional[int]
    age_group: str
    customer_segment: str
    last_order_date: date
    recency: int
    total_orders: int
    total_sales: Optional[float]
    total_quantity: Optional[int]
    total_products: int
    lifespan: int
    avg_order_value: Optional[float]
    avg_monthly_spend: Optional[float]


class ProductReportResponse(BaseModel):
    """Paginated product report"""
    items: List[ProductReportRow]
    total: int
    page: int
    page_size: int
    as_of: date


class CustomerReportResponse(BaseModel):
    """Paginated customer report"""
    items: List[CustomerReportRow]
    total: int
    page: int
    page_size: int
    as_of: date


async def get_report_service(db: AsyncSession = Depends(get_db_dependency)) -> ReportService:
    """FastAPI dependency building a report service over the request session"""
    return ReportService(GoldLayerSource(db))


def _paginate(df: pl.DataFrame, page: int, page_size: int) -> List[dict]:
    return df.slice((page - 1) * page_size, page_size).to_dicts()


@router.get("/products", response_model=ProductReportResponse)
async def get_product_report(
    as_of: Optional[date] = Query(None, description="Date treated as today (defaults to today)"),
    segment: Optional[str] = Query(None, description="High-Performer, Mid-Range or Low-Performer"),
    category: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.reports.default_page_size, ge=1, le=settings.reports.max_page_size),
    service: ReportService = Depends(get_report_service),
) -> ProductReportResponse:
    """
    Product performance report.
    """
    result = await service.product_report(reference_date=as_of)
    df = result.data

    if segment:
        df = df.filter(pl.col("product_segment") == segment)
    if category:
        df = df.filter(pl.col("category") == category)

    logger.debug("Product report filtered", segment=segment, category=category, rows=len(df))

    return ProductReportResponse(
        items=[ProductReportRow(**row) for row in _paginate(df, page, page_size)],
        total=len(df),
        page=page,
        page_size=page_size,
        as_of=result.reference_date,
    )


@router.get("/customers", response_model=CustomerReportResponse)
async def get_customer_report(
    as_of: Optional[date] = Query(None, description="Date treated as today (defaults to today)"),
    segment: Optional[str] = Query(None, description="VIP, Regular or New"),
    age_group: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.reports.default_page_size, ge=1, le=settings.reports.max_page_size),
    service: ReportService = Depends(get_report_service),
) -> CustomerReportResponse:
    """
    Customer segmentation report.
    """
    result = await service.customer_report(reference_date=as_of)
    df = result.data

    if segment:
        df = df.filter(pl.col("customer_segment") == segment)
    if age_group:
        df = df.filter(pl.col("age_group") == age_group)

    logger.debug("Customer report filtered", segment=segment, age_group=age_group, rows=len(df))

    return CustomerReportResponse(
        items=[CustomerReportRow(**row) for row in _paginate(df, page, page_size)],
        total=len(df),
        page=page,
        page_size=page_size,
        as_of=result.reference_date,
    )
