"""
Gold Layer Source

Reads the Gold layer tables into typed polars DataFrames for the reports.
"""

from typing import Dict, List

import polars as pl
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import DimCustomer, DimProduct, FactSales

logger = structlog.get_logger(__name__)

FACT_SALES_SCHEMA: Dict[str, pl.DataType] = {
    "order_number": pl.Utf8,
    "product_key": pl.Int64,
    "customer_key": pl.Int64,
    "order_date": pl.Date,
    "sales": pl.Float64,
    "sales_quantity": pl.Int64,
}

DIM_PRODUCTS_SCHEMA: Dict[str, pl.DataType] = {
    "product_key": pl.Int64,
    "product_name": pl.Utf8,
    "category": pl.Utf8,
    "subcategory": pl.Utf8,
    "product_cost": pl.Float64,
}

DIM_CUSTOMERS_SCHEMA: Dict[str, pl.DataType] = {
    "customer_key": pl.Int64,
    "customer_number": pl.Utf8,
    "first_name": pl.Utf8,
    "last_name": pl.Utf8,
    "birth_date": pl.Date,
}


class GoldLayerSource:
    """
    Loads Gold layer tables through an async SQLAlchemy session.

    Example:
        async with get_db() as session:
            source = GoldLayerSource(session)
            fact_sales = await source.load_fact_sales()
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load(self, model, schema: Dict[str, pl.DataType]) -> pl.DataFrame:
        columns: List = [getattr(model, name) for name in schema]
        result = await self.session.execute(select(*columns))
        rows = [tuple(row) for row in result.all()]

        df = pl.DataFrame(rows, schema=schema, orient="row")
        logger.info("Loaded Gold layer table", table=model.__tablename__, rows=len(df))
        return df

    async def load_fact_sales(self) -> pl.DataFrame:
        """Load sales facts"""
        return await self._load(FactSales, FACT_SALES_SCHEMA)

    async def load_dim_products(self) -> pl.DataFrame:
        """Load the product dimension"""
        return await self._load(DimProduct, DIM_PRODUCTS_SCHEMA)

    async def load_dim_customers(self) -> pl.DataFrame:
        """Load the customer dimension"""
        return await self._load(DimCustomer, DIM_CUSTOMERS_SCHEMA)
