"""
Test Suite Configuration
"""
from datetime import date
from typing import AsyncGenerator

import polars as pl
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from gold_reports.config import ReportSettings
from gold_reports.database.models import Base, DimCustomer, DimProduct, FactSales

REFERENCE_DATE = date(2025, 6, 15)

FACT_SALES_ROWS = [
    # order_number, product_key, customer_key, order_date, sales, sales_quantity
    ("SO1", 1, 10, date(2025, 1, 10), 30000.0, 1),
    ("SO2", 1, 11, date(2025, 4, 5), 25000.0, 1),
    ("SO1", 2, 10, date(2025, 1, 10), 40.0, 2),
    ("SO3", 2, 10, date(2025, 1, 20), 60.0, 0),
    ("SO4", 3, 12, None, 500.0, 5),
    ("SO5", 3, 12, date(2024, 3, 1), 12000.0, 4),
    ("SO6", 4, 13, date(2025, 6, 1), 10.0, 1),
]

DIM_PRODUCTS_ROWS = [
    (1, "Road-150 Red", "Bikes", "Road Bikes", 1000.0),
    (2, "Sport-100 Helmet", "Accessories", "Helmets", 20.0),
    (3, "Touring Frame", "Components", "Touring Frames", 3.0),
]

DIM_CUSTOMERS_ROWS = [
    (10, "AW00000010", "John", "Doe", date(2006, 5, 1)),
    (11, "AW00000011", "Jane", "Smith", date(1980, 7, 20)),
    (12, "AW00000012", "Bob", "Stone", date(1955, 1, 1)),
]

FACT_SALES_SCHEMA = {
    "order_number": pl.Utf8,
    "product_key": pl.Int64,
    "customer_key": pl.Int64,
    "order_date": pl.Date,
    "sales": pl.Float64,
    "sales_quantity": pl.Int64,
}
DIM_PRODUCTS_SCHEMA = {
    "product_key": pl.Int64,
    "product_name": pl.Utf8,
    "category": pl.Utf8,
    "subcategory": pl.Utf8,
    "product_cost": pl.Float64,
}
DIM_CUSTOMERS_SCHEMA = {
    "customer_key": pl.Int64,
    "customer_number": pl.Utf8,
    "first_name": pl.Utf8,
    "last_name": pl.Utf8,
    "birth_date": pl.Date,
}


def make_fact_sales(rows) -> pl.DataFrame:
    """Build a fact_sales frame from tuples"""
    return pl.DataFrame(rows, schema=FACT_SALES_SCHEMA, orient="row")


def make_dim_customers(rows) -> pl.DataFrame:
    """Build a dim_customers frame from tuples"""
    return pl.DataFrame(rows, schema=DIM_CUSTOMERS_SCHEMA, orient="row")


def make_dim_products(rows) -> pl.DataFrame:
    """Build a dim_products frame from tuples"""
    return pl.DataFrame(rows, schema=DIM_PRODUCTS_SCHEMA, orient="row")


class FrameSource:
    """In-memory Gold layer source for tests"""

    def __init__(self, fact_sales: pl.DataFrame, dim_products: pl.DataFrame, dim_customers: pl.DataFrame):
        self.fact_sales = fact_sales
        self.dim_products = dim_products
        self.dim_customers = dim_customers
        self.loads = 0

    async def load_fact_sales(self) -> pl.DataFrame:
        self.loads += 1
        return self.fact_sales

    async def load_dim_products(self) -> pl.DataFrame:
        return self.dim_products

    async def load_dim_customers(self) -> pl.DataFrame:
        return self.dim_customers


@pytest.fixture
def reference_date() -> date:
    """Date treated as today in report tests"""
    return REFERENCE_DATE


@pytest.fixture
def report_settings() -> ReportSettings:
    """Default report thresholds"""
    return ReportSettings()


@pytest.fixture
def fact_sales_df() -> pl.DataFrame:
    """Sample Gold layer sales facts"""
    return make_fact_sales(FACT_SALES_ROWS)


@pytest.fixture
def dim_products_df() -> pl.DataFrame:
    """Sample product dimension (product 4 intentionally missing)"""
    return make_dim_products(DIM_PRODUCTS_ROWS)


@pytest.fixture
def dim_customers_df() -> pl.DataFrame:
    """Sample customer dimension (customer 13 intentionally missing)"""
    return make_dim_customers(DIM_CUSTOMERS_ROWS)


@pytest.fixture
def frame_source(fact_sales_df, dim_products_df, dim_customers_df) -> FrameSource:
    """In-memory source over the sample frames"""
    return FrameSource(fact_sales_df, dim_products_df, dim_customers_df)


@pytest_asyncio.fixture
async def test_engine():
    """In-memory SQLite engine with the Gold tables in the default schema"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        execution_options={"schema_translate_map": {"gold": None}},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Database session over the sample Gold layer rows"""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        session.add_all([
            FactSales(
                order_number=order_number,
                product_key=product_key,
                customer_key=customer_key,
                order_date=order_date,
                sales=sales,
                sales_quantity=quantity,
            )
            for order_number, product_key, customer_key, order_date, sales, quantity in FACT_SALES_ROWS
        ])
        session.add_all([
            DimProduct(
                product_key=key,
                product_name=name,
                category=category,
                subcategory=subcategory,
                product_cost=cost,
            )
            for key, name, category, subcategory, cost in DIM_PRODUCTS_ROWS
        ])
        session.add_all([
            DimCustomer(
                customer_key=key,
                customer_number=number,
                first_name=first_name,
                last_name=last_name,
                birth_date=birth_date,
            )
            for key, number, first_name, last_name, birth_date in DIM_CUSTOMERS_ROWS
        ])
        await session.commit()

        yield session


@pytest.fixture
def sales_frame():
    """Factory for fact_sales frames built from tuples"""
    return make_fact_sales


@pytest.fixture
def customers_frame():
    """Factory for dim_customers frames built from tuples"""
    return make_dim_customers


@pytest.fixture
def products_frame():
    """Factory for dim_products frames built from tuples"""
    return make_dim_products
