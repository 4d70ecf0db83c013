"""
Database Models - Gold Layer Star Schema

Read-only mappings of the Gold layer tables the reports consume:

Fact Tables:
- FactSales: One row per order line item

Dimension Tables:
- DimProduct: Product names, categories and cost
- DimCustomer: Customer identity and birth date

Tables live in the logical "gold" schema. The connection layer translates it
to the configured schema name, so the same mappings work against databases
without schema support.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Float, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

GOLD_SCHEMA = "gold"


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


class DimProduct(Base):
    """
    Product Dimension Table

    One row per product_key.
    """
    __tablename__ = "dim_products"
    __table_args__ = {"schema": GOLD_SCHEMA}

    product_key: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_name: Mapped[Optional[str]] = mapped_column(String(100))
    category: Mapped[Optional[str]] = mapped_column(String(50))
    subcategory: Mapped[Optional[str]] = mapped_column(String(50))
    product_cost: Mapped[Optional[float]] = mapped_column(Float)

    def __repr__(self) -> str:
        return f"<DimProduct(key={self.product_key}, name={self.product_name})>"


class DimCustomer(Base):
    """
    Customer Dimension Table

    One row per customer_key.
    """
    __tablename__ = "dim_customers"
    __table_args__ = {"schema": GOLD_SCHEMA}

    customer_key: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_number: Mapped[Optional[str]] = mapped_column(String(50))
    first_name: Mapped[Optional[str]] = mapped_column(String(50))
    last_name: Mapped[Optional[str]] = mapped_column(String(50))
    birth_date: Mapped[Optional[date]] = mapped_column(Date)

    def __repr__(self) -> str:
        return f"<DimCustomer(key={self.customer_key}, number={self.customer_number})>"


class FactSales(Base):
    """
    Sales Fact Table

    Transaction grain: one row per product on an order. Keys reference the
    dimensions logically; no foreign keys are enforced.
    """
    __tablename__ = "fact_sales"
    __table_args__ = {"schema": GOLD_SCHEMA}

    order_number: Mapped[str] = mapped_column(String(50), primary_key=True)
    product_key: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_key: Mapped[Optional[int]] = mapped_column(Integer)
    order_date: Mapped[Optional[date]] = mapped_column(Date)
    sales: Mapped[Optional[float]] = mapped_column(Float)
    sales_quantity: Mapped[Optional[int]] = mapped_column(Integer)

    def __repr__(self) -> str:
        return f"<FactSales(order={self.order_number}, product={self.product_key})>"
