"""
Database Module
"""
from .connection import close_database, get_db, get_db_dependency, init_database
from .models import Base, DimCustomer, DimProduct, FactSales
from .source import GoldLayerSource

__all__ = [
    "init_database",
    "close_database",
    "get_db",
    "get_db_dependency",
    "Base",
    "DimCustomer",
    "DimProduct",
    "FactSales",
    "GoldLayerSource",
]
