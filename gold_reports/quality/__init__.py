"""
Data Quality Module
"""
from .validators import (
    DataValidator,
    ValidationResult,
    ValidationSeverity,
    ValidationStatus,
    create_dim_customers_validator,
    create_dim_products_validator,
    create_fact_sales_validator,
)

__all__ = [
    "DataValidator",
    "ValidationResult",
    "ValidationSeverity",
    "ValidationStatus",
    "create_dim_customers_validator",
    "create_dim_products_validator",
    "create_fact_sales_validator",
]
