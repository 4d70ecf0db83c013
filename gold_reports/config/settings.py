"""
Gold Layer Reports
Centralized Configuration Management

Configuration is loaded with Pydantic settings from environment variables
and an optional .env file. Report thresholds live here so the segmentation
rules can be tuned without touching the report builders.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Gold layer database configuration"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="data_warehouse", description="Database name")
    user: str = Field(default="reports", description="Database user")
    password: SecretStr = Field(default="secure_password", description="Database password")
    schema_name: str = Field(default="gold", description="Schema holding the Gold layer tables")
    echo: bool = Field(default=False, description="Echo SQL queries")
    url: Optional[str] = Field(default=None, alias="DATABASE_URL", description="Database URL (overrides host/port)")

    @property
    def async_url(self) -> str:
        """Async database URL - uses DATABASE_URL if set, otherwise builds one for asyncpg"""
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"

    @property
    def schema_translate_map(self) -> dict:
        """Map the logical 'gold' schema onto the configured one"""
        return {"gold": self.schema_name or None}


class ReportSettings(BaseSettings):
    """Segmentation thresholds and output options for the reports"""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    # Product segmentation (on total_sales)
    high_performer_sales: float = Field(default=50000, description="Sales above which a product is a High-Performer")
    mid_range_sales: float = Field(default=10000, description="Sales from which a product is Mid-Range")

    # Customer segmentation
    vip_sales: float = Field(default=5000, description="Sales above which a long-standing customer is VIP")
    loyal_lifespan_months: int = Field(default=12, description="Lifespan in months from which a customer is no longer New")

    # Rounding
    price_decimals: int = Field(default=1, description="Decimals kept on avg_selling_price")

    # API
    default_page_size: int = Field(default=50, description="Default page size for report endpoints")
    max_page_size: int = Field(default=500, description="Maximum page size for report endpoints")


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")


class DataQualitySettings(BaseSettings):
    """Data Quality Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    enable_data_quality_checks: bool = Field(
        default=True,
        alias="ENABLE_DATA_QUALITY_CHECKS",
        description="Validate Gold layer inputs before building reports"
    )


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="gold-reports", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    reports: ReportSettings = Field(default_factory=ReportSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    data_quality: DataQualitySettings = Field(default_factory=DataQualitySettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
