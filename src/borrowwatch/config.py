"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic_settings import BaseSettings, SettingsConfigDict

BINANCE_BORROW_REPAY_URL = (
    "https://www.binance.com/bapi/margin/v1/public/margin/statistics/24h-borrow-and-repay"
)


class SourceSettings(BaseSettings):
    """Upstream statistics endpoint."""

    model_config = SettingsConfigDict(env_prefix="SOURCE_")

    endpoint: str = BINANCE_BORROW_REPAY_URL


class StorageSettings(BaseSettings):
    """Location of the per-asset series records."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: str = "coinsJson"


class IngestionSettings(BaseSettings):
    """Polling cadence of the ingestion loop."""

    model_config = SettingsConfigDict(env_prefix="INGESTION_")

    poll_interval: float = 60.0  # seconds, measured from the end of a cycle


class DashboardSettings(BaseSettings):
    """Dashboard server configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    host: str = "0.0.0.0"
    port: int = 8081
    title_template: str = "Chart {asset}"


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    source: SourceSettings = SourceSettings()
    storage: StorageSettings = StorageSettings()
    ingestion: IngestionSettings = IngestionSettings()
    dashboard: DashboardSettings = DashboardSettings()
