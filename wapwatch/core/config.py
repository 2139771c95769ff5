from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # Окружение: production, development, testing
    ENV: str = Field(
        "production",
        description="Application environment",
    )

    # Подключение к БД (SQLite через aiosqlite)
    DATABASE_URL: str = Field(
        "sqlite+aiosqlite:///zwp.db",
        description="SQLAlchemy async database URL",
    )
    SQLITE_BUSY_TIMEOUT_MS: int = Field(
        2000,
        description="PRAGMA busy_timeout for every SQLite connection",
    )

    # Общие параметры API
    API_PREFIX: str = Field(
        "/v1",
        description="Base prefix for all API routes",
    )
    APP_NAME: str = Field(
        "WAP Watch",
        description="Application name for docs/title",
    )

    # Логи
    LOG_LEVEL: str = Field(
        "INFO",
        description="Logging level",
    )
    LOG_DIR: str = Field(
        "logs",
        description="Directory for log files",
    )
    LOG_FILENAME: str = Field(
        "wapwatch.log",
        description="Log file name",
    )

    # nmcli
    NMCLI_BIN: str = Field(
        "nmcli",
        description="Path or name of the nmcli binary",
    )
    WIFI_INTERFACE: str = Field(
        "wlan0",
        description="Interface used when joining open networks",
    )

    # Ёмкости каналов конвейера
    RAW_BUFFER: int = Field(256, ge=1, description="Raw line channel capacity")
    PARSED_BUFFER: int = Field(256, ge=1, description="Parsed record channel capacity")
    COMMITTED_BUFFER: int = Field(256, ge=1, description="Change event channel capacity")

    # Пулы воркеров
    PARSER_WORKERS: int = Field(4, ge=1, description="Number of parser workers")
    CLASSIFIER_WORKERS: int = Field(2, ge=1, description="Number of classifier/logger workers")

    # Писатель в БД
    BATCH_SIZE: int = Field(256, ge=1, description="Flush when the batch reaches this size")
    FLUSH_EVERY: float = Field(1.0, gt=0, description="Flush interval, seconds")

    # Расписание
    SCAN_EVERY: float = Field(30.0, gt=0, description="Scan interval, seconds")
    CONNECT_EVERY: float = Field(60.0, gt=0, description="Auto-connect sweep interval, seconds")
    CONNECT_ENABLED: bool = Field(
        True,
        description="Run the auto-connect sweep for open networks",
    )

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
    }


settings = Settings()
