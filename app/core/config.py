from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # API Settings
    PROJECT_NAME: str = "Hisob Ledger API"
    API_V1_STR: str = "/api/v1"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Incoming payment and outgoing expense ledgers per branch office"

    # MongoDB
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "hisob"
    INCOMING_COLLECTION: str = "incoming"
    OUTGOING_COLLECTION: str = "outgoing"
    COUNTERS_COLLECTION: str = "counters"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""  # empty disables the file handler
    LOG_BACKUP_COUNT: int = 7

    # CSV export
    INCOMING_EXPORT_PREFIX: str = "incoming_report"
    OUTGOING_EXPORT_PREFIX: str = "outgoing_report"
    AMOUNT_SEPARATOR: str = ","

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
