from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    # App
    APP_NAME: str = "RiderScan"
    DEBUG: bool = True

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # Supabase
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_KEY: str = ""
    RECORDS_TABLE: str = "delivery_records"

    # OCR
    TESSERACT_CMD: str = "/usr/local/bin/tesseract"  # macOS default
    OCR_LANGUAGES: str = "kor+eng"
    MAX_UPLOAD_MB: float = 10.0

    # Business day (KST, rolls over at 06:00)
    UTC_OFFSET_HOURS: int = 9
    DAY_ROLLOVER_HOUR: int = 6

    # Validation bounds (KRW)
    MIN_CONFIDENCE: float = 0.7
    MIN_AMOUNT: int = 5_000
    MAX_AMOUNT: int = 1_000_000
    MIN_AVERAGE_PER_DELIVERY: int = 2_000
    MAX_AVERAGE_PER_DELIVERY: int = 15_000
    MAX_DELIVERY_COUNT: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
