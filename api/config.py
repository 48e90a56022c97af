import os
from dotenv import load_dotenv

load_dotenv()


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    DEBUG: bool = os.getenv("DEBUG", "true").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS: list[str] = _csv(
        os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
    )
    DEFAULT_LOCATION: str = os.getenv("DEFAULT_LOCATION", "johannesburg")
    VAT_INCLUSIVE_DEFAULT: bool = os.getenv("VAT_INCLUSIVE_DEFAULT", "false").lower() == "true"


settings = Settings()
