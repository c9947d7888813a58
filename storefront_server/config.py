import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Backend
    BASE_URL: str = os.getenv("STOREFRONT_BASE_URL", "http://localhost:5000")
    TIMEOUT: float = float(os.getenv("STOREFRONT_TIMEOUT", "30"))

    # Local storage (cart blob and auth token)
    STORAGE_FILE: str = os.getenv(
        "STOREFRONT_STORAGE_FILE", str(Path.home() / ".storefront_storage.json")
    )
    TOKEN: Optional[str] = os.getenv("STOREFRONT_TOKEN") or None

    # Logging
    LOG_LEVEL: str = os.getenv("STOREFRONT_LOG_LEVEL", "INFO").upper()


settings = Settings()
