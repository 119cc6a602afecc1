"""Configuration management from environment variables."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file
load_dotenv()

# Project root
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
CACHE_DB = DATA_DIR / "cache.db"
METRICS_FILE = DATA_DIR / "progress.jsonl"

# Ensure directories exist
DATA_DIR.mkdir(parents=True, exist_ok=True)


class Config:
    """Application configuration."""

    # Texas Lottery
    BASE_URL: str = os.getenv("BASE_URL", "https://www.texaslottery.com")
    LISTING_URL: str = os.getenv(
        "LISTING_URL",
        f"{BASE_URL}/export/sites/lottery/Games/Scratch_Offs/all.html",
    )
    DETAIL_LINK_PATTERN: str = os.getenv("DETAIL_LINK_PATTERN", "details.html")
    USER_AGENT: str = os.getenv(
        "USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    )

    # Scraper
    BATCH_SIZE: int = int(os.getenv("BATCH_SIZE", "8"))
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "20"))
    MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "3"))
    RATE_PER_DOMAIN: float = float(os.getenv("RATE_PER_DOMAIN", "0"))

    # Cache
    CACHE_KEY: str = os.getenv("CACHE_KEY", "tx-lottery-games-cache")
    CACHE_MAX_AGE_HOURS: float = float(os.getenv("CACHE_MAX_AGE_HOURS", "24"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # API Security
    API_KEY: str | None = os.getenv("API_KEY")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration values."""
        errors = []
        if cls.BATCH_SIZE < 1:
            errors.append("BATCH_SIZE must be at least 1")
        if cls.REQUEST_TIMEOUT <= 0:
            errors.append("REQUEST_TIMEOUT must be positive")
        if cls.MAX_RETRIES < 1:
            errors.append("MAX_RETRIES must be at least 1")
        if not cls.LISTING_URL.startswith("http"):
            errors.append("LISTING_URL must be an absolute http(s) URL")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


config = Config()
