import os
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # Application
    app_name: str = os.getenv("APP_NAME", "곰클릭+책방")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = _env_bool("DEBUG", "False")
    environment: str = os.getenv("ENVIRONMENT", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # API
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "8000"))

    # Lending rules
    borrow_days: int = int(os.getenv("BORROW_DAYS", "14"))
    extension_days: int = int(os.getenv("EXTENSION_DAYS", "7"))
    max_borrow_limit: int = int(os.getenv("MAX_BORROW_LIMIT", "2"))
    max_extension_count: int = int(os.getenv("MAX_EXTENSION_COUNT", "1"))
    max_reservation_limit: int = int(os.getenv("MAX_RESERVATION_LIMIT", "1"))
    reservation_offer_hours: int = int(os.getenv("RESERVATION_OFFER_HOURS", "48"))

    # Simulated network latency for API responses, in milliseconds
    simulated_delay_ms: int = int(os.getenv("SIMULATED_DELAY_MS", "0"))

    # Pagination
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "12"))
    catalog_page_sizes: tuple = (12, 24, 48, 100)
    rental_page_sizes: tuple = (5, 10, 20, 50)
    board_page_sizes: tuple = (10, 30, 50)

    # Local session storage (browser local storage stand-in)
    session_dir: Path = field(
        default_factory=lambda: Path(os.getenv("GOMCLICK_SESSION_DIR", str(Path.home() / ".gomclick")))
    )


settings = Settings()
