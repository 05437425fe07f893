"""Runtime settings loaded from the environment (and a .env file if present)."""
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from rich.logging import RichHandler

load_dotenv()

DEFAULT_API_URL = "http://localhost:8080/api"
DEFAULT_PREFS_DB = str(Path.home() / ".leet_tracker" / "prefs.db")


@dataclass(frozen=True)
class Settings:
    api_url: str = os.getenv("LEET_TRACKER_API_URL", DEFAULT_API_URL)
    timeout: float = float(os.getenv("LEET_TRACKER_TIMEOUT", "10"))
    prefs_db: str = os.getenv("LEET_TRACKER_PREFS_DB", DEFAULT_PREFS_DB)
    log_level: str = os.getenv("LEET_TRACKER_LOG_LEVEL", "WARNING")


settings = Settings()


def configure_logging(level: str = settings.log_level, console=None) -> None:
    """Route log records through rich so they share the CLI console."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
