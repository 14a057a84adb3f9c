"""
Configuration for the clinic queue service
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clinic_queue.db")

# Application state blob key, same key the dashboard client persisted under
STORAGE_NAMESPACE = os.getenv("STORAGE_NAMESPACE", "clinic-storage")
SEED_DEMO_DATA = _env_flag("SEED_DEMO_DATA", "true")

# JWT
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

# Bootstrap admin account
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
ADMIN_FULL_NAME = os.getenv("ADMIN_FULL_NAME", "Clinic Administrator")

# Queue display polling cadence advertised to the waiting-room screen
DISPLAY_REFRESH_SECONDS = int(os.getenv("DISPLAY_REFRESH_SECONDS", 1))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = LOG_LEVEL):
    """Set up root logging once for the whole service."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s | %(message)s",
    )
