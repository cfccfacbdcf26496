"""
Settings read from the environment once, at import time.
"""
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DATABASE_URL = os.environ.get("LIBRARY_DATABASE_URL", "sqlite:///./library_seats.db")

TOTAL_SEATS = int(os.environ.get("LIBRARY_TOTAL_SEATS", 121))
LOCKER_PRICE_PER_MONTH = int(os.environ.get("LIBRARY_LOCKER_PRICE_PER_MONTH", 100))

# renewal reminders look this many days ahead (inclusive)
EXPIRY_WINDOW_DAYS = int(os.environ.get("LIBRARY_EXPIRY_WINDOW_DAYS", 5))
# inactive students whose plan ended this long ago may be purged
PURGE_AFTER_DAYS = int(os.environ.get("LIBRARY_PURGE_AFTER_DAYS", 30))

ADMIN_MOBILE = os.environ.get("LIBRARY_ADMIN_MOBILE", "admin")
ADMIN_PASSWORD = os.environ.get("LIBRARY_ADMIN_PASSWORD", "admin")

EXPORT_DIR = Path(
    os.environ.get("LIBRARY_EXPORT_DIR", Path(__file__).resolve().parent / "exports")
)

LOG_LEVEL = os.environ.get("LIBRARY_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level=None):
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
    logger.info(f"Database: {DATABASE_URL}")
    logger.info(f"Seats: {TOTAL_SEATS}, expiry window: {EXPIRY_WINDOW_DAYS} days")
