import os
import warnings
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./cleanbook.db")

# Booking capacity defaults (overridden by the business_settings row when present)
DEFAULT_MAX_BOOKINGS_PER_SLOT = int(os.getenv("DEFAULT_MAX_BOOKINGS_PER_SLOT", "3"))
DEFAULT_MIN_LEAD_HOURS = float(os.getenv("DEFAULT_MIN_LEAD_HOURS", "12"))
DEFAULT_TIME_SLOTS = [
    slot.strip()
    for slot in os.getenv(
        "DEFAULT_TIME_SLOTS",
        "9:00 AM - 11:00 AM,11:00 AM - 1:00 PM,1:00 PM - 3:00 PM,3:00 PM - 5:00 PM",
    ).split(",")
    if slot.strip()
]

# Late cancellation fee
CANCELLATION_FEE_WINDOW_HOURS = float(os.getenv("CANCELLATION_FEE_WINDOW_HOURS", "24"))
CANCELLATION_FEE_CENTS = int(os.getenv("CANCELLATION_FEE_CENTS", "3500"))  # $35.00
CANCELLATION_FEE_CURRENCY = os.getenv("CANCELLATION_FEE_CURRENCY", "USD")

# Capacity strictness: "optimistic" (no lock), "local" (per-process lock), "redis" (distributed lock)
SLOT_LOCK_MODE = os.getenv("SLOT_LOCK_MODE", "optimistic").strip().lower()
SLOT_LOCK_TIMEOUT_SECONDS = float(os.getenv("SLOT_LOCK_TIMEOUT_SECONDS", "10"))

# Square Payments Configuration (card-on-file capture for cancellation fees)
SQUARE_ENVIRONMENT = os.getenv("SQUARE_ENVIRONMENT", "sandbox")  # sandbox or production
SQUARE_ACCESS_TOKEN = os.getenv("SQUARE_ACCESS_TOKEN")
SQUARE_LOCATION_ID = os.getenv("SQUARE_LOCATION_ID")

# Admin / employee back office
ADMIN_API_TOKEN = os.getenv("ADMIN_API_TOKEN")
if not ADMIN_API_TOKEN:
    warnings.warn(
        "ADMIN_API_TOKEN not set! Admin endpoints will reject every request", RuntimeWarning, stacklevel=2
    )
