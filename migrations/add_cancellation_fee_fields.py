"""
Add scheduling and cancellation fee fields

Migration to add:
- bookings.cancellation_fee_status (not_applicable/pending/dismissed/charged)
- bookings.cancelled_at
- bookings.payment_method_id
- bookings.fee_charge_attempts
- business_settings.max_bookings_per_slot / min_lead_hours / time_slots
- business_settings.cancellation_fee_window_hours / cancellation_fee_cents

Run with: python migrations/add_cancellation_fee_fields.py
"""

import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect, text

from cleanbook.database import engine

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

COLUMNS = {
    "bookings": [
        ("cancellation_fee_status", "VARCHAR(50) NOT NULL DEFAULT 'not_applicable'"),
        ("cancelled_at", "TIMESTAMP"),
        ("payment_method_id", "VARCHAR(255)"),
        ("fee_charge_attempts", "INTEGER NOT NULL DEFAULT 0"),
    ],
    "business_settings": [
        ("max_bookings_per_slot", "INTEGER"),
        ("min_lead_hours", "FLOAT"),
        ("time_slots", "JSON"),
        ("cancellation_fee_window_hours", "FLOAT"),
        ("cancellation_fee_cents", "INTEGER"),
    ],
}


def upgrade():
    """Add missing columns; safe to run more than once"""
    inspector = inspect(engine)
    with engine.begin() as conn:
        for table, columns in COLUMNS.items():
            if not inspector.has_table(table):
                logger.info(f"ℹ️  {table} does not exist yet, skipping (created on app startup)")
                continue

            existing_columns = {col["name"] for col in inspector.get_columns(table)}
            for name, ddl in columns:
                if name in existing_columns:
                    logger.info(f"ℹ️  {table}.{name} already exists")
                    continue
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}"))
                logger.info(f"✅ Added {table}.{name}")

        # Fee status only applies to cancelled bookings
        if inspector.has_table("bookings"):
            conn.execute(
                text(
                    "UPDATE bookings SET cancellation_fee_status = 'not_applicable' "
                    "WHERE status != 'cancelled' AND cancellation_fee_status != 'not_applicable'"
                )
            )

    logger.info("✅ Migration completed successfully!")


if __name__ == "__main__":
    upgrade()
