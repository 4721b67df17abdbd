"""
Reject overlapping confirmed bookings at the database level (PostgreSQL)

Migration to add:
- btree_gist extension
- bookings_no_confirmed_overlap: EXCLUDE constraint over the booking's
  minute range for confirmed bookings on the same date

The partial unique index on (booking_date, start_time) already stops two
confirmed bookings starting together; this closes the remaining case of
ranges that overlap with different starts.

Run with: python migrations/add_booking_overlap_constraint.py
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import text

from salon.database import engine

CONSTRAINT_NAME = "bookings_no_confirmed_overlap"

# HH:MM -> minutes since midnight
_MINUTES = "(split_part({col}, ':', 1)::int * 60 + split_part({col}, ':', 2)::int)"


def upgrade():
    """Add the exclusion constraint"""
    if engine.dialect.name != "postgresql":
        print(f"ℹ️  {engine.dialect.name} has no exclusion constraints, skipping")
        return

    with engine.connect() as conn:
        result = conn.execute(
            text("SELECT 1 FROM pg_constraint WHERE conname = :name"),
            {"name": CONSTRAINT_NAME},
        )
        if result.first():
            print(f"ℹ️  {CONSTRAINT_NAME} already exists")
            return

        conn.execute(text("CREATE EXTENSION IF NOT EXISTS btree_gist"))
        print("✅ btree_gist extension available")

        conn.execute(
            text(
                f"""
                ALTER TABLE bookings
                ADD CONSTRAINT {CONSTRAINT_NAME}
                EXCLUDE USING gist (
                    booking_date WITH =,
                    int4range({_MINUTES.format(col="start_time")}, {_MINUTES.format(col="end_time")}) WITH &&
                )
                WHERE (status = 'confirmed')
                """
            )
        )
        conn.commit()
        print(f"✅ Added {CONSTRAINT_NAME}")
        print("\n✅ Migration completed successfully!")


def downgrade():
    """Remove the exclusion constraint"""
    if engine.dialect.name != "postgresql":
        return

    with engine.connect() as conn:
        conn.execute(text(f"ALTER TABLE bookings DROP CONSTRAINT IF EXISTS {CONSTRAINT_NAME}"))
        conn.commit()
        print(f"✅ Removed {CONSTRAINT_NAME}")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "downgrade":
        downgrade()
    else:
        upgrade()
