"""
Seed the salon's service catalog

Inserts the default treatments into the services table. Services that
already exist (matched by name) are left untouched, so the script can be
run again after editing prices in the database.

Run with: python migrations/seed_services.py
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import text

from salon import models  # noqa: F401
from salon.database import Base, engine

DEFAULT_SERVICES = [
    # name, description, duration (minutes), price
    ("Maderoterapie - Celotělová", "Full body wood therapy massage", 50, 890),
    ("Maderoterapie - 5 vstupů", "Package of 5 full body wood therapy sessions", 50, 3990),
    ("Maderoterapie - 10 vstupů", "Package of 10 full body wood therapy sessions (9 + 1 free)", 50, 7990),
    ("Lymfomodeling - Vrchní část", "Lymphatic drainage of the upper body", 50, 2490),
    ("Lymfomodeling - Celé tělo", "Full body lymphatic drainage", 100, 3890),
    ("Lymfomodeling - 3 vstupy", "Package of 3 full body lymphatic drainage sessions", 100, 9725),
    ("Lymfomodeling - 5 vstupů", "Package of 5 full body lymphatic drainage sessions", 100, 15560),
]


def upgrade():
    """Create tables if needed and insert missing services"""
    Base.metadata.create_all(bind=engine, checkfirst=True)

    with engine.connect() as conn:
        existing = {row[0] for row in conn.execute(text("SELECT name FROM services"))}

        for name, description, duration, price in DEFAULT_SERVICES:
            if name in existing:
                print(f"ℹ️  {name} already exists")
                continue
            conn.execute(
                text(
                    """
                    INSERT INTO services (name, description, duration, price)
                    VALUES (:name, :description, :duration, :price)
                    """
                ),
                {"name": name, "description": description, "duration": duration, "price": price},
            )
            print(f"✅ Added {name} ({duration} min, {price})")

        conn.commit()
        print("\n✅ Service catalog seeded")


def downgrade():
    """Remove the default services that have no bookings"""
    with engine.connect() as conn:
        for name, *_ in DEFAULT_SERVICES:
            conn.execute(
                text(
                    """
                    DELETE FROM services
                    WHERE name = :name
                    AND NOT EXISTS (SELECT 1 FROM bookings WHERE bookings.service_id = services.id)
                    """
                ),
                {"name": name},
            )
        conn.commit()
        print("✅ Default services removed")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "downgrade":
        downgrade()
    else:
        upgrade()
