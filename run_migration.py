"""
Migration runner
Usage: python run_migration.py <migration_name> [upgrade|downgrade]

Runs migrations/<migration_name>.py, e.g. `python run_migration.py seed_services`.
"""
import importlib
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def available_migrations() -> list[str]:
    return sorted(p.stem for p in MIGRATIONS_DIR.glob("*.py") if not p.stem.startswith("_"))


def run_migration(name: str, direction: str = "upgrade"):
    """Import a migration module and call its upgrade or downgrade"""
    name = Path(name).stem
    if name not in available_migrations():
        logger.error(f"Migration not found: {name}. Available: {', '.join(available_migrations())}")
        sys.exit(1)

    if direction not in ("upgrade", "downgrade"):
        logger.error(f"Unknown direction: {direction}")
        sys.exit(1)

    module = importlib.import_module(f"migrations.{name}")
    logger.info(f"Running {name} ({direction})...")
    getattr(module, direction)()
    logger.info("✅ Migration completed successfully!")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        logger.error("Usage: python run_migration.py <migration_name> [upgrade|downgrade]")
        sys.exit(1)

    try:
        run_migration(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else "upgrade")
    except Exception as e:
        logger.error(f"❌ Migration failed: {e}")
        sys.exit(1)
