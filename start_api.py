#!/usr/bin/env python3
"""
Wait for the database, apply migrations, seed demo data, then exec uvicorn.
"""
import os
import sys
import logging

from alembic import command
from alembic.config import Config

from cleanserve.core.config import settings
from cleanserve.seed import run as run_seed
from wait_for_db import wait

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("start_api")


def main() -> None:
    wait(settings.DATABASE_URL, int(os.getenv("DB_WAIT_TIMEOUT", "60")))

    alembic_cfg = Config(os.path.join(os.path.dirname(os.path.abspath(__file__)), "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    command.upgrade(alembic_cfg, "head")
    logger.info("Migrations applied.")

    if os.getenv("SEED_DEMO_DATA", "true").lower() in ("1", "true", "yes"):
        run_seed()
        logger.info("Demo data seeded.")

    port = os.getenv("PORT", "8000")
    os.execv(
        sys.executable,
        [sys.executable, "-m", "uvicorn", "cleanserve.main:app", "--host", "0.0.0.0", "--port", port],
    )


if __name__ == "__main__":
    main()
