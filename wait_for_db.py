"""Block until the Postgres server behind DATABASE_URL accepts connections."""
import os
import time
import logging
from urllib.parse import urlparse

import psycopg2

logger = logging.getLogger("wait_for_db")


def wait(database_url: str, timeout_s: int = 60) -> None:
    # SQLAlchemy URL may carry a driver suffix
    url = database_url.replace("postgresql+psycopg2://", "postgresql://").replace("postgres://", "postgresql://")
    p = urlparse(url)
    if p.scheme != "postgresql":
        logger.info("Not a Postgres URL (%s); nothing to wait for.", p.scheme)
        return

    params = dict(
        host=p.hostname or "db",
        port=p.port or 5432,
        user=p.username or "cleanserve",
        password=p.password or "cleanserve",
        dbname=(p.path or "/cleanserve").lstrip("/") or "cleanserve",
    )

    logger.info("Waiting for Postgres at %s:%s db=%s (timeout=%ss)", params["host"], params["port"], params["dbname"], timeout_s)
    deadline = time.time() + timeout_s
    while True:
        try:
            psycopg2.connect(**params).close()
            logger.info("Postgres is ready.")
            return
        except psycopg2.OperationalError as e:
            if time.time() > deadline:
                logger.error("Timed out waiting for DB. Last error: %s", e)
                raise
            time.sleep(1)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise SystemExit("DATABASE_URL is not set")
    wait(database_url, int(os.getenv("DB_WAIT_TIMEOUT", "60")))
