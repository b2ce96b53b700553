import logging

from sqlalchemy.orm import Session
from sqlalchemy.exc import ProgrammingError, OperationalError

from cleanserve.db.session import SessionLocal
from cleanserve.services.notification_service import process_pending_sms

logger = logging.getLogger(__name__)


def process_sms_queue(limit: int = 50, db: Session | None = None) -> dict:
    own_session = db is None
    db = db or SessionLocal()
    try:
        try:
            result = process_pending_sms(db, limit=limit)
        except (ProgrammingError, OperationalError):
            # DB not migrated yet; don't crash the worker.
            db.rollback()
            logger.warning("sms_logs table unavailable; skipping SMS retry run")
            return {"skipped": True, "reason": "missing_tables"}
        if result["processed"]:
            logger.info("SMS retry run: %s", result)
        return result
    finally:
        if own_session:
            db.close()
