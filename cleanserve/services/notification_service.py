import uuid
import logging
from datetime import datetime, timezone

import requests
from sqlalchemy.orm import Session

from cleanserve.core.config import settings
from cleanserve.core.i18n import status_name
from cleanserve.models.booking import Booking
from cleanserve.models.sms_log import SmsLog
from cleanserve.models.user import User

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"

STATUS_SMS = {
    "en": {
        "confirmed": "Your order has been confirmed",
        "technician_assigned": "A technician has been assigned to your order",
        "en_route": "Technician is on the way",
        "in_progress": "Service is in progress",
        "quotation_pending": "A spare parts quotation is waiting for your approval",
        "completed": "Service completed successfully",
        "cancelled": "Your order has been cancelled",
    },
    "ar": {
        "confirmed": "تم تأكيد طلبك",
        "technician_assigned": "تم تعيين فني لطلبك",
        "en_route": "الفني في الطريق إليك",
        "in_progress": "جاري تنفيذ الخدمة",
        "quotation_pending": "عرض سعر لقطع الغيار بانتظار موافقتك",
        "completed": "تم إكمال الخدمة بنجاح",
        "cancelled": "تم إلغاء طلبك",
    },
}


def status_sms_body(booking_id: str, status: str, lang: str) -> str:
    lang = lang if lang in STATUS_SMS else "en"
    text = STATUS_SMS[lang].get(status) or status_name(status, lang)
    ref = booking_id[:8].upper()
    if lang == "ar":
        return f"تحديث الطلب {ref}: {text}"
    return f"Order {ref} update: {text}"


def queue_sms(db: Session, to_phone: str, body: str, related_booking_id: str = "") -> str:
    """Store and attempt immediate send. Failed rows are retried by the worker."""
    sid = str(uuid.uuid4())
    db.add(SmsLog(
        id=sid,
        to_phone=to_phone,
        body=body,
        status="queued" if settings.SMS_ENABLED else "disabled",
        related_booking_id=related_booking_id,
    ))
    db.commit()

    if not settings.SMS_ENABLED:
        logger.debug("SMS disabled; stored message %s for %s", sid, to_phone)
        return sid

    log = db.get(SmsLog, sid)
    try:
        log.provider_ref = send_sms(to_phone, body)
        log.status = "sent"
        log.sent_at = datetime.now(timezone.utc)
    except (requests.RequestException, RuntimeError) as e:
        logger.warning("SMS %s to %s failed, will retry: %s", sid, to_phone, e)
        log.status = "failed"
        log.error = str(e)[:500]
    db.commit()
    return sid


def send_sms(to_phone: str, body: str) -> str:
    """Send through the Twilio Messages API; returns the message SID."""
    if not settings.TWILIO_ACCOUNT_SID or not settings.TWILIO_AUTH_TOKEN:
        raise RuntimeError("Twilio credentials are not configured")
    if not to_phone.startswith("+"):
        raise RuntimeError(f"Phone number must be in E.164 format: {to_phone}")

    data = {"To": to_phone, "Body": body}
    if settings.TWILIO_MESSAGING_SERVICE_SID:
        data["MessagingServiceSid"] = settings.TWILIO_MESSAGING_SERVICE_SID
    else:
        data["From"] = settings.TWILIO_FROM_NUMBER

    r = requests.post(
        f"{TWILIO_API_BASE}/Accounts/{settings.TWILIO_ACCOUNT_SID}/Messages.json",
        data=data,
        auth=(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN),
        timeout=20,
    )
    if r.status_code >= 400:
        raise RuntimeError(f"Twilio error {r.status_code}: {r.text}")
    return r.json().get("sid", "")


def notify_status_change(db: Session, booking: Booking) -> str | None:
    """Tell the customer their order moved to ``booking.status``. Fire-and-forget.

    Runs after the transition is committed, so any failure here is logged and
    swallowed rather than turned into an error response.
    """
    booking_id, status = booking.id, booking.status
    try:
        customer = db.get(User, booking.user_id)
        if not customer or not customer.phone:
            logger.debug("No phone for customer of booking %s; skipping SMS", booking_id)
            return None
        body = status_sms_body(booking_id, status, customer.language or settings.DEFAULT_LANGUAGE)
        return queue_sms(db, customer.phone, body, booking_id)
    except Exception:
        db.rollback()
        logger.exception("Status SMS for booking %s (%s) could not be queued", booking_id, status)
        return None


def process_pending_sms(db: Session, limit: int = 50) -> dict:
    """Retry up to `limit` queued or failed messages. Returns counts."""
    pending = (
        db.query(SmsLog)
        .filter(SmsLog.status.in_(["queued", "failed"]))
        .order_by(SmsLog.created_at.asc())
        .limit(limit)
        .all()
    )
    sent, failed = 0, 0
    for log in pending:
        try:
            log.provider_ref = send_sms(log.to_phone, log.body)
            log.status = "sent"
            log.sent_at = datetime.now(timezone.utc)
            sent += 1
        except (requests.RequestException, RuntimeError) as e:
            log.status = "failed"
            log.error = str(e)[:500]
            failed += 1
    if pending:
        db.commit()
    return {"processed": len(pending), "sent": sent, "failed": failed}
