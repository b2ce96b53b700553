import ssl

from celery import Celery
from cleanserve.core.config import settings

celery = Celery(
    "cleanserve",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["cleanserve.tasks.jobs"],
)

celery.conf.timezone = "Asia/Riyadh"

# Managed Redis over TLS (rediss://) needs explicit cert options or Celery refuses to connect.
if settings.REDIS_URL.strip().lower().startswith("rediss://"):
    _tls = {"ssl_cert_reqs": ssl.CERT_NONE}
    celery.conf.broker_use_ssl = _tls
    celery.conf.redis_backend_use_ssl = _tls

celery.conf.beat_schedule = {
    "retry-failed-sms": {
        "task": "cleanserve.tasks.jobs.process_sms_queue",
        "schedule": 120.0,  # seconds
        "kwargs": {"limit": 50},
    },
}
