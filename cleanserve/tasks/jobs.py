from cleanserve.tasks.celery_app import celery
from cleanserve.tasks import worker_jobs


@celery.task(name="cleanserve.tasks.jobs.process_sms_queue")
def process_sms_queue(limit: int = 50):
    return worker_jobs.process_sms_queue(limit=limit)
