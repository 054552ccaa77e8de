# pizzago/services/notification_service.py
from typing import Protocol

from pizzago.celery_worker import celery_app
from pizzago.utils.logging import get_logger

logger = get_logger(__name__)


class EmailSender(Protocol):
    def send(self, to: str, subject: str, body: str) -> None: ...


class CeleryEmailSender:
    """
    Fire-and-forget delivery through the worker.
    A broker outage is logged and never reaches the caller.
    """

    def send(self, to: str, subject: str, body: str) -> None:
        try:
            send_email_task.delay(to, subject, body)
        except Exception as e:
            logger.warning(f"Could not enqueue email to {to}: {e}")


@celery_app.task(name="pizzago.services.notification_service.send_email_task")
def send_email_task(to: str, subject: str, body: str):
    """
    There is no mail transport yet; the message is only logged.
    """
    logger.info(f"[EMAIL] to={to} subject={subject!r}")
    logger.info(f"[EMAIL] {body}")
    return {"to": to, "status": "sent"}
