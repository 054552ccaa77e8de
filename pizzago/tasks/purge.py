# pizzago/tasks/purge.py
from datetime import datetime, timezone

from pizzago.celery_worker import celery_app
from pizzago.data.database import make_engine, make_session_factory
from pizzago.repos.account_repo import AccountRepo
from pizzago.utils.logging import get_logger

logger = get_logger(__name__)

_session_factory = None


def _db():
    global _session_factory
    if _session_factory is None:
        _session_factory = make_session_factory(make_engine())
    return _session_factory()


def purge_expired_verifications(db) -> int:
    removed = AccountRepo(db).purge_expired_verifications(datetime.now(timezone.utc))
    logger.info(f"Purged {removed} expired verification token(s)")
    return removed


@celery_app.task(name="pizzago.tasks.purge.purge_expired_verifications_task")
def purge_expired_verifications_task():
    logger.info("Purge expired verifications task started")
    db = _db()
    try:
        return purge_expired_verifications(db)
    finally:
        db.close()
