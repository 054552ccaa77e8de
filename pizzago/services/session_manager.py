# pizzago/services/session_manager.py
import secrets
from typing import Callable, Tuple

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_random

from pizzago.domain.errors import SessionConflict, SessionGone
from pizzago.domain.session import SessionRecord, utcnow
from pizzago.services.session_store import SessionStore
from pizzago.utils.logging import get_logger
from pizzago.utils.settings import SESSION_PREFIX, SESSION_TTL_SECONDS, SESSION_WRITE_RETRIES

logger = get_logger(__name__)


def generate_session_id() -> str:
    # 32 random bytes -> 256 bits of entropy
    return secrets.token_urlsafe(32)


class SessionManager:
    """
    Owns session identity and the read/update cycle of session records.

    Reads never write back. Every mutation goes through ``mutate``, which
    rewrites the whole record with a fresh TTL, conditional on the blob the
    record was loaded from; on a lost race the record is reloaded and the
    change re-applied, a bounded number of times.
    """

    def __init__(
        self,
        store: SessionStore,
        ttl: int = SESSION_TTL_SECONDS,
        prefix: str = SESSION_PREFIX,
        write_retries: int = SESSION_WRITE_RETRIES,
    ):
        self.store = store
        self.ttl = ttl
        self.prefix = prefix
        self.write_retries = write_retries

    def key(self, session_id: str) -> str:
        return f"{self.prefix}{session_id}"

    # query
    def load(self, session_id: str) -> SessionRecord | None:
        raw = self.store.get(self.key(session_id))
        if raw is None:
            return None
        return SessionRecord.loads(raw)

    def resolve(self, cookie_value: str | None) -> Tuple[SessionRecord, bool]:
        """
        Returns ``(session, created)``. ``created`` tells the caller a new
        cookie has to be issued.
        """
        if cookie_value:
            existing = self.load(cookie_value)
            if existing is not None:
                return existing, False
            logger.info("Presented session is missing or expired, starting a new one")

        return self.create(), True

    # commands
    def create(self, session_id: str | None = None, user_id: int | None = None) -> SessionRecord:
        session = SessionRecord(id=session_id or generate_session_id(), user_id=user_id)
        self.persist(session)
        logger.info(f"Session created (user={user_id})")
        return session

    def persist(self, session: SessionRecord) -> None:
        """Unconditional write, TTL counted from now."""
        raw = session.dumps()
        self.store.set(self.key(session.id), raw, self.ttl)
        session.mark_stored(raw)

    def mutate(self, session: SessionRecord, change: Callable[[SessionRecord], None]) -> SessionRecord:
        """
        Apply ``change`` and write the record back with compare-and-set.
        Raises SessionConflict once the retries are used up and SessionGone
        when the record disappeared in the meantime. Exceptions raised by
        ``change`` itself propagate untouched.
        """
        current = session

        for attempt in Retrying(
            reraise=True,
            stop=stop_after_attempt(self.write_retries),
            wait=wait_random(min=0, max=0.05),
            retry=retry_if_exception_type(SessionConflict),
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        f"Session write conflict, retrying "
                        f"(attempt {attempt.retry_state.attempt_number}/{self.write_retries})"
                    )
                    current = self.load(session.id)
                    if current is None:
                        # deleted by logout or expiry since it was read; never bring it back
                        raise SessionGone()

                change(current)
                self._write_conditionally(current)

        return current

    def _write_conditionally(self, session: SessionRecord) -> None:
        expected = session.stored_blob
        session.version += 1
        session.updated_at = utcnow()
        raw = session.dumps()

        if not self.store.compare_and_set(self.key(session.id), expected, raw, self.ttl):
            raise SessionConflict()

        session.mark_stored(raw)

    def bind_user(self, session_id: str, user_id: int) -> SessionRecord:
        """Create or update the record at ``session_id`` so it belongs to ``user_id``."""
        existing = self.load(session_id)
        if existing is None:
            return self.create(session_id=session_id, user_id=user_id)

        def _bind(record: SessionRecord) -> None:
            record.user_id = user_id

        return self.mutate(existing, _bind)

    def destroy(self, session_id: str) -> bool:
        removed = self.store.delete(self.key(session_id))
        logger.info(f"Session destroyed (existed={removed})")
        return removed
