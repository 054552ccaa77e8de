# pizzago/services/session_store.py
import redis
from redis.exceptions import WatchError

from pizzago.utils.logging import get_logger

logger = get_logger(__name__)


class SessionStore:
    """
    Key-value adapter over Redis for opaque string keys and values.

    - every write carries an expiration (EX)
    - set_if_absent is SET NX EX, one round trip, atomic on the server
    - compare_and_set uses WATCH/MULTI/EXEC, so the write only lands when
      nobody touched the key since the value we compare against was read
    """

    def __init__(self, client: redis.Redis):
        self.redis = client

    def get(self, key: str) -> str | None:
        return self.redis.get(key)

    def set(self, key: str, value: str, ttl: int) -> None:
        self.redis.set(name=key, value=value, ex=ttl)

    def delete(self, key: str) -> bool:
        return bool(self.redis.delete(key))

    def set_if_absent(self, key: str, value: str, ttl: int) -> bool:
        return bool(self.redis.set(name=key, value=value, nx=True, ex=ttl))

    def compare_and_set(self, key: str, expected: str | None, value: str, ttl: int) -> bool:
        """
        Write ``value`` only if the key still holds ``expected``
        (``None`` means the key must be absent). Returns False on mismatch.
        """
        with self.redis.pipeline() as pipe:
            try:
                pipe.watch(key)
                current = pipe.get(key)
                if current != expected:
                    pipe.unwatch()
                    logger.info(f"CAS mismatch on {key}")
                    return False
                pipe.multi()
                pipe.set(name=key, value=value, ex=ttl)
                pipe.execute()
                return True
            except WatchError:
                logger.info(f"CAS lost race on {key}")
                return False
