"""
Pending activation codes, in an expiring key-value store (Redis).

Codes are stored under ``activation:<email>``. Writing a new code for the
same address overwrites the previous one and resets its TTL; there is no
locking, so the last writer wins.
"""

import logging
from datetime import timedelta
from typing import Any, Mapping, Optional

import fakeredis
import redis

from ..exceptions import VerificationStoreError, UnknownCode

KEY_PREFIX = 'activation:'


def key_for(email: str) -> str:
    """Get the store key for the pending code of ``email``."""
    return KEY_PREFIX + email


class VerificationStore(object):
    """
    Manages a connection to Redis.

    The StrictRedis instance is thread safe, and connections are attached at
    the time a command is executed. Every command gives up after ``timeout``
    seconds.
    """

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 password: Optional[str] = None, timeout: float = 2.0,
                 fake: bool = False,
                 logger: Optional[logging.Logger] = None) -> None:
        """Open the connection to Redis."""
        self._logger = logger or logging.getLogger(__name__)
        if fake:
            self._logger.debug('Using fake Redis')
            self.r: Any = fakeredis.FakeStrictRedis(decode_responses=True)
        else:
            self._logger.debug('New Redis connection at %s, port %s',
                               host, port)
            self.r = redis.StrictRedis(
                host=host, port=port, db=db, password=password,
                socket_timeout=timeout, socket_connect_timeout=timeout,
                decode_responses=True
            )

    def set(self, key: str, value: str, ttl: timedelta) -> None:
        """Store ``value`` under ``key`` for ``ttl``."""
        try:
            self.r.set(key, value, ex=ttl)
        except redis.exceptions.ConnectionError as e:
            raise VerificationStoreError(f'Connection failed: {e}') from e
        except redis.exceptions.RedisError as e:
            raise VerificationStoreError(f'Failed to set: {e}') from e

    def get(self, key: str) -> str:
        """
        Get the value stored under ``key``.

        Raises
        ------
        :class:`.UnknownCode`
            If nothing is stored under ``key`` (including after expiry).
        :class:`.VerificationStoreError`
            If the store could not be reached in time.

        """
        try:
            value: Optional[str] = self.r.get(key)
        except redis.exceptions.ConnectionError as e:
            raise VerificationStoreError(f'Connection failed: {e}') from e
        except redis.exceptions.RedisError as e:
            raise VerificationStoreError(f'Failed to get: {e}') from e
        if value is None:
            raise UnknownCode(f'Nothing stored for {key}')
        return value

    def delete(self, key: str) -> None:
        """Delete ``key``. Deleting a missing key is not an error."""
        try:
            self.r.delete(key)
        except redis.exceptions.ConnectionError as e:
            raise VerificationStoreError(f'Connection failed: {e}') from e
        except redis.exceptions.RedisError as e:
            raise VerificationStoreError(f'Failed to delete: {e}') from e

    def set_code(self, email: str, code: str, ttl: timedelta) -> None:
        """Store the pending activation code for ``email``."""
        self.set(key_for(email), code, ttl)

    def get_code(self, email: str) -> str:
        """Get the pending activation code for ``email``."""
        return self.get(key_for(email))

    def delete_code(self, email: str) -> None:
        """Discard the pending activation code for ``email``."""
        self.delete(key_for(email))

    def close(self) -> None:
        """Release pooled connections."""
        self.r.close()


def get_verification_store(config: Mapping,
                           logger: Optional[logging.Logger] = None) \
        -> VerificationStore:
    """Get a new :class:`.VerificationStore` using ``config``."""
    return VerificationStore(
        host=config.get('REDIS_HOST', 'localhost'),
        port=int(config.get('REDIS_PORT', '6379')),
        db=int(config.get('REDIS_DATABASE', '0')),
        password=config.get('REDIS_PASSWORD') or None,
        timeout=float(config.get('REDIS_TIMEOUT', '2')),
        fake=bool(int(config.get('REDIS_FAKE', '0'))),
        logger=logger
    )
