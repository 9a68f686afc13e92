"""
Password credentials.

Passwords are hashed with bcrypt. bcrypt only looks at the first 72 bytes of
its input, so anything longer is rejected outright by :meth:`Credential.set`
rather than being truncated; see :const:`MAX_PASSWORD_BYTES`.
"""

from typing import Optional

import bcrypt

from .exceptions import HashingError, PasswordTooLong, MissingPasswordHash

BCRYPT_COST = 12
MAX_PASSWORD_BYTES = 72


class Credential(object):
    """
    A password hash, plus the plaintext while it is being validated.

    The plaintext is only ever held in memory between :meth:`set` and
    persistence; it is never written anywhere.
    """

    def __init__(self, hash: Optional[bytes] = None,
                 cost: int = BCRYPT_COST) -> None:
        """Wrap an existing ``hash`` (e.g. loaded from the record store)."""
        self.hash = hash
        self.plaintext: Optional[str] = None
        self._cost = cost

    def __repr__(self) -> str:
        """Never render the hash."""
        return '<Credential>'

    def __eq__(self, other: object) -> bool:
        """Credentials are equal if their hashes are equal."""
        return isinstance(other, Credential) and self.hash == other.hash

    def set(self, plaintext: str) -> 'Credential':
        """
        Hash ``plaintext`` and keep the result.

        Parameters
        ----------
        plaintext : str

        Returns
        -------
        :class:`.Credential`
            This credential, for chaining.

        Raises
        ------
        :class:`.PasswordTooLong`
            If ``plaintext`` is more than :const:`MAX_PASSWORD_BYTES` bytes
            once encoded as UTF-8.
        :class:`.HashingError`
            If a salt could not be generated or bcrypt rejected the input.

        """
        encoded = plaintext.encode('utf-8')
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise PasswordTooLong(
                f'password must not be more than {MAX_PASSWORD_BYTES} bytes'
            )
        try:
            salt = bcrypt.gensalt(rounds=self._cost)
            hashed = bcrypt.hashpw(encoded, salt)
        except (ValueError, OSError) as e:
            raise HashingError('Could not hash password') from e
        self.plaintext = plaintext
        self.hash = hashed
        return self

    def matches(self, plaintext: str) -> bool:
        """
        Check ``plaintext`` against the stored hash.

        Returns
        -------
        bool
            ``False`` if the password simply does not match.

        Raises
        ------
        :class:`.MissingPasswordHash`
            If there is no hash to check against.
        :class:`.HashingError`
            If the stored hash is malformed.

        """
        if not self.hash:
            raise MissingPasswordHash('missing password hash for user')
        encoded = plaintext.encode('utf-8')
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False    # Could never have been set.
        try:
            return bcrypt.checkpw(encoded, self.hash)
        except ValueError as e:
            raise HashingError('Stored password hash is malformed') from e
