"""Symmetrically encrypted PASETO (v4.local) tokens."""

from datetime import timedelta
from typing import Union
import json

import pyseto
from pyseto import Key

from . import TokenMaker, to_claims, from_claims
from .. import domain
from ..exceptions import InvalidToken, InvalidKeySize

KEY_SIZE = 32


class PasetoMaker(TokenMaker):
    """Issues v4.local tokens; the payload is encrypted and authenticated."""

    def __init__(self, key: Union[str, bytes]) -> None:
        """
        Check and load the symmetric key.

        Raises
        ------
        :class:`.InvalidKeySize`
            If ``key`` is not exactly :const:`KEY_SIZE` bytes.

        """
        if isinstance(key, str):
            key = key.encode('utf-8')
        if len(key) != KEY_SIZE:
            raise InvalidKeySize(
                f'invalid key size: must be exactly {KEY_SIZE} bytes'
            )
        self._key = Key.new(version=4, purpose='local', key=key)

    def create_token(self, subject: str, duration: timedelta) -> str:
        """Encrypt a new payload for ``subject``."""
        payload = domain.new_payload(subject, duration)
        message = json.dumps(to_claims(payload)).encode('utf-8')
        token: bytes = pyseto.encode(self._key, message)
        return token.decode('ascii')

    def verify_token(self, token: str) -> domain.Payload:
        """Decrypt ``token`` and check that it has not expired."""
        if not isinstance(token, (str, bytes)):
            raise InvalidToken('Not a valid token')
        try:
            decoded = pyseto.decode(self._key, token)
            claims = json.loads(decoded.payload)
        except (pyseto.PysetoError, ValueError, TypeError) as e:
            raise InvalidToken('Not a valid token') from e
        payload = from_claims(claims)
        payload.valid()
        return payload
