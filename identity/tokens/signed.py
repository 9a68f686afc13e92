"""HMAC-signed JSON web tokens."""

from datetime import timedelta

import jwt

from . import TokenMaker, to_claims, from_claims
from .. import domain
from ..exceptions import InvalidToken, InvalidKeySize

MIN_SECRET_SIZE = 32


class JWTMaker(TokenMaker):
    """
    Issues HS256 JWTs.

    Only ``HS256`` is accepted on the way back in. In particular, unsigned
    ``alg: none`` tokens are rejected.
    """

    algorithm = 'HS256'

    def __init__(self, secret: str) -> None:
        """Check and keep the signing secret."""
        if len(secret) < MIN_SECRET_SIZE:
            raise InvalidKeySize(
                f'invalid key size: must be at least {MIN_SECRET_SIZE} '
                'characters'
            )
        self._secret = secret

    def create_token(self, subject: str, duration: timedelta) -> str:
        """Encode a new payload for ``subject`` as a signed JWT."""
        payload = domain.new_payload(subject, duration)
        return jwt.encode(to_claims(payload), self._secret,
                          algorithm=self.algorithm)

    def verify_token(self, token: str) -> domain.Payload:
        """Decode an auth token to access session information."""
        try:
            header = jwt.get_unverified_header(token)
            if header.get('alg') != self.algorithm:
                raise InvalidToken('Unexpected signing algorithm')
            claims = jwt.decode(token, self._secret,
                                algorithms=[self.algorithm])
        except (jwt.exceptions.InvalidTokenError, ValueError) as e:
            raise InvalidToken('Not a valid token') from e
        payload = from_claims(claims)
        payload.valid()
        return payload
