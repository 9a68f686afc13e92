"""
Session tokens.

A :class:`.TokenMaker` issues opaque, self-verifying tokens that carry a
:class:`.domain.Payload`. Two interchangeable makers are provided:

- :class:`.sealed.PasetoMaker` encrypts and authenticates the payload with a
  32-byte symmetric key (PASETO v4.local). This is the default.
- :class:`.signed.JWTMaker` signs the payload with HMAC-SHA256.

Either way, :meth:`.TokenMaker.verify_token` only raises
:class:`.InvalidToken` or :class:`.ExpiredToken`, and expiry is checked only
after the token has been authenticated.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any

from .. import domain
from ..exceptions import InvalidToken, ExpiredToken, InvalidKeySize

__all__ = ('TokenMaker', 'InvalidToken', 'ExpiredToken', 'InvalidKeySize')


class TokenMaker(ABC):
    """Issues and verifies session tokens."""

    @abstractmethod
    def create_token(self, subject: str, duration: timedelta) -> str:
        """Create a token for ``subject`` that lasts ``duration``."""

    @abstractmethod
    def verify_token(self, token: str) -> domain.Payload:
        """Check that ``token`` is authentic and still valid."""


def to_claims(payload: domain.Payload) -> dict:
    """Get the claim set for a payload."""
    return domain.to_dict(payload)


def from_claims(claims: Any) -> domain.Payload:
    """
    Rebuild a :class:`.domain.Payload` from an authenticated claim set.

    Raises
    ------
    :class:`.InvalidToken`
        If any claim is missing or has the wrong type.

    """
    if not isinstance(claims, dict):
        raise InvalidToken('token claims must be an object')
    try:
        payload: domain.Payload = domain.from_dict(domain.Payload, claims)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidToken('token claims are malformed') from e
    if not isinstance(payload.token_id, str) \
            or not isinstance(payload.subject, str):
        raise InvalidToken('token claims are malformed')
    for value in (payload.issued_at, payload.expired_at):
        if not isinstance(value, datetime) or value.tzinfo is None:
            raise InvalidToken('token timestamps are malformed')
    return payload
