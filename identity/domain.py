"""Defines identity concepts used throughout the engine."""

from typing import Any, NamedTuple, Optional, Callable, get_type_hints
from datetime import datetime, timedelta
import uuid

import dateutil.parser
from pytz import UTC

from .passwords import Credential
from .exceptions import ExpiredToken


class User(NamedTuple):
    """Represents a registered user."""

    first_name: str
    """First name or given name."""

    last_name: str
    """Last name or family name."""

    email: str
    """Primary e-mail address; unique, compared exactly as stored."""

    password: Optional[Credential] = None
    """Password credential (hash only once persisted)."""

    user_id: Optional[int] = None
    """Assigned by the record store. If ``None``, the user does not exist."""

    active: bool = True
    """Whether or not the account is enabled."""

    activated: bool = False
    """Whether or not the user's e-mail address has been verified."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class Payload(NamedTuple):
    """The contents of a session token."""

    token_id: str
    """Random identifier, unique per token."""

    subject: str
    """Who the token was issued to; the user's e-mail address."""

    issued_at: datetime
    expired_at: datetime

    @property
    def expired(self) -> bool:
        """Expired if the current time is later than :attr:`.expired_at`."""
        return datetime.now(tz=UTC) > self.expired_at

    def valid(self) -> None:
        """
        Check that the payload has not expired.

        Raises
        ------
        :class:`.ExpiredToken`

        """
        if self.expired:
            raise ExpiredToken('token has expired')


def new_payload(subject: str, duration: timedelta) -> Payload:
    """Create a :class:`.Payload` for ``subject`` that lasts ``duration``."""
    issued_at = datetime.now(tz=UTC)
    return Payload(
        token_id=str(uuid.uuid4()),
        subject=subject,
        issued_at=issued_at,
        expired_at=issued_at + duration
    )


class ActivationData(NamedTuple):
    """Template data for the activation e-mail."""

    activation_code: str
    user_id: int


# Helpers and private functions.


def to_dict(obj: tuple) -> dict:
    """
    Generate a dict representation of a NamedTuple instance.

    Child NamedTuples are cast recursively, datetimes are rendered as
    ISO-8601 strings, and password credentials are always left out.

    Parameters
    ----------
    obj : tuple
        A NamedTuple instance.

    Returns
    -------
    dict

    """
    if not hasattr(obj, '_asdict'):  # NamedTuple-generated classes have this.
        return {}
    data = obj._asdict()  # type: ignore

    def _cast(value: Any) -> Any:
        if hasattr(value, '_asdict'):
            value = to_dict(value)
        elif isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, list):
            value = [_cast(o) for o in value]
        return value

    return {key: _cast(value) for key, value in data.items()
            if not isinstance(value, Credential)}


def from_dict(cls: type, data: dict) -> Any:
    """
    Generate a NamedTuple instance from a dict.

    This is the inverse of :func:`to_dict`. Fields typed as (optional)
    ``datetime`` are parsed from ISO-8601 strings; unknown keys are ignored.

    Parameters
    ----------
    cls: type
        Any NamedTuple class in this module.
    data: dict

    Returns
    -------
    NamedTuple
        An instance of ``cls``.

    Raises
    ------
    ValueError
        If a datetime field cannot be parsed.

    """
    _data = {}
    for field, field_type in get_type_hints(cls).items():
        if field not in data:
            continue
        value = data[field]
        target_type = _get_cast_type(field_type, value)
        if target_type:
            value = target_type(value)
        _data[field] = value
    return cls(**_data)


def _get_cast_type(field_type: type, value: Any) -> Optional[Callable]:
    """Get a casting callable for a field type/value."""
    if type(value) is not str:
        return None
    if field_type is datetime or field_type == Optional[datetime]:
        return dateutil.parser.isoparse
    return None
