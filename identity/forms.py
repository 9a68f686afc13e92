"""Input validation rules for the account operations."""

from typing import Any, Optional
import re

from wtforms import Form, StringField, PasswordField
from wtforms.validators import DataRequired, Regexp, StopValidation, \
    ValidationError

from .exceptions import InvalidRequest

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*\Z"
)


class ByteLength(object):
    """
    Validate the UTF-8 encoded length of a string field.

    :class:`wtforms.validators.Length` counts characters, but the storage and
    hashing limits we care about are in bytes.
    """

    def __init__(self, min: int = -1, max: int = -1) -> None:
        self.min = min
        self.max = max

    def __call__(self, form: Form, field: Any) -> None:
        if not isinstance(field.data, str):
            raise StopValidation('must be a string')
        try:
            length = len(field.data.encode('utf-8'))
        except UnicodeEncodeError:
            raise StopValidation('must be valid UTF-8')
        if self.min >= 0 and length < self.min:
            raise ValidationError(f'must be at least {self.min} bytes long')
        if self.max >= 0 and length > self.max:
            raise ValidationError(
                f'must not be more than {self.max} bytes long'
            )


def _email_field() -> StringField:
    return StringField('E-mail', validators=[
        DataRequired('must be provided'),
        ByteLength(max=255),
        Regexp(EMAIL_PATTERN, message='must be a valid email address')
    ])


def _password_field() -> PasswordField:
    return PasswordField('Password', validators=[
        DataRequired('must be provided'),
        ByteLength(min=8, max=72)
    ])


def _name_field(label: str) -> StringField:
    return StringField(label, validators=[
        DataRequired('must be provided'),
        ByteLength(max=50)
    ])


class EmailForm(Form):
    """Just an e-mail address; used by verify, resend and lookup."""

    email = _email_field()


class LoginForm(Form):
    """E-mail and password."""

    email = _email_field()
    password = _password_field()


class RegistrationForm(Form):
    """A new account."""

    first_name = _name_field('First name')
    last_name = _name_field('Last name')
    email = _email_field()
    password = _password_field()


def validate(form_class: type, **data: Optional[str]) -> Form:
    """
    Validate ``data`` against ``form_class``.

    Returns
    -------
    :class:`wtforms.Form`
        The validated form.

    Raises
    ------
    :class:`.InvalidRequest`
        With the first error message for each invalid field.

    """
    form = form_class(data=data)
    if not form.validate():
        raise InvalidRequest({field: messages[0]
                              for field, messages in form.errors.items()})
    return form
