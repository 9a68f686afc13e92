"""
Exceptions raised by the identity engine.

There are two families here. :class:`IdentityError` and its subclasses are
the caller-facing failures raised by :class:`.AccountService`; each carries a
stable ``code`` and a generic human-readable ``message`` that is safe to show
to an end user. The remaining exceptions are raised by the lower-level
components (credentials, tokens, stores, mail) and are wrapped by the service
before they reach a caller.
"""

from typing import Dict, Optional


class IdentityError(RuntimeError):
    """A caller-facing failure with a stable error code."""

    code = 'internal_error'
    message = 'An unexpected server error occurred'

    def __init__(self, detail: Optional[str] = None) -> None:
        """Set the operator-facing detail (never shown to the end user)."""
        self.detail = detail or self.message
        super(IdentityError, self).__init__(self.detail)


class InvalidRequest(IdentityError):
    """Input failed validation."""

    code = 'invalid_request'
    message = 'The request is invalid or malformed'

    def __init__(self, errors: Optional[Dict[str, str]] = None) -> None:
        """Keep the per-field validation messages."""
        self.errors = errors or {}
        detail = ', '.join(f'{field}: {msg}'
                           for field, msg in sorted(self.errors.items()))
        super(InvalidRequest, self).__init__(detail or None)


class Unauthorized(IdentityError):
    """Missing or invalid authentication credentials."""

    code = 'unauthorized'
    message = 'Missing or invalid authentication credentials'


class Forbidden(IdentityError):
    """The caller is not permitted to do this."""

    code = 'forbidden'
    message = 'You do not have permission to access this resource'


class NotFound(IdentityError):
    """No such user."""

    code = 'not_found'
    message = 'The requested resource was not found'


class Conflict(IdentityError):
    """A resource conflict, e.g. duplicate data."""

    code = 'conflict'
    message = 'A resource conflict occurred (e.g., duplicate data)'


class EmailAlreadyExists(Conflict):
    """A user with this e-mail address is already registered."""

    code = 'email_already_exists'
    message = ('A user with this email already exists. Please try a '
               'different email.')


class OTPNotFound(IdentityError):
    """There is no pending activation code for this address."""

    code = 'otp_not_found'
    message = 'For this user code was not found. Please try again.'


class OTPInvalid(IdentityError):
    """The submitted activation code does not match."""

    code = 'invalid_otp'
    message = 'The code you provided is invalid'


class InvalidPassword(IdentityError):
    """The password does not match."""

    code = 'invalid_password'
    message = 'The password you provided is incorrect'


class AccountCreated(IdentityError):
    """
    The account exists, but the activation code could not be issued.

    This is a partial success: the caller should not retry registration.
    """

    code = 'account_created'
    message = ('An account was created, but email with activation code was '
               'not sent. Please, contact support.')


class LoginRedirect(IdentityError):
    """The account is verified, but the user must log in again."""

    code = 'login_redirect'
    message = 'Your account is verified. Please log in.'


class Internal(IdentityError):
    """An unexpected dependency failure."""


# Component-level exceptions.


class HashingError(RuntimeError):
    """Could not compute or check a password hash."""


class PasswordTooLong(ValueError):
    """Plaintext exceeds the hash function's input limit."""


class MissingPasswordHash(RuntimeError):
    """A credential was used without a hash; this is a programming error."""


class EntropyError(RuntimeError):
    """The secure random source is unavailable."""


class InvalidKeySize(ValueError):
    """A token maker was given a key of the wrong length."""


class InvalidToken(ValueError):
    """Token is malformed or does not authenticate."""


class ExpiredToken(ValueError):
    """Token has expired."""


class DuplicateEmail(RuntimeError):
    """The record store rejected a duplicate e-mail address."""


class NoSuchUser(RuntimeError):
    """User does not exist."""


class StoreError(RuntimeError):
    """The record store failed."""


class VerificationStoreError(RuntimeError):
    """The expiring key-value store failed."""


class UnknownCode(RuntimeError):
    """No value is stored under the requested key."""


class MailDeliveryFailed(RuntimeError):
    """A message could not be delivered after all retries."""


STATUS_CODES: Dict[str, int] = {
    InvalidRequest.code: 400,
    Unauthorized.code: 401,
    Forbidden.code: 403,
    NotFound.code: 404,
    Conflict.code: 409,
    Internal.code: 500,
    EmailAlreadyExists.code: 409,
    AccountCreated.code: 201,
    OTPNotFound.code: 404,
    OTPInvalid.code: 400,
    InvalidPassword.code: 401,
    LoginRedirect.code: 302,
}
"""HTTP status for each error code."""


def status_for(code: str) -> int:
    """Get the HTTP status for an error code; unknown codes are a 400."""
    return STATUS_CODES.get(code, 400)
