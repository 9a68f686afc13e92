"""
Account lifecycle: registration, e-mail verification, and sign-in.

Per e-mail address, an account moves from *unknown* to *unverified*
(:meth:`AccountService.register`) to *active* (:meth:`AccountService.verify`).
Nothing here ever deletes a user.

Every public method either returns plain values or raises an
:class:`.IdentityError` with a stable code. Failures of the stores and of
the token maker are wrapped; the underlying error is chained for operators.
"""

import hmac
import logging
from datetime import timedelta
from typing import Optional, Tuple, Type

from . import domain, forms, otp
from .exceptions import IdentityError, EmailAlreadyExists, NotFound, \
    Internal, AccountCreated, OTPNotFound, OTPInvalid, InvalidPassword, \
    LoginRedirect, Unauthorized, HashingError, PasswordTooLong, \
    MissingPasswordHash, EntropyError, DuplicateEmail, NoSuchUser, \
    StoreError, VerificationStoreError, UnknownCode, MailDeliveryFailed, \
    InvalidToken, ExpiredToken
from .passwords import Credential, BCRYPT_COST
from .services.mail import Mailer
from .services.users import UserStore
from .services.verification import VerificationStore
from .tasks import BackgroundTasks
from .tokens import TokenMaker

ACTIVATION_TEMPLATE = 'user_welcome.tmpl'
TOKEN_DURATION = timedelta(hours=24)
CODE_TTL = timedelta(minutes=15)


class AccountService(object):
    """Coordinates the stores, the mailer, and the token maker."""

    def __init__(self, users: UserStore, codes: VerificationStore,
                 mailer: Mailer, tasks: BackgroundTasks, tokens: TokenMaker,
                 logger: Optional[logging.Logger] = None,
                 token_duration: timedelta = TOKEN_DURATION,
                 code_ttl: timedelta = CODE_TTL,
                 bcrypt_cost: int = BCRYPT_COST) -> None:
        self._users = users
        self._codes = codes
        self._mailer = mailer
        self._tasks = tasks
        self._tokens = tokens
        self._logger = logger or logging.getLogger(__name__)
        self._token_duration = token_duration
        self._code_ttl = code_ttl
        self._bcrypt_cost = bcrypt_cost

    def register(self, first_name: str, last_name: str, email: str,
                 password: str) -> domain.User:
        """
        Create a new, unverified account and mail it an activation code.

        The activation e-mail is sent in the background; this returns as
        soon as the code has been stored.

        Returns
        -------
        :class:`.domain.User`
            The new user, with ``user_id`` and ``created_at`` set.

        Raises
        ------
        :class:`.InvalidRequest`
            If any field fails validation.
        :class:`.EmailAlreadyExists`
            If the address is already registered.
        :class:`.AccountCreated`
            If the account was created but the code could not be stored.
        :class:`.Internal`

        """
        forms.validate(forms.RegistrationForm, first_name=first_name,
                       last_name=last_name, email=email, password=password)
        try:
            credential = Credential(cost=self._bcrypt_cost).set(password)
        except (HashingError, PasswordTooLong) as e:
            raise Internal('Could not hash password') from e

        try:
            user = self._users.create(domain.User(
                first_name=first_name,
                last_name=last_name,
                email=email,
                password=credential
            ))
        except DuplicateEmail as e:
            raise EmailAlreadyExists(str(e)) from e
        except (StoreError, MissingPasswordHash) as e:
            raise Internal('Could not create user') from e
        self._logger.info('Registered user %s', user.user_id)

        code = self._new_code(email)
        self._send_code(email, domain.ActivationData(
            activation_code=code,
            user_id=user.user_id
        ))
        return user

    def verify(self, email: str, code: str) -> Tuple[domain.User, str]:
        """
        Check an activation code and activate the account.

        A wrong code leaves the pending code in place, so the user can try
        again until it expires.

        Returns
        -------
        :class:`.domain.User`
            The activated user.
        str
            A session token for the user.

        Raises
        ------
        :class:`.OTPNotFound`
            If there is no pending code for ``email``.
        :class:`.OTPInvalid`
            If ``code`` does not match.
        :class:`.LoginRedirect`
            If the account was activated but no token could be issued.

        """
        forms.validate(forms.EmailForm, email=email)
        try:
            expected = self._codes.get_code(email)
        except (UnknownCode, VerificationStoreError) as e:
            raise OTPNotFound(str(e)) from e

        if not isinstance(code, str) or not code.isascii() \
                or not hmac.compare_digest(expected, code):
            raise OTPInvalid('Invalid otp provided')

        self._tasks.run(self._discard_code, email)

        try:
            user = self._users.activate(email)
        except NoSuchUser as e:
            raise NotFound(str(e)) from e
        except StoreError as e:
            raise Internal('Could not activate user') from e
        self._logger.info('Activated user %s', user.user_id)

        token = self._issue_token(user.email, LoginRedirect)
        return user, token

    def resend_code(self, email: str) -> None:
        """
        Replace the pending activation code and mail the new one.

        This does not look at whether the account is already active.

        Raises
        ------
        :class:`.AccountCreated`
            If the new code could not be stored.
        :class:`.NotFound`
            If there is no user with this address.

        """
        forms.validate(forms.EmailForm, email=email)
        code = self._new_code(email)
        try:
            user_id = self._users.get_user_id_by_email(email)
        except NoSuchUser as e:
            raise NotFound(str(e)) from e
        except StoreError as e:
            raise Internal('Could not look up user') from e
        self._send_code(email, domain.ActivationData(
            activation_code=code,
            user_id=user_id
        ))

    def sign_in(self, email: str, password: str) -> str:
        """
        Check a user's password and issue a session token.

        Unverified accounts may sign in.

        Raises
        ------
        :class:`.NotFound`
            If there is no user with this address.
        :class:`.InvalidPassword`
            If the password does not match.

        """
        forms.validate(forms.LoginForm, email=email, password=password)
        user = self.get_user(email)
        if user.password is None:
            raise Internal('missing password hash for user')
        try:
            match = user.password.matches(password)
        except (HashingError, MissingPasswordHash) as e:
            raise Internal('Could not check password') from e
        if not match:
            raise InvalidPassword('invalid password')
        return self._issue_token(user.email, Internal)

    def get_user(self, email: str) -> domain.User:
        """
        Look up a user by e-mail address.

        Raises
        ------
        :class:`.NotFound`

        """
        forms.validate(forms.EmailForm, email=email)
        try:
            return self._users.get_user_by_email(email)
        except NoSuchUser as e:
            raise NotFound(str(e)) from e
        except StoreError as e:
            raise Internal('Could not look up user') from e

    def authenticate(self, token: str) -> domain.Payload:
        """
        Verify a session token.

        Raises
        ------
        :class:`.Unauthorized`
            If the token is invalid or has expired.

        """
        try:
            return self._tokens.verify_token(token)
        except (InvalidToken, ExpiredToken) as e:
            raise Unauthorized(str(e)) from e

    def _new_code(self, email: str) -> str:
        """Generate and store a fresh activation code for ``email``."""
        try:
            code = otp.generate()
            self._codes.set_code(email, code, self._code_ttl)
        except (EntropyError, VerificationStoreError) as e:
            raise AccountCreated(str(e)) from e
        return code

    def _issue_token(self, subject: str,
                     failure: Type[IdentityError]) -> str:
        try:
            return self._tokens.create_token(subject, self._token_duration)
        except Exception as e:
            raise failure('Could not create token') from e

    def _send_code(self, email: str, data: domain.ActivationData) -> None:
        self._tasks.run(self._deliver, email, data)

    def _deliver(self, email: str, data: domain.ActivationData) -> None:
        try:
            self._mailer.send(email, ACTIVATION_TEMPLATE, data)
        except MailDeliveryFailed as e:
            self._logger.error('Failed to send activation email: %s', e)

    def _discard_code(self, email: str) -> None:
        try:
            self._codes.delete_code(email)
        except VerificationStoreError as e:
            self._logger.error('Failed to delete activation code: %s', e)
