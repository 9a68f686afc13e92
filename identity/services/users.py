"""
Record store for users.

E-mail uniqueness is enforced by a unique constraint in the database; a
concurrent duplicate registration surfaces here as an ``IntegrityError`` and
is reported as :class:`.DuplicateEmail`.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Generator, Optional

from pytz import UTC
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session
from sqlalchemy.pool import StaticPool

from .. import domain
from ..passwords import Credential
from ..exceptions import DuplicateEmail, NoSuchUser, StoreError, \
    MissingPasswordHash
from .models import Base, DBUser


def new_engine(database_uri: str, timeout: float = 3.0) -> Engine:
    """
    Create an engine whose connections give up after ``timeout`` seconds.

    In-memory SQLite databases share a single connection so that every
    thread sees the same data.
    """
    if database_uri.startswith('sqlite'):
        params: dict = dict(connect_args={'timeout': timeout,
                                          'check_same_thread': False})
        if database_uri in ('sqlite://', 'sqlite:///:memory:'):
            params['poolclass'] = StaticPool
        return create_engine(database_uri, **params)
    return create_engine(database_uri, pool_timeout=timeout,
                         pool_pre_ping=True,
                         connect_args={'connect_timeout': int(timeout)})


class UserStore(object):
    """Creates, activates and looks up :class:`.domain.User` records."""

    def __init__(self, engine: Engine,
                 logger: Optional[logging.Logger] = None) -> None:
        self._engine = engine
        self._sessionmaker = sessionmaker(bind=engine, expire_on_commit=False)
        self._logger = logger or logging.getLogger(__name__)

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """Context manager for database transaction."""
        session = self._sessionmaker()
        try:
            yield session
            session.commit()
        except NoResultFound:
            session.rollback()
            raise
        except Exception as e:
            self._logger.error('Commit failed, rolling back: %s', str(e))
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        """Create all tables in the database."""
        Base.metadata.create_all(self._engine)

    def drop_all(self) -> None:
        """Drop all tables in the database."""
        Base.metadata.drop_all(self._engine)

    def create(self, user: domain.User) -> domain.User:
        """
        Persist a new user.

        Parameters
        ----------
        user : :class:`.domain.User`
            Must carry a hashed password.

        Returns
        -------
        :class:`.domain.User`
            The stored user, with ``user_id`` and ``created_at`` set.

        Raises
        ------
        :class:`.DuplicateEmail`
            If a user with the same e-mail address already exists.
        :class:`.StoreError`
            If anything else goes wrong.

        """
        if user.password is None or not user.password.hash:
            raise MissingPasswordHash('missing password hash for user')
        try:
            with self.transaction() as session:
                db_user = DBUser(
                    first_name=user.first_name,
                    last_name=user.last_name,
                    email=user.email,
                    password_hash=user.password.hash,
                )
                session.add(db_user)
                session.flush()
                created = _to_domain(db_user)
        except IntegrityError as e:
            if _is_duplicate(e):
                raise DuplicateEmail(f'duplicate email: {user.email}') from e
            raise StoreError('Could not create user') from e
        except SQLAlchemyError as e:
            raise StoreError('Could not create user') from e
        return created

    def activate(self, email: str) -> domain.User:
        """Mark the user's e-mail address as verified."""
        try:
            with self.transaction() as session:
                db_user = _get_by_email(session, email)
                db_user.activated = True
                session.flush()
                activated = _to_domain(db_user)
        except NoResultFound as e:
            raise NoSuchUser(f'user not found: {email}') from e
        except SQLAlchemyError as e:
            raise StoreError('Could not activate user') from e
        return activated

    def get_user_id_by_email(self, email: str) -> int:
        """Get the ID of the user with e-mail address ``email``."""
        try:
            with self.transaction() as session:
                user_id: int = (
                    session.query(DBUser.user_id)
                    .filter(DBUser.email == email)
                    .one()
                ).user_id
        except NoResultFound as e:
            raise NoSuchUser(f'user not found: {email}') from e
        except SQLAlchemyError as e:
            raise StoreError('Could not look up user') from e
        return user_id

    def get_user_by_email(self, email: str) -> domain.User:
        """Load the user with e-mail address ``email``."""
        try:
            with self.transaction() as session:
                user = _to_domain(_get_by_email(session, email))
        except NoResultFound as e:
            raise NoSuchUser(f'user not found: {email}') from e
        except SQLAlchemyError as e:
            raise StoreError('Could not look up user') from e
        return user


def _get_by_email(session: Session, email: str) -> DBUser:
    db_user: DBUser = (
        session.query(DBUser)
        .filter(DBUser.email == email)
        .one()
    )
    return db_user


def _is_duplicate(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return 'unique' in message or 'duplicate' in message


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; they were stored as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_domain(db_user: DBUser) -> domain.User:
    return domain.User(
        user_id=db_user.user_id,
        first_name=db_user.first_name,
        last_name=db_user.last_name,
        email=db_user.email,
        password=Credential(db_user.password_hash),
        active=db_user.active,
        activated=db_user.activated,
        created_at=_aware(db_user.created_at),
        updated_at=_aware(db_user.updated_at),
        deleted_at=_aware(db_user.deleted_at)
    )
