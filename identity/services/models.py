"""Database models for the record store."""

from datetime import datetime

from pytz import UTC
from sqlalchemy import Boolean, Column, DateTime, Integer, LargeBinary, \
    String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(tz=UTC)


class DBUser(Base):  # type: ignore
    """
    Registered users.

    +---------------+--------------+------+-----+---------+----------------+
    | Field         | Type         | Null | Key | Default | Extra          |
    +---------------+--------------+------+-----+---------+----------------+
    | user_id       | int          | NO   | PRI | NULL    | auto_increment |
    | first_name    | varchar(50)  | NO   |     | NULL    |                |
    | last_name     | varchar(50)  | NO   |     | NULL    |                |
    | email         | varchar(255) | NO   | UNI | NULL    |                |
    | password_hash | blob         | NO   |     | NULL    |                |
    | active        | bool         | NO   |     | 1       |                |
    | activated     | bool         | NO   |     | 0       |                |
    | created_at    | datetime     | NO   |     | NULL    |                |
    | updated_at    | datetime     | NO   |     | NULL    |                |
    | deleted_at    | datetime     | YES  |     | NULL    |                |
    +---------------+--------------+------+-----+---------+----------------+
    """

    __tablename__ = 'users'

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(LargeBinary(60), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    activated = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now,
                        onupdate=_now)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
