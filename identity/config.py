"""Flask configuration."""

import os

DEBUG = bool(int(os.environ.get('DEBUG', '0')))
"""Include error details in responses. Never enable in production."""

#################### Logging ####################
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
LOG_JSON = bool(int(os.environ.get('LOG_JSON', '1')))

#################### Record store ####################
SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite:///identity.db')
DB_TIMEOUT = os.environ.get('DB_TIMEOUT', '3')
"""Seconds to wait for a database connection."""

CREATE_DB = bool(int(os.environ.get('CREATE_DB', '0')))
"""Create the tables at startup, if they do not exist."""

#################### Activation codes ####################
REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = os.environ.get('REDIS_PORT', '6379')
REDIS_DATABASE = os.environ.get('REDIS_DATABASE', '0')
REDIS_PASSWORD = os.environ.get('REDIS_PASSWORD', '')
REDIS_TIMEOUT = os.environ.get('REDIS_TIMEOUT', '2')
"""Seconds before a Redis command gives up."""

REDIS_FAKE = os.environ.get('REDIS_FAKE', '0')
"""Use the FakeRedis library instead of a redis service.

Useful for testing, dev, beta."""

ACTIVATION_CODE_TTL = os.environ.get('ACTIVATION_CODE_TTL', '900')
"""Seconds an activation code remains valid."""

#################### Session tokens ####################
TOKEN_KIND = os.environ.get('TOKEN_KIND', 'paseto')
"""Either ``paseto`` (encrypted) or ``jwt`` (signed)."""

TOKEN_SYMMETRIC_KEY = os.environ.get('TOKEN_SYMMETRIC_KEY', '')
"""Exactly 32 characters for ``paseto``; at least 32 for ``jwt``.

Must be the same for every process serving the app. If unset, a random key
is generated at startup and tokens only verify in the process that issued
them."""

TOKEN_DURATION = os.environ.get('TOKEN_DURATION', '86400')
"""Seconds a session token remains valid."""

BCRYPT_COST = os.environ.get('BCRYPT_COST', '12')

#################### Mail ####################
SMTP_HOST = os.environ.get('SMTP_HOST', 'localhost')
SMTP_PORT = os.environ.get('SMTP_PORT', '25')
SMTP_USERNAME = os.environ.get('SMTP_USERNAME', '')
SMTP_PASSWORD = os.environ.get('SMTP_PASSWORD', '')
SMTP_SENDER = os.environ.get('SMTP_SENDER', 'no-reply@localhost')
SMTP_USE_TLS = os.environ.get('SMTP_USE_TLS', '0')
MAIL_RETRIES = os.environ.get('MAIL_RETRIES', '3')
MAIL_RETRY_DELAY = os.environ.get('MAIL_RETRY_DELAY', '0.5')

BACKGROUND_WORKERS = os.environ.get('BACKGROUND_WORKERS', '4')

LOGIN_URL = os.environ.get('LOGIN_URL', '/login')
"""Where to send users who are verified but have to log in again."""
