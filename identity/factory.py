"""Application factory for the identity service."""

import atexit
import secrets
from datetime import timedelta
from typing import Mapping, Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from . import routes
from .accounts import AccountService
from .exceptions import IdentityError
from .logs import create_logger
from .services.mail import get_mailer
from .services.users import UserStore, new_engine
from .services.verification import get_verification_store
from .tasks import BackgroundTasks
from .tokens import TokenMaker
from .tokens.sealed import PasetoMaker
from .tokens.signed import JWTMaker


def get_token_maker(config: Mapping) -> TokenMaker:
    """Build the token maker selected by ``TOKEN_KIND``."""
    kind = config.get('TOKEN_KIND', 'paseto')
    key = config['TOKEN_SYMMETRIC_KEY']
    if kind == 'paseto':
        return PasetoMaker(key)
    if kind == 'jwt':
        return JWTMaker(key)
    raise ValueError(f'Unknown TOKEN_KIND: {kind}')


def jsonify_exception(error: HTTPException):   # type: ignore
    """Render a werkzeug exception as JSON."""
    exc_resp = error.get_response()
    response = jsonify(reason=error.description)
    response.status_code = exc_resp.status_code
    return response


def create_web_app(config: Optional[Mapping] = None) -> Flask:
    """
    Initialize and configure the identity application.

    Settings come from :mod:`identity.config` (i.e. the environment), then
    from ``config`` if given.
    """
    app = Flask('identity')
    app.config.from_pyfile('config.py')
    if config:
        app.config.update(config)

    logger = create_logger('identity', app.config['LOG_LEVEL'],
                           bool(app.config['LOG_JSON']))
    logger.debug('logger initialized')

    if not app.config.get('TOKEN_SYMMETRIC_KEY'):
        logger.warning('TOKEN_SYMMETRIC_KEY is not set; using a random key. '
                       'Tokens will not verify in other processes.')
        app.config['TOKEN_SYMMETRIC_KEY'] = secrets.token_hex(16)

    engine = new_engine(app.config['SQLALCHEMY_DATABASE_URI'],
                        timeout=float(app.config['DB_TIMEOUT']))
    users = UserStore(engine, logger=logger.getChild('users'))
    if app.config['CREATE_DB']:
        users.create_all()

    tasks = BackgroundTasks(int(app.config['BACKGROUND_WORKERS']),
                            logger=logger.getChild('tasks'))
    atexit.register(tasks.shutdown)
    codes = get_verification_store(app.config, logger.getChild('codes'))

    app.extensions['identity'] = AccountService(
        users=users,
        codes=codes,
        mailer=get_mailer(app.config, logger.getChild('mail')),
        tasks=tasks,
        tokens=get_token_maker(app.config),
        logger=logger.getChild('accounts'),
        token_duration=timedelta(seconds=int(app.config['TOKEN_DURATION'])),
        code_ttl=timedelta(seconds=int(app.config['ACTIVATION_CODE_TTL'])),
        bcrypt_cost=int(app.config['BCRYPT_COST'])
    )
    app.extensions['identity.tasks'] = tasks
    app.extensions['identity.users'] = users
    app.extensions['identity.codes'] = codes

    app.register_blueprint(routes.blueprint)
    app.errorhandler(IdentityError)(routes.handle_identity_error)
    app.errorhandler(HTTPException)(jsonify_exception)
    return app
