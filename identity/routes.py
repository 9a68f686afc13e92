"""JSON API for the account operations."""

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, redirect, request, \
    Response

from . import domain
from .accounts import AccountService
from .exceptions import IdentityError, InvalidRequest, status_for

blueprint = Blueprint('identity', __name__, url_prefix='')


def _service() -> AccountService:
    service: AccountService = current_app.extensions['identity']
    return service


def _body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidRequest({'body': 'must be a JSON object'})
    return data


@blueprint.route('/status', methods=['GET'])
def ok() -> Response:
    """Health check."""
    return jsonify(status='ok')


@blueprint.route('/users', methods=['POST'])
def register() -> Response:
    """Register a new user."""
    data = _body()
    user = _service().register(data.get('first_name'), data.get('last_name'),
                               data.get('email'), data.get('password'))
    return jsonify(user=domain.to_dict(user))


@blueprint.route('/users/activate', methods=['PATCH'])
def verify() -> Response:
    """Activate an account with the code that was mailed to it."""
    data = _body()
    user, token = _service().verify(data.get('email'), data.get('code'))
    return jsonify({'user': domain.to_dict(user), 'access-token': token})


@blueprint.route('/users/resend-code', methods=['PATCH'])
def resend_code() -> Response:
    """Mail a fresh activation code."""
    data = _body()
    _service().resend_code(data.get('email'))
    return jsonify(message='verification was sent')


@blueprint.route('/users/login', methods=['POST'])
def login() -> Any:
    """Exchange an e-mail address and password for a session token."""
    data = _body()
    token = _service().sign_in(data.get('email'), data.get('password'))
    return jsonify({'access-token': token}), 201


@blueprint.route('/users/<path:email>', methods=['GET'])
def get_user(email: str) -> Response:
    """Look up a user."""
    return jsonify(user=domain.to_dict(_service().get_user(email)))


def handle_identity_error(error: IdentityError) -> Any:
    """Render an :class:`.IdentityError` with the status for its code."""
    current_app.logger.error('%s: %s %s', request.endpoint, error.code,
                             error.detail)
    status = status_for(error.code)
    if status == 302:
        return redirect(current_app.config['LOGIN_URL'], code=302)
    body: Dict[str, Any] = {'error': error.code, 'message': error.message}
    if isinstance(error, InvalidRequest):
        body['fields'] = error.errors
    if current_app.config.get('DEBUG'):
        body['details'] = error.detail
    return jsonify(body), status
