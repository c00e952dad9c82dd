import logging
import os
import time
from datetime import datetime, timezone
from functools import wraps

import pydantic
from flask import Blueprint, Flask, current_app, jsonify, request, session
from werkzeug.exceptions import HTTPException

import config
from errors import InternalError, RateLimited, Unauthorized, ValidationError, VaultError, NotFound
from models import db
from models.user import User
from patterns.observer import VaultSubject, AlertObserver
from patterns.password_builder import generate_password as builder_generate_password
from patterns.rate_gate import RateGate
from schemas import (LoginRequest, RegisterRequest, PasswordCreate, PasswordUpdate,
                     PasswordGeneratorRequest)
from services import auth
from services.alerts import AlertDeriver
from services.vault_store import VaultStore, RequestOrigin
from utils import strength

api = Blueprint('api', __name__, url_prefix='/api')

STARTED_AT = time.time()


def create_app(test_config=None, clock=None):
    app = Flask(__name__)
    app.config.from_object(config)
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(level=app.config['LOG_LEVEL'],
                        format='%(asctime)s %(levelname)s %(name)s %(message)s')
    app.logger.setLevel(app.config['LOG_LEVEL'])

    db.init_app(app)

    deriver = AlertDeriver()
    subject = VaultSubject()
    subject.attach(AlertObserver(deriver))
    app.extensions['alert_deriver'] = deriver
    app.extensions['vault_store'] = VaultStore(subject)
    app.extensions['rate_gate'] = RateGate(
        max_attempts=app.config['LOGIN_MAX_ATTEMPTS'],
        block_seconds=app.config['LOGIN_BLOCK_SECONDS'],
        max_identities=app.config['RATE_GATE_MAX_IDENTITIES'],
        sweep_seconds=app.config['RATE_GATE_SWEEP_SECONDS'],
        clock=clock,
    )

    app.register_blueprint(api)
    _register_error_handlers(app)

    with app.app_context():
        uri = app.config['SQLALCHEMY_DATABASE_URI']
        if uri.startswith('sqlite:///') and ':memory:' not in uri:
            os.makedirs(os.path.dirname(uri[len('sqlite:///'):]), exist_ok=True)
        db.create_all()

    return app


def _register_error_handlers(app):
    @app.errorhandler(VaultError)
    def handle_vault_error(err):
        if isinstance(err, InternalError):
            app.logger.error('internal error: %s', err, exc_info=err)
        resp = jsonify({'message': err.message})
        resp.status_code = err.status_code
        if isinstance(err, RateLimited):
            resp.headers['Retry-After'] = str(err.retry_after)
        return resp

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        resp = jsonify({'message': err.description})
        resp.status_code = err.code
        return resp

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        app.logger.exception('Unhandled error')
        return handle_vault_error(InternalError())


def gate() -> RateGate:
    return current_app.extensions['rate_gate']


def store() -> VaultStore:
    return current_app.extensions['vault_store']


def deriver() -> AlertDeriver:
    return current_app.extensions['alert_deriver']


def client_identity() -> str:
    if current_app.config['TRUST_PROXY_HEADERS']:
        forwarded = request.headers.get('X-Forwarded-For', '')
        if forwarded:
            return forwarded.split(',')[0].strip()
    return request.remote_addr or 'unknown'


def request_origin() -> RequestOrigin:
    return RequestOrigin(ip_address=client_identity(),
                         user_agent=request.headers.get('User-Agent', ''))


def current_user_id():
    return session.get('user_id')


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        user_id = current_user_id()
        if not user_id:
            raise Unauthorized()
        return view(user_id, *args, **kwargs)
    return wrapped


def parse_body(schema):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        field = '.'.join(str(p) for p in first.get('loc', ()))
        message = first.get('msg', 'Invalid input')
        raise ValidationError(f'{field}: {message}' if field else message)


def parse_id(raw, label):
    try:
        value = int(raw)
    except (TypeError, ValueError):
        value = 0
    if value <= 0:
        raise ValidationError(f'Invalid {label} ID')
    return value


# ----- auth -----

@api.route('/auth/register', methods=['POST'])
def register():
    body = parse_body(RegisterRequest)
    user = auth.register(body.email, body.password, username=body.username, name=body.name)
    return jsonify({'user': user.to_dict()}), 201


@api.route('/auth/login', methods=['POST'])
def login():
    body = parse_body(LoginRequest)
    user = auth.authenticate(gate(), client_identity(), body.email, body.password)
    session['user_id'] = user.id
    return jsonify({'user': user.to_dict()})


@api.route('/auth/logout', methods=['POST'])
def logout():
    session.pop('user_id', None)
    return jsonify({'message': 'Logged out successfully'})


@api.route('/auth/me')
@login_required
def me(user_id):
    user = db.session.get(User, user_id)
    if not user:
        # Session points at a user that no longer exists
        session.pop('user_id', None)
        raise Unauthorized()
    return jsonify({'user': user.to_dict()})


# ----- vault -----

@api.route('/passwords')
@login_required
def list_passwords(user_id):
    return jsonify([e.to_dict() for e in store().list(user_id)])


@api.route('/passwords/<entry_id>')
@login_required
def get_password(user_id, entry_id):
    entry = store().get(parse_id(entry_id, 'password'), user_id)
    if entry is None:
        raise NotFound('Password')
    return jsonify(entry.to_dict())


@api.route('/passwords', methods=['POST'])
@login_required
def create_password(user_id):
    body = parse_body(PasswordCreate)
    extra = body.model_dump(exclude={'title', 'encrypted_password'})
    entry = store().create(user_id, body.title, body.encrypted_password,
                           origin=request_origin(), **extra)
    return jsonify(entry.to_dict()), 201


@api.route('/passwords/<entry_id>', methods=['PUT'])
@login_required
def update_password(user_id, entry_id):
    entry_id = parse_id(entry_id, 'password')
    body = parse_body(PasswordUpdate)
    entry = store().update(entry_id, user_id, body.model_dump(exclude_unset=True),
                           origin=request_origin())
    if entry is None:
        raise NotFound('Password')
    return jsonify(entry.to_dict())


@api.route('/passwords/<entry_id>', methods=['DELETE'])
@login_required
def delete_password(user_id, entry_id):
    if not store().delete(parse_id(entry_id, 'password'), user_id, origin=request_origin()):
        raise NotFound('Password')
    return jsonify({'message': 'Password deleted successfully'})


@api.route('/password-stats')
@login_required
def password_stats(user_id):
    return jsonify(store().stats(user_id).to_dict())


# ----- alerts -----

@api.route('/security-alerts')
@login_required
def security_alerts(user_id):
    if request.args.get('unresolved', '0') in ('1', 'true', 'True'):
        alerts = deriver().list_unresolved(user_id)
    else:
        alerts = deriver().list_all(user_id)
    return jsonify([a.to_dict() for a in alerts])


@api.route('/security-alerts/<alert_id>/resolve', methods=['POST'])
@login_required
def resolve_alert(user_id, alert_id):
    if not deriver().resolve(parse_id(alert_id, 'alert'), user_id):
        raise NotFound('Security alert')
    return jsonify({'message': 'Alert resolved successfully'})


# ----- activity -----

@api.route('/activity-logs')
@login_required
def activity_logs(user_id):
    cfg = current_app.config
    try:
        limit = int(request.args.get('limit', cfg['ACTIVITY_LOG_DEFAULT_LIMIT']))
    except ValueError:
        raise ValidationError('Invalid limit')
    limit = max(1, min(cfg['ACTIVITY_LOG_MAX_LIMIT'], limit))
    return jsonify([log.to_dict() for log in store().activity(user_id, limit)])


# ----- generator -----

@api.route('/generate-password', methods=['POST'])
@login_required
def generate_password(user_id):
    body = parse_body(PasswordGeneratorRequest)
    pwd = builder_generate_password(length=body.length,
                                    upper=body.include_uppercase,
                                    lower=body.include_lowercase,
                                    digits=body.include_numbers,
                                    symbols=body.include_symbols)
    return jsonify({'password': pwd, 'strength': strength.score(pwd)})


@api.route('/health')
def health():
    return jsonify({
        'status': 'ok',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'uptime': time.time() - STARTED_AT,
    })


if __name__ == '__main__':
    create_app().run(debug=True)
