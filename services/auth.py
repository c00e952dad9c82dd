import logging
import re

from sqlalchemy.exc import IntegrityError

from errors import InvalidCredentials, ValidationError
from models import db
from models.user import User
from patterns.rate_gate import RateGate
from utils.strength import is_strong

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

WEAK_PASSWORD_MESSAGE = ('Password is too weak. It must have uppercase, lowercase, numbers, '
                         'symbols and be at least 8 characters long.')


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_RE.match(email) is not None


def _free_username(base: str) -> str:
    # Derived handles get a numeric suffix on clash: bob, bob2, bob3...
    base = base[:56]
    taken = {name for (name,) in db.session.query(User.username)
             .filter(User.username.like(base + '%'))}
    candidate, n = base, 1
    while candidate in taken:
        n += 1
        candidate = f'{base}{n}'
    return candidate


def register(email: str, password: str, username: str = None, name: str = None) -> User:
    if not is_valid_email(email):
        raise ValidationError('Invalid email format')
    if not is_strong(password):
        raise ValidationError(WEAK_PASSWORD_MESSAGE)
    if User.query.filter_by(email=email).first():
        raise ValidationError('Unable to register that email.')
    if username:
        if User.query.filter_by(username=username).first():
            raise ValidationError('Unable to register that email.')
    else:
        username = _free_username(email.split('@', 1)[0])

    user = User(email=email, username=username, name=name)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration
        db.session.rollback()
        raise ValidationError('Unable to register that email.')
    logger.info('registered user %s', user.id)
    return user


def authenticate(gate: RateGate, identity: str, email: str, password: str) -> User:
    """Verify credentials behind the rate gate.

    Raises ``RateLimited`` before any lookup when the identity is blocked and
    ``InvalidCredentials`` on a mismatch. A success clears the identity's
    failure count, a failure adds one.
    """
    gate.check(identity)

    try:
        user = User.query.filter_by(email=email).first()
        verified = user is not None and user.check_password(password)
    except Exception:
        gate.release(identity)
        raise

    if verified:
        gate.record_success(identity)
        logger.info('user %s logged in from %s', user.id, identity)
        return user

    failures = gate.record_failure(identity)
    logger.warning('failed login from %s (%d/%d)', identity, failures, gate.max_attempts)
    raise InvalidCredentials()
