import pytest

from app import create_app
from models import db
from services import auth


class FakeClock:
    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app(clock):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'LOGIN_MAX_ATTEMPTS': 5,
        'LOGIN_BLOCK_SECONDS': 900,
    }, clock=clock)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions['vault_store']


@pytest.fixture
def deriver(app):
    return app.extensions['alert_deriver']


@pytest.fixture
def alice(app):
    return auth.register('alice@example.com', 'Tr0ub4dor&3!', username='alice')


@pytest.fixture
def bob(app):
    return auth.register('bob@example.com', 'B0b$ecret-pass', username='bob')
