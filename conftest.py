from decimal import Decimal

import pytest

from app import create_app
from app_models import Student, db
from config import TestConfig
from store import AcademyStore

HOUR = 60 * 60 * 1000
START = 1_700_000_000_000


class FakeClock:
    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, hours):
        self.now += int(hours * HOUR)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app(clock):
    app = create_app(TestConfig)
    app.config['CLOCK'] = clock
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def logged_in(client):
    response = client.post('/login', data={'password': TestConfig.ACADEMY_PASSWORD})
    assert response.status_code == 302
    return client


@pytest.fixture
def store(app, clock):
    with app.app_context():
        yield AcademyStore(db.session, TestConfig.ACADEMY_PASSWORD, clock=clock)


def make_student(standard='5', total_fee=1000, paid_fee=0, name='Student', **kwargs):
    """A Student built in memory, for the pure aggregate and reminder functions."""
    fields = dict(
        id=kwargs.pop('id', f'{name}-{standard}'),
        name=name,
        whatsapp=kwargs.pop('whatsapp', '919876543210'),
        standard=standard,
        total_fee=Decimal(str(total_fee)),
        paid_fee=Decimal(str(paid_fee)),
        created_at=kwargs.pop('created_at', START),
    )
    fields.update(kwargs)
    return Student(**fields)
