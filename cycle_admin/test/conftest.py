"""
Pytest configuration and fixtures for the order cycle tests
"""
import itertools
import os
from datetime import timedelta

import pytest

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('SECRET_KEY', 'test-secret-key')

from cycle_admin import create_app  # noqa: E402
from cycle_admin import db as _db  # noqa: E402
from cycle_admin.data.base import utcnow  # noqa: E402
from cycle_admin.data.models import (  # noqa: E402
    Enterprise,
    EnterpriseRole,
    Exchange,
    Order,
    OrderCycle,
    Schedule,
    User,
    Variant,
)

TEST_PASSWORD = 'password123'

TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test-secret-key',
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'WTF_CSRF_ENABLED': False,
    'RATELIMIT_ENABLED': False,
    'ENABLE_HTTPS': False,
    'SESSION_COOKIE_SECURE': False,
    'TASK_WORKER_ENABLED': False,
}


@pytest.fixture()
def app():
    """Flask application with a fresh in-memory database"""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def db(app):
    return _db


@pytest.fixture()
def client(app):
    """Flask test client"""
    return app.test_client()


@pytest.fixture()
def task_queue(app):
    return app.extensions['task_queue']


def login(client, user, password=TEST_PASSWORD):
    """Log a user in through the login endpoint"""
    return client.post('/login', data={'username': user.username, 'password': password})


@pytest.fixture()
def login_as(client):
    def _login_as(user):
        response = login(client, user)
        assert response.status_code == 302, "login should redirect"
        return client
    return _login_as


class Builder:
    """Creates committed records with sensible defaults"""

    def __init__(self, session):
        self.session = session
        self._sequence = itertools.count(1)

    def _next(self):
        return next(self._sequence)

    def _save(self, record):
        self.session.add(record)
        self.session.commit()
        return record

    def user(self, username=None, is_admin=False, password=TEST_PASSWORD):
        n = self._next()
        username = username or f'user{n}'
        user = User(username=username, email=f'{username}@example.com', is_admin=is_admin)
        user.set_password(password)
        return self._save(user)

    def enterprise(self, owner=None, sells='any', name=None, is_primary_producer=False, managers=()):
        owner = owner or self.user()
        enterprise = Enterprise(
            name=name or f'Enterprise {self._next()}',
            owner_id=owner.id,
            sells=sells,
            is_primary_producer=is_primary_producer,
        )
        self._save(enterprise)
        for manager in managers:
            self.role(manager, enterprise)
        return enterprise

    def distributor(self, owner=None, **kwargs):
        return self.enterprise(owner=owner, sells='any', **kwargs)

    def producer(self, owner=None, **kwargs):
        return self.enterprise(owner=owner, sells='none', is_primary_producer=True, **kwargs)

    def role(self, user, enterprise):
        return self._save(EnterpriseRole(user_id=user.id, enterprise_id=enterprise.id))

    def variant(self, supplier, name=None):
        return self._save(Variant(name=name or f'Variant {self._next()}', supplier_id=supplier.id))

    def order_cycle(self, coordinator=None, name=None, orders_open_at='default', orders_close_at='default'):
        now = utcnow().replace(microsecond=0)
        coordinator = coordinator or self.distributor()
        return self._save(OrderCycle(
            name=name or f'Order Cycle {self._next()}',
            orders_open_at=now - timedelta(days=1) if orders_open_at == 'default' else orders_open_at,
            orders_close_at=now + timedelta(days=7) if orders_close_at == 'default' else orders_close_at,
            coordinator_id=coordinator.id,
        ))

    def exchange(self, order_cycle, sender, receiver, incoming, variants=()):
        return self._save(Exchange(
            order_cycle_id=order_cycle.id,
            sender_id=sender.id,
            receiver_id=receiver.id,
            incoming=incoming,
            variants=list(variants),
        ))

    def order(self, order_cycle, distributor=None):
        return self._save(Order(
            number=f'R{self._next():09d}',
            order_cycle_id=order_cycle.id,
            distributor_id=distributor.id if distributor else None,
        ))

    def schedule(self, order_cycles):
        schedule = Schedule(name=f'Schedule {self._next()}')
        schedule.order_cycles = list(order_cycles)
        return self._save(schedule)


@pytest.fixture()
def build(db):
    return Builder(db.session)


@pytest.fixture()
def supply_chain(build):
    """
    One order cycle with a producer supplying the coordinator and the
    coordinator distributing to a hub, each enterprise with its own owner.
    """
    order_cycle = build.order_cycle()
    coordinator = order_cycle.coordinator
    producer = build.producer()
    other_producer = build.producer()
    hub = build.distributor()
    variant = build.variant(producer)
    spare_variant = build.variant(producer)
    other_variant = build.variant(other_producer)

    incoming = build.exchange(order_cycle, producer, coordinator, incoming=True, variants=[variant])
    other_incoming = build.exchange(order_cycle, other_producer, coordinator, incoming=True, variants=[other_variant])
    outgoing = build.exchange(order_cycle, coordinator, hub, incoming=False, variants=[variant])

    class Chain:
        pass

    chain = Chain()
    chain.order_cycle = order_cycle
    chain.coordinator = coordinator
    chain.producer = producer
    chain.other_producer = other_producer
    chain.hub = hub
    chain.variant = variant
    chain.spare_variant = spare_variant
    chain.other_variant = other_variant
    chain.incoming = incoming
    chain.other_incoming = other_incoming
    chain.outgoing = outgoing
    return chain
