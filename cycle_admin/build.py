"""
Database build

Creates every table and, on request, a small demo dataset: an admin, a
coordinating hub, a producer with two variants, a shop, and one order cycle
wiring them together.
"""

import os
from datetime import timedelta

from cycle_admin import db
from cycle_admin.data.base import utcnow
from cycle_admin.data.models import Enterprise, Exchange, OrderCycle, User, Variant
from cycle_admin.logger import get_logger

logger = get_logger("cycle_admin.build")


def build_database(seed_demo=False):
    """
    Create tables (idempotent) and optionally insert demo data.

    Must run inside an application context.
    """
    logger.info("Creating database tables")
    db.create_all()

    if seed_demo:
        seed_demo_data()


def _get_or_create_user(username, email, password, is_admin=False):
    user = User.query.filter_by(username=username).first()
    if user is None:
        user = User(username=username, email=email, is_admin=is_admin)
        user.set_password(password)
        db.session.add(user)
        db.session.flush()
        logger.info(f"Created user {username}")
    return user


def seed_demo_data():
    """Insert the demo dataset unless an order cycle already exists"""
    if OrderCycle.query.first() is not None:
        logger.info("Demo data already present, skipping")
        return None

    admin = _get_or_create_user(
        'admin', 'admin@example.com', os.environ.get('ADMIN_PASSWORD', 'change-me-admin'), is_admin=True
    )
    hub_owner = _get_or_create_user(
        'hub_manager', 'hub@example.com', os.environ.get('DEMO_USER_PASSWORD', 'change-me-demo')
    )
    farmer = _get_or_create_user(
        'farmer', 'farmer@example.com', os.environ.get('DEMO_USER_PASSWORD', 'change-me-demo')
    )

    hub = Enterprise(name='Demo Food Hub', owner_id=hub_owner.id, sells='any', created_by_id=admin.id)
    farm = Enterprise(name='Demo Farm', owner_id=farmer.id, sells='none', is_primary_producer=True, created_by_id=admin.id)
    shop = Enterprise(name='Demo Shop', owner_id=hub_owner.id, sells='own', created_by_id=admin.id)
    db.session.add_all([hub, farm, shop])
    db.session.flush()

    carrots = Variant(name='Carrots 1kg', supplier_id=farm.id, created_by_id=admin.id)
    potatoes = Variant(name='Potatoes 2kg', supplier_id=farm.id, created_by_id=admin.id)
    db.session.add_all([carrots, potatoes])
    db.session.flush()

    now = utcnow()
    order_cycle = OrderCycle(
        name='Demo Weekly Cycle',
        orders_open_at=now - timedelta(days=1),
        orders_close_at=now + timedelta(days=6),
        coordinator_id=hub.id,
        created_by_id=admin.id,
    )
    order_cycle.exchanges.append(Exchange(sender_id=farm.id, receiver_id=hub.id, incoming=True, variants=[carrots, potatoes]))
    order_cycle.exchanges.append(Exchange(sender_id=hub.id, receiver_id=shop.id, incoming=False, variants=[carrots]))
    db.session.add(order_cycle)
    db.session.commit()

    logger.info(f"Demo order cycle {order_cycle.id} created")
    return order_cycle
