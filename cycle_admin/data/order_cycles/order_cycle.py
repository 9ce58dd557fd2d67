from cycle_admin import db
from cycle_admin.data.base import UserCreatedBase, utcnow
from cycle_admin.data.orders.schedule import order_cycle_schedules


class OrderCycle(UserCreatedBase):
    """
    A time-bounded window in which suppliers send goods to a coordinator
    (incoming exchanges) and the coordinator sends them on to distributors
    (outgoing exchanges).
    """
    __tablename__ = 'order_cycles'

    name = db.Column(db.String(255), nullable=False)
    orders_open_at = db.Column(db.DateTime, nullable=True)
    orders_close_at = db.Column(db.DateTime, nullable=True)  # None: open-ended

    coordinator_id = db.Column(db.Integer, db.ForeignKey('enterprises.id'), nullable=False)

    coordinator = db.relationship('Enterprise', foreign_keys=[coordinator_id])
    exchanges = db.relationship(
        'Exchange',
        back_populates='order_cycle',
        cascade='all, delete-orphan',
        order_by='Exchange.id'
    )
    schedules = db.relationship('Schedule', secondary=order_cycle_schedules, back_populates='order_cycles')
    orders = db.relationship('Order', back_populates='order_cycle', lazy='dynamic')

    def __repr__(self):
        return f'<OrderCycle {self.id}: {self.name}>'

    # Properties
    @property
    def incoming_exchanges(self):
        return [exchange for exchange in self.exchanges if exchange.incoming]

    @property
    def outgoing_exchanges(self):
        return [exchange for exchange in self.exchanges if not exchange.incoming]

    @property
    def supplied_variant_ids(self):
        """Variants brought in by any incoming exchange"""
        return {variant.id for exchange in self.incoming_exchanges for variant in exchange.variants}

    @property
    def is_undated(self):
        return self.orders_open_at is None

    @property
    def status(self):
        """undated / upcoming / open / closed, relative to now"""
        now = utcnow()
        if self.orders_open_at is None:
            return 'undated'
        if self.orders_open_at > now:
            return 'upcoming'
        if self.orders_close_at is None or self.orders_close_at > now:
            return 'open'
        return 'closed'

    # Methods
    def find_exchange(self, sender_id, receiver_id, incoming):
        for exchange in self.exchanges:
            if (exchange.sender_id, exchange.receiver_id, exchange.incoming) == (sender_id, receiver_id, incoming):
                return exchange
        return None

    def to_dict(self, include_exchanges=False):
        data = {
            'id': self.id,
            'name': self.name,
            'orders_open_at': self.orders_open_at.isoformat() if self.orders_open_at else None,
            'orders_close_at': self.orders_close_at.isoformat() if self.orders_close_at else None,
            'coordinator_id': self.coordinator_id,
            'status': self.status,
        }
        if include_exchanges:
            data['incoming_exchanges'] = [exchange.to_dict() for exchange in self.incoming_exchanges]
            data['outgoing_exchanges'] = [exchange.to_dict() for exchange in self.outgoing_exchanges]
        data.update(self.audit_dict())
        return data
