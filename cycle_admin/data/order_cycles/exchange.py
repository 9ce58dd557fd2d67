from cycle_admin import db
from cycle_admin.data.base import UserCreatedBase


exchange_variants = db.Table(
    'exchange_variants',
    db.Column('exchange_id', db.Integer, db.ForeignKey('exchanges.id', ondelete='CASCADE'), primary_key=True),
    db.Column('variant_id', db.Integer, db.ForeignKey('variants.id'), primary_key=True),
)


class Exchange(UserCreatedBase):
    """
    One leg of an order cycle.

    Incoming: sender (a supplier) -> coordinator.
    Outgoing: coordinator -> receiver (a distributor).
    """
    __tablename__ = 'exchanges'
    __table_args__ = (
        db.UniqueConstraint('order_cycle_id', 'sender_id', 'receiver_id', 'incoming', name='uq_exchange_edge'),
    )

    order_cycle_id = db.Column(db.Integer, db.ForeignKey('order_cycles.id'), nullable=False)
    sender_id = db.Column(db.Integer, db.ForeignKey('enterprises.id'), nullable=False)
    receiver_id = db.Column(db.Integer, db.ForeignKey('enterprises.id'), nullable=False)
    incoming = db.Column(db.Boolean, nullable=False, default=False)

    pickup_time = db.Column(db.String(255), nullable=True)
    pickup_instructions = db.Column(db.Text, nullable=True)
    receival_instructions = db.Column(db.Text, nullable=True)

    order_cycle = db.relationship('OrderCycle', back_populates='exchanges')
    sender = db.relationship('Enterprise', foreign_keys=[sender_id])
    receiver = db.relationship('Enterprise', foreign_keys=[receiver_id])
    variants = db.relationship('Variant', secondary=exchange_variants, order_by='Variant.id')

    def __repr__(self):
        direction = 'incoming' if self.incoming else 'outgoing'
        return f'<Exchange {self.id}: {self.sender_id} -> {self.receiver_id} ({direction})>'

    @property
    def edge(self):
        return (self.sender_id, self.receiver_id)

    @property
    def enterprise_id(self):
        """The participant that is not the coordinator"""
        return self.sender_id if self.incoming else self.receiver_id

    @property
    def variant_ids(self):
        return {variant.id for variant in self.variants}

    def to_dict(self):
        return {
            'id': self.id,
            'sender_id': self.sender_id,
            'receiver_id': self.receiver_id,
            'enterprise_id': self.enterprise_id,
            'incoming': self.incoming,
            'variants': sorted(self.variant_ids),
            'pickup_time': self.pickup_time,
            'pickup_instructions': self.pickup_instructions,
            'receival_instructions': self.receival_instructions,
        }
