from cycle_admin import db
from cycle_admin.data.base import UserCreatedBase


class Order(UserCreatedBase):
    """A customer order placed through an order cycle"""
    __tablename__ = 'orders'

    number = db.Column(db.String(32), unique=True, nullable=False)
    state = db.Column(db.String(20), nullable=False, default='cart')  # cart/complete/canceled

    order_cycle_id = db.Column(db.Integer, db.ForeignKey('order_cycles.id'), nullable=True)
    distributor_id = db.Column(db.Integer, db.ForeignKey('enterprises.id'), nullable=True)

    order_cycle = db.relationship('OrderCycle', back_populates='orders')
    distributor = db.relationship('Enterprise', foreign_keys=[distributor_id])

    def __repr__(self):
        return f'<Order {self.number}>'
