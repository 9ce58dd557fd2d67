from cycle_admin import db
from cycle_admin.data.base import UserCreatedBase


order_cycle_schedules = db.Table(
    'order_cycle_schedules',
    db.Column('order_cycle_id', db.Integer, db.ForeignKey('order_cycles.id'), primary_key=True),
    db.Column('schedule_id', db.Integer, db.ForeignKey('schedules.id'), primary_key=True),
)


class Schedule(UserCreatedBase):
    """Subscription schedule; an order cycle it references is linked to it"""
    __tablename__ = 'schedules'

    name = db.Column(db.String(255), nullable=False)

    order_cycles = db.relationship('OrderCycle', secondary=order_cycle_schedules, back_populates='schedules')

    def __repr__(self):
        return f'<Schedule {self.id}: {self.name}>'
