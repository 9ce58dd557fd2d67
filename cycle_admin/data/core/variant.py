from cycle_admin import db
from cycle_admin.data.base import UserCreatedBase


class Variant(UserCreatedBase):
    """A sellable variant of a product, supplied by one enterprise"""
    __tablename__ = 'variants'

    name = db.Column(db.String(255), nullable=False)
    sku = db.Column(db.String(100), nullable=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey('enterprises.id'), nullable=False)

    supplier = db.relationship('Enterprise', back_populates='variants')

    def __repr__(self):
        return f'<Variant {self.id}: {self.name}>'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'sku': self.sku,
            'supplier_id': self.supplier_id,
        }
