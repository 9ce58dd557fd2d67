from cycle_admin import db
from cycle_admin.data.base import UserCreatedBase


class Enterprise(UserCreatedBase):
    """
    A business taking part in order cycles.

    Its role in a given order cycle (coordinator, supplier, distributor) is
    derived from the cycle's exchanges and is never stored here.
    """
    __tablename__ = 'enterprises'

    SELLS_OPTIONS = ('none', 'own', 'any')

    name = db.Column(db.String(255), nullable=False)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    sells = db.Column(db.String(20), nullable=False, default='none')
    is_primary_producer = db.Column(db.Boolean, default=False)

    owner = db.relationship('User', foreign_keys=[owner_id])
    roles = db.relationship('EnterpriseRole', back_populates='enterprise', cascade='all, delete-orphan')
    variants = db.relationship('Variant', back_populates='supplier', lazy='dynamic')

    def __repr__(self):
        return f'<Enterprise {self.id}: {self.name}>'

    @property
    def is_distributor(self):
        """Enterprises that sell can coordinate order cycles"""
        return self.sells != 'none'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'owner_id': self.owner_id,
            'sells': self.sells,
            'is_primary_producer': self.is_primary_producer,
        }


class EnterpriseRole(db.Model):
    """Grants a user management rights over an enterprise it does not own"""
    __tablename__ = 'enterprise_roles'
    __table_args__ = (db.UniqueConstraint('user_id', 'enterprise_id', name='uq_enterprise_role'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    enterprise_id = db.Column(db.Integer, db.ForeignKey('enterprises.id'), nullable=False)

    user = db.relationship('User', back_populates='enterprise_roles')
    enterprise = db.relationship('Enterprise', back_populates='roles')

    def __repr__(self):
        return f'<EnterpriseRole user={self.user_id} enterprise={self.enterprise_id}>'
