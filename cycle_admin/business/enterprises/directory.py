"""
Enterprise directory

Answers which enterprises a user manages and which of them may coordinate
an order cycle. Everything that asks "may this user touch that enterprise"
goes through here.
"""

from typing import List, Set

from cycle_admin import db
from cycle_admin.data.core.enterprise import Enterprise, EnterpriseRole
from cycle_admin.data.core.user import User


class EnterpriseDirectory:
    """Read-only view over enterprises and the users managing them"""

    def enterprises_managed_by(self, user: User) -> List[Enterprise]:
        """
        Enterprises the user owns or holds a role on.

        Global administrators manage every enterprise.
        """
        if user is None or not getattr(user, 'is_authenticated', False):
            return []

        query = Enterprise.query
        if not user.is_admin:
            role_enterprise_ids = db.select(EnterpriseRole.enterprise_id).where(
                EnterpriseRole.user_id == user.id
            )
            query = query.filter(
                db.or_(
                    Enterprise.owner_id == user.id,
                    Enterprise.id.in_(role_enterprise_ids),
                )
            )
        return query.order_by(Enterprise.name.asc(), Enterprise.id.asc()).all()

    def managed_enterprise_ids(self, user: User) -> Set[int]:
        return {enterprise.id for enterprise in self.enterprises_managed_by(user)}

    @staticmethod
    def is_coordinator_eligible(enterprise: Enterprise) -> bool:
        """Only enterprises that sell may coordinate"""
        return enterprise is not None and enterprise.is_distributor
