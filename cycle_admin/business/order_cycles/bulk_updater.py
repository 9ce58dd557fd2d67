"""
OrderCycleBulkUpdater - applies core field edits to many order cycles

Each row is scoped, filtered and committed on its own. Rows for order
cycles the user cannot manage, or that no longer exist, are skipped without
an error. A failing row does not undo rows that already committed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from cycle_admin import db
from cycle_admin.business.order_cycles.change_set import ChangeSet, CORE_FIELDS
from cycle_admin.business.order_cycles.errors import EmptyInputError, ValidationError
from cycle_admin.business.order_cycles.permissions import OrderCyclePermissions
from cycle_admin.business.order_cycles.updater import OrderCycleUpdater
from cycle_admin.data.order_cycles.order_cycle import OrderCycle
from cycle_admin.logger import get_logger

logger = get_logger("cycle_admin.business.order_cycles.bulk_updater")


@dataclass
class BulkUpdateResult:
    """
    errors is the EmptyInputError message when no rows were supplied,
    otherwise {row index: {field: [messages]}} for the rows that failed.
    """
    success: bool
    errors: Union[str, Dict[str, Any], None] = None
    updated_ids: List[int] = field(default_factory=list)
    skipped_indexes: List[str] = field(default_factory=list)
    no_data: bool = False

    def to_dict(self):
        data = {'success': self.success}
        if self.errors:
            data['errors'] = self.errors
        return data


def _sort_key(index):
    return (0, int(index), '') if str(index).isdigit() else (1, 0, str(index))


class OrderCycleBulkUpdater:
    """Bulk update engine acting on behalf of one user"""

    ROW_FIELDS = CORE_FIELDS

    def __init__(self, user, permissions: Optional[OrderCyclePermissions] = None):
        self.user = user
        self.permissions = permissions or OrderCyclePermissions(user)

    def apply(self, collection_attributes) -> BulkUpdateResult:
        """
        Args:
            collection_attributes: {row index: {id, name?, orders_open_at?, orders_close_at?}}
                (a list is accepted and indexed by position)
        """
        try:
            rows = self._rows(collection_attributes)
        except EmptyInputError as e:
            logger.info(f"Bulk update by user {getattr(self.user, 'id', None)} rejected: {e}")
            return BulkUpdateResult(success=False, errors=str(e), no_data=True)

        result = BulkUpdateResult(success=True)
        row_errors = {}

        for index, row in rows:
            order_cycle = self._find(row)
            if order_cycle is None:
                logger.warning(f"Bulk update row {index}: order cycle {row.get('id')!r} not found, skipped")
                result.skipped_indexes.append(index)
                continue

            scope = self.permissions.scope_for(order_cycle)
            if scope.is_empty:
                logger.warning(
                    f"Bulk update row {index}: user {getattr(self.user, 'id', None)} "
                    f"cannot manage order cycle {order_cycle.id}, skipped"
                )
                result.skipped_indexes.append(index)
                continue

            try:
                change_set = ChangeSet.from_params({key: row[key] for key in self.ROW_FIELDS if key in row})
            except ValidationError as e:
                row_errors[index] = e.to_errors()
                continue

            # scope=None: the updater re-resolves and filters under its row lock
            row_result = OrderCycleUpdater(order_cycle.id, self.user, self.permissions).apply(change_set)
            if row_result.success:
                result.updated_ids.append(order_cycle.id)
            elif row_result.error_type == 'AuthorizationError':
                logger.warning(f"Bulk update row {index}: access to order cycle {order_cycle.id} revoked, skipped")
                result.skipped_indexes.append(index)
            else:
                row_errors[index] = row_result.errors

        if row_errors:
            result.success = False
            result.errors = row_errors
            logger.info(f"Bulk update finished with errors on rows: {', '.join(row_errors)}")
        else:
            logger.info(f"Bulk update by user {getattr(self.user, 'id', None)}: {len(result.updated_ids)} row(s) applied")
        return result

    @staticmethod
    def _rows(collection_attributes):
        if not collection_attributes:
            raise EmptyInputError()
        if isinstance(collection_attributes, dict):
            items = [(str(index), row) for index, row in collection_attributes.items()]
        elif not isinstance(collection_attributes, (list, tuple)):
            raise EmptyInputError()
        else:
            items = [(str(index), row) for index, row in enumerate(collection_attributes)]
        items = [(index, row) for index, row in items if isinstance(row, dict)]
        if not items:
            raise EmptyInputError()
        return sorted(items, key=lambda item: _sort_key(item[0]))

    @staticmethod
    def _find(row):
        try:
            order_cycle_id = int(row.get('id'))
        except (TypeError, ValueError):
            return None
        return db.session.get(OrderCycle, order_cycle_id)
