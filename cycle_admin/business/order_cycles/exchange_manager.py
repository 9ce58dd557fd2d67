"""
ExchangeManager - applies requested exchange lists to an order cycle

Diffs each requested side (incoming / outgoing) against the cycle's current
exchanges: missing exchanges are created, existing ones updated, and
exchanges absent from the request removed. Creating and removing exchanges
needs a scope with can_create_exchanges; narrower scopes only update the
exchanges they were given. Nothing is committed here.
"""

from typing import List

from cycle_admin import db
from cycle_admin.business.order_cycles.change_set import ChangeSet, ExchangeEdit
from cycle_admin.business.order_cycles.errors import ValidationError
from cycle_admin.business.order_cycles.policies import ExchangeVariantPolicy
from cycle_admin.data.core.enterprise import Enterprise
from cycle_admin.data.core.variant import Variant
from cycle_admin.data.order_cycles.exchange import Exchange
from cycle_admin.logger import get_logger

logger = get_logger("cycle_admin.business.order_cycles.exchange_manager")


class ExchangeManager:
    """Mutates the exchanges of one order cycle inside the caller's transaction"""

    def __init__(self, order_cycle, user=None):
        self.order_cycle = order_cycle
        self.user = user
        self.changed = False

    @property
    def user_id(self):
        return getattr(self.user, 'id', None)

    def apply(self, change_set: ChangeSet) -> bool:
        """
        Apply the exchange edits of a filtered change set.

        Incoming exchanges go first so outgoing variants are checked against
        the updated supply. Outgoing exchanges then drop any variant that is
        no longer supplied.

        Returns:
            bool: True if any exchange row was created, changed or removed

        Raises:
            ValidationError: Unknown enterprise or variant, duplicate edits,
                or variants the exchange may not carry
        """
        scope = change_set.scope
        if change_set.incoming_exchanges is not None:
            self._sync('incoming_exchanges', True, change_set.incoming_exchanges, scope)
            self._prune_unsupplied()
        if change_set.outgoing_exchanges is not None:
            self._sync('outgoing_exchanges', False, change_set.outgoing_exchanges, scope)
        return self.changed

    def _sync(self, field: str, incoming: bool, edits: List[ExchangeEdit], scope) -> None:
        coordinator_id = self.order_cycle.coordinator_id
        self._check_enterprises(field, edits)
        variants_by_id = self._load_variants(edits)

        requested_edges = set()
        for edit in edits:
            edge = edit.edge(coordinator_id)
            if edge in requested_edges:
                raise ValidationError.on(field, f"enterprise {edit.enterprise_id} is listed more than once")
            requested_edges.add(edge)

            exchange = self.order_cycle.find_exchange(edge[0], edge[1], incoming)
            if exchange is None:
                if scope is not None and not scope.can_create_exchanges:
                    continue
                exchange = self._create(edit, edge)

            self._update(field, exchange, edit, variants_by_id)

        if scope is not None and not scope.can_create_exchanges:
            return

        current = self.order_cycle.incoming_exchanges if incoming else self.order_cycle.outgoing_exchanges
        for exchange in current:
            if exchange.edge not in requested_edges:
                self._remove(exchange)

    def _prune_unsupplied(self) -> None:
        supplied = self.order_cycle.supplied_variant_ids
        for exchange in self.order_cycle.outgoing_exchanges:
            dropped = exchange.variant_ids - supplied
            if not dropped:
                continue
            exchange.variants = [variant for variant in exchange.variants if variant.id in supplied]
            exchange.updated_by_id = self.user_id
            self.changed = True
            logger.debug(
                f"Order cycle {self.order_cycle.id}: variants {sorted(dropped)} no longer supplied, "
                f"removed from exchange {exchange.sender_id} -> {exchange.receiver_id}"
            )

    def _create(self, edit: ExchangeEdit, edge) -> Exchange:
        exchange = Exchange(
            sender_id=edge[0],
            receiver_id=edge[1],
            incoming=edit.incoming,
            created_by_id=self.user_id,
            updated_by_id=self.user_id,
        )
        self.order_cycle.exchanges.append(exchange)
        self.changed = True
        logger.debug(f"Order cycle {self.order_cycle.id}: adding exchange {edge[0]} -> {edge[1]}")
        return exchange

    def _update(self, field: str, exchange: Exchange, edit: ExchangeEdit, variants_by_id: dict) -> None:
        if edit.variant_ids is not None:
            if exchange.incoming:
                ExchangeVariantPolicy.check_incoming(field, exchange.sender_id, edit.variant_ids, variants_by_id)
            else:
                ExchangeVariantPolicy.check_outgoing(
                    field, edit.variant_ids, variants_by_id, self.order_cycle.supplied_variant_ids
                )
            if exchange.variant_ids != set(edit.variant_ids):
                exchange.variants = [variants_by_id[variant_id] for variant_id in sorted(edit.variant_ids)]
                self.changed = True

        touched = False
        for key, value in edit.attributes.items():
            if getattr(exchange, key) != value:
                setattr(exchange, key, value)
                touched = True
        if touched:
            self.changed = True
            exchange.updated_by_id = self.user_id

    def _remove(self, exchange: Exchange) -> None:
        logger.debug(f"Order cycle {self.order_cycle.id}: removing exchange {exchange.sender_id} -> {exchange.receiver_id}")
        self.order_cycle.exchanges.remove(exchange)
        self.changed = True

    @staticmethod
    def _check_enterprises(field, edits):
        enterprise_ids = {edit.enterprise_id for edit in edits}
        if not enterprise_ids:
            return
        found = {
            enterprise_id for (enterprise_id,) in
            db.session.query(Enterprise.id).filter(Enterprise.id.in_(sorted(enterprise_ids))).all()
        }
        missing = sorted(enterprise_ids - found)
        if missing:
            raise ValidationError.on(field, f"unknown enterprises: {', '.join(map(str, missing))}")

    @staticmethod
    def _load_variants(edits):
        variant_ids = set()
        for edit in edits:
            if edit.variant_ids:
                variant_ids.update(edit.variant_ids)
        if not variant_ids:
            return {}
        variants = Variant.query.filter(Variant.id.in_(sorted(variant_ids))).all()
        return {variant.id: variant for variant in variants}
