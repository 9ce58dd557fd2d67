"""
Mutation Filter

Projects a change set down to what an UpdateScope allows. Anything outside
the scope is dropped silently: an actor with a partial scope gets a smaller,
still-successful update rather than an error.
"""

from dataclasses import replace

from cycle_admin.business.order_cycles.change_set import ChangeSet, CORE_FIELDS
from cycle_admin.business.order_cycles.permissions import UpdateScope
from cycle_admin.logger import get_logger

logger = get_logger("cycle_admin.business.order_cycles.mutation_filter")


def _filter_edits(scope, edits):
    if edits is None:
        return None
    return [edit for edit in edits if scope.allows_edge(edit.edge(scope.coordinator_id))]


def filter_change_set(scope: UpdateScope, change_set: ChangeSet) -> ChangeSet:
    """
    Reduce change_set to the scope. Never raises.

    Returns:
        ChangeSet: a new change set, a subset of the input, remembering scope
    """
    fields = dict(change_set.fields)
    if not scope.can_edit_core_fields:
        dropped = [key for key in CORE_FIELDS if key in fields]
        for key in dropped:
            fields.pop(key)
        if dropped:
            logger.debug(f"Dropped core fields outside scope: {', '.join(dropped)}")

    incoming = _filter_edits(scope, change_set.incoming_exchanges)
    outgoing = _filter_edits(scope, change_set.outgoing_exchanges)

    requested = len(change_set.exchange_edits)
    kept = len(incoming or []) + len(outgoing or [])
    if kept < requested:
        logger.debug(f"Dropped {requested - kept} exchange edit(s) outside scope")

    return replace(
        change_set,
        fields=fields,
        incoming_exchanges=incoming,
        outgoing_exchanges=outgoing,
        scope=scope,
    )
