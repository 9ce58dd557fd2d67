"""
Change sets

A ChangeSet is the typed form of an order cycle update request: the core
fields being changed plus, optionally, the requested incoming and outgoing
exchange lists. Parsing from request parameters happens here; permission
filtering happens in mutation_filter; persistence in updater.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Dict, FrozenSet, List, Optional

from cycle_admin.business.order_cycles.errors import ValidationError


CORE_FIELDS = ('name', 'orders_open_at', 'orders_close_at')
EXCHANGE_ATTRIBUTES = ('pickup_time', 'pickup_instructions', 'receival_instructions')


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse a request timestamp into a naive UTC datetime.

    Accepts datetimes, dates (midnight) and ISO 8601 strings. Blank means None.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _parse_variant_ids(raw) -> FrozenSet[int]:
    """Variants arrive either as a list of ids or as {id: selected}"""
    if isinstance(raw, dict):
        return frozenset(int(variant_id) for variant_id, selected in raw.items() if _truthy(selected))
    return frozenset(int(variant_id) for variant_id in raw)


def _truthy(value):
    if isinstance(value, str):
        return value.lower() in ('true', '1', 'yes', 'on')
    return bool(value)


@dataclass(frozen=True)
class ExchangeEdit:
    """
    Requested state of one exchange.

    enterprise_id is the participant on the far side of the coordinator: the
    sender of an incoming exchange or the receiver of an outgoing one.
    variant_ids of None leaves the exchange's variants unchanged.
    """
    enterprise_id: int
    incoming: bool
    variant_ids: Optional[FrozenSet[int]] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    def edge(self, coordinator_id):
        if self.incoming:
            return (self.enterprise_id, coordinator_id)
        return (coordinator_id, self.enterprise_id)

    @classmethod
    def from_params(cls, params, incoming):
        enterprise_id = params.get('enterprise_id')
        if enterprise_id is None:
            enterprise_id = params.get('sender_id') if incoming else params.get('receiver_id')
        if enterprise_id is None:
            raise ValueError("enterprise_id is required")

        variant_ids = None
        if params.get('variants') is not None:
            variant_ids = _parse_variant_ids(params['variants'])

        attributes = {key: params[key] for key in EXCHANGE_ATTRIBUTES if key in params}
        return cls(
            enterprise_id=int(enterprise_id),
            incoming=incoming,
            variant_ids=variant_ids,
            attributes=attributes,
        )


@dataclass
class ChangeSet:
    """
    Proposed changes to one order cycle.

    incoming_exchanges / outgoing_exchanges of None mean "leave that side
    alone"; an empty list means "the actor wants none of the exchanges it may
    edit on that side".
    """
    fields: Dict[str, Any] = field(default_factory=dict)
    incoming_exchanges: Optional[List[ExchangeEdit]] = None
    outgoing_exchanges: Optional[List[ExchangeEdit]] = None
    # Set by the mutation filter: the scope this change set was reduced to
    scope: Any = None

    @property
    def is_empty(self):
        return not self.fields and self.incoming_exchanges is None and self.outgoing_exchanges is None

    @property
    def exchange_edits(self):
        return list(self.incoming_exchanges or []) + list(self.outgoing_exchanges or [])

    @classmethod
    def from_params(cls, params: Optional[Dict[str, Any]]) -> 'ChangeSet':
        """
        Build a change set from request parameters.

        Unknown keys are ignored. Malformed values raise ValidationError
        carrying one message per offending field.
        """
        params = params or {}
        if not isinstance(params, dict):
            raise ValidationError.on('base', "order cycle data must be an object")
        errors = {}
        fields = {}

        if 'name' in params:
            name = params['name']
            if name is None or isinstance(name, str):
                fields['name'] = name.strip() if name else name
            else:
                errors.setdefault('name', []).append("must be text")

        for key in ('orders_open_at', 'orders_close_at'):
            if key in params:
                try:
                    fields[key] = parse_timestamp(params[key])
                except (TypeError, ValueError):
                    errors.setdefault(key, []).append("is not a valid date and time")

        exchanges = {}
        for key, incoming in (('incoming_exchanges', True), ('outgoing_exchanges', False)):
            if key not in params or params[key] is None:
                exchanges[key] = None
                continue
            if not isinstance(params[key], (list, tuple)):
                errors.setdefault(key, []).append("must be a list of exchanges")
                continue
            edits = []
            for raw in params[key]:
                try:
                    edits.append(ExchangeEdit.from_params(raw, incoming))
                except (AttributeError, TypeError, ValueError):
                    errors.setdefault(key, []).append(f"contains an invalid exchange: {raw!r}")
            exchanges[key] = edits

        if errors:
            raise ValidationError(errors)

        return cls(
            fields=fields,
            incoming_exchanges=exchanges['incoming_exchanges'],
            outgoing_exchanges=exchanges['outgoing_exchanges'],
        )
