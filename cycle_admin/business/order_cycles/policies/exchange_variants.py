"""
Exchange Variant Policy

Validates the variants requested for an exchange.
"""

from typing import Iterable

from cycle_admin.business.order_cycles.errors import ValidationError


class ExchangeVariantPolicy:
    """
    Rules:
    1. Every variant must exist
    2. An incoming exchange only carries variants supplied by its sender
    3. An outgoing exchange only carries variants some incoming exchange brings in
    """

    @classmethod
    def check_incoming(cls, field: str, sender_id: int, requested_ids: Iterable[int], variants_by_id: dict) -> None:
        requested_ids = set(requested_ids)
        cls._check_exist(field, requested_ids, variants_by_id)

        foreign = sorted(
            variant_id for variant_id in requested_ids
            if variants_by_id[variant_id].supplier_id != sender_id
        )
        if foreign:
            raise ValidationError.on(
                field,
                f"variants {', '.join(map(str, foreign))} are not supplied by enterprise {sender_id}"
            )

    @classmethod
    def check_outgoing(cls, field: str, requested_ids: Iterable[int], variants_by_id: dict, supplied_ids: Iterable[int]) -> None:
        requested_ids = set(requested_ids)
        cls._check_exist(field, requested_ids, variants_by_id)

        not_supplied = sorted(requested_ids - set(supplied_ids))
        if not_supplied:
            raise ValidationError.on(
                field,
                f"variants {', '.join(map(str, not_supplied))} are not supplied to this order cycle"
            )

    @staticmethod
    def _check_exist(field, requested_ids, variants_by_id):
        missing = sorted(requested_ids - set(variants_by_id))
        if missing:
            raise ValidationError.on(field, f"unknown variants: {', '.join(map(str, missing))}")
