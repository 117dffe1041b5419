from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sfa_schemes.dto.calculation import OverrideBenefit, SchemeOverride
from sfa_schemes.schemes.aggregator import SchemeEvaluation
from sfa_schemes.validations.overrides import OverrideValidator, free_goods_placeable


@dataclass(frozen=True)
class OverrideLedger:
    """Immutable set of overrides for one calculation session.

    Every transition returns a new ledger. Each override carries the
    computed benefit it replaces, never discarded.
    """

    entries: Tuple[SchemeOverride, ...] = ()

    def get(self, scheme_id: str) -> Optional[SchemeOverride]:
        return next((o for o in self.entries if o.scheme_id == scheme_id), None)

    def __contains__(self, scheme_id: str) -> bool:
        return self.get(scheme_id) is not None

    def __len__(self) -> int:
        return len(self.entries)

    def with_override(self, override: SchemeOverride) -> "OverrideLedger":
        if override.scheme_id in self:
            return OverrideLedger(tuple(override if o.scheme_id == override.scheme_id else o for o in self.entries))
        return OverrideLedger(self.entries + (override,))

    def without(self, scheme_id: str) -> "OverrideLedger":
        return OverrideLedger(tuple(o for o in self.entries if o.scheme_id != scheme_id))

    def cleared(self) -> "OverrideLedger":
        return OverrideLedger()

    def as_dict(self) -> Dict[str, SchemeOverride]:
        return {o.scheme_id: o for o in self.entries}


def add_override(ledger: OverrideLedger, evaluation: SchemeEvaluation, scheme_id: str, benefit: OverrideBenefit,
                 reason: str, actor: str, occurred_at: datetime) -> Tuple[OverrideLedger, SchemeOverride]:
    """Validate and record an override against the currently applied scheme.

    Raises:
        ValidationError: empty reason, scheme not applied, or a free quantity with no product to grant
    """
    reason = OverrideValidator(evaluation).validate(scheme_id, benefit, reason)
    applied = evaluation.get_applied(scheme_id)
    override = SchemeOverride(
        scheme_id=scheme_id,
        original_benefit=applied.benefit,
        override_benefit=benefit,
        reason=reason,
        actor=actor,
        created_at=occurred_at,
    )
    return ledger.with_override(override), override


def remove_override(ledger: OverrideLedger, scheme_id: str) -> Tuple[OverrideLedger, Optional[SchemeOverride]]:
    """Drop the override for scheme_id; a no-op when there is none."""
    removed = ledger.get(scheme_id)
    if removed is None:
        return ledger, None
    return ledger.without(scheme_id), removed


def rebase_overrides(ledger: OverrideLedger, evaluation: SchemeEvaluation) -> Tuple[OverrideLedger, Tuple[SchemeOverride, ...]]:
    """Carry the ledger onto a fresh evaluation.

    An override is invalidated when its scheme no longer applies or its free
    quantity can no longer be placed. Kept overrides take the freshly
    computed benefit as their original.

    Returns:
        (new ledger, invalidated overrides as they stood before the recompute)
    """
    kept: List[SchemeOverride] = []
    invalidated: List[SchemeOverride] = []
    for override in ledger.entries:
        applied = evaluation.get_applied(override.scheme_id)
        if applied is None or not free_goods_placeable(applied, override.override_benefit):
            invalidated.append(override)
            continue
        kept.append(override.model_copy(update={"original_benefit": applied.benefit}))
    return OverrideLedger(tuple(kept)), tuple(invalidated)
