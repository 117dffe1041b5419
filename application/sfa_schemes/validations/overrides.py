from sfa_schemes.core.constants import SchemeErrorCode
from sfa_schemes.core.exceptions import ValidationError
from sfa_schemes.dto.calculation import AppliedScheme, OverrideBenefit
from sfa_schemes.schemes.aggregator import SchemeEvaluation


def free_goods_placeable(applied: AppliedScheme, benefit: OverrideBenefit) -> bool:
    """A free quantity needs an explicit product or one the scheme already grants"""
    if benefit.free_quantity <= 0 or benefit.free_product_id:
        return True
    return bool(applied.benefit.free_goods)


class OverrideValidator:
    """Caller-contract checks for addOverride, raised synchronously"""

    def __init__(self, evaluation: SchemeEvaluation):
        self.evaluation = evaluation

    def validate_reason(self, reason: str) -> str:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError(SchemeErrorCode.OVERRIDE_REASON_REQUIRED, "An override reason is required", field="reason")
        return reason

    def validate_scheme_applied(self, scheme_id: str) -> AppliedScheme:
        applied = self.evaluation.get_applied(scheme_id)
        if applied is None:
            raise ValidationError(SchemeErrorCode.SCHEME_NOT_APPLIED, f"Scheme '{scheme_id}' is not applied to this cart", field="scheme_id")
        return applied

    def validate_benefit(self, applied: AppliedScheme, benefit: OverrideBenefit):
        if not free_goods_placeable(applied, benefit):
            raise ValidationError(
                SchemeErrorCode.INVALID_OVERRIDE_BENEFIT,
                f"Scheme '{applied.scheme_id}' grants no free goods; free_product_id is required for free_quantity",
                field="free_product_id",
            )

    def validate(self, scheme_id: str, benefit: OverrideBenefit, reason: str) -> str:
        """Run every check and return the normalised reason."""
        reason = self.validate_reason(reason)
        applied = self.validate_scheme_applied(scheme_id)
        self.validate_benefit(applied, benefit)
        return reason
