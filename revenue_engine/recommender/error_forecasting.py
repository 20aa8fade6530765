"""
Monthly error forecasting.

Diagnoses systematic mispricing by comparing the property's occupancy,
RevPAR and ADR to the comparable set, then corrects the annual target
rent by a smoothed, capped multiplier.

Decision tree (first match wins):
| Occ mult | RevPAR mult | Diagnosis              | Correction           |
|----------|-------------|------------------------|----------------------|
| >= 1.5   | <= 0.8      | CLASSIC_UNDERPRICING   | 1/ADR mult, halved   |
| <= 0.7   | <= 0.8      | CLASSIC_OVERPRICING    | 0.90                 |
| any      | any         | ACCEPTABLE_PERFORMANCE | none                 |
"""

import logging
from dataclasses import dataclass
from typing import Optional

from revenue_engine.config import DEFAULT_SETTINGS, MonthlySettings
from revenue_engine.models import AdjustmentType, DiagnosisType, PerformanceMultipliers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnosis:
    """Result of the monthly pricing diagnosis."""
    kind: DiagnosisType
    price_error_factor: float
    correction_factor: float
    explanation: str


@dataclass(frozen=True)
class CorrectionResult:
    """Target-rent correction derived from a diagnosis."""
    previous_target_rent: float
    new_target_rent: float
    applied_multiplier: float
    adjustment_type: AdjustmentType

    @property
    def adjustment_amount(self) -> float:
        return self.new_target_rent - self.previous_target_rent

    @property
    def adjustment_percentage(self) -> float:
        return self.applied_multiplier - 1

    def to_dict(self) -> dict:
        return {
            'previous_target_rent': self.previous_target_rent,
            'new_target_rent': self.new_target_rent,
            'applied_multiplier': self.applied_multiplier,
            'adjustment_type': self.adjustment_type.value,
            'adjustment_amount': self.adjustment_amount,
            'adjustment_percentage': self.adjustment_percentage,
        }


@dataclass(frozen=True)
class MonthlyReviewResult:
    """Complete output of the monthly strategic review."""
    metrics: PerformanceMultipliers
    diagnosis: Diagnosis
    correction: CorrectionResult
    previous_aps: float
    new_aps: float

    def to_dict(self) -> dict:
        return {
            'occupancy_multiplier': self.metrics.occupancy,
            'revpar_multiplier': self.metrics.revpar,
            'adr_multiplier': self.metrics.adr,
            'diagnosis': self.diagnosis.kind.value,
            'price_error_factor': self.diagnosis.price_error_factor,
            'correction_factor': self.diagnosis.correction_factor,
            'explanation': self.diagnosis.explanation,
            'previous_aps': self.previous_aps,
            'new_aps': self.new_aps,
            **self.correction.to_dict(),
        }


def derive_adr(revpar: float, occupancy: float) -> float:
    """
    ADR from RevPAR and occupancy.

    With no occupancy the RevPAR itself is returned (0 if falsy).
    """
    if occupancy <= 0:
        return revpar or 0
    return revpar / occupancy


def calculate_performance_multipliers(
    our_occ: float,
    our_revpar: float,
    our_adr: float,
    comp_occ: float,
    comp_revpar: float,
    comp_adr: float,
    monthly: MonthlySettings = DEFAULT_SETTINGS.monthly
) -> PerformanceMultipliers:
    """Property-to-comp ratios with comp denominators floored."""
    safe_comp_occ = max(comp_occ, monthly.min_occupancy_threshold)
    safe_comp_revpar = max(comp_revpar, monthly.min_revpar_threshold)
    safe_comp_adr = max(comp_adr, monthly.min_adr_threshold)

    return PerformanceMultipliers(
        occupancy=our_occ / safe_comp_occ,
        revpar=our_revpar / safe_comp_revpar,
        adr=our_adr / safe_comp_adr,
    )


def diagnose_error_forecasting(
    m: PerformanceMultipliers,
    monthly: MonthlySettings = DEFAULT_SETTINGS.monthly
) -> Diagnosis:
    """
    Classify the month's pricing error.

    Args:
        m: Occupancy, RevPAR and ADR multipliers vs the comp set
        monthly: Diagnosis thresholds

    Returns:
        Diagnosis; exactly one type for any multiplier triple
    """
    # Bought occupancy with cheap prices
    if (m.occupancy >= monthly.underpricing_occ_multiplier
            and m.revpar <= monthly.underpricing_revpar_multiplier):
        price_error_factor = m.adr
        if price_error_factor > 0:
            correction_factor = 1 / price_error_factor
        else:
            correction_factor = monthly.underpricing_default_correction

        return Diagnosis(
            kind=DiagnosisType.CLASSIC_UNDERPRICING,
            price_error_factor=price_error_factor,
            correction_factor=correction_factor,
            explanation=(
                f"Bought occupancy ({m.occupancy*100:.0f}% of market) "
                f"with prices at only {price_error_factor*100:.0f}% of market ADR."
            )
        )

    # High prices deterred bookings
    if (m.occupancy <= monthly.overpricing_occ_multiplier
            and m.revpar <= monthly.overpricing_revpar_multiplier):
        return Diagnosis(
            kind=DiagnosisType.CLASSIC_OVERPRICING,
            price_error_factor=m.adr,
            correction_factor=monthly.overpricing_correction_factor,
            explanation=(
                f"High prices deterred bookings. Only achieving "
                f"{m.occupancy*100:.0f}% of market occupancy."
            )
        )

    return Diagnosis(
        kind=DiagnosisType.ACCEPTABLE_PERFORMANCE,
        price_error_factor=1.0,
        correction_factor=1.0,
        explanation="Performance within acceptable bounds. No adjustment needed."
    )


def calculate_correction_adjustment(
    current_target_rent: float,
    diagnosis: Diagnosis,
    monthly: MonthlySettings = DEFAULT_SETTINGS.monthly
) -> CorrectionResult:
    """
    Apply the diagnosis to the target rent.

    Upward corrections are halved and capped at +50%; downward
    corrections are capped at -20%.
    """
    if diagnosis.kind == DiagnosisType.CLASSIC_UNDERPRICING:
        smoothed = 1 + (diagnosis.correction_factor - 1) / monthly.correction_smoothing_divisor
        applied_multiplier = min(smoothed, monthly.max_upward_correction)
        adjustment_type = AdjustmentType.INCREASE
    elif diagnosis.kind == DiagnosisType.CLASSIC_OVERPRICING:
        applied_multiplier = max(diagnosis.correction_factor, monthly.max_downward_correction)
        adjustment_type = AdjustmentType.DECREASE
    else:
        applied_multiplier = 1.0
        adjustment_type = AdjustmentType.NO_CHANGE

    return CorrectionResult(
        previous_target_rent=current_target_rent,
        new_target_rent=current_target_rent * applied_multiplier,
        applied_multiplier=applied_multiplier,
        adjustment_type=adjustment_type,
    )


def run_monthly_error_forecasting(
    our_occ: float,
    our_revpar: float,
    comp_occ: float,
    comp_revpar: float,
    current_target_rent: float,
    current_aps: float,
    market_annual_revpar: float,
    new_aps: Optional[float] = None,
    monthly: MonthlySettings = DEFAULT_SETTINGS.monthly
) -> MonthlyReviewResult:
    """
    Full monthly review: multipliers → diagnosis → target correction.

    Args:
        our_occ: Property occupancy (0-1)
        our_revpar: Property RevPAR
        comp_occ: Comparable-set occupancy (0-1)
        comp_revpar: Comparable-set RevPAR
        current_target_rent: Existing annual target; <= 0 means none yet
        current_aps: APS used to bootstrap a missing target
        market_annual_revpar: Comparable-set annual RevPAR
        new_aps: APS produced by this run, reported alongside (defaults to current_aps)
        monthly: Diagnosis and correction thresholds

    Returns:
        MonthlyReviewResult
    """
    our_adr = derive_adr(our_revpar, our_occ)
    comp_adr = derive_adr(comp_revpar, comp_occ)

    metrics = calculate_performance_multipliers(
        our_occ, our_revpar, our_adr, comp_occ, comp_revpar, comp_adr, monthly
    )
    diagnosis = diagnose_error_forecasting(metrics, monthly)

    if current_target_rent > 0:
        effective_target = current_target_rent
    else:
        effective_target = market_annual_revpar * current_aps
        logger.info(f"No prior target rent; bootstrapping at {effective_target:,.2f}")

    correction = calculate_correction_adjustment(effective_target, diagnosis, monthly)
    logger.info(
        f"Monthly review: {diagnosis.kind.value} → {correction.adjustment_type.value} "
        f"x{correction.applied_multiplier:.3f}"
    )

    return MonthlyReviewResult(
        metrics=metrics,
        diagnosis=diagnosis,
        correction=correction,
        previous_aps=current_aps,
        new_aps=current_aps if new_aps is None else new_aps,
    )
