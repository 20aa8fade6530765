"""
Weekly bell-curve audit.

For each stay date in the lookahead window the audit decides whether the
date sits in the back half of the booking curve (far from arrival, goal:
maximize ADR) or the front half (near arrival, goal: maximize occupancy),
then applies the rule for that phase:

| Phase      | Condition                          | Action          |
|------------|------------------------------------|-----------------|
| BACK_HALF  | our occ > 2.5x market pace         | RATE_INCREASE   |
| FRONT_HALF | lagging + above APS-justified price| PRICE_DROP      |
| FRONT_HALF | lagging + price aligned            | APPLY_PROMOTION |

Dates where no rule fires produce no recommendation at all.

Market state (HOT / NEUTRAL / COLD) is computed once per run and selects
the operating mode, which sets how deep promotions may go.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from revenue_engine.config import (
    DEFAULT_SETTINGS,
    DiscountBracket,
    EngineSettings,
    MarketStateSettings,
    OperatingMode,
    WeeklySettings,
)
from revenue_engine.models import (
    BookingPhase,
    MarketState,
    Recommendation,
    RecommendationType,
    count_by_type,
)

logger = logging.getLogger(__name__)

GOAL_MAXIMIZE_ADR = "MAXIMIZE_ADR"
GOAL_MAXIMIZE_OCCUPANCY = "MAXIMIZE_OCCUPANCY"

# Market state → operating mode key
MODE_FOR_STATE = {
    MarketState.HOT: 'AGGRESSIVE',
    MarketState.NEUTRAL: 'STANDARD',
    MarketState.COLD: 'DEFENSIVE',
}


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class BookingPhaseResult:
    phase: BookingPhase
    goal: str
    days_to_arrival: int
    transition_point: float


@dataclass(frozen=True)
class APSDecayResult:
    effective_aps: float
    decay_applied: bool
    decay_multiplier: float
    days_to_arrival: int


@dataclass(frozen=True)
class MarketAlignmentResult:
    is_overpriced: bool
    our_price: float
    fair_market_price: float
    effective_aps: float
    aps_adjusted_price: float
    max_justifiable_price: float
    price_gap_percentage: float
    decay_applied: bool


@dataclass(frozen=True)
class SlidingScaleResult:
    base_discount: float
    multiplier: float
    calculated_discount: float
    final_discount: float
    bracket_label: str
    capped_by_max: bool


@dataclass(frozen=True)
class DayData:
    """Occupancy and price inputs for one audited date."""
    our_occ: float
    our_price: float
    market_occ: float
    fair_market_price: float


@dataclass(frozen=True)
class AuditContext:
    """Everything audit_day needs besides the day offset."""
    start_date: date
    day: DayData
    full_aps: float
    mode: OperatingMode
    market_state: MarketState
    weekly: WeeklySettings = DEFAULT_SETTINGS.weekly
    brackets: Tuple[DiscountBracket, ...] = DEFAULT_SETTINGS.sliding_scale_brackets


@dataclass(frozen=True)
class WeeklyReviewResult:
    """Complete output of the weekly tactical review."""
    market_state: MarketState
    operating_mode: str
    transition_point: float
    back_half_days: int
    front_half_days: int
    recommendations: List[Recommendation]
    counts: Dict[RecommendationType, int]

    @property
    def total(self) -> int:
        return len(self.recommendations)

    def to_dict(self) -> dict:
        return {
            'market_state': self.market_state.value,
            'operating_mode': self.operating_mode,
            'transition_point': self.transition_point,
            'back_half_days': self.back_half_days,
            'front_half_days': self.front_half_days,
            'rate_increases': self.counts[RecommendationType.RATE_INCREASE],
            'price_drops': self.counts[RecommendationType.PRICE_DROP],
            'promotions': self.counts[RecommendationType.APPLY_PROMOTION],
            'total': self.total,
            'recommendations': [r.to_dict() for r in self.recommendations],
        }


# =============================================================================
# CLASSIFICATION
# =============================================================================

def determine_booking_phase(
    days_to_arrival: int,
    weekly: WeeklySettings = DEFAULT_SETTINGS.weekly
) -> BookingPhaseResult:
    """Back half strictly beyond the transition point, front half otherwise."""
    transition_point = weekly.transition_point
    if days_to_arrival > transition_point:
        phase, goal = BookingPhase.BACK_HALF, GOAL_MAXIMIZE_ADR
    else:
        phase, goal = BookingPhase.FRONT_HALF, GOAL_MAXIMIZE_OCCUPANCY

    return BookingPhaseResult(
        phase=phase,
        goal=goal,
        days_to_arrival=days_to_arrival,
        transition_point=transition_point,
    )


def determine_market_state(
    forward_occupancy: float,
    historical_occupancy_pace: float,
    thresholds: MarketStateSettings = DEFAULT_SETTINGS.market_state
) -> MarketState:
    """
    Classify market demand from forward occupancy and pace.

    HOT wins over COLD when both conditions hold.
    """
    if historical_occupancy_pace > 0:
        pace_ratio = forward_occupancy / historical_occupancy_pace
    else:
        pace_ratio = 1.0

    if (forward_occupancy >= thresholds.hot_occupancy_threshold
            or pace_ratio >= thresholds.hot_pace_threshold):
        return MarketState.HOT
    if (forward_occupancy <= thresholds.cold_occupancy_threshold
            or pace_ratio <= thresholds.cold_pace_threshold):
        return MarketState.COLD
    return MarketState.NEUTRAL


def get_operating_mode(
    state: MarketState,
    settings: EngineSettings = DEFAULT_SETTINGS
) -> OperatingMode:
    return settings.get_operating_mode(MODE_FOR_STATE[state])


# =============================================================================
# PRICING CHECKS
# =============================================================================

def calculate_aps_decay(
    full_aps: float,
    days_to_arrival: int,
    weekly: WeeklySettings = DEFAULT_SETTINGS.weekly
) -> APSDecayResult:
    """
    Linearly reduce APS influence inside the decay window.

    1.0x at the window edge (27 days) down to MIN_DECAY_MULTIPLIER (0.70x)
    on the arrival day.
    """
    decay_window = weekly.transition_point

    if days_to_arrival >= decay_window:
        return APSDecayResult(
            effective_aps=full_aps,
            decay_applied=False,
            decay_multiplier=1.0,
            days_to_arrival=days_to_arrival,
        )

    decay_progress = (decay_window - days_to_arrival) / decay_window
    decay_multiplier = 1.0 - decay_progress * (1.0 - weekly.min_decay_multiplier)

    return APSDecayResult(
        effective_aps=full_aps * decay_multiplier,
        decay_applied=True,
        decay_multiplier=decay_multiplier,
        days_to_arrival=days_to_arrival,
    )


def check_market_alignment(
    our_price: float,
    fair_market_price: float,
    full_aps: float,
    days_to_arrival: int,
    weekly: WeeklySettings = DEFAULT_SETTINGS.weekly
) -> MarketAlignmentResult:
    """Is our price more than 10% above the (decayed) APS-justified price?"""
    decay = calculate_aps_decay(full_aps, days_to_arrival, weekly)
    aps_adjusted_price = fair_market_price * decay.effective_aps
    max_justifiable_price = aps_adjusted_price * (1 + weekly.aps_justified_price_threshold)

    if aps_adjusted_price > 0:
        price_gap = (our_price - aps_adjusted_price) / aps_adjusted_price
    else:
        price_gap = 0.0

    return MarketAlignmentResult(
        is_overpriced=our_price > max_justifiable_price,
        our_price=our_price,
        fair_market_price=fair_market_price,
        effective_aps=decay.effective_aps,
        aps_adjusted_price=aps_adjusted_price,
        max_justifiable_price=max_justifiable_price,
        price_gap_percentage=price_gap,
        decay_applied=decay.decay_applied,
    )


def find_discount_bracket(
    days_to_arrival: int,
    brackets: Iterable[DiscountBracket] = DEFAULT_SETTINGS.sliding_scale_brackets
) -> DiscountBracket:
    """First bracket (ascending) containing the day offset; last bracket otherwise."""
    brackets = tuple(brackets)
    for bracket in brackets:
        if bracket.contains(days_to_arrival):
            return bracket
    return brackets[-1]


def calculate_sliding_scale_discount(
    base_discount: float,
    max_discount: float,
    days_to_arrival: int,
    brackets: Iterable[DiscountBracket] = DEFAULT_SETTINGS.sliding_scale_brackets
) -> SlidingScaleResult:
    """
    Scale the mode's base discount by how close the stay is.

    Args:
        base_discount: Operating mode base discount
        max_discount: Operating mode cap
        days_to_arrival: Day offset of the stay date

    Returns:
        SlidingScaleResult with the capped final discount
    """
    bracket = find_discount_bracket(days_to_arrival, brackets)
    calculated = base_discount * bracket.multiplier

    return SlidingScaleResult(
        base_discount=base_discount,
        multiplier=bracket.multiplier,
        calculated_discount=calculated,
        final_discount=min(calculated, max_discount),
        bracket_label=bracket.label,
        capped_by_max=calculated > max_discount,
    )


def early_demand_multiplier(
    our_occ: float,
    market_occ: float,
    weekly: WeeklySettings = DEFAULT_SETTINGS.weekly
) -> float:
    return our_occ / max(market_occ, weekly.min_market_occupancy)


def early_demand_increase(
    demand_multiplier: float,
    weekly: WeeklySettings = DEFAULT_SETTINGS.weekly
) -> float:
    """Rate increase scaling from 20% at 2.5x market pace to 25% at 5.0x and beyond."""
    threshold = weekly.early_demand_occ_multiplier
    strength = min((demand_multiplier - threshold) / threshold, 1)
    spread = weekly.early_demand_rate_increase_max - weekly.early_demand_rate_increase_min
    return weekly.early_demand_rate_increase_min + strength * spread


def is_front_half_lagging(
    our_occ: float,
    market_occ: float,
    weekly: WeeklySettings = DEFAULT_SETTINGS.weekly
) -> bool:
    return our_occ < market_occ * (1 - weekly.front_half_lagging_threshold)


# =============================================================================
# DAY AUDIT
# =============================================================================

def _audit_back_half(stay_date: date, ctx: AuditContext) -> Optional[Recommendation]:
    day = ctx.day
    multiplier = early_demand_multiplier(day.our_occ, day.market_occ, ctx.weekly)
    if multiplier <= ctx.weekly.early_demand_occ_multiplier:
        return None

    pct = early_demand_increase(multiplier, ctx.weekly)
    return Recommendation(
        date=stay_date,
        type=RecommendationType.RATE_INCREASE,
        value=f"+{pct*100:.0f}%",
        current_price=day.our_price,
        suggested_price=day.our_price * (1 + pct),
        rationale=(
            f"Early demand: our occ {day.our_occ*100:.1f}% is "
            f"{multiplier:.1f}x market pace."
        ),
        phase=BookingPhase.BACK_HALF,
        market_state=ctx.market_state,
        operating_mode=ctx.mode.name,
    )


def _audit_front_half(
    stay_date: date,
    days_to_arrival: int,
    ctx: AuditContext
) -> Optional[Recommendation]:
    day = ctx.day
    if not is_front_half_lagging(day.our_occ, day.market_occ, ctx.weekly):
        return None

    alignment = check_market_alignment(
        day.our_price, day.fair_market_price, ctx.full_aps, days_to_arrival, ctx.weekly
    )

    if alignment.is_overpriced:
        return Recommendation(
            date=stay_date,
            type=RecommendationType.PRICE_DROP,
            value=f"${alignment.aps_adjusted_price:.2f}",
            current_price=day.our_price,
            suggested_price=alignment.aps_adjusted_price,
            rationale=(
                f"Price ${day.our_price:.2f} exceeds APS-justified "
                f"${alignment.aps_adjusted_price:.2f} by {alignment.price_gap_percentage*100:.0f}%."
            ),
            phase=BookingPhase.FRONT_HALF,
            market_state=ctx.market_state,
            operating_mode=ctx.mode.name,
        )

    # Price is justified but pace is slow: promote on a sliding scale
    discount = calculate_sliding_scale_discount(
        ctx.mode.base_discount, ctx.mode.max_discount, days_to_arrival, ctx.brackets
    )
    return Recommendation(
        date=stay_date,
        type=RecommendationType.APPLY_PROMOTION,
        value=f"{discount.final_discount*100:.0f}% off",
        current_price=day.our_price,
        suggested_price=day.our_price * (1 - discount.final_discount),
        rationale=(
            f"Pacing slow (our {day.our_occ*100:.1f}% vs market {day.market_occ*100:.1f}%). "
            f"Bracket {discount.bracket_label}."
        ),
        phase=BookingPhase.FRONT_HALF,
        market_state=ctx.market_state,
        operating_mode=ctx.mode.name,
    )


def audit_day(days_to_arrival: int, ctx: AuditContext) -> Optional[Recommendation]:
    """
    Audit one stay date.

    Pure: the result depends only on the day offset and the context.

    Args:
        days_to_arrival: Offset from the audit start date
        ctx: Run-level inputs (prices, occupancy, APS, mode)

    Returns:
        Recommendation, or None when no rule fires
    """
    stay_date = ctx.start_date + timedelta(days=days_to_arrival)
    phase = determine_booking_phase(days_to_arrival, ctx.weekly)

    if phase.phase == BookingPhase.BACK_HALF:
        rec = _audit_back_half(stay_date, ctx)
    else:
        rec = _audit_front_half(stay_date, days_to_arrival, ctx)

    if rec is not None:
        logger.debug(f"{stay_date} ({phase.phase.value}): {rec.type.value} {rec.value}")
    return rec


def audit_days(day_offsets: Iterable[int], ctx: AuditContext) -> List[Recommendation]:
    """Audit each offset in order, keeping only days where a rule fired."""
    return [rec for rec in (audit_day(i, ctx) for i in day_offsets) if rec is not None]


# =============================================================================
# WEEKLY REVIEW
# =============================================================================

def run_weekly_bell_curve_review(
    property_occ: float,
    current_price: float,
    full_aps: float,
    market_forward_occ: float,
    market_historical_occ: float,
    market_avg_adr: float,
    start_date: Optional[date] = None,
    settings: EngineSettings = DEFAULT_SETTINGS
) -> WeeklyReviewResult:
    """
    Audit every date in the lookahead window.

    Args:
        property_occ: Our occupancy (0-1)
        current_price: Our current nightly price
        full_aps: APS from this run (before decay)
        market_forward_occ: Market forward occupancy (0-1)
        market_historical_occ: Market historical occupancy pace (0-1)
        market_avg_adr: Fair market nightly price
        start_date: First audited date (defaults to today)
        settings: EngineSettings

    Returns:
        WeeklyReviewResult with recommendations ordered by date
    """
    weekly = settings.weekly
    market_state = determine_market_state(
        market_forward_occ, market_historical_occ, settings.market_state
    )
    mode = get_operating_mode(market_state, settings)

    ctx = AuditContext(
        start_date=start_date or date.today(),
        day=DayData(
            our_occ=property_occ,
            our_price=current_price,
            market_occ=market_forward_occ,
            fair_market_price=market_avg_adr,
        ),
        full_aps=full_aps,
        mode=mode,
        market_state=market_state,
        weekly=weekly,
        brackets=settings.sliding_scale_brackets,
    )

    day_offsets = range(weekly.audit_lookahead_days)
    phases = [determine_booking_phase(i, weekly).phase for i in day_offsets]
    back_half_days = phases.count(BookingPhase.BACK_HALF)

    recommendations = audit_days(day_offsets, ctx)
    counts = count_by_type(recommendations)

    logger.info(
        f"Weekly review: {market_state.value} market, {mode.name} mode, "
        f"{len(recommendations)}/{len(day_offsets)} days flagged"
    )

    return WeeklyReviewResult(
        market_state=market_state,
        operating_mode=mode.name,
        transition_point=weekly.transition_point,
        back_half_days=back_half_days,
        front_half_days=len(phases) - back_half_days,
        recommendations=recommendations,
        counts=counts,
    )
