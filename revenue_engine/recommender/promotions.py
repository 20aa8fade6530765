"""
Supplemental promotion scan.

Runs once per audit against "today", independently of the day-by-day
bell-curve audit. Every rule is evaluated; any number may fire.

| Rule          | Condition                                      | Price            |
|---------------|------------------------------------------------|------------------|
| Velocity gap  | market occ - our occ > 15% and price > centroid | centroid - 15%   |
| Last minute   | <= 7 days out and our occ < 50%                | centroid - 20%   |
| Extended stay | our avg stay < 3 nights, market >= 4 nights    | current - 10%    |
"""

import logging
from datetime import date
from typing import List, Optional

from revenue_engine.config import DEFAULT_SETTINGS, PromotionSettings
from revenue_engine.models import BookingPhase, MarketState, Recommendation, RecommendationType

logger = logging.getLogger(__name__)

NO_ACTION = "NO_ACTION"
NOT_APPLICABLE = "N/A"


def evaluate_promotion(
    days_out: int,
    my_occ: float,
    market_occ: float,
    current_price: float,
    dynamic_centroid: float,
    promotions: PromotionSettings = DEFAULT_SETTINGS.promotions
) -> str:
    """
    Legacy velocity check returning a single status string.

    Fires only when occupancy lags the market and price sits above the
    centroid; the offer depends on how far out the stay is.
    """
    is_velocity_lagging = (market_occ - my_occ) > promotions.velocity_gap_threshold
    is_price_too_high = current_price > dynamic_centroid

    if is_velocity_lagging and is_price_too_high:
        if days_out < promotions.legacy_last_minute_days:
            return "TRIGGERED: Last Minute Hero (20% Off)"
        if days_out <= promotions.legacy_early_bird_days:
            return "TRIGGERED: Early Bird Velocity (15% Off)"
    return NO_ACTION


def scan_all_promotions(
    my_occ: float,
    market_occ: float,
    current_price: float,
    dynamic_centroid: float,
    days_out: int,
    market_state: MarketState,
    avg_booking_length: Optional[float] = None,
    market_avg_booking_length: Optional[float] = None,
    today: Optional[date] = None,
    promotions: PromotionSettings = DEFAULT_SETTINGS.promotions
) -> List[Recommendation]:
    """
    Evaluate every promotion rule against today's position.

    Args:
        my_occ: Our occupancy (0-1)
        market_occ: Market occupancy (0-1)
        current_price: Our current nightly price
        dynamic_centroid: Market future ADR scaled by APS
        days_out: Days until the stay being promoted
        market_state: Current market state (reported on each recommendation)
        avg_booking_length: Our average stay in nights, if known
        market_avg_booking_length: Market average stay in nights, if known
        today: Date stamped on recommendations (defaults to today)

    Returns:
        Zero or more recommendations, in rule order
    """
    today = today or date.today()
    recommendations = []

    velocity_gap = market_occ - my_occ
    if velocity_gap > promotions.velocity_gap_threshold and current_price > dynamic_centroid:
        recommendations.append(Recommendation(
            date=today,
            type=RecommendationType.APPLY_PROMOTION,
            value=f"{promotions.velocity_discount*100:.0f}% off",
            current_price=current_price,
            suggested_price=dynamic_centroid * (1 - promotions.velocity_discount),
            rationale=(
                f"Velocity gap {velocity_gap*100:.1f}% exceeds "
                f"{promotions.velocity_gap_threshold*100:.0f}% threshold and price "
                f"${current_price:.2f} above centroid ${dynamic_centroid:.2f}."
            ),
            phase=BookingPhase.NOT_APPLICABLE,
            market_state=market_state,
            operating_mode=NOT_APPLICABLE,
        ))

    if days_out <= promotions.last_minute_max_days_out and my_occ < promotions.last_minute_occ_threshold:
        recommendations.append(Recommendation(
            date=today,
            type=RecommendationType.LAST_MINUTE_DEAL,
            value=f"{promotions.last_minute_discount*100:.0f}% off",
            current_price=current_price,
            suggested_price=dynamic_centroid * (1 - promotions.last_minute_discount),
            rationale=f"Low occupancy ({my_occ*100:.1f}%) with only {days_out} days out.",
            phase=BookingPhase.FRONT_HALF,
            market_state=market_state,
            operating_mode=NOT_APPLICABLE,
        ))

    if (avg_booking_length is not None
            and market_avg_booking_length is not None
            and avg_booking_length < promotions.extended_stay_property_max_avg_stay
            and market_avg_booking_length >= promotions.extended_stay_market_min_avg_stay):
        recommendations.append(Recommendation(
            date=today,
            type=RecommendationType.EXTENDED_STAY_INCENTIVE,
            value=promotions.extended_stay_label,
            current_price=current_price,
            suggested_price=current_price * (1 - promotions.extended_stay_discount),
            rationale=(
                f"Avg stay {avg_booking_length:.1f} nights vs market "
                f"{market_avg_booking_length:.1f} nights."
            ),
            phase=BookingPhase.NOT_APPLICABLE,
            market_state=market_state,
            operating_mode=NOT_APPLICABLE,
        ))

    logger.info(f"Promotion scan: {len(recommendations)} rule(s) fired")
    return recommendations
