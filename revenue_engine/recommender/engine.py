"""
End-to-end revenue decision engine.

Logic:
1. Core formulas: performance index → APS → price bounds and centroid
2. Monthly error forecasting: diagnosis → corrected target rent
3. Weekly bell-curve audit over the lookahead window
4. Supplemental promotion scan against today

The engine is stateless between runs; every input arrives in run().
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

import pandas as pd

from revenue_engine.config import DEFAULT_SETTINGS, EngineSettings
from revenue_engine.data.sources import MarketDataSource
from revenue_engine.models import ComparableFilters, MarketData, PropertyData, Recommendation
from revenue_engine.recommender.bell_curve import WeeklyReviewResult, run_weekly_bell_curve_review
from revenue_engine.recommender.comparables import ComparableSelection, select_comparable_market
from revenue_engine.recommender.error_forecasting import (
    MonthlyReviewResult,
    run_monthly_error_forecasting,
)
from revenue_engine.recommender.formulas import CoreMetrics, compute_core_metrics
from revenue_engine.recommender.promotions import evaluate_promotion, scan_all_promotions

logger = logging.getLogger(__name__)

RECOMMENDATION_COLUMNS = [
    'source', 'date', 'type', 'value', 'current_price', 'suggested_price',
    'change_pct', 'phase', 'market_state', 'operating_mode', 'rationale',
]


@dataclass(frozen=True)
class EngineResult:
    """Everything a report needs, with no values left to re-derive."""
    core: CoreMetrics
    monthly: MonthlyReviewResult
    weekly: WeeklyReviewResult
    promotions: List[Recommendation]
    legacy_promotion: str
    days_out: int
    comparables: Optional[ComparableSelection] = None

    @property
    def all_recommendations(self) -> List[Recommendation]:
        return list(self.weekly.recommendations) + list(self.promotions)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'core': self.core.to_dict(),
            'monthly': self.monthly.to_dict(),
            'weekly': self.weekly.to_dict(),
            'promotions': [r.to_dict() for r in self.promotions],
            'legacy_promotion': self.legacy_promotion,
            'days_out': self.days_out,
            'comparables': self.comparables.to_dict() if self.comparables else None,
        }

    def recommendations_frame(self) -> pd.DataFrame:
        """
        Day-by-day schedule and promotion findings as one DataFrame.

        The 'source' column is 'bell_curve' or 'promotion'.
        """
        rows = [{'source': 'bell_curve', **r.to_dict()} for r in self.weekly.recommendations]
        rows += [{'source': 'promotion', **r.to_dict()} for r in self.promotions]
        return pd.DataFrame(rows, columns=RECOMMENDATION_COLUMNS)


class RevenueEngine:
    """
    Revenue decision engine for one property.

    Example:
        engine = RevenueEngine()
        result = engine.run(property_data, market_data,
                            previous_aps=1.0, current_target_rent=65000, days_out=21)
        print(result.core.new_aps, result.monthly.diagnosis.kind)
    """

    def __init__(self, settings: EngineSettings = DEFAULT_SETTINGS):
        self.settings = settings

    def select_comparables(
        self,
        source: MarketDataSource,
        market_id: str,
        filters: ComparableFilters
    ) -> ComparableSelection:
        """
        Pick the comparable market using this engine's minimum sample size.

        Pass the selection's market_data to run(), and the selection itself
        as run(comparables=...) so reports can show the tier used.

        Raises:
            MissingMarketError: market_id is empty
        """
        return select_comparable_market(source, market_id, filters, self.settings.min_comps)

    def run(
        self,
        property_data: PropertyData,
        market_data: MarketData,
        previous_aps: float,
        current_target_rent: float,
        days_out: int,
        historical_occupancy_pace: Optional[float] = None,
        today: Optional[date] = None,
        comparables: Optional[ComparableSelection] = None
    ) -> EngineResult:
        """
        Compute every recommendation for one property.

        Args:
            property_data: Subject property metrics
            market_data: Comparable market metrics (live or fallback)
            previous_aps: APS carried from the previous run
            current_target_rent: Existing annual target; <= 0 bootstraps one
            days_out: Days until the stay evaluated by the promotion scan
            historical_occupancy_pace: Market historical pace; defaults to the
                market occupancy, which yields a pace ratio of 1.0
            today: Start of the audit window (defaults to today)
            comparables: Selection that produced market_data, carried into
                the result for report headers

        Returns:
            EngineResult
        """
        settings = self.settings
        today = today or date.today()
        if historical_occupancy_pace is None:
            historical_occupancy_pace = market_data.market_occupancy

        core = compute_core_metrics(property_data, market_data, previous_aps, settings.aps)
        logger.info(
            f"Core: index {core.performance_index:.3f}, APS {previous_aps:.3f} → {core.new_aps:.3f}"
        )

        monthly = run_monthly_error_forecasting(
            our_occ=property_data.my_occupancy,
            our_revpar=property_data.my_revpar,
            comp_occ=market_data.market_occupancy,
            comp_revpar=market_data.market_revpar,
            current_target_rent=current_target_rent,
            current_aps=previous_aps,
            market_annual_revpar=market_data.total_market_annual_revpar,
            new_aps=core.new_aps,
            monthly=settings.monthly,
        )

        weekly = run_weekly_bell_curve_review(
            property_occ=property_data.my_occupancy,
            current_price=property_data.current_price,
            full_aps=core.new_aps,
            market_forward_occ=market_data.market_occupancy,
            market_historical_occ=historical_occupancy_pace,
            market_avg_adr=market_data.avg_adr,
            start_date=today,
            settings=settings,
        )

        promotions = scan_all_promotions(
            my_occ=property_data.my_occupancy,
            market_occ=market_data.market_occupancy,
            current_price=property_data.current_price,
            dynamic_centroid=core.dynamic_centroid,
            days_out=days_out,
            market_state=weekly.market_state,
            avg_booking_length=property_data.avg_booking_length,
            market_avg_booking_length=market_data.avg_booking_length,
            today=today,
            promotions=settings.promotions,
        )

        legacy = evaluate_promotion(
            days_out,
            property_data.my_occupancy,
            market_data.market_occupancy,
            property_data.current_price,
            core.dynamic_centroid,
            settings.promotions,
        )

        return EngineResult(
            core=core,
            monthly=monthly,
            weekly=weekly,
            promotions=promotions,
            legacy_promotion=legacy,
            days_out=days_out,
            comparables=comparables,
        )
