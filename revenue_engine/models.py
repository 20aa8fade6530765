"""
Core data models shared across the engine.

MarketData and PropertyData are produced fresh by a data source for each
run and are never mutated. Recommendation is the unit of output for both
the day-by-day bell-curve audit and the promotion scanner.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple


class MarketState(Enum):
    """Demand pace of the comparable market."""
    HOT = "HOT"
    NEUTRAL = "NEUTRAL"
    COLD = "COLD"


class BookingPhase(Enum):
    """Where a stay date sits on the booking curve."""
    BACK_HALF = "BACK_HALF"      # far from arrival: maximize ADR
    FRONT_HALF = "FRONT_HALF"    # near arrival: maximize occupancy
    NOT_APPLICABLE = "N/A"


class RecommendationType(Enum):
    RATE_INCREASE = "RATE_INCREASE"
    PRICE_DROP = "PRICE_DROP"
    APPLY_PROMOTION = "APPLY_PROMOTION"
    LAST_MINUTE_DEAL = "LAST_MINUTE_DEAL"
    EXTENDED_STAY_INCENTIVE = "EXTENDED_STAY_INCENTIVE"
    NO_ACTION = "NO_ACTION"  # defined for completeness; never emitted


class DiagnosisType(Enum):
    CLASSIC_UNDERPRICING = "CLASSIC_UNDERPRICING"
    CLASSIC_OVERPRICING = "CLASSIC_OVERPRICING"
    ACCEPTABLE_PERFORMANCE = "ACCEPTABLE_PERFORMANCE"


class AdjustmentType(Enum):
    INCREASE = "INCREASE"
    DECREASE = "DECREASE"
    NO_CHANGE = "NO_CHANGE"


@dataclass(frozen=True)
class MarketData:
    """Aggregated metrics for the comparable set."""
    market_revpar: float
    market_occupancy: float
    market_20th_pctl_adr: float
    peak_future_adr: float
    avg_future_market_adr: float
    total_market_annual_revpar: float
    avg_adr: float
    avg_booking_length: Optional[float] = None


@dataclass(frozen=True)
class PropertyData:
    """The subject property's own metrics."""
    my_revpar: float
    my_occupancy: float
    last_year_lowest_sold: float
    current_price: float
    my_adr: Optional[float] = None
    avg_booking_length: Optional[float] = None


@dataclass(frozen=True)
class ComparableFilters:
    """
    Attributes used to narrow the comparable market.

    Derived once from the property's attributes; each relaxation returns
    a new instance with fewer attributes set.
    """
    bedrooms: Optional[int] = None
    property_type: Optional[str] = None
    min_sleeps: Optional[int] = None
    amenities: Tuple[str, ...] = ()

    def standard(self) -> 'ComparableFilters':
        """Bedrooms + sleeps."""
        return ComparableFilters(bedrooms=self.bedrooms, min_sleeps=self.min_sleeps)

    def broad(self) -> 'ComparableFilters':
        """Bedrooms only."""
        return ComparableFilters(bedrooms=self.bedrooms)

    def is_empty(self) -> bool:
        return self.to_api_filters() is None

    def to_api_filters(self) -> Optional[Dict]:
        """
        Render the filters in the market API's request format.

        Property type is lower-cased, amenities are snake-cased and
        non-positive numeric filters are dropped. Returns None when
        nothing remains.
        """
        f = {}
        if self.property_type:
            f['property_type'] = self.property_type.lower()
        if self.bedrooms and self.bedrooms > 0:
            f['bedrooms'] = self.bedrooms
        if self.min_sleeps and self.min_sleeps > 0:
            f['min_sleeps'] = self.min_sleeps
        if self.amenities:
            f['amenities'] = ['_'.join(a.lower().split()) for a in self.amenities]
        return f or None


@dataclass(frozen=True)
class PerformanceMultipliers:
    """Property-to-market ratios."""
    occupancy: float
    revpar: float
    adr: float


@dataclass(frozen=True)
class Recommendation:
    """A single pricing or promotion action."""
    date: date
    type: RecommendationType
    value: str
    current_price: float
    suggested_price: float
    rationale: str
    phase: BookingPhase
    market_state: MarketState
    operating_mode: str

    @property
    def change_pct(self) -> float:
        """Suggested change relative to current price, in percent."""
        if self.current_price > 0:
            return round((self.suggested_price - self.current_price) / self.current_price * 100, 1)
        return 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'date': self.date.isoformat(),
            'type': self.type.value,
            'value': self.value,
            'current_price': self.current_price,
            'suggested_price': self.suggested_price,
            'change_pct': self.change_pct,
            'rationale': self.rationale,
            'phase': self.phase.value,
            'market_state': self.market_state.value,
            'operating_mode': self.operating_mode,
        }


def count_by_type(recommendations: List[Recommendation]) -> Dict[RecommendationType, int]:
    """Tally recommendations per type; every type is present in the result."""
    counts = {t: 0 for t in RecommendationType}
    for rec in recommendations:
        counts[rec.type] += 1
    return counts
