"""
Comparable-set selection with tiered fallback.

Tiered fallback:
1. Strict: bedrooms + property type + sleeps + amenities
2. Standard: bedrooms + sleeps
3. Broad: bedrooms only
4. Whole market: no filter (always accepted)

Each tier is fetched in order and the first one returning at least
MIN_COMPS listings wins. This is a linear degradation path, not a retry
loop: every tier is fetched at most once and nothing is skipped.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from revenue_engine.config import MIN_COMPS
from revenue_engine.data.sources import MarketDataSource, MissingMarketError
from revenue_engine.models import ComparableFilters, MarketData

logger = logging.getLogger(__name__)


class CompTier(Enum):
    """Comparable-set strictness, strictest first."""
    STRICT = "Strict"
    STANDARD = "Standard"
    BROAD = "Broad"
    WHOLE_MARKET = "Whole Market"


TIER_ORDER = (CompTier.STRICT, CompTier.STANDARD, CompTier.BROAD, CompTier.WHOLE_MARKET)


@dataclass(frozen=True)
class ComparableSelection:
    """Chosen comparable set, with the trail of tiers tried."""
    tier: CompTier
    market_data: MarketData
    sample_size: int
    attempts: Tuple[Tuple[CompTier, int], ...] = field(default_factory=tuple)

    def header(self) -> str:
        """One-line summary for report headers."""
        return f"Comp set: {self.tier.value} ({self.sample_size} listings)"

    def to_dict(self) -> dict:
        return {
            'tier': self.tier.value,
            'sample_size': self.sample_size,
            'attempts': [{'tier': t.value, 'sample_size': n} for t, n in self.attempts],
        }


def filters_for_tier(filters: ComparableFilters, tier: CompTier) -> Optional[ComparableFilters]:
    """Project the full filter set down to a tier; None means unfiltered."""
    if tier == CompTier.STRICT:
        return filters
    if tier == CompTier.STANDARD:
        return filters.standard()
    if tier == CompTier.BROAD:
        return filters.broad()
    return None


def select_comparable_market(
    source: MarketDataSource,
    market_id: str,
    filters: ComparableFilters,
    min_comps: int = MIN_COMPS
) -> ComparableSelection:
    """
    Fetch the strictest comparable set that has enough listings.

    Args:
        source: Market data provider
        market_id: Market identifier
        filters: Full filter set derived from the property
        min_comps: Minimum sample size for a tier to be accepted

    Returns:
        ComparableSelection for the first tier meeting min_comps, or the
        whole market with whatever sample it returned

    Raises:
        MissingMarketError: market_id is empty
    """
    if not market_id:
        raise MissingMarketError("No market identifier; cannot select comparables")

    attempts: List[Tuple[CompTier, int]] = []
    snapshot = None

    for tier in TIER_ORDER:
        snapshot = source.fetch_market(market_id, filters_for_tier(filters, tier))
        attempts.append((tier, snapshot.sample_size))

        if snapshot.sample_size >= min_comps:
            logger.info(f"Comp set: {tier.value} tier accepted with {snapshot.sample_size} listings")
            return ComparableSelection(tier, snapshot.data, snapshot.sample_size, tuple(attempts))

        if tier != CompTier.WHOLE_MARKET:
            logger.info(
                f"Comp set: {tier.value} tier has {snapshot.sample_size} listings "
                f"(< {min_comps}), relaxing"
            )

    logger.warning(
        f"Comp set: all tiers below {min_comps} listings; "
        f"using whole market ({snapshot.sample_size})"
    )
    return ComparableSelection(
        CompTier.WHOLE_MARKET, snapshot.data, snapshot.sample_size, tuple(attempts)
    )
