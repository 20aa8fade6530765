"""
Configuration for the revenue decision engine.

Contains APS smoothing weights, monthly error-forecasting thresholds,
bell-curve timing windows, market-state cutoffs, operating modes and
promotion rules. Everything is gathered into a frozen EngineSettings that
is handed to the engine once, at construction time.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple


# =============================================================================
# APS (ADAPTIVE PERFORMANCE SCORE)
# =============================================================================

APS_MIN = 0.80
APS_MAX = 1.60
DEFAULT_APS = 1.00

# Single-step smoothing: 70% history, 30% current performance index
PID_HISTORY = 0.70
PID_INDEX = 0.30

# Ceiling multiplier applied on top of peak future ADR
PEAK_ADR_MULTIPLIER = 1.25


# =============================================================================
# COMPARABLE SET
# =============================================================================

MIN_COMPS = 10


# =============================================================================
# MONTHLY REVIEW (ERROR FORECASTING)
# =============================================================================

MIN_OCCUPANCY_THRESHOLD = 0.01
MIN_REVPAR_THRESHOLD = 1.0
MIN_ADR_THRESHOLD = 1.0

# Underpricing: high occupancy (>=1.5x) with low RevPAR (<=0.8x)
UNDERPRICING_OCC_MULTIPLIER = 1.5
UNDERPRICING_REVPAR_MULTIPLIER = 0.8

# Overpricing: low occupancy (<=0.7x) with low RevPAR (<=0.8x)
OVERPRICING_OCC_MULTIPLIER = 0.7
OVERPRICING_REVPAR_MULTIPLIER = 0.8

OVERPRICING_CORRECTION_FACTOR = 0.90
UNDERPRICING_DEFAULT_CORRECTION = 2.0
CORRECTION_SMOOTHING_DIVISOR = 2

# Never move the target more than +50% / -20% in one month
MAX_UPWARD_CORRECTION = 1.50
MAX_DOWNWARD_CORRECTION = 0.80


# =============================================================================
# WEEKLY REVIEW (BELL CURVE)
# =============================================================================

AUDIT_LOOKAHEAD_DAYS = 14
FORWARD_BOOKING_WINDOW = 90
DECAY_WINDOW_PERCENTAGE = 0.30  # 30% of 90 = 27 day transition
MIN_DECAY_MULTIPLIER = 0.70

APS_JUSTIFIED_PRICE_THRESHOLD = 0.10  # 10% over APS price = overpriced

# Back half: early demand
EARLY_DEMAND_OCC_MULTIPLIER = 2.5
EARLY_DEMAND_RATE_INCREASE_MIN = 0.20
EARLY_DEMAND_RATE_INCREASE_MAX = 0.25
MIN_MARKET_OCCUPANCY = 0.01

# Front half: lagging occupancy
FRONT_HALF_LAGGING_THRESHOLD = 0.20


# =============================================================================
# MARKET STATE
# =============================================================================

HOT_OCCUPANCY_THRESHOLD = 0.75
COLD_OCCUPANCY_THRESHOLD = 0.45
HOT_PACE_THRESHOLD = 1.10
COLD_PACE_THRESHOLD = 0.90


# =============================================================================
# PROMOTIONS
# =============================================================================

VELOCITY_GAP_THRESHOLD = 0.15
VELOCITY_DISCOUNT = 0.15

LAST_MINUTE_MAX_DAYS_OUT = 7
LAST_MINUTE_OCC_THRESHOLD = 0.50
LAST_MINUTE_DISCOUNT = 0.20

EXTENDED_STAY_PROPERTY_MAX_AVG_STAY = 3
EXTENDED_STAY_MARKET_MIN_AVG_STAY = 4
EXTENDED_STAY_DISCOUNT = 0.10
EXTENDED_STAY_LABEL = '10% for 5+ nights'

# Legacy single-string velocity check
LEGACY_LAST_MINUTE_DAYS = 14
LEGACY_EARLY_BIRD_DAYS = 60


# =============================================================================
# OPERATING MODES & SLIDING SCALE
# =============================================================================

@dataclass(frozen=True)
class OperatingMode:
    """Discount aggressiveness selected from the market state."""
    name: str
    base_discount: float
    max_discount: float
    occupancy_threshold: float


@dataclass(frozen=True)
class DiscountBracket:
    """Day-out range with a multiplier on the mode's base discount."""
    min_days: int
    max_days: float
    multiplier: float
    label: str

    def contains(self, days_to_arrival: int) -> bool:
        return self.min_days <= days_to_arrival <= self.max_days


# Read-only registry; EngineSettings copies it into key/mode pairs
OPERATING_MODES = MappingProxyType({
    'AGGRESSIVE': OperatingMode(
        name='Aggressive',
        base_discount=0.05,
        max_discount=0.15,
        occupancy_threshold=0.10,
    ),
    'STANDARD': OperatingMode(
        name='Standard',
        base_discount=0.10,
        max_discount=0.20,
        occupancy_threshold=0.15,
    ),
    'DEFENSIVE': OperatingMode(
        name='Defensive',
        base_discount=0.15,
        max_discount=0.30,
        occupancy_threshold=0.15,
    ),
})

SLIDING_SCALE_BRACKETS = (
    DiscountBracket(0, 3, 2.0, '0-3d (2x)'),
    DiscountBracket(4, 7, 1.5, '4-7d (1.5x)'),
    DiscountBracket(8, 14, 1.25, '8-14d (1.25x)'),
    DiscountBracket(15, 30, 1.0, '15-30d (1x)'),
    DiscountBracket(31, math.inf, 0.75, '31+d (0.75x)'),
)


# =============================================================================
# SETTINGS OBJECTS
# =============================================================================

@dataclass(frozen=True)
class ApsSettings:
    """Bounds and weights for the adaptive performance score."""
    aps_min: float = APS_MIN
    aps_max: float = APS_MAX
    history_weight: float = PID_HISTORY
    index_weight: float = PID_INDEX
    peak_adr_multiplier: float = PEAK_ADR_MULTIPLIER


@dataclass(frozen=True)
class MonthlySettings:
    """Thresholds for the monthly error-forecasting review."""
    min_occupancy_threshold: float = MIN_OCCUPANCY_THRESHOLD
    min_revpar_threshold: float = MIN_REVPAR_THRESHOLD
    min_adr_threshold: float = MIN_ADR_THRESHOLD
    underpricing_occ_multiplier: float = UNDERPRICING_OCC_MULTIPLIER
    underpricing_revpar_multiplier: float = UNDERPRICING_REVPAR_MULTIPLIER
    overpricing_occ_multiplier: float = OVERPRICING_OCC_MULTIPLIER
    overpricing_revpar_multiplier: float = OVERPRICING_REVPAR_MULTIPLIER
    overpricing_correction_factor: float = OVERPRICING_CORRECTION_FACTOR
    underpricing_default_correction: float = UNDERPRICING_DEFAULT_CORRECTION
    correction_smoothing_divisor: float = CORRECTION_SMOOTHING_DIVISOR
    max_upward_correction: float = MAX_UPWARD_CORRECTION
    max_downward_correction: float = MAX_DOWNWARD_CORRECTION


@dataclass(frozen=True)
class WeeklySettings:
    """Timing windows and rule thresholds for the bell-curve audit."""
    audit_lookahead_days: int = AUDIT_LOOKAHEAD_DAYS
    forward_booking_window: int = FORWARD_BOOKING_WINDOW
    decay_window_percentage: float = DECAY_WINDOW_PERCENTAGE
    min_decay_multiplier: float = MIN_DECAY_MULTIPLIER
    aps_justified_price_threshold: float = APS_JUSTIFIED_PRICE_THRESHOLD
    early_demand_occ_multiplier: float = EARLY_DEMAND_OCC_MULTIPLIER
    early_demand_rate_increase_min: float = EARLY_DEMAND_RATE_INCREASE_MIN
    early_demand_rate_increase_max: float = EARLY_DEMAND_RATE_INCREASE_MAX
    min_market_occupancy: float = MIN_MARKET_OCCUPANCY
    front_half_lagging_threshold: float = FRONT_HALF_LAGGING_THRESHOLD

    @property
    def transition_point(self) -> float:
        """Day offset splitting back half from front half (27 by default)."""
        return self.forward_booking_window * self.decay_window_percentage


@dataclass(frozen=True)
class MarketStateSettings:
    hot_occupancy_threshold: float = HOT_OCCUPANCY_THRESHOLD
    cold_occupancy_threshold: float = COLD_OCCUPANCY_THRESHOLD
    hot_pace_threshold: float = HOT_PACE_THRESHOLD
    cold_pace_threshold: float = COLD_PACE_THRESHOLD


@dataclass(frozen=True)
class PromotionSettings:
    velocity_gap_threshold: float = VELOCITY_GAP_THRESHOLD
    velocity_discount: float = VELOCITY_DISCOUNT
    last_minute_max_days_out: int = LAST_MINUTE_MAX_DAYS_OUT
    last_minute_occ_threshold: float = LAST_MINUTE_OCC_THRESHOLD
    last_minute_discount: float = LAST_MINUTE_DISCOUNT
    extended_stay_property_max_avg_stay: float = EXTENDED_STAY_PROPERTY_MAX_AVG_STAY
    extended_stay_market_min_avg_stay: float = EXTENDED_STAY_MARKET_MIN_AVG_STAY
    extended_stay_discount: float = EXTENDED_STAY_DISCOUNT
    extended_stay_label: str = EXTENDED_STAY_LABEL
    legacy_last_minute_days: int = LEGACY_LAST_MINUTE_DAYS
    legacy_early_bird_days: int = LEGACY_EARLY_BIRD_DAYS


@dataclass(frozen=True)
class EngineSettings:
    """
    Immutable tuning for one engine instance.

    Built once and passed to RevenueEngine; there is no runtime
    reconfiguration. Use dataclasses.replace() to derive a variant.
    """
    aps: ApsSettings = field(default_factory=ApsSettings)
    monthly: MonthlySettings = field(default_factory=MonthlySettings)
    weekly: WeeklySettings = field(default_factory=WeeklySettings)
    market_state: MarketStateSettings = field(default_factory=MarketStateSettings)
    promotions: PromotionSettings = field(default_factory=PromotionSettings)
    operating_modes: Tuple[Tuple[str, OperatingMode], ...] = tuple(OPERATING_MODES.items())
    sliding_scale_brackets: Tuple[DiscountBracket, ...] = SLIDING_SCALE_BRACKETS
    min_comps: int = MIN_COMPS

    def __post_init__(self):
        # Accept a mapping but store immutable pairs so the settings stay hashable
        if isinstance(self.operating_modes, Mapping):
            object.__setattr__(self, 'operating_modes', tuple(self.operating_modes.items()))

    @property
    def operating_mode_keys(self) -> Tuple[str, ...]:
        return tuple(key for key, _ in self.operating_modes)

    def get_operating_mode(self, key: str) -> OperatingMode:
        """
        Returns operating mode by key.

        Args:
            key: One of 'AGGRESSIVE', 'STANDARD', 'DEFENSIVE'

        Returns:
            OperatingMode dataclass
        """
        for mode_key, mode in self.operating_modes:
            if mode_key == key:
                return mode
        raise ValueError(
            f"Unknown operating mode: {key}. Choose from: {list(self.operating_mode_keys)}"
        )


DEFAULT_SETTINGS = EngineSettings()


def get_operating_mode(key: str) -> OperatingMode:
    """Returns operating mode by key from the default settings."""
    return DEFAULT_SETTINGS.get_operating_mode(key)
