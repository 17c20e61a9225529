"""Analysis settings dataclasses.

Every window, period, tolerance and scoring weight the analysis pass uses.
Passed explicitly into ``analyze_candles`` so synthetic series can be
tested with non-default values.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScoringWeights:
    """Additive contributions and thresholds of the composite entry score.

    Each weight is applied with a ``+`` sign on the bullish branch and a
    ``-`` sign on the bearish branch; penalties are always subtracted.
    """

    order_flow: float = 10.0
    divergence: float = 15.0
    price_action: float = 12.0
    level_approach: float = 10.0
    trend: float = 8.0
    rsi_extreme: float = 8.0
    macd_direction: float = 5.0
    ranging_penalty: float = 10.0
    no_level_penalty: float = 15.0

    rsi_oversold: float = 30.0
    rsi_overbought: float = 70.0
    rsi_confirm_oversold: float = 35.0  # signal summary only
    rsi_confirm_overbought: float = 65.0  # signal summary only
    adx_ranging: float = 15.0
    adx_trend_confirm: float = 20.0


@dataclass(frozen=True)
class AnalysisSettings:
    """Indicator periods, structure windows and scoring weights for one pass."""

    min_candles: int = 50

    swing_lookback: int = 5
    structure_swings: int = 10
    cluster_tolerance_atr: float = 0.5
    max_levels: int = 5

    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    atr_period: int = 14
    adx_period: int = 14
    bb_period: int = 20
    bb_std_dev: float = 2.0
    stoch_period: int = 14
    stoch_smooth_k: int = 3
    stoch_smooth_d: int = 3
    ema_fast: int = 20
    ema_slow: int = 50

    order_flow_lookback: int = 20
    price_action_lookback: int = 20
    liquidity_lookback: int = 50

    # Level approach, in ATR multiples of the distance to the nearest level
    level_near_atr: float = 0.5
    level_at_atr: float = 0.2
    level_pierce_ratio: float = 0.3  # of each recent candle's own range

    # Liquidity zones
    reversal_body_atr: float = 0.5
    consolidation_range_atr: float = 1.5
    consolidation_window: int = 5
    zone_nearby_atr: float = 0.5
    max_reversal_zones: int = 5
    max_consolidations: int = 3

    weights: ScoringWeights = field(default_factory=ScoringWeights)
