"""Analysis result aggregates.

One ``AnalysisResult`` is produced per (pair, timestamp) analysis pass and
is read-only from then on.  Series-derived fields are ``None`` when the
configured period leaves the series too short to produce a value.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from fxlead.analysis.leading import (
    LevelStrength,
    LiquidityZones,
    MomentumShift,
    OrderFlow,
    PriceActionStrength,
)
from fxlead.analysis.models import CandlePattern, Level, SwingPoint
from fxlead.analysis.scoring import SignalSummary, TradingSignal
from fxlead.analysis.structure import TrendStructure


@dataclass(frozen=True)
class CurrentSnapshot:
    price: float
    time: datetime


@dataclass(frozen=True)
class RSISnapshot:
    current: Optional[float]
    previous: Optional[float]
    status: str  # "overbought" > 70, "oversold" < 30, else "neutral"


@dataclass(frozen=True)
class MACDSnapshot:
    histogram: Optional[float]
    previous: Optional[float]
    trending: str  # "up" when the histogram rose on the last value


@dataclass(frozen=True)
class ADXSnapshot:
    value: float
    plus_di: float
    minus_di: float
    strength: str  # "strong" > 25, "moderate" > 15, else "weak"


@dataclass(frozen=True)
class EMASnapshot:
    fast: Optional[float]
    slow: Optional[float]
    alignment: str  # "bullish" when fast > slow


@dataclass(frozen=True)
class BollingerSnapshot:
    upper: Optional[float]
    middle: Optional[float]
    lower: Optional[float]


@dataclass(frozen=True)
class StochasticSnapshot:
    k: Optional[float]
    d: Optional[float]
    status: str  # "overbought" > 80, "oversold" < 20, else "neutral"


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Lagging indicators, used as confirmation only."""

    rsi: RSISnapshot
    macd: MACDSnapshot
    adx: ADXSnapshot
    ema: EMASnapshot
    bollinger: BollingerSnapshot
    stochastic: StochasticSnapshot
    atr: float


@dataclass(frozen=True)
class LeadingSnapshot:
    """Leading price-action signals, the main drivers of the score."""

    order_flow: OrderFlow
    momentum_shift: MomentumShift
    price_action: PriceActionStrength
    level_strength: LevelStrength
    liquidity_zones: LiquidityZones


@dataclass(frozen=True)
class StructureSnapshot:
    trend: TrendStructure
    swing_points: list[SwingPoint] = field(default_factory=list)
    levels: list[Level] = field(default_factory=list)


@dataclass(frozen=True)
class KeyLevels:
    support: Optional[float]
    resistance: Optional[float]
    nearest_level: Optional[float]
    atr: float


@dataclass(frozen=True)
class AnalysisResult:
    """Complete analysis of one candle series."""

    pair: str
    timestamp: Optional[datetime]
    current: CurrentSnapshot
    leading: LeadingSnapshot
    indicators: IndicatorSnapshot
    structure: StructureSnapshot
    patterns: list[CandlePattern]
    signals: SignalSummary
    trading_signal: TradingSignal
    key_levels: KeyLevels
    daily_structure: Optional[TrendStructure] = None


@dataclass(frozen=True)
class InsufficientDataResult:
    """The series was too short for a full analysis; nothing was computed."""

    pair: str
    reason: str
    data_points: int
    required: int
