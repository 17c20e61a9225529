"""Analysis data models — typed representations shared by every analyzer."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional


class MalformedCandleError(ValueError):
    """Raised when a candle series violates an OHLC or ordering invariant."""


@dataclass(frozen=True)
class Candle:
    """A single OHLCV bar, immutable once normalised."""

    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def upper_wick(self) -> float:
        return self.high - max(self.open, self.close)

    @property
    def lower_wick(self) -> float:
        return min(self.open, self.close) - self.low

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


@dataclass(frozen=True)
class SwingPoint:
    """A strict local extreme in the candle series."""

    type: Literal["high", "low"]
    index: int  # position in the candle series
    price: float
    time: datetime


@dataclass(frozen=True)
class Level:
    """A support or resistance level clustered from swing prices."""

    type: Literal["support", "resistance"]
    price: float  # centroid of all merged swing prices
    strength: int  # touch count, always >= 2
    distance: float
    distance_atr: float


@dataclass(frozen=True)
class Zone:
    """A liquidity zone: sharp-reversal demand/supply or consolidation."""

    price: float
    type: Literal["demand", "supply", "consolidation"]
    strength: float
    range: Optional[float] = None
    time: Optional[datetime] = None


@dataclass(frozen=True)
class CandlePattern:
    """A recognised candlestick pattern on one of the latest candles."""

    name: str
    direction: Literal["bullish", "bearish", "neutral"]
    strength: Literal["strong", "moderate", "weak"]
    index: int  # index of the candle completing the pattern
