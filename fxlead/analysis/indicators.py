"""Technical indicators — SMA, EMA, RSI, MACD, ATR, Bollinger, Stochastic, ADX.

Pure functions, no I/O.  Every series returned here is aligned to a
*suffix* of its input: the first value corresponds to the first input
position at which the full window is available, and nothing is padded.
Inputs too short to produce a single value yield an empty series (or a
zeroed composite result), never an exception.

Smoothing is a simple rolling mean throughout (RSI, ATR, ADX), not
Wilder's recursive smoothing.  RSI maps a zero average loss to
``rs = 100`` (≈ 99.0099), and ADX reports the latest DX value.
"""

import math
from dataclasses import dataclass, field

from fxlead.analysis.models import Candle


def _check_period(name: str, period: int) -> None:
    if period < 1:
        raise ValueError(f"{name} period must be >= 1, got {period}")


def _true_ranges(candles: list[Candle]) -> list[float]:
    """TR[i] = max(high - low, |high - prev_close|, |low - prev_close|)."""
    return [
        max(
            candles[i].high - candles[i].low,
            abs(candles[i].high - candles[i - 1].close),
            abs(candles[i].low - candles[i - 1].close),
        )
        for i in range(1, len(candles))
    ]


# ── Moving averages ──────────────────────────────────────────────────────


def calculate_sma(values: list[float], period: int) -> list[float]:
    """Simple sliding mean.  Output length is ``len(values) - period + 1``."""
    _check_period("SMA", period)
    return [
        sum(values[i - period + 1 : i + 1]) / period
        for i in range(period - 1, len(values))
    ]


def calculate_ema(values: list[float], period: int) -> list[float]:
    """Exponential Moving Average seeded with the SMA of the first *period* values.

        ``ema[i] = value[i] × k + ema[i-1] × (1 - k)``, ``k = 2 / (period + 1)``

    Output length is ``len(values) - period + 1``.
    """
    _check_period("EMA", period)
    if len(values) < period:
        return []

    k = 2.0 / (period + 1)
    ema = [sum(values[:period]) / period]
    for i in range(period, len(values)):
        ema.append(values[i] * k + ema[-1] * (1 - k))
    return ema


# ── RSI ──────────────────────────────────────────────────────────────────


def calculate_rsi(candles: list[Candle], period: int = 14) -> list[float]:
    """Relative Strength Index over rolling windows of close-to-close deltas.

    Algorithm (simple rolling mean):
        1. delta = close[i] - close[i-1]
        2. For each window of *period* deltas:
           gains  = sum(positive deltas) / period
           losses = |sum(negative deltas)| / period
        3. RS = 100 if losses == 0 else gains / losses
        4. RSI = 100 - 100 / (1 + RS)

    Requires at least ``period + 1`` candles.  Value ``j`` belongs to
    candle index ``j + period``.
    """
    _check_period("RSI", period)
    if len(candles) < period + 1:
        return []

    deltas = [candles[i].close - candles[i - 1].close for i in range(1, len(candles))]

    rsi: list[float] = []
    for i in range(period - 1, len(deltas)):
        window = deltas[i - period + 1 : i + 1]
        gains = sum(d for d in window if d > 0) / period
        losses = abs(sum(d for d in window if d < 0)) / period
        rs = 100.0 if losses == 0 else gains / losses
        rsi.append(100.0 - 100.0 / (1.0 + rs))
    return rsi


# ── MACD ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MACDResult:
    """MACD line, signal line and histogram, each suffix-aligned.

    ``histogram`` has the same length as ``signal``.
    """

    macd: list[float] = field(default_factory=list)
    signal: list[float] = field(default_factory=list)
    histogram: list[float] = field(default_factory=list)


def calculate_macd(
    candles: list[Candle],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MACDResult:
    """MACD = EMA(close, fast) - EMA(close, slow).

    The fast EMA series is longer by ``slow - fast`` values, so its leading
    values are dropped before subtracting.  The histogram drops the leading
    ``len(macd) - len(signal)`` MACD values before subtracting the signal.
    """
    closes = [c.close for c in candles]
    ema_fast = calculate_ema(closes, fast)
    ema_slow = calculate_ema(closes, slow)

    if not ema_fast or not ema_slow:
        return MACDResult()

    offset = slow - fast
    macd_line = [
        ema_fast[i + offset] - ema_slow[i]
        for i in range(len(ema_fast) - offset)
    ]

    signal_line = calculate_ema(macd_line, signal)
    hist_offset = len(macd_line) - len(signal_line)
    histogram = [
        macd_line[i + hist_offset] - signal_line[i]
        for i in range(len(signal_line))
    ]
    return MACDResult(macd=macd_line, signal=signal_line, histogram=histogram)


# ── ATR ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ATRResult:
    """Rolling-mean Average True Range."""

    current: float = 0.0  # last value, 0 when there is none
    values: list[float] = field(default_factory=list)


def calculate_atr(candles: list[Candle], period: int = 14) -> ATRResult:
    """Average True Range as a simple rolling mean of TR over *period*.

    Requires at least ``period + 1`` candles (TR needs a previous close).
    Value ``j`` belongs to candle index ``j + period``.
    """
    _check_period("ATR", period)
    if len(candles) < period + 1:
        return ATRResult()

    values = calculate_sma(_true_ranges(candles), period)
    return ATRResult(current=values[-1] if values else 0.0, values=values)


# ── Bollinger Bands ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class BollingerBands:
    """Upper/middle/lower bands, suffix-aligned (``len(candles) - period + 1``)."""

    upper: list[float] = field(default_factory=list)
    middle: list[float] = field(default_factory=list)
    lower: list[float] = field(default_factory=list)


def calculate_bollinger(
    candles: list[Candle],
    period: int = 20,
    std_dev: float = 2.0,
) -> BollingerBands:
    """Bollinger Bands.

    Middle = SMA(close, *period*)
    Upper  = middle + *std_dev* × σ
    Lower  = middle − *std_dev* × σ

    σ is the population standard deviation of the same window.
    """
    _check_period("Bollinger", period)
    closes = [c.close for c in candles]

    upper: list[float] = []
    middle: list[float] = []
    lower: list[float] = []

    for i in range(period - 1, len(closes)):
        window = closes[i - period + 1 : i + 1]
        sma = sum(window) / period
        variance = sum((x - sma) ** 2 for x in window) / period
        sigma = math.sqrt(variance)

        middle.append(sma)
        upper.append(sma + std_dev * sigma)
        lower.append(sma - std_dev * sigma)

    return BollingerBands(upper=upper, middle=middle, lower=lower)


# ── Stochastic ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class StochasticResult:
    """Smoothed %K and %D lines, each suffix-aligned."""

    k: list[float] = field(default_factory=list)
    d: list[float] = field(default_factory=list)


def calculate_stochastic(
    candles: list[Candle],
    period: int = 14,
    smooth_k: int = 3,
    smooth_d: int = 3,
) -> StochasticResult:
    """Stochastic oscillator.

    raw %K = (close - lowest low) / (highest high - lowest low) × 100 per
    window of *period* candles, or 50 when the window has zero range.
    %K = SMA(raw %K, *smooth_k*), %D = SMA(%K, *smooth_d*).
    """
    _check_period("Stochastic", period)
    raw_k: list[float] = []
    for i in range(period - 1, len(candles)):
        window = candles[i - period + 1 : i + 1]
        highest = max(c.high for c in window)
        lowest = min(c.low for c in window)
        span = highest - lowest
        if span == 0:
            raw_k.append(50.0)
        else:
            raw_k.append((candles[i].close - lowest) / span * 100.0)

    k_line = calculate_sma(raw_k, smooth_k)
    d_line = calculate_sma(k_line, smooth_d)
    return StochasticResult(k=k_line, d=d_line)


# ── ADX ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DirectionalPoint:
    """Directional movement readings for one window."""

    adx: float  # the window's DX
    plus_di: float
    minus_di: float


@dataclass(frozen=True)
class ADXResult:
    """Latest directional reading plus the full per-window series."""

    adx: float = 0.0
    plus_di: float = 0.0
    minus_di: float = 0.0
    values: list[DirectionalPoint] = field(default_factory=list)


def calculate_adx(candles: list[Candle], period: int = 14) -> ADXResult:
    """Directional movement index.

    Algorithm:
        1. up = high[i] - high[i-1], down = low[i-1] - low[i]
           +DM = up if up > down and up > 0 else 0
           -DM = down if down > up and down > 0 else 0
        2. Rolling mean of +DM, -DM and TR over *period*.
        3. ±DI = 100 × avgDM / avgTR (0 when avgTR is 0)
        4. DX = 100 × |+DI − −DI| / (+DI + −DI) (0 when both DI are 0)

    The reported ``adx`` is the latest DX value, not a smoothed DX average.
    Requires at least ``period + 1`` candles.
    """
    _check_period("ADX", period)
    if len(candles) < period + 1:
        return ADXResult()

    plus_dm: list[float] = []
    minus_dm: list[float] = []
    for i in range(1, len(candles)):
        up_move = candles[i].high - candles[i - 1].high
        down_move = candles[i - 1].low - candles[i].low
        plus_dm.append(up_move if (up_move > down_move and up_move > 0) else 0.0)
        minus_dm.append(down_move if (down_move > up_move and down_move > 0) else 0.0)

    avg_tr = calculate_sma(_true_ranges(candles), period)
    avg_plus = calculate_sma(plus_dm, period)
    avg_minus = calculate_sma(minus_dm, period)

    points: list[DirectionalPoint] = []
    for tr, pdm, mdm in zip(avg_tr, avg_plus, avg_minus):
        if tr == 0:
            plus_di = minus_di = 0.0
        else:
            plus_di = pdm / tr * 100.0
            minus_di = mdm / tr * 100.0
        di_sum = plus_di + minus_di
        dx = 0.0 if di_sum == 0 else abs(plus_di - minus_di) / di_sum * 100.0
        points.append(DirectionalPoint(adx=dx, plus_di=plus_di, minus_di=minus_di))

    latest = points[-1]
    return ADXResult(
        adx=latest.adx,
        plus_di=latest.plus_di,
        minus_di=latest.minus_di,
        values=points,
    )
