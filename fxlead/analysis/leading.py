"""Leading signals — order flow, momentum shift, price action, level approach,
liquidity zones.

These read raw candle structure rather than smoothed indicators, so they
react before the lagging oscillators do.  Pure functions, no I/O.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional

from fxlead.analysis.models import Candle, Level, Zone


def _avg_body(candles: list[Candle]) -> float:
    if not candles:
        return 0.0
    return sum(c.body for c in candles) / len(candles)


# ── Order flow ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class OrderFlow:
    """Buying vs selling pressure from strong-bodied candles."""

    buying: float
    selling: float
    net: float
    ratio: float  # net / total, in [-1, 1]
    bias: Literal["bullish", "bearish", "neutral"]
    strength: float  # |ratio|
    signal: Literal["strong_buy", "strong_sell", "neutral"]


def analyze_order_flow(
    candles: list[Candle],
    lookback: int = 20,
    body_ratio_threshold: float = 0.6,
) -> OrderFlow:
    """Sum the bodies of conviction candles into buying/selling pressure.

    A candle counts when its body fills more than *body_ratio_threshold*
    of its range; zero-range candles never count.  The bias needs
    ``|ratio| > 0.3``, a strong signal ``|ratio| > 0.5``.
    """
    buying = 0.0
    selling = 0.0
    for c in candles[-lookback:]:
        if c.range <= 0:
            continue
        body_ratio = c.body / c.range
        if c.is_bullish and body_ratio > body_ratio_threshold:
            buying += c.body
        elif c.is_bearish and body_ratio > body_ratio_threshold:
            selling += c.body

    net = buying - selling
    total = buying + selling
    ratio = net / total if total > 0 else 0.0

    if ratio > 0.3:
        bias = "bullish"
    elif ratio < -0.3:
        bias = "bearish"
    else:
        bias = "neutral"

    if ratio > 0.5:
        signal = "strong_buy"
    elif ratio < -0.5:
        signal = "strong_sell"
    else:
        signal = "neutral"

    return OrderFlow(
        buying=buying,
        selling=selling,
        net=net,
        ratio=ratio,
        bias=bias,
        strength=abs(ratio),
        signal=signal,
    )


# ── Momentum shift ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class MomentumShift:
    """Short-term momentum change and RSI divergence."""

    acceleration: float  # avg body of last 5 / avg body of last 10
    accelerating: bool
    decelerating: bool
    momentum_5: Literal["bullish", "bearish"]
    momentum_10: Literal["bullish", "bearish"]
    rsi_momentum: Literal["rising", "falling", "flat"]
    divergence: Literal["bullish", "bearish", "none"]
    early_signal: bool


def detect_momentum_shift(candles: list[Candle], rsi: list[float]) -> MomentumShift:
    """Compare the last 5 candles against the last 10 and against RSI.

    Divergence:
        - **bullish**: last-5 low is lower than the first low of the window
          while the last RSI value exceeds the first of its last 5.
        - **bearish**: last-5 high is higher while RSI ends lower.

    RSI momentum is ``rising``/``falling`` when at least 3 of the 4 steps
    across its last 5 values move that way.
    """
    if not candles:
        raise ValueError("Momentum shift needs at least one candle")

    last10 = candles[-10:]
    last5 = candles[-5:]

    change_5 = last5[-1].close - last5[0].close
    change_10 = last10[-1].close - last10[0].close

    avg_body_10 = _avg_body(last10)
    avg_body_5 = _avg_body(last5)
    acceleration = avg_body_5 / avg_body_10 if avg_body_10 > 0 else 1.0

    rsi_last = rsi[-5:]
    steps = list(zip(rsi_last, rsi_last[1:]))
    rising = sum(1 for prev, curr in steps if curr > prev) >= 3
    falling = sum(1 for prev, curr in steps if curr < prev) >= 3
    if rising:
        rsi_momentum = "rising"
    elif falling:
        rsi_momentum = "falling"
    else:
        rsi_momentum = "flat"

    price_higher = last5[-1].high > last5[0].high
    price_lower = last5[-1].low < last5[0].low
    rsi_higher = bool(rsi_last) and rsi_last[-1] > rsi_last[0]
    rsi_lower = bool(rsi_last) and rsi_last[-1] < rsi_last[0]

    bullish_div = price_lower and rsi_higher
    bearish_div = price_higher and rsi_lower
    if bullish_div:
        divergence = "bullish"
    elif bearish_div:
        divergence = "bearish"
    else:
        divergence = "none"

    return MomentumShift(
        acceleration=acceleration,
        accelerating=acceleration > 1.2,
        decelerating=acceleration < 0.8,
        momentum_5="bullish" if change_5 > 0 else "bearish",
        momentum_10="bullish" if change_10 > 0 else "bearish",
        rsi_momentum=rsi_momentum,
        divergence=divergence,
        early_signal=bullish_div or bearish_div,
    )


# ── Price action strength ────────────────────────────────────────────────


@dataclass(frozen=True)
class PriceActionStrength:
    """Current-candle conviction relative to recent candles."""

    current_body: float
    avg_body: float
    strength: float  # current body / average body
    body_ratio: float
    upper_rejection: bool
    lower_rejection: bool
    consecutive_bullish: int
    consecutive_bearish: int
    momentum: Literal["strong_bullish", "strong_bearish", "neutral"]
    signal: Literal["bullish_reversal", "bearish_reversal", "none"]


def analyze_price_action(
    candles: list[Candle],
    lookback: int = 20,
    wick_ratio: float = 1.5,
) -> PriceActionStrength:
    """Score the latest candle's body, wicks and directional run.

    A rejection wick is longer than *wick_ratio* × body.  The run counter
    scans backward from the latest candle until the direction flips; a
    candle that is not bullish counts toward the bearish run.

    Signal:
        - **bullish_reversal**: lower rejection, bullish, body above average.
        - **bearish_reversal**: upper rejection, bearish, body above average.
    """
    if not candles:
        raise ValueError("Price action needs at least one candle")

    recent = candles[-lookback:]
    last = candles[-1]

    body = last.body
    body_ratio = body / last.range if last.range > 0 else 0.0
    avg_body = _avg_body(recent)

    upper_rejection = last.upper_wick > body * wick_ratio
    lower_rejection = last.lower_wick > body * wick_ratio

    bull_run = 0
    bear_run = 0
    for c in reversed(recent):
        if c.is_bullish:
            if bear_run:
                break
            bull_run += 1
        else:
            if bull_run:
                break
            bear_run += 1

    if bull_run >= 3:
        momentum = "strong_bullish"
    elif bear_run >= 3:
        momentum = "strong_bearish"
    else:
        momentum = "neutral"

    if lower_rejection and last.is_bullish and body > avg_body:
        signal = "bullish_reversal"
    elif upper_rejection and not last.is_bullish and body > avg_body:
        signal = "bearish_reversal"
    else:
        signal = "none"

    return PriceActionStrength(
        current_body=body,
        avg_body=avg_body,
        strength=body / avg_body if avg_body > 0 else 0.0,
        body_ratio=body_ratio,
        upper_rejection=upper_rejection,
        lower_rejection=lower_rejection,
        consecutive_bullish=bull_run,
        consecutive_bearish=bear_run,
        momentum=momentum,
        signal=signal,
    )


# ── Level approach ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class LevelStrength:
    """Where price sits relative to the nearest clustered level."""

    near_level: bool
    at_level: bool
    distance: Optional[float]
    distance_atr: Optional[float]
    strength: int
    type: Optional[Literal["support", "resistance"]]
    price: Optional[float]
    testing: bool
    signal: Literal["potential_bounce", "potential_rejection", "none"]


_NO_LEVEL = LevelStrength(
    near_level=False,
    at_level=False,
    distance=None,
    distance_atr=None,
    strength=0,
    type=None,
    price=None,
    testing=False,
    signal="none",
)


def analyze_level_strength(
    candles: list[Candle],
    levels: list[Level],
    current_price: float,
    atr: float,
    near_atr: float = 0.5,
    at_atr: float = 0.2,
    pierce_ratio: float = 0.3,
) -> LevelStrength:
    """Measure the approach to the nearest level (``levels[0]``).

    ``near_level`` within *near_atr* ATR, ``at_level`` within *at_atr* ATR.
    ``testing`` is set when any of the last 5 candles reached within
    *pierce_ratio* of its own range of the level.
    """
    if not levels:
        return _NO_LEVEL

    nearest = levels[0]
    distance = abs(current_price - nearest.price)
    if atr > 0:
        distance_atr = distance / atr
    else:
        distance_atr = 0.0 if distance == 0 else float("inf")

    near_level = distance_atr < near_atr
    at_level = distance_atr < at_atr

    testing = False
    for c in candles[-5:]:
        reach = c.range * pierce_ratio
        if nearest.type == "support" and c.low <= nearest.price + reach:
            testing = True
        elif nearest.type == "resistance" and c.high >= nearest.price - reach:
            testing = True

    if at_level and nearest.type == "support":
        signal = "potential_bounce"
    elif at_level and nearest.type == "resistance":
        signal = "potential_rejection"
    else:
        signal = "none"

    return LevelStrength(
        near_level=near_level,
        at_level=at_level,
        distance=distance,
        distance_atr=distance_atr,
        strength=nearest.strength,
        type=nearest.type,
        price=nearest.price,
        testing=testing,
        signal=signal,
    )


# ── Liquidity zones ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class LiquidityZones:
    """Recent reversal (demand/supply) and consolidation zones."""

    reversal_zones: list[Zone] = field(default_factory=list)
    consolidations: list[Zone] = field(default_factory=list)
    has_nearby_zone: bool = False


def identify_liquidity_zones(
    candles: list[Candle],
    atr: float,
    lookback: int = 50,
    reversal_body_atr: float = 0.5,
    consolidation_range_atr: float = 1.5,
    consolidation_window: int = 5,
    nearby_atr: float = 0.5,
    max_reversals: int = 5,
    max_consolidations: int = 3,
) -> LiquidityZones:
    """Mark where price reversed sharply or built up in a tight range.

    Reversal zones: a candle flipping the previous candle's direction with
    a body above *reversal_body_atr* × ATR.  A bullish flip marks demand at
    its low, a bearish flip supply at its high.  The latest candle is not
    scanned (it has no follow-through yet).

    Consolidations: each *consolidation_window*-candle window preceding a
    scanned position whose high-low range is below
    *consolidation_range_atr* × ATR.

    ``has_nearby_zone`` looks only at reversal zones within *nearby_atr*
    ATR of the latest close.
    """
    recent = candles[-lookback:]
    if not recent:
        return LiquidityZones()

    zones: list[Zone] = []
    for i in range(1, len(recent) - 1):
        curr = recent[i]
        prev = recent[i - 1]
        sharp = curr.body > atr * reversal_body_atr
        if prev.is_bearish and curr.is_bullish and sharp:
            zones.append(Zone(
                price=curr.low,
                type="demand",
                strength=curr.body / atr if atr > 0 else 0.0,
                time=curr.time,
            ))
        elif prev.is_bullish and curr.is_bearish and sharp:
            zones.append(Zone(
                price=curr.high,
                type="supply",
                strength=curr.body / atr if atr > 0 else 0.0,
                time=curr.time,
            ))

    consolidations: list[Zone] = []
    for i in range(consolidation_window, len(recent)):
        window = recent[i - consolidation_window : i]
        high = max(c.high for c in window)
        low = min(c.low for c in window)
        if high - low < atr * consolidation_range_atr:
            consolidations.append(Zone(
                price=(high + low) / 2,
                type="consolidation",
                strength=float(consolidation_window),
                range=high - low,
            ))

    last_close = candles[-1].close
    has_nearby = any(abs(z.price - last_close) < atr * nearby_atr for z in zones)

    return LiquidityZones(
        reversal_zones=zones[-max_reversals:] if max_reversals > 0 else [],
        consolidations=consolidations[-max_consolidations:] if max_consolidations > 0 else [],
        has_nearby_zone=has_nearby,
    )
