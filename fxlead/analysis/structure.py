"""Market structure — swing points, trend structure, support/resistance.

Pure functions over a time-ascending candle series.
"""

from dataclasses import dataclass
from typing import Literal, Optional

from fxlead.analysis.models import Candle, Level, SwingPoint


@dataclass(frozen=True)
class TrendStructure:
    """Higher-high / higher-low counts over the most recent swing points."""

    structure: Literal["uptrend", "downtrend", "ranging"]
    higher_highs: int
    lower_highs: int
    higher_lows: int
    lower_lows: int
    recent_high: Optional[float]
    recent_low: Optional[float]


def identify_swing_points(candles: list[Candle], lookback: int = 5) -> list[SwingPoint]:
    """Identify strict swing highs and lows.

    Index ``i`` is a swing high when every candle within *lookback* on both
    sides has a strictly lower high; swing lows mirror this on the low.
    Ties on either side disqualify the point, so flat tops and bottoms are
    never reported.  A candle may be both a high and a low; the high is
    listed first.
    """
    swings: list[SwingPoint] = []
    for i in range(lookback, len(candles) - lookback):
        high = candles[i].high
        low = candles[i].low
        is_high = True
        is_low = True
        for j in range(1, lookback + 1):
            if candles[i - j].high >= high or candles[i + j].high >= high:
                is_high = False
            if candles[i - j].low <= low or candles[i + j].low <= low:
                is_low = False
            if not is_high and not is_low:
                break

        if is_high:
            swings.append(SwingPoint("high", i, high, candles[i].time))
        if is_low:
            swings.append(SwingPoint("low", i, low, candles[i].time))
    return swings


def identify_trend_structure(
    swings: list[SwingPoint],
    window: int = 10,
) -> TrendStructure:
    """Classify trend from the last *window* swing points.

    Consecutive highs are compared pairwise (an equal high counts as a
    lower high), likewise for lows.

    Rules:
        - **uptrend**: higher highs > lower highs AND higher lows > lower lows.
        - **downtrend**: the mirrored condition.
        - **ranging**: everything else.
    """
    recent = swings[-window:] if window > 0 else []
    highs = [s for s in recent if s.type == "high"]
    lows = [s for s in recent if s.type == "low"]

    higher_highs = lower_highs = 0
    for prev, curr in zip(highs, highs[1:]):
        if curr.price > prev.price:
            higher_highs += 1
        else:
            lower_highs += 1

    higher_lows = lower_lows = 0
    for prev, curr in zip(lows, lows[1:]):
        if curr.price > prev.price:
            higher_lows += 1
        else:
            lower_lows += 1

    if higher_highs > lower_highs and higher_lows > lower_lows:
        structure = "uptrend"
    elif lower_highs > higher_highs and lower_lows > higher_lows:
        structure = "downtrend"
    else:
        structure = "ranging"

    return TrendStructure(
        structure=structure,
        higher_highs=higher_highs,
        lower_highs=lower_highs,
        higher_lows=higher_lows,
        lower_lows=lower_lows,
        recent_high=highs[-1].price if highs else None,
        recent_low=lows[-1].price if lows else None,
    )


def _atr_distance(distance: float, atr: float) -> float:
    if atr > 0:
        return distance / atr
    return 0.0 if distance == 0 else float("inf")


def _cluster_prices(prices: list[float], tolerance: float) -> list[tuple[float, int]]:
    """Greedy single-pass clustering in input order.

    Each price joins the first cluster whose centroid is strictly within
    *tolerance*, moving that centroid to the running mean of its members;
    otherwise it starts a new cluster.  Order-dependent.
    """
    clusters: list[list] = []  # [centroid, touches]
    for price in prices:
        for cluster in clusters:
            if abs(price - cluster[0]) < tolerance:
                cluster[1] += 1
                cluster[0] = (cluster[0] * (cluster[1] - 1) + price) / cluster[1]
                break
        else:
            clusters.append([price, 1])
    return [(centroid, touches) for centroid, touches in clusters]


def identify_support_resistance(
    swings: list[SwingPoint],
    current_price: float,
    atr: float,
    tolerance_atr: float = 0.5,
    max_levels: int = 5,
) -> list[Level]:
    """Cluster swing prices into support/resistance levels.

    Swing prices are clustered chronologically with tolerance
    ``tolerance_atr × atr``.  Clusters touched at least twice become
    levels: resistance above *current_price*, support otherwise.

    Returns:
        Up to *max_levels* ``Level`` objects, nearest first.
    """
    tolerance = atr * tolerance_atr
    clusters = _cluster_prices([s.price for s in swings], tolerance)

    levels: list[Level] = []
    for centroid, touches in clusters:
        if touches < 2:
            continue
        distance = abs(current_price - centroid)
        levels.append(
            Level(
                type="resistance" if centroid > current_price else "support",
                price=centroid,
                strength=touches,
                distance=distance,
                distance_atr=_atr_distance(distance, atr),
            )
        )

    levels.sort(key=lambda lv: lv.distance)
    return levels[:max_levels]
