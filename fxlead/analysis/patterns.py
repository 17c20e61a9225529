"""Candlestick pattern recognition over the latest three candles."""

from fxlead.analysis.models import Candle, CandlePattern


def _is_bullish_engulfing(prev: Candle, curr: Candle) -> bool:
    """Return True if *curr* is a bullish engulfing relative to *prev*."""
    return (
        prev.is_bearish
        and curr.is_bullish
        and curr.close > prev.open  # body engulfs prev body
        and curr.open <= prev.close
    )


def _is_bearish_engulfing(prev: Candle, curr: Candle) -> bool:
    """Return True if *curr* is a bearish engulfing relative to *prev*."""
    return (
        prev.is_bullish
        and curr.is_bearish
        and curr.close < prev.open
        and curr.open >= prev.close
    )


def _has_long_lower_wick(candle: Candle) -> bool:
    body = candle.body
    if body == 0:
        return False
    return candle.lower_wick >= 2 * body and candle.upper_wick <= body * 0.5


def _has_long_upper_wick(candle: Candle) -> bool:
    body = candle.body
    if body == 0:
        return False
    return candle.upper_wick >= 2 * body and candle.lower_wick <= body * 0.5


def _is_doji(candle: Candle) -> bool:
    return candle.range > 0 and candle.body < candle.range * 0.1


def _is_morning_star(first: Candle, middle: Candle, last: Candle) -> bool:
    """Large bearish candle, small-bodied pause, bullish close past the midpoint."""
    if not first.is_bearish or first.range == 0:
        return False
    if first.body < first.range * 0.5:
        return False
    midpoint = (first.open + first.close) / 2
    return (
        middle.body <= first.body * 0.3
        and last.is_bullish
        and last.close > midpoint
    )


def _is_evening_star(first: Candle, middle: Candle, last: Candle) -> bool:
    """Large bullish candle, small-bodied pause, bearish close past the midpoint."""
    if not first.is_bullish or first.range == 0:
        return False
    if first.body < first.range * 0.5:
        return False
    midpoint = (first.open + first.close) / 2
    return (
        middle.body <= first.body * 0.3
        and last.is_bearish
        and last.close < midpoint
    )


def detect_candle_patterns(candles: list[Candle]) -> list[CandlePattern]:
    """Recognise reversal and indecision patterns completed by the latest candle.

    Patterns:
        - Bullish / Bearish Engulfing (2 candles, strong)
        - Hammer / Hanging Man: long lower wick; a bullish close is a
          Hammer, a bearish close a Hanging Man (moderate)
        - Shooting Star: long upper wick (bearish, moderate)
        - Morning / Evening Star (3 candles, strong)
        - Doji: body under 10% of range (neutral, weak)

    Returns an empty list for an empty series.
    """
    if not candles:
        return []

    last_index = len(candles) - 1
    last = candles[-1]
    patterns: list[CandlePattern] = []

    if len(candles) >= 2:
        prev = candles[-2]
        if _is_bullish_engulfing(prev, last):
            patterns.append(CandlePattern("Bullish Engulfing", "bullish", "strong", last_index))
        elif _is_bearish_engulfing(prev, last):
            patterns.append(CandlePattern("Bearish Engulfing", "bearish", "strong", last_index))

    if _has_long_lower_wick(last):
        if last.is_bullish:
            patterns.append(CandlePattern("Hammer", "bullish", "moderate", last_index))
        else:
            patterns.append(CandlePattern("Hanging Man", "bearish", "moderate", last_index))

    if _has_long_upper_wick(last):
        patterns.append(CandlePattern("Shooting Star", "bearish", "moderate", last_index))

    if len(candles) >= 3:
        first, middle = candles[-3], candles[-2]
        if _is_morning_star(first, middle, last):
            patterns.append(CandlePattern("Morning Star", "bullish", "strong", last_index))
        elif _is_evening_star(first, middle, last):
            patterns.append(CandlePattern("Evening Star", "bearish", "strong", last_index))

    if _is_doji(last):
        patterns.append(CandlePattern("Doji", "neutral", "weak", last_index))

    return patterns
