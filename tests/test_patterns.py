"""Tests for candlestick pattern recognition."""

from datetime import datetime, timedelta

from fxlead.analysis.models import Candle
from fxlead.analysis.patterns import detect_candle_patterns

_T0 = datetime(2025, 1, 1)


def _make_candle(i: int, o: float, h: float, l: float, c: float) -> Candle:
    return Candle(time=_T0 + timedelta(hours=4 * i), open=o, high=h, low=l, close=c)


def _names(candles: list[Candle]) -> list[str]:
    return [p.name for p in detect_candle_patterns(candles)]


class TestCandlePatterns:
    def test_empty(self):
        assert detect_candle_patterns([]) == []

    def test_bullish_engulfing(self):
        candles = [
            _make_candle(0, 10.0, 10.2, 8.8, 9.0),
            _make_candle(1, 8.9, 10.6, 8.8, 10.5),
        ]
        patterns = detect_candle_patterns(candles)
        assert [p.name for p in patterns] == ["Bullish Engulfing"]
        assert patterns[0].direction == "bullish"
        assert patterns[0].strength == "strong"
        assert patterns[0].index == 1

    def test_bearish_engulfing(self):
        candles = [
            _make_candle(0, 9.0, 10.2, 8.8, 10.0),
            _make_candle(1, 10.1, 10.2, 8.4, 8.5),
        ]
        assert _names(candles) == ["Bearish Engulfing"]

    def test_hammer(self):
        patterns = detect_candle_patterns([_make_candle(0, 10.0, 10.25, 9.5, 10.2)])
        assert [(p.name, p.direction, p.strength) for p in patterns] == [
            ("Hammer", "bullish", "moderate"),
        ]

    def test_hanging_man(self):
        patterns = detect_candle_patterns([_make_candle(0, 10.2, 10.25, 9.5, 10.0)])
        assert [(p.name, p.direction) for p in patterns] == [("Hanging Man", "bearish")]

    def test_shooting_star(self):
        assert _names([_make_candle(0, 10.0, 10.5, 9.75, 9.8)]) == ["Shooting Star"]

    def test_doji(self):
        patterns = detect_candle_patterns([_make_candle(0, 10.0, 10.5, 9.5, 10.01)])
        assert [(p.name, p.direction, p.strength) for p in patterns] == [
            ("Doji", "neutral", "weak"),
        ]

    def test_morning_star(self):
        candles = [
            _make_candle(0, 11.0, 11.05, 9.95, 10.0),
            _make_candle(1, 9.9, 10.0, 9.85, 9.95),
            _make_candle(2, 10.0, 10.85, 9.95, 10.8),
        ]
        patterns = detect_candle_patterns(candles)
        assert [p.name for p in patterns] == ["Morning Star"]
        assert patterns[0].index == 2

    def test_evening_star(self):
        candles = [
            _make_candle(0, 10.0, 11.05, 9.95, 11.0),
            _make_candle(1, 11.1, 11.15, 11.0, 11.05),
            _make_candle(2, 11.0, 11.05, 10.15, 10.2),
        ]
        assert _names(candles) == ["Evening Star"]

    def test_weak_first_candle_is_not_a_star(self):
        candles = [
            _make_candle(0, 10.5, 12.0, 9.0, 10.0),
            _make_candle(1, 9.9, 10.0, 9.85, 9.95),
            _make_candle(2, 10.0, 10.85, 9.95, 10.8),
        ]
        assert "Morning Star" not in _names(candles)

    def test_plain_candle_has_no_pattern(self):
        candles = [
            _make_candle(0, 10.0, 10.6, 9.9, 10.5),
            _make_candle(1, 10.5, 11.1, 10.4, 11.0),
        ]
        assert detect_candle_patterns(candles) == []
