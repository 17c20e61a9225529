"""Tests for the leading-signal analyzers.

Order flow, momentum shift, price action, level approach and liquidity
zones, each on small hand-built candle sequences.
"""

from datetime import datetime, timedelta

import pytest

from fxlead.analysis.leading import (
    analyze_level_strength,
    analyze_order_flow,
    analyze_price_action,
    detect_momentum_shift,
    identify_liquidity_zones,
)
from fxlead.analysis.models import Candle, Level

_T0 = datetime(2025, 1, 1)


def _make_candle(i: int, o: float, h: float, l: float, c: float) -> Candle:
    return Candle(time=_T0 + timedelta(hours=4 * i), open=o, high=h, low=l, close=c)


def _level(price: float, type_: str = "support", strength: int = 3) -> Level:
    return Level(type=type_, price=price, strength=strength, distance=0.0, distance_atr=0.0)


# ── Order flow ───────────────────────────────────────────────────────────


class TestOrderFlow:
    def test_all_strong_bullish(self):
        candles = [_make_candle(i, 1.0, 2.0, 1.0, 2.0) for i in range(5)]
        flow = analyze_order_flow(candles)
        assert flow.buying == pytest.approx(5.0)
        assert flow.selling == 0.0
        assert flow.ratio == pytest.approx(1.0)
        assert flow.bias == "bullish"
        assert flow.signal == "strong_buy"
        assert flow.strength == pytest.approx(1.0)

    def test_moderate_bias_without_strong_signal(self):
        candles = [_make_candle(i, 1.0, 2.0, 1.0, 2.0) for i in range(3)]
        candles.append(_make_candle(3, 2.0, 2.0, 1.0, 1.0))
        flow = analyze_order_flow(candles)
        assert flow.ratio == pytest.approx(0.5)
        assert flow.bias == "bullish"
        assert flow.signal == "neutral"

    def test_strong_selling(self):
        candles = [_make_candle(i, 2.0, 2.0, 1.0, 1.0) for i in range(4)]
        flow = analyze_order_flow(candles)
        assert flow.bias == "bearish"
        assert flow.signal == "strong_sell"
        assert flow.net == pytest.approx(-4.0)

    def test_weak_bodies_ignored(self):
        # body fills half the range, below the 0.6 threshold
        candles = [_make_candle(i, 1.0, 2.0, 1.0, 1.5) for i in range(10)]
        flow = analyze_order_flow(candles)
        assert flow.buying == 0.0
        assert flow.bias == "neutral"

    def test_zero_range_candles_skipped(self):
        candles = [_make_candle(i, 1.0, 1.0, 1.0, 1.0) for i in range(10)]
        flow = analyze_order_flow(candles)
        assert flow.ratio == 0.0
        assert flow.signal == "neutral"

    def test_only_lookback_counts(self):
        old = [_make_candle(i, 2.0, 2.0, 1.0, 1.0) for i in range(10)]
        recent = [_make_candle(10 + i, 1.0, 2.0, 1.0, 2.0) for i in range(5)]
        flow = analyze_order_flow(old + recent, lookback=5)
        assert flow.signal == "strong_buy"


# ── Momentum shift ───────────────────────────────────────────────────────


class TestMomentumShift:
    def test_empty_series_raises(self):
        with pytest.raises(ValueError):
            detect_momentum_shift([], [50.0])

    def test_bullish_divergence(self):
        closes = [10.0, 9.8, 9.6, 9.4, 9.2]
        candles = [_make_candle(i, c + 0.1, c + 0.2, c - 0.1, c) for i, c in enumerate(closes)]
        shift = detect_momentum_shift(candles, [40.0, 41.0, 42.0, 43.0, 44.0])
        assert shift.divergence == "bullish"
        assert shift.early_signal is True
        assert shift.rsi_momentum == "rising"
        assert shift.momentum_5 == "bearish"

    def test_bearish_divergence(self):
        closes = [10.0, 10.2, 10.4, 10.6, 10.8]
        candles = [_make_candle(i, c - 0.1, c + 0.1, c - 0.2, c) for i, c in enumerate(closes)]
        shift = detect_momentum_shift(candles, [70.0, 69.0, 68.0, 67.0, 66.0])
        assert shift.divergence == "bearish"
        assert shift.rsi_momentum == "falling"
        assert shift.momentum_5 == "bullish"

    def test_no_rsi_means_no_divergence(self):
        candles = [_make_candle(i, 1.0, 2.0, 0.5, 1.5) for i in range(10)]
        shift = detect_momentum_shift(candles, [])
        assert shift.divergence == "none"
        assert shift.rsi_momentum == "flat"
        assert shift.early_signal is False

    def test_acceleration(self):
        small = [_make_candle(i, 10.0, 11.2, 9.8, 11.0) for i in range(5)]
        large = [_make_candle(5 + i, 10.0, 13.2, 9.8, 13.0) for i in range(5)]
        shift = detect_momentum_shift(small + large, [50.0] * 5)
        # avg body last 5 = 3, last 10 = 2
        assert shift.acceleration == pytest.approx(1.5)
        assert shift.accelerating is True
        assert shift.decelerating is False

    def test_zero_bodies_default_to_steady(self):
        candles = [_make_candle(i, 1.0, 1.5, 0.5, 1.0) for i in range(10)]
        shift = detect_momentum_shift(candles, [50.0] * 5)
        assert shift.acceleration == 1.0
        assert shift.accelerating is False
        assert shift.decelerating is False


# ── Price action ─────────────────────────────────────────────────────────


class TestPriceAction:
    def test_bullish_reversal(self):
        candles = [_make_candle(i, 10.0, 10.6, 9.4, 9.5) for i in range(19)]
        candles.append(_make_candle(19, 10.0, 11.1, 7.0, 11.0))
        pa = analyze_price_action(candles)
        assert pa.lower_rejection is True
        assert pa.upper_rejection is False
        assert pa.signal == "bullish_reversal"
        assert pa.strength > 1.0

    def test_bearish_reversal(self):
        candles = [_make_candle(i, 9.5, 10.6, 9.4, 10.0) for i in range(19)]
        candles.append(_make_candle(19, 11.0, 14.0, 9.9, 10.0))
        pa = analyze_price_action(candles)
        assert pa.upper_rejection is True
        assert pa.signal == "bearish_reversal"

    def test_consecutive_run(self):
        candles = [_make_candle(0, 11.0, 11.1, 9.9, 10.0)]
        candles += [_make_candle(1 + i, 10.0, 11.1, 9.9, 11.0) for i in range(4)]
        pa = analyze_price_action(candles)
        assert pa.consecutive_bullish == 4
        assert pa.consecutive_bearish == 0
        assert pa.momentum == "strong_bullish"
        assert pa.signal == "none"

    def test_doji_counts_toward_bearish_run(self):
        candles = [_make_candle(i, 10.0, 10.5, 9.5, 10.0) for i in range(3)]
        pa = analyze_price_action(candles)
        assert pa.consecutive_bearish == 3
        assert pa.momentum == "strong_bearish"

    def test_zero_range_body_ratio(self):
        candles = [_make_candle(0, 10.0, 10.0, 10.0, 10.0)]
        pa = analyze_price_action(candles)
        assert pa.body_ratio == 0.0
        assert pa.strength == 0.0

    def test_empty_series_raises(self):
        with pytest.raises(ValueError):
            analyze_price_action([])


# ── Level strength ───────────────────────────────────────────────────────


class TestLevelStrength:
    def _candles(self, close: float) -> list[Candle]:
        return [_make_candle(i, close + 0.05, close + 0.1, close - 0.1, close) for i in range(5)]

    def test_no_levels(self):
        ls = analyze_level_strength(self._candles(100.0), [], 100.0, 1.0)
        assert ls.near_level is False
        assert ls.at_level is False
        assert ls.type is None
        assert ls.signal == "none"

    def test_at_support_is_potential_bounce(self):
        ls = analyze_level_strength(self._candles(100.1), [_level(100.0)], 100.1, 1.0)
        assert ls.distance_atr == pytest.approx(0.1)
        assert ls.at_level is True
        assert ls.near_level is True
        assert ls.signal == "potential_bounce"
        assert ls.strength == 3
        assert ls.testing is True

    def test_at_resistance_is_potential_rejection(self):
        level = _level(100.0, "resistance")
        ls = analyze_level_strength(self._candles(99.9), [level], 99.9, 1.0)
        assert ls.signal == "potential_rejection"

    def test_near_but_not_at(self):
        ls = analyze_level_strength(self._candles(100.3), [_level(100.0)], 100.3, 1.0)
        assert ls.near_level is True
        assert ls.at_level is False
        assert ls.signal == "none"

    def test_far_level_not_tested(self):
        ls = analyze_level_strength(self._candles(105.0), [_level(100.0)], 105.0, 1.0)
        assert ls.near_level is False
        assert ls.testing is False
        assert ls.distance == pytest.approx(5.0)

    def test_zero_atr(self):
        ls = analyze_level_strength(self._candles(101.0), [_level(100.0)], 101.0, 0.0)
        assert ls.distance_atr == float("inf")
        assert ls.near_level is False


# ── Liquidity zones ──────────────────────────────────────────────────────


class TestLiquidityZones:
    def test_demand_zone(self):
        candles = [
            _make_candle(0, 10.0, 10.1, 8.9, 9.0),
            _make_candle(1, 9.0, 11.1, 8.9, 11.0),
            _make_candle(2, 11.0, 11.3, 10.9, 11.2),
        ]
        zones = identify_liquidity_zones(candles, atr=1.0)
        assert len(zones.reversal_zones) == 1
        zone = zones.reversal_zones[0]
        assert zone.type == "demand"
        assert zone.price == 8.9
        assert zone.strength == pytest.approx(2.0)
        assert zone.time == candles[1].time
        assert zones.has_nearby_zone is False

    def test_supply_zone(self):
        candles = [
            _make_candle(0, 9.0, 10.1, 8.9, 10.0),
            _make_candle(1, 10.0, 10.1, 7.9, 8.0),
            _make_candle(2, 8.0, 8.1, 7.7, 7.8),
        ]
        zones = identify_liquidity_zones(candles, atr=1.0)
        assert [z.type for z in zones.reversal_zones] == ["supply"]
        assert zones.reversal_zones[0].price == 10.1

    def test_nearby_zone(self):
        candles = [
            _make_candle(0, 10.0, 10.1, 8.9, 9.0),
            _make_candle(1, 9.0, 11.1, 8.9, 11.0),
            _make_candle(2, 9.2, 9.3, 8.95, 9.0),
        ]
        zones = identify_liquidity_zones(candles, atr=1.0)
        assert zones.has_nearby_zone is True

    def test_latest_candle_not_scanned(self):
        candles = [
            _make_candle(0, 10.0, 10.1, 8.9, 9.0),
            _make_candle(1, 9.0, 11.1, 8.9, 11.0),
        ]
        zones = identify_liquidity_zones(candles, atr=1.0)
        assert zones.reversal_zones == []

    def test_consolidation(self):
        candles = [_make_candle(i, 10.0, 10.1, 9.9, 10.0) for i in range(7)]
        zones = identify_liquidity_zones(candles, atr=1.0)
        assert zones.reversal_zones == []
        assert len(zones.consolidations) == 2
        assert zones.consolidations[0].price == pytest.approx(10.0)
        assert zones.consolidations[0].range == pytest.approx(0.2)
        assert zones.consolidations[0].strength == 5.0

    def test_capped_counts(self):
        candles = [_make_candle(i, 10.0, 10.1, 9.9, 10.0) for i in range(20)]
        zones = identify_liquidity_zones(candles, atr=1.0)
        assert len(zones.consolidations) == 3

    def test_empty(self):
        zones = identify_liquidity_zones([], atr=1.0)
        assert zones.reversal_zones == []
        assert zones.consolidations == []
        assert zones.has_nearby_zone is False
