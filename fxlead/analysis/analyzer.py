"""Single-pass analysis — candles in, ``AnalysisResult`` out.

Validates the series, computes every indicator once, runs the structure
detector and leading analyzers, and scores the result.  No I/O, no state
kept between calls.
"""

import logging
import math
from datetime import datetime
from typing import Optional, Union

from fxlead.analysis.indicators import (
    calculate_adx,
    calculate_atr,
    calculate_bollinger,
    calculate_ema,
    calculate_macd,
    calculate_rsi,
    calculate_stochastic,
)
from fxlead.analysis.leading import (
    analyze_level_strength,
    analyze_order_flow,
    analyze_price_action,
    detect_momentum_shift,
    identify_liquidity_zones,
)
from fxlead.analysis.models import Candle, MalformedCandleError
from fxlead.analysis.patterns import detect_candle_patterns
from fxlead.analysis.results import (
    ADXSnapshot,
    AnalysisResult,
    BollingerSnapshot,
    CurrentSnapshot,
    EMASnapshot,
    IndicatorSnapshot,
    InsufficientDataResult,
    KeyLevels,
    LeadingSnapshot,
    MACDSnapshot,
    RSISnapshot,
    StochasticSnapshot,
    StructureSnapshot,
)
from fxlead.analysis.scoring import build_trading_signal, summarize_signals
from fxlead.analysis.structure import (
    TrendStructure,
    identify_support_resistance,
    identify_swing_points,
    identify_trend_structure,
)
from fxlead.models.analysis_settings import AnalysisSettings

logger = logging.getLogger("fxlead.analysis")


def _last(series: list[float], back: int = 1) -> Optional[float]:
    """Return ``series[-back]`` or ``None`` when the series is too short."""
    return series[-back] if len(series) >= back else None


def validate_candles(candles: list[Candle]) -> None:
    """Fail fast on candles that would otherwise propagate NaN or nonsense.

    Checks every candle for finite OHLC, ``low <= min(open, close)``,
    ``max(open, close) <= high``, non-negative volume, and that times never
    decrease.

    Raises ``MalformedCandleError`` naming the first offending candle.
    """
    prev_time = None
    for i, c in enumerate(candles):
        for name in ("open", "high", "low", "close", "volume"):
            value = getattr(c, name)
            if not math.isfinite(value):
                raise MalformedCandleError(
                    f"Candle {i} ({c.time}): {name} is not finite ({value})"
                )
        if c.volume < 0:
            raise MalformedCandleError(
                f"Candle {i} ({c.time}): negative volume {c.volume}"
            )
        if not (c.low <= min(c.open, c.close) and max(c.open, c.close) <= c.high):
            raise MalformedCandleError(
                f"Candle {i} ({c.time}): inconsistent OHLC "
                f"o={c.open} h={c.high} l={c.low} c={c.close}"
            )
        if prev_time is not None and c.time < prev_time:
            raise MalformedCandleError(
                f"Candle {i} ({c.time}): time precedes previous candle ({prev_time})"
            )
        prev_time = c.time


def analyze_structure(candles: list[Candle], settings: AnalysisSettings) -> TrendStructure:
    """Trend structure alone, used for higher-timeframe context."""
    swings = identify_swing_points(candles, settings.swing_lookback)
    return identify_trend_structure(swings, settings.structure_swings)


def analyze_candles(
    candles: list[Candle],
    pair: str = "",
    settings: AnalysisSettings = AnalysisSettings(),
    as_of: Optional[datetime] = None,
    daily: Optional[list[Candle]] = None,
) -> Union[AnalysisResult, InsufficientDataResult]:
    """Run one full analysis pass over a time-ascending candle series.

    Args:
        candles: Primary (e.g. 4H) candles, oldest-first.
        pair: Instrument label carried into the result.
        settings: Indicator periods, windows and scoring weights.
        as_of: Timestamp stamped on the result.
        daily: Optional higher-timeframe candles; when long enough their
            trend structure is attached as context (never scored).  A
            malformed daily series is logged and dropped.

    Returns:
        ``AnalysisResult``, or ``InsufficientDataResult`` when fewer than
        ``settings.min_candles`` candles are supplied.

    Raises:
        MalformedCandleError: if the primary series breaks an OHLC or time invariant.
    """
    if len(candles) < settings.min_candles:
        logger.info(
            "%s: insufficient data (%d candles, need %d)",
            pair or "series", len(candles), settings.min_candles,
        )
        return InsufficientDataResult(
            pair=pair,
            reason="Insufficient data",
            data_points=len(candles),
            required=settings.min_candles,
        )

    validate_candles(candles)

    w = settings.weights
    last = candles[-1]
    current_price = last.close
    closes = [c.close for c in candles]

    # 1 ── Lagging indicators
    rsi = calculate_rsi(candles, settings.rsi_period)
    macd = calculate_macd(candles, settings.macd_fast, settings.macd_slow, settings.macd_signal)
    atr = calculate_atr(candles, settings.atr_period)
    adx = calculate_adx(candles, settings.adx_period)
    ema_fast = calculate_ema(closes, settings.ema_fast)
    ema_slow = calculate_ema(closes, settings.ema_slow)
    bands = calculate_bollinger(candles, settings.bb_period, settings.bb_std_dev)
    stoch = calculate_stochastic(
        candles, settings.stoch_period, settings.stoch_smooth_k, settings.stoch_smooth_d,
    )

    # 2 ── Structure
    swings = identify_swing_points(candles, settings.swing_lookback)
    trend = identify_trend_structure(swings, settings.structure_swings)
    levels = identify_support_resistance(
        swings, current_price, atr.current,
        tolerance_atr=settings.cluster_tolerance_atr,
        max_levels=settings.max_levels,
    )

    # 3 ── Leading signals
    order_flow = analyze_order_flow(candles, settings.order_flow_lookback)
    momentum = detect_momentum_shift(candles, rsi)
    price_action = analyze_price_action(candles, settings.price_action_lookback)
    level = analyze_level_strength(
        candles, levels, current_price, atr.current,
        near_atr=settings.level_near_atr,
        at_atr=settings.level_at_atr,
        pierce_ratio=settings.level_pierce_ratio,
    )
    liquidity = identify_liquidity_zones(
        candles, atr.current, settings.liquidity_lookback,
        reversal_body_atr=settings.reversal_body_atr,
        consolidation_range_atr=settings.consolidation_range_atr,
        consolidation_window=settings.consolidation_window,
        nearby_atr=settings.zone_nearby_atr,
        max_reversals=settings.max_reversal_zones,
        max_consolidations=settings.max_consolidations,
    )
    patterns = detect_candle_patterns(candles)

    # 4 ── Composite score
    rsi_now = _last(rsi)
    trading_signal = build_trading_signal(
        order_flow, momentum, price_action, level, liquidity, trend,
        rsi_now, macd.histogram, adx.adx, w,
    )
    signals = summarize_signals(
        order_flow, momentum, price_action, level, trend,
        rsi_now, macd.histogram, w,
    )

    # 5 ── Snapshots
    if rsi_now is not None and rsi_now > w.rsi_overbought:
        rsi_status = "overbought"
    elif rsi_now is not None and rsi_now < w.rsi_oversold:
        rsi_status = "oversold"
    else:
        rsi_status = "neutral"

    hist_now = _last(macd.histogram)
    hist_prev = _last(macd.histogram, 2)
    macd_up = hist_now is not None and hist_prev is not None and hist_now > hist_prev

    if adx.adx > 25:
        adx_strength = "strong"
    elif adx.adx > w.adx_ranging:
        adx_strength = "moderate"
    else:
        adx_strength = "weak"

    ema_f = _last(ema_fast)
    ema_s = _last(ema_slow)
    ema_bullish = ema_f is not None and ema_s is not None and ema_f > ema_s

    stoch_k = _last(stoch.k)
    if stoch_k is not None and stoch_k > 80:
        stoch_status = "overbought"
    elif stoch_k is not None and stoch_k < 20:
        stoch_status = "oversold"
    else:
        stoch_status = "neutral"

    indicators = IndicatorSnapshot(
        rsi=RSISnapshot(current=rsi_now, previous=_last(rsi, 2), status=rsi_status),
        macd=MACDSnapshot(
            histogram=hist_now,
            previous=hist_prev,
            trending="up" if macd_up else "down",
        ),
        adx=ADXSnapshot(
            value=adx.adx,
            plus_di=adx.plus_di,
            minus_di=adx.minus_di,
            strength=adx_strength,
        ),
        ema=EMASnapshot(
            fast=ema_f,
            slow=ema_s,
            alignment="bullish" if ema_bullish else "bearish",
        ),
        bollinger=BollingerSnapshot(
            upper=_last(bands.upper),
            middle=_last(bands.middle),
            lower=_last(bands.lower),
        ),
        stochastic=StochasticSnapshot(k=stoch_k, d=_last(stoch.d), status=stoch_status),
        atr=atr.current,
    )

    daily_structure = None
    if daily and len(daily) >= settings.min_candles:
        try:
            validate_candles(daily)
        except MalformedCandleError as exc:
            logger.warning("%s: daily series dropped: %s", pair or "series", exc)
        else:
            daily_structure = analyze_structure(daily, settings)

    logger.debug(
        "%s: score=%s %s (%d swings, %d levels, %d patterns)",
        pair or "series",
        trading_signal.entry_score,
        trading_signal.recommendation,
        len(swings),
        len(levels),
        len(patterns),
    )

    return AnalysisResult(
        pair=pair,
        timestamp=as_of,
        current=CurrentSnapshot(price=current_price, time=last.time),
        leading=LeadingSnapshot(
            order_flow=order_flow,
            momentum_shift=momentum,
            price_action=price_action,
            level_strength=level,
            liquidity_zones=liquidity,
        ),
        indicators=indicators,
        structure=StructureSnapshot(trend=trend, swing_points=swings, levels=levels),
        patterns=patterns,
        signals=signals,
        trading_signal=trading_signal,
        key_levels=KeyLevels(
            support=level.price if level.type == "support" else None,
            resistance=level.price if level.type == "resistance" else None,
            nearest_level=level.price,
            atr=atr.current,
        ),
        daily_structure=daily_structure,
    )
