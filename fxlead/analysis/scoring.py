"""Composite entry scoring — fuses leading and lagging signals.

Deterministic weighted accumulator starting from a neutral 50.  The score
is not clamped: strongly aligned setups may go above 100 or below 0.
"""

import math
from dataclasses import dataclass
from typing import Literal, Optional

from fxlead.analysis.leading import (
    LevelStrength,
    LiquidityZones,
    MomentumShift,
    OrderFlow,
    PriceActionStrength,
)
from fxlead.analysis.structure import TrendStructure
from fxlead.models.analysis_settings import ScoringWeights

NEUTRAL_SCORE = 50.0

EntryType = Literal["IMMEDIATE", "WAIT_FOR_LEVEL", "EARLY_ENTRY", "WAIT_FOR_SETUP"]


@dataclass(frozen=True)
class ScoreVerdict:
    """Bias, strength, recommendation and confidence implied by a score."""

    bias: Literal["BULLISH", "BEARISH", "NEUTRAL"]
    strength: Literal["STRONG", "MODERATE", "WEAK"]
    recommendation: Literal["BUY", "SELL", "WAIT"]
    confidence: float  # 0-100 within the nominal range, unclamped beyond it


@dataclass(frozen=True)
class TradingSignal:
    """The final, explainable trading decision."""

    entry_score: int  # raw score rounded half-up
    raw_score: float
    bias: str
    strength: str
    recommendation: str
    confidence: float
    entry_type: EntryType
    reasoning: list[str]


@dataclass(frozen=True)
class SignalSummary:
    """Per-signal labels, leading first, then confirmations."""

    order_flow_signal: str
    momentum_shift_signal: Literal["early_buy", "early_sell", "none"]
    price_action_signal: str
    level_approach: str
    trend_alignment: Literal["bullish", "bearish", "neutral"]
    rsi_confirmation: Literal["oversold_buy", "overbought_sell", "neutral"]
    macd_confirmation: Literal["bullish", "bearish"]


def calculate_entry_score(
    order_flow: OrderFlow,
    momentum: MomentumShift,
    price_action: PriceActionStrength,
    level: LevelStrength,
    liquidity: LiquidityZones,
    trend: TrendStructure,
    rsi_current: Optional[float],
    macd_histogram: list[float],
    adx: float,
    weights: ScoringWeights = ScoringWeights(),
) -> float:
    """Accumulate the weighted contributions of every signal.

    Leading signals: order-flow bias, RSI divergence, price-action
    reversal, level approach.  Confirmations: trend structure, RSI
    extremes, MACD histogram direction of change (skipped with fewer than
    two histogram values).  Penalties: ADX below the ranging threshold,
    and no nearby level or reversal zone.
    """
    score = NEUTRAL_SCORE

    if order_flow.bias == "bullish":
        score += weights.order_flow
    elif order_flow.bias == "bearish":
        score -= weights.order_flow

    if momentum.divergence == "bullish":
        score += weights.divergence
    elif momentum.divergence == "bearish":
        score -= weights.divergence

    if price_action.signal == "bullish_reversal":
        score += weights.price_action
    elif price_action.signal == "bearish_reversal":
        score -= weights.price_action

    if level.signal == "potential_bounce":
        score += weights.level_approach
    elif level.signal == "potential_rejection":
        score -= weights.level_approach

    if trend.structure == "uptrend":
        score += weights.trend
    elif trend.structure == "downtrend":
        score -= weights.trend

    if rsi_current is not None:
        if rsi_current < weights.rsi_oversold:
            score += weights.rsi_extreme
        elif rsi_current > weights.rsi_overbought:
            score -= weights.rsi_extreme

    if len(macd_histogram) >= 2:
        if macd_histogram[-1] > macd_histogram[-2]:
            score += weights.macd_direction
        else:
            score -= weights.macd_direction

    if adx < weights.adx_ranging:
        score -= weights.ranging_penalty
    if not level.near_level and not liquidity.has_nearby_zone:
        score -= weights.no_level_penalty

    return score


def interpret_score(score: float) -> ScoreVerdict:
    """Map a raw score onto bias, strength, recommendation and confidence.

    All comparisons are strict: exactly 60 is NEUTRAL, exactly 65 is WAIT.
    """
    if score > 60:
        bias = "BULLISH"
    elif score < 40:
        bias = "BEARISH"
    else:
        bias = "NEUTRAL"

    if score > 70 or score < 30:
        strength = "STRONG"
    elif score > 60 or score < 40:
        strength = "MODERATE"
    else:
        strength = "WEAK"

    if score > 65:
        recommendation = "BUY"
    elif score < 35:
        recommendation = "SELL"
    else:
        recommendation = "WAIT"

    confidence = abs(score - NEUTRAL_SCORE) / NEUTRAL_SCORE * 100
    return ScoreVerdict(bias, strength, recommendation, confidence)


def determine_entry_type(level: LevelStrength, momentum: MomentumShift) -> EntryType:
    """At a level beats near a level beats an early divergence signal."""
    if level.at_level:
        return "IMMEDIATE"
    if level.near_level:
        return "WAIT_FOR_LEVEL"
    if momentum.early_signal:
        return "EARLY_ENTRY"
    return "WAIT_FOR_SETUP"


def generate_reasoning(
    order_flow: OrderFlow,
    momentum: MomentumShift,
    price_action: PriceActionStrength,
    level: LevelStrength,
    trend: TrendStructure,
    adx: float,
    adx_trend_confirm: float = 20.0,
) -> list[str]:
    """One human-readable line per triggered signal, in fixed priority order.

    Order: order flow, divergence, price action, level, consecutive-candle
    run, trend with ADX confirmation, acceleration.
    """
    reasons: list[str] = []

    if order_flow.signal == "strong_buy":
        reasons.append(
            f"Strong buying pressure detected ({order_flow.strength * 100:.0f}% dominance)"
        )
    elif order_flow.signal == "strong_sell":
        reasons.append(
            f"Strong selling pressure detected ({order_flow.strength * 100:.0f}% dominance)"
        )

    if momentum.divergence == "bullish":
        reasons.append(
            "Bullish divergence - price making lower lows but RSI rising (EARLY BUY SIGNAL)"
        )
    elif momentum.divergence == "bearish":
        reasons.append(
            "Bearish divergence - price making higher highs but RSI falling (EARLY SELL SIGNAL)"
        )

    if price_action.signal == "bullish_reversal":
        reasons.append(
            f"Bullish reversal pattern with {price_action.strength:.1f}x average body size"
        )
    elif price_action.signal == "bearish_reversal":
        reasons.append(
            f"Bearish reversal pattern with {price_action.strength:.1f}x average body size"
        )

    if level.at_level:
        reasons.append(
            f"Price AT {level.type} level ({level.strength} touches) - HIGH PROBABILITY ZONE"
        )
    elif level.near_level:
        reasons.append(
            f"Price approaching {level.type} ({level.distance_atr:.2f} ATR away)"
        )

    if price_action.consecutive_bullish >= 3:
        reasons.append(
            f"{price_action.consecutive_bullish} consecutive bullish candles - strong momentum"
        )
    elif price_action.consecutive_bearish >= 3:
        reasons.append(
            f"{price_action.consecutive_bearish} consecutive bearish candles - strong momentum"
        )

    if trend.structure in ("uptrend", "downtrend") and adx > adx_trend_confirm:
        reasons.append(
            f"Clear {trend.structure} structure with ADX {adx:.1f} (confirmed trend)"
        )

    if momentum.accelerating:
        reasons.append(
            f"Momentum accelerating ({momentum.acceleration:.2f}x) - entry timing is critical"
        )

    if not reasons:
        reasons.append("No clear setup - wait for better entry conditions")

    return reasons


def summarize_signals(
    order_flow: OrderFlow,
    momentum: MomentumShift,
    price_action: PriceActionStrength,
    level: LevelStrength,
    trend: TrendStructure,
    rsi_current: Optional[float],
    macd_histogram: list[float],
    weights: ScoringWeights = ScoringWeights(),
) -> SignalSummary:
    """Label each signal for display alongside the score."""
    if momentum.divergence == "bullish":
        shift = "early_buy"
    elif momentum.divergence == "bearish":
        shift = "early_sell"
    else:
        shift = "none"

    if trend.structure == "uptrend":
        alignment = "bullish"
    elif trend.structure == "downtrend":
        alignment = "bearish"
    else:
        alignment = "neutral"

    if rsi_current is not None and rsi_current < weights.rsi_confirm_oversold:
        rsi_confirmation = "oversold_buy"
    elif rsi_current is not None and rsi_current > weights.rsi_confirm_overbought:
        rsi_confirmation = "overbought_sell"
    else:
        rsi_confirmation = "neutral"

    macd_bullish = bool(macd_histogram) and macd_histogram[-1] > 0

    return SignalSummary(
        order_flow_signal=order_flow.signal,
        momentum_shift_signal=shift,
        price_action_signal=price_action.signal,
        level_approach=level.signal,
        trend_alignment=alignment,
        rsi_confirmation=rsi_confirmation,
        macd_confirmation="bullish" if macd_bullish else "bearish",
    )


def build_trading_signal(
    order_flow: OrderFlow,
    momentum: MomentumShift,
    price_action: PriceActionStrength,
    level: LevelStrength,
    liquidity: LiquidityZones,
    trend: TrendStructure,
    rsi_current: Optional[float],
    macd_histogram: list[float],
    adx: float,
    weights: ScoringWeights = ScoringWeights(),
) -> TradingSignal:
    """Score, interpret and explain one set of signals."""
    score = calculate_entry_score(
        order_flow, momentum, price_action, level, liquidity, trend,
        rsi_current, macd_histogram, adx, weights,
    )
    verdict = interpret_score(score)
    return TradingSignal(
        entry_score=math.floor(score + 0.5),
        raw_score=score,
        bias=verdict.bias,
        strength=verdict.strength,
        recommendation=verdict.recommendation,
        confidence=verdict.confidence,
        entry_type=determine_entry_type(level, momentum),
        reasoning=generate_reasoning(
            order_flow, momentum, price_action, level, trend, adx,
            weights.adx_trend_confirm,
        ),
    )
