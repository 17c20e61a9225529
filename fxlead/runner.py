"""Batch orchestration — fetch, analyze and rank several pairs.

Pairs are fetched one after another (4H and daily concurrently for each
pair) with a pause between pairs to stay inside the provider's rate limit.
A failure on one pair never stops the batch.
"""

import asyncio
import dataclasses
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union

from fxlead.analysis.analyzer import analyze_candles
from fxlead.analysis.models import Candle
from fxlead.analysis.results import AnalysisResult, InsufficientDataResult
from fxlead.config import Config
from fxlead.feed.normalize import normalize_records
from fxlead.feed.twelvedata_client import TwelveDataClient
from fxlead.models.analysis_settings import AnalysisSettings

logger = logging.getLogger("fxlead.runner")


@dataclass(frozen=True)
class PairData:
    pair: str
    h4: list[Candle] = field(default_factory=list)
    daily: list[Candle] = field(default_factory=list)
    error: Optional[str] = None  # set when the 4H records could not be parsed
    raw_points: int = 0  # 4H records received, reported with the error


@dataclass(frozen=True)
class PairError:
    """Analysis of one pair raised; the batch carried on."""

    pair: str
    error: str
    data_points: int


PairOutcome = Union[AnalysisResult, InsufficientDataResult, PairError]


async def _fetch_or_empty(coro, pair: str, label: str) -> list[dict]:
    try:
        return await coro
    except Exception as exc:
        logger.error("%s %s fetch failed: %s", pair, label, exc)
        return []


async def fetch_pair(client: TwelveDataClient, pair: str) -> PairData:
    """Fetch 4H and daily series for *pair* concurrently.

    Records that fail to parse never escape: a bad 4H series is carried as
    ``PairData.error``, a bad daily series is dropped.
    """
    h4_raw, daily_raw = await asyncio.gather(
        _fetch_or_empty(client.fetch_h4(pair), pair, "4H"),
        _fetch_or_empty(client.fetch_daily(pair), pair, "daily"),
    )
    try:
        daily = normalize_records(daily_raw)
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("%s daily records dropped: %r", pair, exc)
        daily = []

    try:
        h4 = normalize_records(h4_raw)
    except (KeyError, TypeError, ValueError) as exc:
        logger.error("%s 4H records malformed: %r", pair, exc)
        return PairData(
            pair=pair,
            daily=daily,
            error=f"Malformed 4H record: {exc!r}",
            raw_points=len(h4_raw),
        )
    return PairData(pair=pair, h4=h4, daily=daily)


async def fetch_all_pairs(
    client: TwelveDataClient,
    pairs: list[str],
    delay_seconds: float = 1.0,
) -> list[PairData]:
    """Fetch every pair in order, sleeping *delay_seconds* between pairs."""
    out: list[PairData] = []
    for i, pair in enumerate(pairs):
        logger.info("Fetching %s (%d/%d)", pair, i + 1, len(pairs))
        out.append(await fetch_pair(client, pair))
        if delay_seconds > 0 and i < len(pairs) - 1:
            await asyncio.sleep(delay_seconds)
    return out


def analyze_pair(
    data: PairData,
    settings: AnalysisSettings = AnalysisSettings(),
    as_of: Optional[datetime] = None,
) -> PairOutcome:
    """Analyze one pair's 4H series with daily context; never raises."""
    if data.error is not None:
        return PairError(pair=data.pair, error=data.error, data_points=data.raw_points)

    try:
        result = analyze_candles(
            data.h4, pair=data.pair, settings=settings, as_of=as_of, daily=data.daily,
        )
    except Exception as exc:
        logger.error("%s analysis failed: %s", data.pair, exc)
        return PairError(pair=data.pair, error=str(exc), data_points=len(data.h4))

    if isinstance(result, InsufficientDataResult):
        logger.warning(
            "%s: insufficient 4H data (%d/%d candles)",
            data.pair, result.data_points, result.required,
        )
        return dataclasses.replace(result, reason="Insufficient H4 data")

    logger.info(
        "%s: %s score=%d (%s)",
        data.pair,
        result.trading_signal.recommendation,
        result.trading_signal.entry_score,
        result.trading_signal.entry_type,
    )
    return result


def rank_actionable(results: list[PairOutcome]) -> list[AnalysisResult]:
    """Full results whose recommendation is not WAIT, best score first."""
    actionable = [
        r for r in results
        if isinstance(r, AnalysisResult) and r.trading_signal.recommendation != "WAIT"
    ]
    return sorted(actionable, key=lambda r: r.trading_signal.entry_score, reverse=True)


def _json_default(obj):
    if isinstance(obj, datetime):
        return obj.isoformat()
    return str(obj)


def _outcome_to_dict(outcome: PairOutcome) -> dict:
    data = dataclasses.asdict(outcome)
    data["kind"] = type(outcome).__name__
    return data


def _finite(value):
    # json.dumps would emit Infinity, which is not valid JSON
    if isinstance(value, float) and value in (float("inf"), float("-inf")):
        return None
    if isinstance(value, dict):
        return {k: _finite(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_finite(v) for v in value]
    return value


def results_to_json(results: list[PairOutcome], indent: int = 2) -> str:
    """Serialize a batch, ranked actionable pairs first."""
    payload = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "actionable": [r.pair for r in rank_actionable(results)],
        "results": [_finite(_outcome_to_dict(r)) for r in results],
    }
    return json.dumps(payload, indent=indent, default=_json_default)


async def run_batch(
    config: Config,
    pairs: Optional[list[str]] = None,
    settings: AnalysisSettings = AnalysisSettings(),
    client: Optional[TwelveDataClient] = None,
) -> list[PairOutcome]:
    """Fetch and analyze every configured pair."""
    pairs = pairs or config.pairs
    client = client or TwelveDataClient(config)
    as_of = datetime.now(timezone.utc)

    fetched = await fetch_all_pairs(client, pairs, config.api_delay_seconds)
    return [analyze_pair(data, settings, as_of) for data in fetched]
