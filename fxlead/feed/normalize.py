"""Raw provider records to time-ascending ``Candle`` lists."""

from datetime import datetime

from fxlead.analysis.models import Candle


def normalize_records(records) -> list[Candle]:
    """Convert ``{datetime, open, high, low, close, volume?}`` records.

    Numbers may arrive as strings and records in any order; the result is
    sorted oldest-first.  A missing volume becomes 0.  Anything that is not
    a non-empty list yields ``[]``.
    """
    if not isinstance(records, list) or not records:
        return []

    candles = [
        Candle(
            time=datetime.fromisoformat(r["datetime"]),
            open=float(r["open"]),
            high=float(r["high"]),
            low=float(r["low"]),
            close=float(r["close"]),
            volume=float(r.get("volume") or 0),
        )
        for r in records
    ]
    candles.sort(key=lambda c: c.time)
    return candles
