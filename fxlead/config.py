"""fxlead — runner configuration.

Loads .env variables into a typed config object.
Validates required variables on startup.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


_REQUIRED_VARS = [
    "TWELVEDATA_API_KEY_DAILY",
    "TWELVEDATA_API_KEY_H4",
]

DEFAULT_PAIRS = (
    "EUR/USD",
    "GBP/JPY",
    "USD/JPY",
    "AUD/USD",
    "AUD/CHF",
    "EUR/GBP",
    "CAD/JPY",
    "AUD/JPY",
)


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    api_key_daily: str
    api_key_h4: str
    pairs: list[str] = field(default_factory=lambda: list(DEFAULT_PAIRS))
    api_delay_seconds: float = 1.0
    daily_outputsize: int = 100
    h4_outputsize: int = 200
    base_url: str = "https://api.twelvedata.com"
    log_level: str = "INFO"


def _parse_pairs(raw: str | None) -> list[str]:
    if not raw:
        return list(DEFAULT_PAIRS)
    return [p.strip() for p in raw.split(",") if p.strip()]


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` with a message naming the missing variables when a
    required variable is absent.
    """
    load_dotenv(dotenv_path=env_path)

    missing = [v for v in _REQUIRED_VARS if not os.environ.get(v)]
    if missing:
        raise ValueError(
            f"Missing required environment variable(s): {', '.join(missing)}"
        )

    return Config(
        api_key_daily=os.environ["TWELVEDATA_API_KEY_DAILY"],
        api_key_h4=os.environ["TWELVEDATA_API_KEY_H4"],
        pairs=_parse_pairs(os.environ.get("ANALYSIS_PAIRS")),
        api_delay_seconds=float(os.environ.get("API_DELAY_SECONDS", "1.0")),
        daily_outputsize=int(os.environ.get("DAILY_OUTPUTSIZE", "100")),
        h4_outputsize=int(os.environ.get("H4_OUTPUTSIZE", "200")),
        base_url=os.environ.get("TWELVEDATA_BASE_URL", "https://api.twelvedata.com").rstrip("/"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )
