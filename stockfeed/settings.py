from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv


DEFAULT_SYMBOLS: tuple[str, ...] = ("AAPL", "GOOGL", "MSFT")


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    database_url: str | None
    symbols: tuple[str, ...] = DEFAULT_SYMBOLS
    pacing_sec: float = 0.5
    http_timeout_sec: float = 15.0
    db_timeout_sec: float = 10.0
    log_level: str = "INFO"


def get_settings(*, load_env_file: bool = True) -> Settings:
    # .env never overrides variables already present in the environment
    if load_env_file:
        load_dotenv(find_dotenv(usecwd=True), override=False)

    return Settings(
        api_key=_optional_str("ALPHA_VANTAGE_KEY"),
        database_url=_optional_str("DATABASE_URL"),
        symbols=parse_symbols(os.getenv("STOCKFEED_SYMBOLS")),
        pacing_sec=_non_negative_float("STOCKFEED_PACING_SEC", 0.5),
        http_timeout_sec=_positive_float("STOCKFEED_HTTP_TIMEOUT_SEC", 15.0),
        db_timeout_sec=_positive_float("STOCKFEED_DB_TIMEOUT_SEC", 10.0),
        log_level=parse_log_level(_optional_str("STOCKFEED_LOG_LEVEL") or "INFO", name="STOCKFEED_LOG_LEVEL"),
    )


def parse_symbols(raw: str | None) -> tuple[str, ...]:
    """Comma-separated list -> ordered tuple; blanks are dropped, order and case kept."""
    if raw is None or not raw.strip():
        return DEFAULT_SYMBOLS
    symbols = tuple(s.strip() for s in raw.split(",") if s.strip())
    return symbols or DEFAULT_SYMBOLS


def parse_log_level(raw: str, *, name: str) -> str:
    level = raw.strip().upper()
    # getLevelName returns an int only for registered level names
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"{name} must be a logging level name (DEBUG, INFO, ...), got {raw!r}")
    return level


def _optional_str(name: str) -> str | None:
    v = os.getenv(name)
    if v is None or not v.strip():
        return None
    return v.strip()


def _non_negative_float(name: str, default: float) -> float:
    raw = _optional_str(name)
    if raw is None:
        return default
    value = _float(name, raw)
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {raw!r}")
    return value


def _positive_float(name: str, default: float) -> float:
    raw = _optional_str(name)
    if raw is None:
        return default
    value = _float(name, raw)
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {raw!r}")
    return value


def _float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {raw!r}")
    return value
