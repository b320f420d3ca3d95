"""
Command-line entry point: one invocation runs one batch pass.

Example usage:
    stockfeed-ingest
    stockfeed-ingest --symbols AAPL,IBM --pacing 12
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace

from stockfeed.db import open_store
from stockfeed.errors import StoreConnectionError
from stockfeed.providers.alpha_vantage_provider import AlphaVantageQuoteProvider
from stockfeed.repositories.sql_stock_price_repository import SqlStockPriceRepository
from stockfeed.services.ingest_quotes_service import ingest_quotes
from stockfeed.settings import Settings, get_settings, parse_log_level, parse_symbols


log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fetch current quotes and append them to the stock_prices table",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--symbols", type=str, default=None, help="Comma-separated tickers (overrides STOCKFEED_SYMBOLS)")
    parser.add_argument("--pacing", type=float, default=None, help="Seconds between two requests (overrides STOCKFEED_PACING_SEC)")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (overrides STOCKFEED_LOG_LEVEL)")
    return parser.parse_args(args)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def run(settings: Settings) -> int:
    try:
        engine = open_store(settings.database_url, timeout_sec=settings.db_timeout_sec)
    except StoreConnectionError as e:
        log.critical("startup aborted (%s): %s", e.kind, e)
        return 1

    if settings.api_key is None:
        log.warning("ALPHA_VANTAGE_KEY is not set; every fetch will fail with MissingCredential")

    provider = AlphaVantageQuoteProvider(api_key=settings.api_key, timeout_sec=settings.http_timeout_sec)
    price_repo = SqlStockPriceRepository(engine=engine)

    try:
        outcome = ingest_quotes(
            symbols=settings.symbols,
            provider=provider,
            price_repo=price_repo,
            pacing_sec=settings.pacing_sec,
        )
    finally:
        engine.dispose()

    print(json.dumps(outcome.as_dict()))
    return 0


def main(args: list[str] | None = None) -> int:
    parsed = parse_args(args)
    settings = get_settings()

    if parsed.symbols is not None:
        settings = replace(settings, symbols=parse_symbols(parsed.symbols))
    if parsed.pacing is not None:
        if parsed.pacing < 0:
            raise SystemExit("--pacing must be >= 0")
        settings = replace(settings, pacing_sec=parsed.pacing)
    if parsed.log_level is not None:
        try:
            settings = replace(settings, log_level=parse_log_level(parsed.log_level, name="--log-level"))
        except ValueError as e:
            raise SystemExit(str(e)) from e

    configure_logging(settings.log_level)
    log.info("starting stockfeed (%d symbols)", len(settings.symbols))
    return run(settings)


if __name__ == "__main__":
    raise SystemExit(main())
