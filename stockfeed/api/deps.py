from __future__ import annotations

from functools import lru_cache

from sqlalchemy.engine import Engine

from stockfeed.db import open_store
from stockfeed.providers.alpha_vantage_provider import AlphaVantageQuoteProvider
from stockfeed.providers.quote_provider import QuoteProvider
from stockfeed.repositories.sql_stock_price_repository import SqlStockPriceRepository
from stockfeed.repositories.stock_price_repository import StockPriceRepository
from stockfeed.settings import Settings
from stockfeed.settings import get_settings as _load_settings


@lru_cache
def get_settings() -> Settings:
    return _load_settings()


@lru_cache
def get_engine() -> Engine:
    settings = get_settings()
    return open_store(settings.database_url, timeout_sec=settings.db_timeout_sec)


def get_price_repo() -> StockPriceRepository:
    return SqlStockPriceRepository(engine=get_engine())


def get_quote_provider() -> QuoteProvider:
    settings = get_settings()
    return AlphaVantageQuoteProvider(api_key=settings.api_key, timeout_sec=settings.http_timeout_sec)
