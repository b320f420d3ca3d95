from __future__ import annotations

import logging
import threading

from fastapi import APIRouter, Depends, HTTPException, Query

from stockfeed.api.deps import get_price_repo, get_quote_provider, get_settings
from stockfeed.api.schemas.prices import BatchOutcomeOut, StockPriceOut
from stockfeed.providers.quote_provider import QuoteProvider
from stockfeed.repositories.stock_price_repository import StockPriceRepository
from stockfeed.services.ingest_quotes_service import ingest_quotes
from stockfeed.settings import Settings, parse_symbols


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/prices", tags=["prices"])

# one batch at a time per process: a single outstanding provider request
batch_lock = threading.Lock()


@router.get("", response_model=list[StockPriceOut])
def list_prices(
    symbol: str | None = None,
    limit: int | None = Query(default=None, ge=1, le=10_000),
    repo: StockPriceRepository = Depends(get_price_repo),
):
    return [StockPriceOut.from_domain(r) for r in repo.list(symbol=symbol, limit=limit)]


@router.get("/{symbol}/latest", response_model=StockPriceOut)
def latest_price(symbol: str, repo: StockPriceRepository = Depends(get_price_repo)):
    r = repo.latest(symbol=symbol)
    if r is None:
        raise HTTPException(status_code=404, detail="price not found")
    return StockPriceOut.from_domain(r)


@router.post("/ingest", response_model=BatchOutcomeOut)
def ingest(
    symbols: str | None = Query(default=None, description="Comma-separated tickers, default: configured list"),
    settings: Settings = Depends(get_settings),
    provider: QuoteProvider = Depends(get_quote_provider),
    repo: StockPriceRepository = Depends(get_price_repo),
):
    todo = parse_symbols(symbols) if symbols is not None else settings.symbols

    if not batch_lock.acquire(blocking=False):
        logger.warning("ingest rejected: a batch is already running")
        raise HTTPException(status_code=409, detail="a batch is already running")
    try:
        logger.info("ingest requested for %d symbols", len(todo))
        outcome = ingest_quotes(
            symbols=todo,
            provider=provider,
            price_repo=repo,
            pacing_sec=settings.pacing_sec,
        )
    finally:
        batch_lock.release()
    return BatchOutcomeOut(**outcome.as_dict())
