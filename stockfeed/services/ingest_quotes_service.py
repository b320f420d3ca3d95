from __future__ import annotations

import datetime as dt
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from stockfeed.engine.normalize import normalize
from stockfeed.errors import FetchError, WriteError
from stockfeed.providers.quote_provider import QuoteProvider
from stockfeed.repositories.stock_price_repository import StockPriceRepository


log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SymbolFailure:
    symbol: str
    kind: str       # MissingCredential | TransportError | DecodeError | ParseError | WriteError
    message: str


@dataclass
class BatchOutcome:
    attempted: int = 0
    succeeded: list[str] = field(default_factory=list)
    failures: list[SymbolFailure] = field(default_factory=list)

    @property
    def stored(self) -> int:
        return len(self.succeeded)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def as_dict(self) -> dict:
        return {
            "attempted": self.attempted,
            "stored": self.stored,
            "failed": self.failed,
            "succeeded": list(self.succeeded),
            "failures": [{"symbol": f.symbol, "kind": f.kind, "message": f.message} for f in self.failures],
        }


def utc_now_epoch() -> int:
    return int(dt.datetime.now(dt.timezone.utc).timestamp())


def ingest_quotes(
    *,
    symbols: Iterable[str],
    provider: QuoteProvider,
    price_repo: StockPriceRepository,
    pacing_sec: float = 0.5,
    clock: Callable[[], int] = utc_now_epoch,
    sleep: Callable[[float], None] = time.sleep,
) -> BatchOutcome:
    """
    One batch pass: fetch -> normalize -> persist, one symbol at a time.

    A failing symbol is recorded and skipped; it never stops the pass.
    Requests are strictly sequential and separated by `pacing_sec` to stay
    under the provider's rate limit (no wait after the last symbol).
    """
    if pacing_sec < 0:
        raise ValueError("pacing_sec must be >= 0")

    symbols = list(symbols)
    outcome = BatchOutcome()

    for i, sym in enumerate(symbols):
        if i > 0 and pacing_sec > 0:
            sleep(pacing_sec)

        outcome.attempted += 1
        try:
            raw = provider.fetch(symbol=sym)
        except FetchError as e:
            log.error("fetch failed for %s (%s): %s", sym, e.kind, e)
            outcome.failures.append(SymbolFailure(symbol=sym, kind=e.kind, message=str(e)))
            continue

        record = normalize(raw, source=provider.source, captured_at=clock())
        log.info("fetched %s: $%s", record.symbol, record.price)

        try:
            price_repo.add(record)
        except WriteError as e:
            log.error("store failed for %s (%s): %s", sym, e.kind, e)
            outcome.failures.append(SymbolFailure(symbol=sym, kind=e.kind, message=str(e)))
            continue

        outcome.succeeded.append(sym)

    log.info(
        "batch done: attempted=%d stored=%d failed=%d",
        outcome.attempted,
        outcome.stored,
        outcome.failed,
    )
    return outcome
