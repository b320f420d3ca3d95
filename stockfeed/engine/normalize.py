from __future__ import annotations

from stockfeed.domain.stock_price import RawQuote, StockPriceRecord


def normalize(raw: RawQuote, *, source: str, captured_at: int) -> StockPriceRecord:
    """
    Provider quote -> canonical record.

    `source` and `captured_at` come from the caller: the GLOBAL_QUOTE payload
    carries no fetch clock, and the provider tag is fixed per pipeline.
    """
    return StockPriceRecord(
        symbol=raw.symbol,
        price=raw.price,
        source=source,
        timestamp=captured_at,
    )
