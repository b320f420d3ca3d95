from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RawQuote:
    symbol: str        # as echoed by the provider
    price_text: str    # as reported, ex: "150.2500"
    price: float       # parsed from price_text by the provider client


@dataclass(frozen=True, slots=True)
class StockPriceRecord:
    symbol: str
    price: float
    source: str
    timestamp: int     # UTC epoch seconds, captured at fetch completion

    def __post_init__(self) -> None:
        if not isinstance(self.symbol, str) or not self.symbol.strip():
            raise ValueError("stock_price.symbol must be non-empty")
        if isinstance(self.price, bool) or not isinstance(self.price, (int, float)):
            raise ValueError("stock_price.price must be a number")
        if not math.isfinite(self.price):
            raise ValueError("stock_price.price must be finite")
        if not isinstance(self.source, str) or not self.source.strip():
            raise ValueError("stock_price.source must be non-empty")
        if isinstance(self.timestamp, bool) or not isinstance(self.timestamp, int):
            raise ValueError("stock_price.timestamp must be an int (epoch seconds)")
