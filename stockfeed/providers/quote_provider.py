from __future__ import annotations

from abc import ABC, abstractmethod

from stockfeed.domain.stock_price import RawQuote


class QuoteProvider(ABC):
    source: str

    @abstractmethod
    def fetch(self, *, symbol: str) -> RawQuote: ...
