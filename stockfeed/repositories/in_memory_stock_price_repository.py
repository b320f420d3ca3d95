from __future__ import annotations

from stockfeed.domain.stock_price import StockPriceRecord
from stockfeed.repositories.stock_price_repository import StockPriceRepository


class InMemoryStockPriceRepository(StockPriceRepository):
    def __init__(self) -> None:
        self._items: list[StockPriceRecord] = []

    def add(self, record: StockPriceRecord) -> None:
        self._items.append(record)

    def list(self, *, symbol: str | None = None, limit: int | None = None) -> list[StockPriceRecord]:
        if limit is not None and limit < 1:
            raise ValueError("limit must be >= 1")
        # ties on timestamp: most recently added first
        items = [r for r in reversed(self._items) if symbol is None or r.symbol == symbol]
        items.sort(key=lambda r: r.timestamp, reverse=True)
        return items if limit is None else items[:limit]

    def latest(self, *, symbol: str) -> StockPriceRecord | None:
        items = self.list(symbol=symbol, limit=1)
        return items[0] if items else None
