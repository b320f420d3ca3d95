from __future__ import annotations

from abc import ABC, abstractmethod

from stockfeed.domain.stock_price import StockPriceRecord


class StockPriceRepository(ABC):
    """
    Append-only store of StockPriceRecord.

    Reads return newest first: by timestamp, then by insertion order for rows
    sharing a timestamp. A SQL backend without an implicit row id (ex: PostgreSQL,
    the table has no key column) cannot see insertion order, so ties within the
    same second come back in an unspecified order there.
    """

    @abstractmethod
    def add(self, record: StockPriceRecord) -> None: ...

    @abstractmethod
    def list(self, *, symbol: str | None = None, limit: int | None = None) -> list[StockPriceRecord]: ...

    @abstractmethod
    def latest(self, *, symbol: str) -> StockPriceRecord | None: ...
