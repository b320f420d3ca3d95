from __future__ import annotations

from sqlalchemy import insert, literal_column, select
from sqlalchemy.engine import Engine, Row
from sqlalchemy.exc import SQLAlchemyError

from stockfeed.db import stock_prices
from stockfeed.domain.stock_price import StockPriceRecord
from stockfeed.errors import WriteError
from stockfeed.repositories.stock_price_repository import StockPriceRepository


class SqlStockPriceRepository(StockPriceRepository):
    def __init__(self, *, engine: Engine) -> None:
        self._engine = engine

    def add(self, record: StockPriceRecord) -> None:
        stmt = insert(stock_prices).values(
            symbol=record.symbol,
            price=record.price,
            source=record.source,
            timestamp=record.timestamp,
        )
        try:
            # engine.begin(): commit on success, rollback on error
            with self._engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as e:
            raise WriteError(f"insert failed: {e}", symbol=record.symbol) from e

    def list(self, *, symbol: str | None = None, limit: int | None = None) -> list[StockPriceRecord]:
        stmt = select(stock_prices)
        if symbol is not None:
            stmt = stmt.where(stock_prices.c.symbol == symbol)
        stmt = stmt.order_by(*self._newest_first())
        if limit is not None:
            if limit < 1:
                raise ValueError("limit must be >= 1")
            stmt = stmt.limit(limit)

        with self._engine.connect() as conn:
            rows = conn.execute(stmt).all()

        return [self._to_domain(r) for r in rows]

    def latest(self, *, symbol: str) -> StockPriceRecord | None:
        stmt = (
            select(stock_prices)
            .where(stock_prices.c.symbol == symbol)
            .order_by(*self._newest_first())
            .limit(1)
        )

        with self._engine.connect() as conn:
            row = conn.execute(stmt).first()

        return None if row is None else self._to_domain(row)

    def _newest_first(self) -> list:
        keys = [stock_prices.c.timestamp.desc()]
        if self._engine.dialect.name == "sqlite":
            # same-second rows: implicit rowid gives insertion order
            keys.append(literal_column("rowid").desc())
        return keys

    @staticmethod
    def _to_domain(r: Row) -> StockPriceRecord:
        return StockPriceRecord(
            symbol=r.symbol,
            price=float(r.price),
            source=r.source,
            timestamp=int(r.timestamp),
        )
