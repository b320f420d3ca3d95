from __future__ import annotations

from pydantic import BaseModel, Field

from stockfeed.domain.stock_price import StockPriceRecord


class StockPriceOut(BaseModel):
    symbol: str
    price: float
    source: str
    timestamp: int

    @classmethod
    def from_domain(cls, r: StockPriceRecord) -> "StockPriceOut":
        return cls(symbol=r.symbol, price=r.price, source=r.source, timestamp=r.timestamp)


class SymbolFailureOut(BaseModel):
    symbol: str
    kind: str
    message: str


class BatchOutcomeOut(BaseModel):
    attempted: int = Field(ge=0)
    stored: int = Field(ge=0)
    failed: int = Field(ge=0)
    succeeded: list[str]
    failures: list[SymbolFailureOut]
