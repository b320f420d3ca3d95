from __future__ import annotations

import logging
import time

import pytest

from stockfeed.domain.stock_price import RawQuote, StockPriceRecord
from stockfeed.errors import DecodeError, TransportError, WriteError
from stockfeed.providers.alpha_vantage_provider import AlphaVantageQuoteProvider
from stockfeed.repositories.in_memory_stock_price_repository import InMemoryStockPriceRepository
from stockfeed.repositories.sql_stock_price_repository import SqlStockPriceRepository
from stockfeed.services.ingest_quotes_service import ingest_quotes


def q(symbol: str, price: str) -> RawQuote:
    return RawQuote(symbol=symbol, price_text=price, price=float(price))


class FailingRepo(InMemoryStockPriceRepository):
    def __init__(self, failing: set[str]) -> None:
        super().__init__()
        self._failing = failing
        self.attempts: list[str] = []

    def add(self, record: StockPriceRecord) -> None:
        self.attempts.append(record.symbol)
        if record.symbol in self._failing:
            raise WriteError("disk full", symbol=record.symbol)
        super().add(record)


class Sleeper:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def run(symbols, provider, repo, **kw):
    kw.setdefault("sleep", Sleeper())
    kw.setdefault("clock", lambda: 1_760_000_000)
    return ingest_quotes(symbols=symbols, provider=provider, price_repo=repo, **kw)


def test_one_fetch_attempt_per_symbol_in_order(make_provider):
    provider = make_provider(
        {
            "AAPL": q("AAPL", "1"),
            "GOOGL": TransportError("timeout", symbol="GOOGL"),
            "MSFT": q("MSFT", "3"),
            "IBM": DecodeError("bad json", symbol="IBM"),
        }
    )
    outcome = run(["AAPL", "GOOGL", "MSFT", "IBM"], provider, InMemoryStockPriceRepository())

    assert provider.calls == ["AAPL", "GOOGL", "MSFT", "IBM"]
    assert outcome.attempted == 4
    assert outcome.succeeded == ["AAPL", "MSFT"]
    assert [(f.symbol, f.kind) for f in outcome.failures] == [("GOOGL", "TransportError"), ("IBM", "DecodeError")]


def test_fetch_failure_skips_persistence_and_leaves_others_unchanged(make_provider):
    ok = {"AAPL": q("AAPL", "1"), "MSFT": q("MSFT", "2")}

    baseline_repo = FailingRepo(set())
    baseline = run(["AAPL", "X", "MSFT"], make_provider(ok | {"X": q("X", "5")}), baseline_repo)

    repo = FailingRepo(set())
    outcome = run(["AAPL", "X", "MSFT"], make_provider(ok | {"X": TransportError("down", symbol="X")}), repo)

    assert "X" not in repo.attempts
    assert repo.attempts == ["AAPL", "MSFT"]
    assert outcome.succeeded == [s for s in baseline.succeeded if s != "X"]


def test_write_failure_is_recorded_and_loop_continues(make_provider):
    provider = make_provider({"AAPL": q("AAPL", "1"), "MSFT": q("MSFT", "2"), "IBM": q("IBM", "3")})
    repo = FailingRepo({"MSFT"})

    outcome = run(["AAPL", "MSFT", "IBM"], provider, repo)

    assert repo.attempts == ["AAPL", "MSFT", "IBM"]
    assert repo.latest(symbol="MSFT") is None
    assert outcome.succeeded == ["AAPL", "IBM"]
    assert [(f.symbol, f.kind, f.message) for f in outcome.failures] == [("MSFT", "WriteError", "disk full")]


@pytest.mark.parametrize("n", [1, 2, 5])
def test_pacing_between_symbols_but_not_after_last(make_provider, n):
    symbols = [f"S{i}" for i in range(n)]
    provider = make_provider({s: TransportError("x", symbol=s) for s in symbols})
    sleeper = Sleeper()

    run(symbols, provider, InMemoryStockPriceRepository(), pacing_sec=0.5, sleep=sleeper)

    assert sleeper.calls == [0.5] * (n - 1)


def test_zero_pacing_never_sleeps(make_provider):
    sleeper = Sleeper()
    run(["A", "B"], make_provider({"A": q("A", "1"), "B": q("B", "2")}), InMemoryStockPriceRepository(), pacing_sec=0, sleep=sleeper)
    assert sleeper.calls == []


def test_negative_pacing_is_rejected(make_provider):
    with pytest.raises(ValueError):
        run(["A"], make_provider({}), InMemoryStockPriceRepository(), pacing_sec=-1)


def test_empty_symbol_list(make_provider):
    outcome = run([], make_provider({}), InMemoryStockPriceRepository())
    assert outcome.as_dict() == {"attempted": 0, "stored": 0, "failed": 0, "succeeded": [], "failures": []}


def test_record_uses_provider_source_and_clock(make_provider):
    repo = InMemoryStockPriceRepository()
    run(["aapl"], make_provider({"aapl": q("AAPL", "150.25")}), repo, clock=lambda: 123)

    assert repo.list() == [StockPriceRecord(symbol="AAPL", price=150.25, source="fake_source", timestamp=123)]


def test_unexpected_errors_propagate(make_provider):
    class Boom(InMemoryStockPriceRepository):
        def add(self, record):
            raise RuntimeError("bug")

    with pytest.raises(RuntimeError):
        run(["A"], make_provider({"A": q("A", "1")}), Boom())


def test_scenario_single_symbol_persisted(engine, fake_http, quote_body):
    fake_http({"AAPL": quote_body("AAPL", "150.25")})
    repo = SqlStockPriceRepository(engine=engine)
    provider = AlphaVantageQuoteProvider(api_key="k")

    before = int(time.time())
    outcome = ingest_quotes(symbols=["AAPL"], provider=provider, price_repo=repo, sleep=Sleeper())
    after = int(time.time())

    rows = repo.list()
    assert outcome.succeeded == ["AAPL"]
    assert len(rows) == 1
    assert rows[0].symbol == "AAPL"
    assert rows[0].price == 150.25
    assert rows[0].source == "alpha_vantage"
    assert before <= rows[0].timestamp <= after


def test_scenario_malformed_json_for_one_symbol(engine, fake_http, quote_body, caplog):
    fake_http({"AAPL": quote_body("AAPL", "150.25"), "MSFT": b'{"Global Quote": {'})
    repo = SqlStockPriceRepository(engine=engine)
    provider = AlphaVantageQuoteProvider(api_key="k")

    with caplog.at_level(logging.ERROR, logger="stockfeed.services.ingest_quotes_service"):
        outcome = ingest_quotes(symbols=["AAPL", "MSFT"], provider=provider, price_repo=repo, sleep=Sleeper())

    assert [r.symbol for r in repo.list()] == ["AAPL"]
    assert repo.latest(symbol="MSFT") is None
    assert [(f.symbol, f.kind) for f in outcome.failures] == [("MSFT", "DecodeError")]
    assert any("MSFT" in m and "DecodeError" in m for m in caplog.messages)
