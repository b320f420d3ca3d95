from __future__ import annotations

import io
import json
from urllib.parse import parse_qs, urlparse

import pytest

from stockfeed.db import open_store
from stockfeed.domain.stock_price import RawQuote
from stockfeed.errors import FetchError
from stockfeed.providers.quote_provider import QuoteProvider


class FakeProvider(QuoteProvider):
    source = "fake_source"

    def __init__(self, answers: dict[str, RawQuote | FetchError]) -> None:
        self._answers = answers
        self.calls: list[str] = []

    def fetch(self, *, symbol: str) -> RawQuote:
        self.calls.append(symbol)
        answer = self._answers[symbol]
        if isinstance(answer, FetchError):
            raise answer
        return answer


class FakeHttp:
    """Stands in for urllib's urlopen: answers per `symbol` query parameter."""

    def __init__(self, bodies: dict[str, bytes | Exception]) -> None:
        self._bodies = bodies
        self.requests: list[dict[str, list[str]]] = []
        self.timeouts: list[float] = []

    def __call__(self, req, timeout=None):
        query = parse_qs(urlparse(req.full_url).query)
        self.requests.append(query)
        self.timeouts.append(timeout)
        body = self._bodies[query["symbol"][0]]
        if isinstance(body, Exception):
            raise body
        return io.BytesIO(body)


def global_quote(symbol: str, price: str) -> bytes:
    return json.dumps(
        {
            "Global Quote": {
                "01. symbol": symbol,
                "02. open": "149.0000",
                "05. price": price,
                "07. latest trading day": "2026-10-16",
            }
        }
    ).encode("utf-8")


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{(tmp_path / 'stockfeed.db').as_posix()}"


@pytest.fixture
def engine(database_url):
    eng = open_store(database_url)
    yield eng
    eng.dispose()


@pytest.fixture
def fake_http(monkeypatch):
    def install(bodies: dict[str, bytes | Exception]) -> FakeHttp:
        fake = FakeHttp(bodies)
        monkeypatch.setattr("stockfeed.providers.alpha_vantage_provider.urlopen", fake)
        return fake

    return install


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def quote_body():
    return global_quote
