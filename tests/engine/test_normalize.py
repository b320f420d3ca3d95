import pytest

from stockfeed.domain.stock_price import RawQuote
from stockfeed.engine.normalize import normalize


@pytest.mark.parametrize("text", ["150.25", "0.0001", "12345.6789", "1e3", "3"])
def test_price_equals_parsed_value_exactly(text):
    raw = RawQuote(symbol="AAPL", price_text=text, price=float(text))
    r = normalize(raw, source="alpha_vantage", captured_at=1_760_000_000)
    assert r.price == float(text)


def test_source_and_timestamp_come_from_caller():
    raw = RawQuote(symbol="msft", price_text="410.10", price=410.10)
    r = normalize(raw, source="my_tag", captured_at=42)

    assert r.symbol == "msft"  # case preserved
    assert r.source == "my_tag"
    assert r.timestamp == 42
