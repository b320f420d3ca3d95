from __future__ import annotations

import http.client
import json
import logging
import math
import re
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from stockfeed.domain.stock_price import RawQuote
from stockfeed.errors import DecodeError, MissingCredentialError, ParseError, TransportError
from stockfeed.providers.quote_provider import QuoteProvider


log = logging.getLogger(__name__)

_ENVELOPE = "Global Quote"
_SYMBOL_FIELD = "01. symbol"
_PRICE_FIELD = "05. price"

# plain decimal literal, optional exponent: no "_", no whitespace, no nan/inf words
_PRICE_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

# keys Alpha Vantage uses to reject a request with HTTP 200
_PROVIDER_MESSAGE_KEYS = ("Error Message", "Note", "Information")


class AlphaVantageQuoteProvider(QuoteProvider):
    BASE = "https://www.alphavantage.co/query"
    source = "alpha_vantage"

    def __init__(self, *, api_key: str | None, timeout_sec: float = 15.0, base_url: str | None = None) -> None:
        self._api_key = api_key
        self._timeout = timeout_sec
        self._base = base_url or self.BASE

    def fetch(self, *, symbol: str) -> RawQuote:
        if not symbol or not symbol.strip():
            raise ValueError("symbol must be non-empty")
        if not self._api_key or not self._api_key.strip():
            raise MissingCredentialError("ALPHA_VANTAGE_KEY is not configured", symbol=symbol)

        params = urlencode({"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": self._api_key})
        url = f"{self._base}?{params}"
        log.debug("GET %s?function=GLOBAL_QUOTE&symbol=%s", self._base, symbol)

        try:
            req = Request(url, headers={"Accept": "application/json", "User-Agent": "stockfeed/0.1"})
            with urlopen(req, timeout=self._timeout) as resp:
                body = resp.read()
        except (OSError, http.client.HTTPException) as e:
            # URLError, HTTPError and socket timeouts are all OSError subclasses
            raise TransportError(f"request failed: {e}", symbol=symbol) from e

        payload = _decode_body(body, symbol=symbol)
        quote_symbol, price_text = _extract_quote(payload, symbol=symbol)

        return RawQuote(symbol=quote_symbol, price_text=price_text, price=parse_price(price_text, symbol=symbol))


def parse_price(text: str, *, symbol: str) -> float:
    """Textual decimal -> float. Rejects anything that is not a finite numeric literal."""
    if not _PRICE_RE.fullmatch(text):
        raise ParseError(f"invalid price literal {text!r}", symbol=symbol)
    price = float(text)
    if not math.isfinite(price):
        raise ParseError(f"price out of range {text!r}", symbol=symbol)
    return price


def _decode_body(body: bytes, *, symbol: str) -> dict:
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(f"response is not valid JSON: {e}", symbol=symbol) from e

    if not isinstance(payload, dict):
        raise DecodeError("response must be a JSON object", symbol=symbol)
    return payload


def _extract_quote(payload: dict, *, symbol: str) -> tuple[str, str]:
    for key in _PROVIDER_MESSAGE_KEYS:
        if key in payload:
            raise DecodeError(f"provider rejected request: {payload[key]}", symbol=symbol)

    quote = payload.get(_ENVELOPE)
    if not isinstance(quote, dict):
        raise DecodeError(f"missing '{_ENVELOPE}' object", symbol=symbol)
    if not quote:
        # Alpha Vantage answers unknown symbols with an empty envelope
        raise DecodeError(f"empty '{_ENVELOPE}' (unknown symbol?)", symbol=symbol)

    quote_symbol = quote.get(_SYMBOL_FIELD)
    price_text = quote.get(_PRICE_FIELD)
    if not isinstance(quote_symbol, str) or not quote_symbol.strip():
        raise DecodeError(f"missing/invalid '{_SYMBOL_FIELD}'", symbol=symbol)
    if not isinstance(price_text, str):
        raise DecodeError(f"missing/invalid '{_PRICE_FIELD}'", symbol=symbol)
    return quote_symbol, price_text
