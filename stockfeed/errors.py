from __future__ import annotations


class StockfeedError(Exception):
    kind = "Stockfeed"


class FetchError(StockfeedError):
    """A quote could not be obtained for one symbol."""

    kind = "Fetch"

    def __init__(self, message: str, *, symbol: str) -> None:
        super().__init__(message)
        self.symbol = symbol


class MissingCredentialError(FetchError):
    kind = "MissingCredential"


class TransportError(FetchError):
    kind = "TransportError"


class DecodeError(FetchError):
    kind = "DecodeError"


class ParseError(FetchError):
    kind = "ParseError"


class WriteError(StockfeedError):
    """A record could not be appended to the store."""

    kind = "WriteError"

    def __init__(self, message: str, *, symbol: str) -> None:
        super().__init__(message)
        self.symbol = symbol


class StoreConnectionError(StockfeedError):
    # fatal: raised at startup only, before any fetch
    kind = "StoreConnection"
