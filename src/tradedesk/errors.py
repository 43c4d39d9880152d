"""Error taxonomy shared by the clients, the reconciliation core and the views.

Every failure degrades a single view or row; none of these are fatal to
the process and none are retried automatically.
"""

from __future__ import annotations


class TradeDeskError(Exception):
    """Base class for all TradeDesk failures."""


class Unauthenticated(TradeDeskError):
    """No auth token present, or the backend rejected it."""

    def __init__(self, message: str = "Please log in to continue") -> None:
        super().__init__(message)


class BackendUnavailable(TradeDeskError):
    """The trade backend could not be reached or answered with a server error."""


# The backend and the network are indistinguishable from the client side.
NetworkFailure = BackendUnavailable


class ServiceUnavailable(TradeDeskError):
    """The prediction/rebalancing service could not be reached."""


class ValidationFailure(TradeDeskError):
    """Client-side input rejected before any network call."""


class QuoteUnavailable(TradeDeskError):
    """No usable quote for a ticker (empty payload, rate limit, network)."""

    def __init__(self, ticker: str, reason: str = "") -> None:
        self.ticker = ticker
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Quote unavailable for {ticker}{detail}")


class TradeRejected(TradeDeskError):
    """The backend refused a trade and said why (e.g. insufficient balance)."""
