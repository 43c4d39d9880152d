"""Tests for the quote client and the stale-response guard in QuoteBook."""

from __future__ import annotations

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from tradedesk.data.quote_client import QuoteBook, QuoteClient
from tradedesk.errors import QuoteUnavailable
from tradedesk.models import Quote


def _response(payload) -> MagicMock:
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = payload
    return resp


def _client(*responses) -> tuple[QuoteClient, AsyncMock]:
    qc = QuoteClient("https://quotes.test/query", "key-1", timeout=5.0)
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.side_effect = list(responses)
    qc._client = mock_client
    return qc, mock_client


class TestQuoteBook:
    def test_newer_response_wins(self) -> None:
        book = QuoteBook()
        first = book.begin("TCS.BSE")
        second = book.begin("TCS.BSE")
        assert book.apply(Quote("TCS.BSE", Decimal("2610")), second)
        # The older request resolves late and is discarded
        assert not book.apply(Quote("TCS.BSE", Decimal("2500")), first)
        assert book.price("TCS.BSE") == Decimal("2610")

    def test_in_order_responses_apply(self) -> None:
        book = QuoteBook()
        s1 = book.begin("TCS.BSE")
        assert book.apply(Quote("TCS.BSE", Decimal("1")), s1)
        s2 = book.begin("TCS.BSE")
        assert book.apply(Quote("TCS.BSE", Decimal("2")), s2)
        assert book.price("TCS.BSE") == Decimal("2")

    def test_sequences_are_per_ticker(self) -> None:
        book = QuoteBook()
        a = book.begin("A.BSE")
        book.begin("B.BSE")
        book.begin("B.BSE")
        assert book.apply(Quote("A.BSE", Decimal("10")), a)

    def test_pending_until_settled(self) -> None:
        book = QuoteBook()
        seq = book.begin("TCS.BSE")
        assert book.is_pending("TCS.BSE")
        book.fail("TCS.BSE", seq)
        assert not book.is_pending("TCS.BSE")
        assert book.price("TCS.BSE") is None

    def test_failure_keeps_previous_price(self) -> None:
        book = QuoteBook()
        book.apply(Quote("TCS.BSE", Decimal("5")), book.begin("TCS.BSE"))
        book.fail("TCS.BSE", book.begin("TCS.BSE"))
        assert book.price("TCS.BSE") == Decimal("5")


class TestGetQuote:
    def test_parses_global_quote(self) -> None:
        async def _run():
            qc, mock_client = _client(
                _response({"Global Quote": {"01. symbol": "TCS.BSE", "05. price": "2543.7500"}})
            )
            quote = await qc.get_quote("TCS.BSE")
            assert quote.ticker == "TCS.BSE"
            assert quote.price == Decimal("2543.7500")

            params = mock_client.get.call_args.kwargs["params"]
            assert params == {"function": "GLOBAL_QUOTE", "symbol": "TCS.BSE", "apikey": "key-1"}
        asyncio.run(_run())

    def test_empty_payload_is_unavailable(self) -> None:
        async def _run():
            qc, _ = _client(_response({"Global Quote": {}}))
            with pytest.raises(QuoteUnavailable) as exc_info:
                await qc.get_quote("TCS.BSE")
            assert exc_info.value.ticker == "TCS.BSE"
        asyncio.run(_run())

    def test_rate_limit_note_is_reported(self) -> None:
        async def _run():
            qc, _ = _client(_response({"Note": "Thank you for using Alpha Vantage! 5 calls per minute"}))
            with pytest.raises(QuoteUnavailable, match="5 calls per minute"):
                await qc.get_quote("TCS.BSE")
        asyncio.run(_run())

    def test_missing_price_is_unavailable(self) -> None:
        async def _run():
            qc, _ = _client(_response({"Global Quote": {"01. symbol": "TCS.BSE"}}))
            with pytest.raises(QuoteUnavailable, match="missing price"):
                await qc.get_quote("TCS.BSE")
        asyncio.run(_run())

    def test_network_error_is_unavailable(self) -> None:
        async def _run():
            qc, mock_client = _client()
            mock_client.get.side_effect = httpx.ConnectError("refused")
            with pytest.raises(QuoteUnavailable):
                await qc.get_quote("TCS.BSE")
        asyncio.run(_run())

    def test_non_json_is_unavailable(self) -> None:
        async def _run():
            resp = _response(None)
            resp.json.side_effect = ValueError("not json")
            qc, _ = _client(resp)
            with pytest.raises(QuoteUnavailable):
                await qc.get_quote("TCS.BSE")
        asyncio.run(_run())


class TestRefresh:
    def test_refresh_applies_to_book(self) -> None:
        async def _run():
            qc, _ = _client(_response({"Global Quote": {"05. price": "100"}}))
            book = QuoteBook()
            quote = await qc.refresh(book, "SBIN.BSE")
            assert quote is not None
            assert book.price("SBIN.BSE") == Decimal("100")
            assert not book.is_pending("SBIN.BSE")
        asyncio.run(_run())

    def test_refresh_failure_leaves_row_unresolved(self) -> None:
        async def _run():
            qc, _ = _client(_response({}))
            book = QuoteBook()
            assert await qc.refresh(book, "SBIN.BSE") is None
            assert book.price("SBIN.BSE") is None
            assert not book.is_pending("SBIN.BSE")
        asyncio.run(_run())

    def test_slow_response_does_not_overwrite_newer(self) -> None:
        async def _run():
            slow_gate = asyncio.Event()
            slow = _response({"Global Quote": {"05. price": "90"}})
            fast = _response({"Global Quote": {"05. price": "110"}})

            async def fake_get(url, params=None, timeout=None):
                if fake_get.calls == 0:
                    fake_get.calls += 1
                    await slow_gate.wait()
                    return slow
                fake_get.calls += 1
                return fast

            fake_get.calls = 0
            qc, mock_client = _client()
            mock_client.get.side_effect = fake_get
            book = QuoteBook()

            first = asyncio.create_task(qc.refresh(book, "TCS.BSE"))
            await asyncio.sleep(0)
            await qc.refresh(book, "TCS.BSE")
            slow_gate.set()
            result = await first

            assert book.price("TCS.BSE") == Decimal("110")
            assert result is not None and result.price == Decimal("110")
        asyncio.run(_run())
