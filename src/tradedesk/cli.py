"""CLI entry point for TradeDesk.

Provides the dashboard views on the command line:
  - overview: Show holdings with live prices and profit/loss
  - buy: Buy units of a catalogue stock at the current price
  - sell: Sell units of a held position (with advisory recommendation)
  - advise: Analyze a single stock
  - predictions: Show batch predictions
  - rebalance: Suggest optimal weights for a portfolio
  - serve: Run the dashboard JSON API
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from decimal import Decimal, InvalidOperation

from tradedesk.config import AppConfig, load_config
from tradedesk.errors import TradeDeskError


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _build_store(config: AppConfig):
    from tradedesk.data.backend_client import BackendClient
    from tradedesk.data.quote_client import QuoteClient
    from tradedesk.portfolio.store import PositionStore

    backend = BackendClient(config.backend_url, timeout=config.http_timeout)
    quotes = QuoteClient(config.quote_api_url, config.quote_api_key, timeout=config.http_timeout)
    return PositionStore(backend, quotes, config.auth_token or None)


async def _close_store(store) -> None:
    await store.backend.close()
    await store.quotes.close()


def _print_portfolio(store) -> None:
    from tradedesk.api.routes.shared import EMPTY_PORTFOLIO, display
    from tradedesk.formatting import format_inr

    if store.balance is not None:
        print(f"Balance: ₹{format_inr(store.balance)}")
    rows = store.rows()
    if not rows:
        print(EMPTY_PORTFOLIO)
        return

    print(f"\n{'ID':24s} {'Stock':32s} {'Units':>8s} {'Invested':>14s} {'Price':>12s} {'P/L':>14s}")
    for r in rows:
        p = r.position
        pnl = r.profit_loss
        pnl_str = display(pnl) if pnl is None else ("+" if pnl >= 0 else "-") + format_inr(abs(pnl))
        print(
            f"{p.id:24s} {p.display_name[:32]:32s} {str(p.quantity):>8s} "
            f"{format_inr(p.invested_amount):>14s} {display(r.price):>12s} {pnl_str:>14s}"
        )

    s = store.summary()
    print(f"\nInvested: ₹{format_inr(s.invested)}  Value: ₹{format_inr(s.current_value)}  "
          f"P/L: ₹{format_inr(s.profit_loss)}")
    if s.unresolved:
        print(f"  ({s.unresolved} position(s) still waiting for a price, excluded from totals)")


def cmd_overview(args: argparse.Namespace) -> None:
    """Show holdings with live prices and profit/loss."""
    config = load_config()
    store = _build_store(config)

    async def _run():
        try:
            await store.reload()
        finally:
            await _close_store(store)

    asyncio.run(_run())
    _print_portfolio(store)


def cmd_buy(args: argparse.Namespace) -> None:
    """Buy units of a catalogue stock at the current quoted price."""
    from tradedesk.catalogue import BUYABLE_STOCKS, find_stock
    from tradedesk.errors import QuoteUnavailable
    from tradedesk.formatting import format_inr
    from tradedesk.portfolio.notices import NoticeBoard
    from tradedesk.portfolio.trader import TradeSubmitter

    stock = find_stock(args.ticker)
    if stock is None:
        print(f"{args.ticker} is not available. Choose one of:")
        for s in BUYABLE_STOCKS:
            print(f"  {s.symbol:16s} {s.name}")
        sys.exit(1)

    config = load_config()
    store = _build_store(config)
    submitter = TradeSubmitter(store, NoticeBoard(duration=config.notice_seconds))

    async def _run():
        try:
            try:
                quote = await store.quotes.get_quote(stock.symbol)
            except QuoteUnavailable as e:
                logging.warning("%s", e)
                quote = None
            if quote is not None:
                print(f"{stock.name}: ₹{format_inr(quote.price)} x {args.units} "
                      f"= ₹{format_inr(quote.price * args.units)}")
            return await submitter.buy(stock, args.units, quote)
        finally:
            await _close_store(store)

    try:
        asyncio.run(_run())
    finally:
        notice = submitter.notices.current()
        if notice:
            print(notice.message)


def cmd_sell(args: argparse.Namespace) -> None:
    """Sell units of a held position at the current quoted price."""
    from tradedesk.data.prediction_client import PredictionClient, RecommendationClient
    from tradedesk.formatting import format_inr
    from tradedesk.portfolio.sell_flow import SellSession, SellState
    from tradedesk.portfolio.trader import TradeSubmitter, plain

    config = load_config()
    store = _build_store(config)
    predictions = PredictionClient(config.prediction_url, timeout=config.http_timeout)
    session = SellSession(
        TradeSubmitter(store),
        RecommendationClient(predictions, timeout=config.recommendation_timeout),
        horizon_days=config.default_horizon_days,
        risk_tolerance=config.default_risk_tolerance,
    )

    async def _run():
        try:
            await store.load_positions()
            position = store.find(args.position_id)
            session.open(position)
            await store.quotes.refresh(store.book, position.ticker)
            if args.units is not None:
                session.set_units(args.units)
            if args.wait > 0:
                await session.wait_for_recommendation(args.wait)
            print(f"Advice: {session.advice}")
            return await session.confirm()
        finally:
            if session.state is SellState.MODAL_OPEN:
                session.cancel()
            await _close_store(store)
            await predictions.close()

    report = asyncio.run(_run())
    if report is None:
        print(session.error or "Error selling stock. Please try again.")
        sys.exit(1)

    outcome = "Profit" if report.is_profitable else "Loss"
    print(f"Successfully sold {plain(report.units)} units of {report.position.display_name} "
          f"for ₹{format_inr(report.selling_value)}!")
    print(f"{outcome}: ₹{format_inr(abs(report.profit_loss))}")


def cmd_advise(args: argparse.Namespace) -> None:
    """Analyze a single stock."""
    from tradedesk.advisory.advisor import analyze_with_fallback
    from tradedesk.advisory.rebalancer import parse_risk_tolerance
    from tradedesk.data.prediction_client import PredictionClient

    config = load_config()
    risk = parse_risk_tolerance(args.risk)
    client = PredictionClient(config.prediction_url, timeout=config.http_timeout)

    async def _run():
        try:
            return await analyze_with_fallback(client, args.symbol, args.days, args.model, risk.value)
        finally:
            await client.close()

    analysis = asyncio.run(_run())
    print(json.dumps(analysis, indent=2, default=str))


def cmd_predictions(args: argparse.Namespace) -> None:
    """Show batch predictions."""
    from tradedesk.advisory.predictions import filter_and_sort, recommendation_counts
    from tradedesk.data.prediction_client import PredictionClient
    from tradedesk.formatting import format_currency, format_percentage

    config = load_config()
    client = PredictionClient(config.prediction_url, timeout=config.http_timeout)

    async def _run():
        try:
            return await client.list_predictions()
        finally:
            await client.close()

    predictions = asyncio.run(_run())
    rows = filter_and_sort(predictions, args.filter, args.sort, not args.asc)
    if not rows:
        print("No predictions available.")
        return
    for p in rows:
        print(
            f"  {p.symbol:14s} {format_currency(p.current_price):>14s} -> "
            f"{format_currency(p.predicted_price):>14s} {format_percentage(p.predicted_return):>9s} "
            f"{p.recommendation:6s} {p.confidence}"
        )

    counts = recommendation_counts(predictions)
    print(f"\nBuy: {counts['BUY']}  Hold: {counts['HOLD']}  Sell: {counts['SELL']}  Total: {counts['TOTAL']}")


def _units_arg(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"Invalid number of units: {text!r}") from None


def _parse_allocation(text: str) -> tuple[str, Decimal]:
    symbol, sep, pct = text.partition("=")
    if not sep or not symbol:
        raise argparse.ArgumentTypeError(f"Expected SYMBOL=PERCENT, got {text!r}")
    try:
        return symbol.strip().upper(), Decimal(pct)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"Invalid percentage in {text!r}") from None


def cmd_rebalance(args: argparse.Namespace) -> None:
    """Suggest optimal weights for a portfolio."""
    from tradedesk.advisory.rebalancer import parse_risk_tolerance, validate_holdings
    from tradedesk.data.prediction_client import PredictionClient
    from tradedesk.formatting import format_percentage
    from tradedesk.models import RebalanceHolding

    config = load_config()
    risk = parse_risk_tolerance(args.risk)
    proposed = [RebalanceHolding(s, s, pct) for s, pct in args.allocations]
    validate_holdings(proposed)
    client = PredictionClient(
        config.prediction_url,
        timeout=config.http_timeout,
        list_timeout=config.ticker_list_timeout,
    )

    async def _run():
        try:
            holdings = validate_holdings(proposed, supported=await client.list_rebalance_stocks())
            return await client.rebalance(holdings, risk.value)
        finally:
            await client.close()

    result = asyncio.run(_run())
    print(f"Rebalanced portfolio ({risk.value} risk):")
    for r in result.rows:
        current = format_percentage(r.current_weight * 100 if r.current_weight is not None else None, signed=False)
        optimal = format_percentage(r.optimal_weight * 100 if r.optimal_weight is not None else None, signed=False)
        print(f"  {r.symbol:14s} {current:>8s} -> {optimal:>8s}  {r.action:5s} {format_percentage(r.expected_return)}")
    if result.timestamp:
        print(f"\nCalculated on: {result.timestamp}")


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the dashboard JSON API."""
    import uvicorn

    from tradedesk.api.app import create_app

    uvicorn.run(create_app(use_lifespan=True), host=args.host, port=args.port)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="tradedesk",
        description="Indian equities trading simulator dashboard",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subs = parser.add_subparsers(dest="command", required=True)

    # overview
    subs.add_parser("overview", help="Show holdings with live prices and P/L")

    # buy
    p_buy = subs.add_parser("buy", help="Buy units of a stock at the current price")
    p_buy.add_argument("ticker", help="Ticker from the catalogue, e.g. TCS.BSE")
    p_buy.add_argument("units", type=_units_arg, help="Number of units to buy")

    # sell
    p_sell = subs.add_parser("sell", help="Sell units of a held position")
    p_sell.add_argument("position_id", help="Position id (see `overview`)")
    p_sell.add_argument("units", type=_units_arg, nargs="?", default=None,
                        help="Units to sell (default: the whole position)")
    p_sell.add_argument("--wait", type=float, default=10.0,
                        help="Seconds to wait for the advisory recommendation (0: don't wait)")

    # advise
    p_advise = subs.add_parser("advise", help="Analyze a single stock")
    p_advise.add_argument("symbol", help="Prediction-service symbol, e.g. TCS.NS")
    p_advise.add_argument("--days", type=int, default=30, help="Prediction horizon in days")
    p_advise.add_argument("--model", choices=["auto", "svr", "technical", "LSTM"], default="auto")
    p_advise.add_argument("--risk", choices=["low", "medium", "high"], default="medium")

    # predictions
    p_pred = subs.add_parser("predictions", help="Show batch predictions")
    p_pred.add_argument("--filter", choices=["ALL", "BUY", "HOLD", "SELL"], default="ALL")
    p_pred.add_argument("--sort", default="predicted_return", help="Column to sort by")
    p_pred.add_argument("--asc", action="store_true", help="Sort ascending")

    # rebalance
    p_reb = subs.add_parser("rebalance", help="Suggest optimal portfolio weights")
    p_reb.add_argument("allocations", nargs="+", type=_parse_allocation,
                       help="SYMBOL=PERCENT pairs summing to 100")
    p_reb.add_argument("--risk", choices=["low", "medium", "high"], default="medium")

    # serve
    p_serve = subs.add_parser("serve", help="Run the dashboard JSON API")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8080)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    commands = {
        "overview": cmd_overview,
        "buy": cmd_buy,
        "sell": cmd_sell,
        "advise": cmd_advise,
        "predictions": cmd_predictions,
        "rebalance": cmd_rebalance,
        "serve": cmd_serve,
    }
    try:
        commands[args.command](args)
    except TradeDeskError as e:
        logging.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
