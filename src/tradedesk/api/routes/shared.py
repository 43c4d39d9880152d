"""View-model builders shared by the overview and sell screens."""

from __future__ import annotations

from decimal import Decimal

from tradedesk.formatting import format_inr
from tradedesk.portfolio.store import PositionRow, PositionStore

LOADING = "Loading..."
EMPTY_PORTFOLIO = "You don't own any stocks yet."


def money(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


def display(value: Decimal | None) -> str:
    """Formatted amount, or the loading placeholder while a quote is unresolved."""
    return format_inr(value) if value is not None else LOADING


def position_view(row: PositionRow) -> dict:
    p = row.position
    pnl = row.profit_loss
    return {
        "id": p.id,
        "ticker": p.ticker,
        "name": p.display_name,
        "quantity": float(p.quantity),
        "investedAmount": float(p.invested_amount),
        "investedDisplay": format_inr(p.invested_amount),
        "boughtAt": p.bought_at.isoformat() if p.bought_at else None,
        "closed": p.is_closed,
        "price": money(row.price),
        "priceDisplay": display(row.price),
        "currentValue": money(row.current_value),
        "currentValueDisplay": display(row.current_value),
        "profitLoss": money(pnl),
        "profitLossDisplay": display(abs(pnl) if pnl is not None else None),
        "profitable": (pnl >= 0) if pnl is not None else None,
        "loading": not row.resolved,
        "refreshing": row.pending,
    }


def portfolio_view(store: PositionStore) -> dict:
    rows = store.rows()
    summary = store.summary()
    return {
        "balance": money(store.balance),
        "balanceDisplay": format_inr(store.balance) if store.balance is not None else LOADING,
        "positions": [position_view(r) for r in rows],
        "totals": {
            "invested": float(summary.invested),
            "currentValue": float(summary.current_value),
            "profitLoss": float(summary.profit_loss),
            "investedDisplay": format_inr(summary.invested),
            "currentValueDisplay": format_inr(summary.current_value),
            "profitLossDisplay": format_inr(summary.profit_loss),
            "unresolved": summary.unresolved,
        },
        "emptyMessage": EMPTY_PORTFOLIO if not rows else None,
    }
