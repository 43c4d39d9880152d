"""Input checks for portfolio rebalancing requests."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from tradedesk.errors import ValidationFailure
from tradedesk.models import RebalanceHolding, RiskTolerance, SupportedStock

ALLOCATION_TOLERANCE = Decimal("0.1")


def parse_risk_tolerance(value: str) -> RiskTolerance:
    try:
        return RiskTolerance(value.lower())
    except ValueError:
        raise ValidationFailure(
            f"Risk tolerance must be one of low, medium, high (got {value!r})"
        ) from None


def validate_holdings(
    holdings: Iterable[RebalanceHolding],
    supported: Iterable[SupportedStock] | None = None,
) -> list[RebalanceHolding]:
    """Check a proposed portfolio before it is sent for rebalancing.

    When ``supported`` is given, every symbol must be listed there with a
    trained model.
    """
    rows = list(holdings)
    models = None if supported is None else {s.symbol: s.has_model for s in supported}
    if not rows:
        raise ValidationFailure("Please add at least one stock to your portfolio")

    seen: set[str] = set()
    for h in rows:
        if h.symbol in seen:
            raise ValidationFailure(f"{h.symbol} is already in your portfolio")
        seen.add(h.symbol)
        if h.allocation_pct < 0:
            raise ValidationFailure(f"Allocation for {h.symbol} cannot be negative")
        if models is not None:
            if h.symbol not in models:
                raise ValidationFailure(f"{h.symbol} is not available for rebalancing")
            if not models[h.symbol]:
                raise ValidationFailure(f"{h.symbol} has no trained model yet")

    total = sum((h.allocation_pct for h in rows), Decimal("0"))
    if abs(total - 100) > ALLOCATION_TOLERANCE:
        raise ValidationFailure(
            f"Total allocation must be 100% (currently {total.quantize(Decimal('0.01'))}%)"
        )
    return rows
