"""Risk score → equity/debt/gold split."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict

from planwise.risk_profile import clamp, round_half_up

EQUITY_MIN, EQUITY_MAX = 15, 90
GOLD_MIN, GOLD_MAX = 5, 15


@dataclass(frozen=True)
class PortfolioAllocation:
    """Integer percentages of the monthly contribution; sum to 100."""
    equity: int
    debt: int
    gold: int

    def to_dict(self) -> Dict[str, int]:
        return {"equity": self.equity, "debt": self.debt, "gold": self.gold}

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "PortfolioAllocation":
        return cls(equity=int(data["equity"]), debt=int(data["debt"]), gold=int(data["gold"]))


def get_recommended_allocation(score: float) -> PortfolioAllocation:
    """
    Derive a continuous allocation from the risk score (10-95).

    Equity tracks the score (score * 0.9, clamped 15-90). Gold scales
    inversely from 15% at score 10 down to 5% at score 95. Debt takes
    the remainder.
    """
    equity = int(clamp(round_half_up(score * 0.9), EQUITY_MIN, EQUITY_MAX))
    gold = int(clamp(round_half_up(15 - ((score - 10) / 85) * 10), GOLD_MIN, GOLD_MAX))
    # Non-negative for the clamp ranges above; floor guards future tuning
    debt = max(0, 100 - equity - gold)
    return PortfolioAllocation(equity=equity, debt=debt, gold=gold)


__all__ = ["PortfolioAllocation", "get_recommended_allocation"]
