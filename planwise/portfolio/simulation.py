"""Monthly SIP growth projection and chart utilities."""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Tuple, Any

import pandas as pd

from planwise.investor_profiles import InvestmentProfile
from planwise.risk_profile import round_half_up
from .allocation import PortfolioAllocation

_log = logging.getLogger(__name__)

# Expected long-run annual returns per asset class
EQUITY_RETURN = 0.12
DEBT_RETURN = 0.07
GOLD_RETURN = 0.08

INFLATION_RATE = 0.06
SAVINGS_RATE = 0.035  # savings-account benchmark


@dataclass(frozen=True)
class GrowthDataPoint:
    year: float
    invested: int
    estimated: int
    savings: int

    def to_dict(self) -> Dict[str, float]:
        return {"year": self.year, "invested": self.invested,
                "estimated": self.estimated, "savings": self.savings}


@dataclass(frozen=True)
class GrowthProjection:
    projected: int
    inflation_adjusted_corpus: int
    total_invested: int
    chart: Tuple[GrowthDataPoint, ...]


def expected_annual_return(allocation: PortfolioAllocation) -> float:
    """Blended annual return for integer percentage weights (60 not 0.60)."""
    return (
        allocation.equity * EQUITY_RETURN
        + allocation.debt * DEBT_RETURN
        + allocation.gold * GOLD_RETURN
    ) / 100


def _point(year: float, invested: float, estimated: float, savings: float) -> GrowthDataPoint:
    return GrowthDataPoint(
        year=year,
        invested=int(round_half_up(invested)),
        estimated=int(round_half_up(estimated)),
        savings=int(round_half_up(savings)),
    )


def calculate_growth(profile: InvestmentProfile, allocation: PortfolioAllocation) -> GrowthProjection:
    """Project the corpus month by month over the profile's horizon.

    Each month the SIP is added first and the month's growth applied to the
    sum. The monthly rate is the annual rate / 12 (not the geometric
    equivalent). A savings-account benchmark is compounded alongside.

    Chart points are emitted at year 0, at every whole year, and at the last
    month when the horizon is fractional (0.5 years -> years 0 and 0.5).

    Args:
        profile: Investor profile; uses current_savings, monthly_savings_target
            and investment_horizon_years. Inputs are not validated here.
        allocation: Equity/debt/gold percentages.

    Returns:
        GrowthProjection with rounded projected value, inflation-adjusted value,
        total principal and the sampled chart.
    """
    years = profile.investment_horizon_years
    total_months = int(round_half_up(years * 12))
    monthly_sip = profile.monthly_savings_target
    initial_corpus = profile.current_savings

    monthly_rate = expected_annual_return(allocation) / 12
    monthly_savings_rate = SAVINGS_RATE / 12

    current_estimated = initial_corpus
    current_savings = initial_corpus
    total_invested = initial_corpus

    chart = [_point(0.0, total_invested, current_estimated, current_savings)]

    for m in range(1, total_months + 1):
        current_estimated = (current_estimated + monthly_sip) * (1 + monthly_rate)
        current_savings = (current_savings + monthly_sip) * (1 + monthly_savings_rate)
        total_invested += monthly_sip

        if m % 12 == 0 or m == total_months:
            year_value = round_half_up(m / 12, 1)
            if chart[-1].year != year_value:
                chart.append(_point(year_value, total_invested, current_estimated, current_savings))

    projected = int(round_half_up(current_estimated))
    inflation_factor = (1 + INFLATION_RATE) ** years
    inflation_adjusted = int(round_half_up(projected / inflation_factor))

    _log.debug(
        "growth months=%d rate=%.4f projected=%d real=%d",
        total_months, monthly_rate * 12, projected, inflation_adjusted,
    )
    return GrowthProjection(
        projected=projected,
        inflation_adjusted_corpus=inflation_adjusted,
        total_invested=int(round_half_up(total_invested)),
        chart=tuple(chart),
    )


def growth_frame(chart: Iterable[GrowthDataPoint]) -> pd.DataFrame:
    """Chart points as a DataFrame indexed by year, with a gain column."""
    rows = [p.to_dict() for p in chart]
    df = pd.DataFrame(rows, columns=["year", "invested", "estimated", "savings"])
    df["gain"] = df["estimated"] - df["invested"]
    return df.set_index("year")


def projection_summary(projection: GrowthProjection) -> Dict[str, Any]:
    """Headline figures derived from a projection (gain, multiple, benchmark gap)."""
    last = projection.chart[-1]
    return {
        "total_gain": projection.projected - projection.total_invested,
        "wealth_multiple": round(projection.projected / max(projection.total_invested, 1), 2),
        "benchmark_gap": last.estimated - last.savings,
    }


__all__ = [
    "EQUITY_RETURN",
    "DEBT_RETURN",
    "GOLD_RETURN",
    "INFLATION_RATE",
    "SAVINGS_RATE",
    "GrowthDataPoint",
    "GrowthProjection",
    "expected_annual_return",
    "calculate_growth",
    "growth_frame",
    "projection_summary",
]
