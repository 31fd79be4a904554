"""Plan orchestration: score → allocation → suggestions → projection → narrative.

The numeric pipeline is deterministic. Stock suggestions and the written
explanation come from optional collaborators passed in as callables; when
they are missing or fail, the plan is still complete (static suggestions,
fallback text).
"""

from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, TYPE_CHECKING

from planwise.investor_profiles import InvestmentProfile, InvestorType, ensure_valid_profile
from planwise.risk_profile import calculate_risk_score, determine_investor_type
from planwise.portfolio.allocation import PortfolioAllocation, get_recommended_allocation
from planwise.portfolio.simulation import GrowthDataPoint, GrowthProjection, calculate_growth
from planwise.suggestions import EquityBreakdown, attach_amounts, get_equity_suggestions
from planwise.narrative import EMPTY_EXPLANATION, FALLBACK_EXPLANATION

if TYPE_CHECKING:
    from planwise.history import PlanHistory

_log = logging.getLogger(__name__)

Explainer = Callable[[InvestmentProfile, PortfolioAllocation, str, float], str]
Suggester = Callable[[InvestmentProfile, str], Mapping[str, Any]]


@dataclass(frozen=True)
class AdvisorResult:
    id: str
    date: str
    profile: InvestmentProfile
    risk_score: int
    investor_type: InvestorType
    allocation: PortfolioAllocation
    equity_breakdown: EquityBreakdown
    projected_corpus: int
    inflation_adjusted_corpus: int
    total_invested: int
    growth_chart: Tuple[GrowthDataPoint, ...]
    ai_explanation: Optional[str] = None

    @property
    def projection(self) -> GrowthProjection:
        return GrowthProjection(
            projected=self.projected_corpus,
            inflation_adjusted_corpus=self.inflation_adjusted_corpus,
            total_invested=self.total_invested,
            chart=self.growth_chart,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "profile": self.profile.to_dict(),
            "risk_score": self.risk_score,
            "investor_type": self.investor_type,
            "allocation": self.allocation.to_dict(),
            "equity_breakdown": self.equity_breakdown.to_dict(),
            "projected_corpus": self.projected_corpus,
            "inflation_adjusted_corpus": self.inflation_adjusted_corpus,
            "total_invested": self.total_invested,
            "growth_chart": [p.to_dict() for p in self.growth_chart],
            "ai_explanation": self.ai_explanation,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AdvisorResult":
        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            profile=InvestmentProfile.from_dict(data["profile"]),
            risk_score=int(data["risk_score"]),
            investor_type=data["investor_type"],
            allocation=PortfolioAllocation.from_dict(data["allocation"]),
            equity_breakdown=EquityBreakdown.from_dict(data["equity_breakdown"]),
            projected_corpus=int(data["projected_corpus"]),
            inflation_adjusted_corpus=int(data["inflation_adjusted_corpus"]),
            total_invested=int(data["total_invested"]),
            growth_chart=tuple(
                GrowthDataPoint(
                    year=float(p["year"]),
                    invested=int(p["invested"]),
                    estimated=int(p["estimated"]),
                    savings=int(p["savings"]),
                )
                for p in data.get("growth_chart", [])
            ),
            ai_explanation=data.get("ai_explanation"),
        )


def _equity_breakdown(
    profile: InvestmentProfile,
    investor_type: InvestorType,
    monthly_equity: float,
    suggester: Optional[Suggester],
) -> EquityBreakdown:
    """AI picks first, static tables when the suggester is absent or fails."""
    if suggester is not None:
        try:
            picks = suggester(profile, investor_type)
            breakdown = EquityBreakdown(
                etf=attach_amounts(picks["etf"], monthly_equity),
                stocks=attach_amounts(picks["stocks"], monthly_equity),
            )
            if breakdown.etf or breakdown.stocks:
                return breakdown
            _log.warning("AI stock suggestion returned no items, using fallback engine.")
        except Exception as e:
            _log.warning(f"AI stock suggestion failed, using fallback engine: {type(e).__name__}: {e}")
    return get_equity_suggestions(investor_type, monthly_equity, profile.currency)


def _explanation(
    profile: InvestmentProfile,
    allocation: PortfolioAllocation,
    investor_type: InvestorType,
    projected: int,
    explainer: Optional[Explainer],
) -> Optional[str]:
    if explainer is None:
        return None
    try:
        text = explainer(profile, allocation, investor_type, projected)
    except Exception as e:
        _log.warning(f"AI explanation failed: {type(e).__name__}: {e}")
        return FALLBACK_EXPLANATION
    return text if text and text.strip() else EMPTY_EXPLANATION


def generate_plan(
    user_id: str,
    profile: InvestmentProfile,
    *,
    explainer: Optional[Explainer] = None,
    suggester: Optional[Suggester] = None,
    store: Optional["PlanHistory"] = None,
    validate: bool = True,
) -> AdvisorResult:
    """
    Build a complete plan for a profile.

    Steps:
      1) validate the profile (form rules) unless validate=False
      2) risk score → investor type → allocation
      3) equity suggestions for the monthly equity amount (AI, else static)
      4) growth projection
      5) explanation (optional collaborator, fallback text on failure)
      6) persist to `store` when given

    Raises:
        ProfileValidationError: if validate=True and the profile is invalid.
    """
    if validate:
        ensure_valid_profile(profile)

    risk_score = calculate_risk_score(profile)
    investor_type = determine_investor_type(risk_score)
    allocation = get_recommended_allocation(risk_score)

    monthly_equity = profile.monthly_savings_target * (allocation.equity / 100)
    breakdown = _equity_breakdown(profile, investor_type, monthly_equity, suggester)

    growth = calculate_growth(profile, allocation)
    explanation = _explanation(profile, allocation, investor_type, growth.projected, explainer)

    result = AdvisorResult(
        id=str(uuid.uuid4()),
        date=datetime.now(timezone.utc).isoformat(),
        profile=profile,
        risk_score=risk_score,
        investor_type=investor_type,
        allocation=allocation,
        equity_breakdown=breakdown,
        projected_corpus=growth.projected,
        inflation_adjusted_corpus=growth.inflation_adjusted_corpus,
        total_invested=growth.total_invested,
        growth_chart=growth.chart,
        ai_explanation=explanation,
    )
    _log.info(
        f"Plan {result.id}: score={risk_score} type={investor_type} "
        f"allocation={allocation.equity}/{allocation.debt}/{allocation.gold} projected={growth.projected}"
    )

    if store is not None:
        store.save(user_id, result)
    return result


def resimulate(
    result: AdvisorResult,
    horizon_years: float,
    monthly_savings_target: Optional[float] = None,
) -> GrowthProjection:
    """Re-run the projection of a stored plan at another horizon and, optionally,
    another monthly investment. The allocation is not re-derived."""
    changes = {"investment_horizon_years": float(horizon_years)}
    if monthly_savings_target is not None:
        changes["monthly_savings_target"] = float(monthly_savings_target)
    profile = replace(result.profile, **changes)
    return calculate_growth(profile, result.allocation)


__all__ = ["AdvisorResult", "Explainer", "Suggester", "generate_plan", "resimulate"]
