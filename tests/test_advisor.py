"""
End-to-end plan generation with and without the AI collaborators.

Validates that:
1. The numeric pipeline matches the standalone scorer/allocator/projector
2. Missing, failing or empty collaborators still yield a complete plan
3. resimulate keeps the allocation and only changes the horizon
"""

import pytest

from planwise.advisor import AdvisorResult, generate_plan, resimulate
from planwise.investor_profiles import InvestmentProfile, ProfileValidationError
from planwise.narrative import EMPTY_EXPLANATION, FALLBACK_EXPLANATION, NarrativeUnavailable
from planwise.portfolio.allocation import PortfolioAllocation
from planwise.portfolio.simulation import calculate_growth
from planwise.suggestions import get_equity_suggestions


@pytest.fixture
def profile():
    return InvestmentProfile(
        age=30,
        monthly_income=5000,
        current_savings=10000,
        monthly_savings_target=1000,
        risk_tolerance="Moderate",
        investment_horizon_years=10,
    )


def _failing(*args, **kwargs):
    raise NarrativeUnavailable("provider down")


def test_plan_without_collaborators(profile):
    result = generate_plan("u1", profile)
    assert result.risk_score == 65
    assert result.investor_type == "Moderate"
    assert result.allocation == PortfolioAllocation(59, 32, 9)
    assert result.ai_explanation is None
    assert result.equity_breakdown == get_equity_suggestions("Moderate", 1000 * 0.59, "$")

    growth = calculate_growth(profile, result.allocation)
    assert result.projected_corpus == growth.projected
    assert result.inflation_adjusted_corpus == growth.inflation_adjusted_corpus
    assert result.total_invested == 130000
    assert result.growth_chart == growth.chart
    assert result.id and result.date


def test_plan_ids_are_unique(profile):
    assert generate_plan("u1", profile).id != generate_plan("u1", profile).id


def test_failing_collaborators_fall_back(profile):
    result = generate_plan("u1", profile, explainer=_failing, suggester=_failing)
    assert result.ai_explanation == FALLBACK_EXPLANATION
    assert result.equity_breakdown == get_equity_suggestions("Moderate", 590, "$")


def test_empty_collaborator_output_falls_back(profile):
    result = generate_plan(
        "u1",
        profile,
        explainer=lambda *a: "   ",
        suggester=lambda p, t: {"etf": [], "stocks": []},
    )
    assert result.ai_explanation == EMPTY_EXPLANATION
    assert result.equity_breakdown.etf
    assert result.equity_breakdown.stocks


def test_malformed_suggestion_falls_back(profile):
    result = generate_plan("u1", profile, suggester=lambda p, t: {"etf": [{"symbol": "X"}]})
    assert result.equity_breakdown == get_equity_suggestions("Moderate", 590, "$")


def test_ai_collaborators_are_used(profile):
    seen = {}

    def explainer(p, allocation, investor_type, projected):
        seen.update(allocation=allocation, investor_type=investor_type, projected=projected)
        return "### The Simple Plan\nSteady growth."

    def suggester(p, investor_type):
        return {
            "etf": [{"symbol": "VOO", "name": "S&P 500", "sector": "Broad", "allocationPercent": 100}],
            "stocks": [
                {"symbol": "AAPL", "name": "Apple", "sector": "Tech", "allocationPercent": 60},
                {"symbol": "MSFT", "name": "Microsoft", "sector": "Tech", "allocationPercent": 40},
            ],
        }

    result = generate_plan("u1", profile, explainer=explainer, suggester=suggester)
    assert result.ai_explanation.startswith("### The Simple Plan")
    assert seen["investor_type"] == "Moderate"
    assert seen["projected"] == result.projected_corpus
    assert [r.amount for r in result.equity_breakdown.etf] == [590]
    assert [r.amount for r in result.equity_breakdown.stocks] == [354, 236]


def test_invalid_profile_is_rejected(profile):
    bad = InvestmentProfile(**{**profile.to_dict(), "age": 16})
    with pytest.raises(ProfileValidationError) as exc:
        generate_plan("u1", bad)
    assert "age" in exc.value.errors
    # engine itself tolerates the input
    assert generate_plan("u1", bad, validate=False).risk_score >= 10


def test_store_receives_plan(profile):
    class Store:
        def __init__(self):
            self.saved = []

        def save(self, user_id, result):
            self.saved.append((user_id, result))

    store = Store()
    result = generate_plan("alice", profile, store=store)
    assert store.saved == [("alice", result)]


def test_resimulate_changes_only_horizon(profile):
    result = generate_plan("u1", profile)
    short = resimulate(result, 0.5)
    assert [p.year for p in short.chart] == [0.0, 0.5]
    assert short.total_invested == 16000

    same = resimulate(result, 10)
    assert same == result.projection


def test_resimulate_with_new_monthly_investment(profile):
    result = generate_plan("u1", profile)
    bigger = resimulate(result, 10, 2000)
    assert bigger.total_invested == 10000 + 2000 * 120
    assert bigger.projected > result.projected_corpus
    expected = calculate_growth(
        InvestmentProfile(**{**profile.to_dict(), "monthly_savings_target": 2000}),
        result.allocation,
    )
    assert bigger == expected
    # stored plan is untouched
    assert result.allocation == PortfolioAllocation(59, 32, 9)
    assert result.profile.monthly_savings_target == 1000


def test_result_dict_round_trip(profile):
    result = generate_plan("u1", profile, explainer=lambda *a: "text")
    data = result.to_dict()
    assert data["allocation"] == {"equity": 59, "debt": 32, "gold": 9}
    assert data["profile"]["risk_tolerance"] == "Moderate"
    assert AdvisorResult.from_dict(data) == result
