#!/usr/bin/env python
import tempfile
from pathlib import Path

from planwise.advisor import generate_plan, resimulate
from planwise.history import PlanHistory
from planwise.investor_profiles import InvestmentProfile
from planwise.narrative import client_from_config


def main():
    profile = InvestmentProfile(
        age=30,
        monthly_income=5000,
        current_savings=10000,
        monthly_savings_target=1000,
        risk_tolerance="Moderate",
        investment_horizon_years=10,
    )

    # Optional AI collaborators; static content when no key is configured
    client = client_from_config()
    explainer = client.explain if client else None
    suggester = client.suggest if client else None
    print("Gemini client:", "enabled" if client else "disabled")

    with tempfile.TemporaryDirectory() as tmp:
        store = PlanHistory(Path(tmp) / "plans.json")
        result = generate_plan("smoke", profile, explainer=explainer, suggester=suggester, store=store)

        print(f"\nRisk score: {result.risk_score} ({result.investor_type})")
        print(f"Allocation: {result.allocation.to_dict()}")
        print(f"Projected: {result.projected_corpus:,} | Real: {result.inflation_adjusted_corpus:,}")
        print(f"ETFs: {[r.symbol for r in result.equity_breakdown.etf]}")

        # Basic validation
        assert result.risk_score == 65, "Reference profile should score 65"
        assert result.allocation.to_dict() == {"equity": 59, "debt": 32, "gold": 9}, "Unexpected allocation"
        assert result.total_invested == 130000, "Principal mismatch"
        assert store.get_plan(result.id) == result, "History round-trip failed"

        short = resimulate(result, 0.5)
        print(f"\n6-month re-simulation chart years: {[p.year for p in short.chart]}")
        assert [p.year for p in short.chart] == [0.0, 0.5], "Fractional horizon sampling broken"

        if client:
            assert result.ai_explanation, "Missing AI explanation"
            print("\nExplanation:\n", result.ai_explanation)


if __name__ == "__main__":
    main()
    print("\nAll checks passed!")
