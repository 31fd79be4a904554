#!/usr/bin/env python3
"""
Sensitivity Grid Runner - Plan outcomes across ages × horizons × tolerances.

USAGE:
    python3 dev/run_sensitivity.py --ages 25,35,45,55 --horizons 5,10,20 --tolerances Low,Moderate,High

Runs the deterministic planner over a grid of profiles (fixed income, savings
and SIP) and writes one row per profile into a tidy CSV. No AI calls.

Args:
    --ages: Comma-separated ages (default: 25,35,45,55,65)
    --horizons: Comma-separated horizons in years (default: 3,5,10,20,30)
    --tolerances: Comma-separated tolerances (default: Low,Moderate,High)
    --income: Monthly income (default: 5000)
    --sip: Monthly investment (default: 1000)
    --savings: Current savings (default: 10000)
    --out: Output CSV path (default: dev/artifacts/sensitivity_<timestamp>.csv)
    --verbose: Enable verbose logging

Output CSV columns:
    age, horizon, tolerance, risk_score, investor_type, equity, debt, gold,
    total_invested, projected, inflation_adjusted, wealth_multiple
"""

import sys
from pathlib import Path
from datetime import datetime
import argparse
import itertools
import logging

import pandas as pd

from planwise.investor_profiles import InvestmentProfile
from planwise.risk_profile import calculate_risk_score, determine_investor_type
from planwise.portfolio import calculate_growth, get_recommended_allocation, projection_summary

ROOT = Path(__file__).resolve().parents[1]


def parse_args():
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Run the planner across ages × horizons × tolerances",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("--ages", type=str, default="25,35,45,55,65",
                        help="Comma-separated ages (default: 25,35,45,55,65)")
    parser.add_argument("--horizons", type=str, default="3,5,10,20,30",
                        help="Comma-separated horizons in years (default: 3,5,10,20,30)")
    parser.add_argument("--tolerances", type=str, default="Low,Moderate,High",
                        help="Comma-separated tolerances (default: Low,Moderate,High)")
    parser.add_argument("--income", type=float, default=5000, help="Monthly income (default: 5000)")
    parser.add_argument("--sip", type=float, default=1000, help="Monthly investment (default: 1000)")
    parser.add_argument("--savings", type=float, default=10000, help="Current savings (default: 10000)")
    parser.add_argument("--out", type=str, default=None,
                        help="Output CSV path (default: dev/artifacts/sensitivity_<timestamp>.csv)")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser.parse_args()


def run_single_profile(profile: InvestmentProfile) -> dict:
    """Score, allocate and project one profile; returns a flat result row."""
    score = calculate_risk_score(profile)
    alloc = get_recommended_allocation(score)
    growth = calculate_growth(profile, alloc)
    summary = projection_summary(growth)
    return {
        "risk_score": score,
        "investor_type": determine_investor_type(score),
        "equity": alloc.equity,
        "debt": alloc.debt,
        "gold": alloc.gold,
        "total_invested": growth.total_invested,
        "projected": growth.projected,
        "inflation_adjusted": growth.inflation_adjusted_corpus,
        "wealth_multiple": summary["wealth_multiple"],
    }


def main():
    """Main entry point."""
    args = parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    ages = [int(a.strip()) for a in args.ages.split(",")]
    horizons = [float(h.strip()) for h in args.horizons.split(",")]
    tolerances = [t.strip() for t in args.tolerances.split(",")]

    if args.out:
        out_path = Path(args.out)
    else:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        out_path = ROOT / "dev" / "artifacts" / f"sensitivity_{timestamp}.csv"
    out_path.parent.mkdir(parents=True, exist_ok=True)

    print("Sensitivity Grid Runner", file=sys.stderr)
    print(f"Ages: {ages}", file=sys.stderr)
    print(f"Horizons: {horizons}", file=sys.stderr)
    print(f"Tolerances: {tolerances}", file=sys.stderr)
    print(f"Income/SIP/Savings: {args.income:g}/{args.sip:g}/{args.savings:g}", file=sys.stderr)
    print("", file=sys.stderr)

    results = []
    for age, horizon, tol in itertools.product(ages, horizons, tolerances):
        profile = InvestmentProfile(
            age=age,
            monthly_income=args.income,
            current_savings=args.savings,
            monthly_savings_target=args.sip,
            risk_tolerance=tol,
            investment_horizon_years=horizon,
        )
        results.append({"age": age, "horizon": horizon, "tolerance": tol, **run_single_profile(profile)})

    df = pd.DataFrame(results)
    df.to_csv(out_path, index=False)
    print(f"\nWrote {len(df)} results to {out_path}", file=sys.stderr)

    print(f"\n{'='*80}", file=sys.stderr)
    print("SENSITIVITY SUMMARY", file=sys.stderr)
    print(f"{'='*80}", file=sys.stderr)

    pivot = df.pivot_table(values="risk_score", index="age", columns="tolerance", aggfunc="mean")
    print("\nMean Risk Score by Age × Tolerance:", file=sys.stderr)
    print(pivot.round(1).to_string(), file=sys.stderr)

    multiple = df.pivot_table(values="wealth_multiple", index="horizon", columns="tolerance", aggfunc="median")
    print("\nMedian Wealth Multiple by Horizon × Tolerance:", file=sys.stderr)
    print(multiple.to_string(), file=sys.stderr)

    # real value as a share of nominal, per horizon
    real_share = df["inflation_adjusted"] / df["projected"].clip(lower=1)
    print("\nReal/Nominal ratio by horizon:", file=sys.stderr)
    print(real_share.groupby(df["horizon"]).mean().round(3).to_string(), file=sys.stderr)

    print("\nInvestor Type Distribution:", file=sys.stderr)
    print(df["investor_type"].value_counts().to_string(), file=sys.stderr)
    print(f"\n{'='*80}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
