"""
planwise - build an investment plan from the command line.

USAGE EXAMPLES:

Plan without AI narration:
    planwise --age 30 --income 5000 --savings 10000 --sip 1000 --risk Moderate --years 10

INR plan, saved to history, JSON output:
    planwise --age 28 --income 90000 --savings 200000 --sip 25000 --risk High \\
        --years 15 --currency ₹ --goal "Retirement" --save --json

With Gemini narration (needs GEMINI_API_KEY in the environment, .env or config.yaml):
    planwise --age 45 --income 8000 --savings 50000 --sip 1500 --risk Low --years 5 --ai
"""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from planwise.advisor import AdvisorResult, generate_plan
from planwise.history import PlanHistory
from planwise.investor_profiles import InvestmentProfile, ProfileValidationError
from planwise.narrative import client_from_config
from planwise.portfolio.simulation import growth_frame, projection_summary
from planwise.utils import get_logger
from planwise.utils.env_tools import env_flag, load_config

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="planwise",
        description="Risk score, allocation and growth projection for a savings plan",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--age", type=int, required=True, help="Age in years (18-100)")
    parser.add_argument("--income", type=float, required=True, help="Monthly income")
    parser.add_argument("--savings", type=float, default=0.0, help="Current savings / lump sum (default: 0)")
    parser.add_argument("--sip", type=float, required=True, help="Monthly investment (SIP)")
    parser.add_argument("--risk", type=str, default="Moderate", help="Risk tolerance: Low, Moderate, High")
    parser.add_argument("--years", type=float, required=True, help="Investment horizon in years (1-50)")
    parser.add_argument("--goal", type=str, default="Wealth Creation", help="Financial goal label")
    parser.add_argument("--currency", type=str, default="$", help="Currency symbol (default: $)")
    parser.add_argument("--user", type=str, default=None, help="User id for history (default: config app.user_id)")
    parser.add_argument("--ai", action="store_true", help="Use Gemini for stock picks and explanation")
    parser.add_argument("--save", action="store_true", help="Save the plan to history")
    parser.add_argument("--history", type=str, default=None, help="History JSON path (default: config app.history_path)")
    parser.add_argument("--config", type=str, default=None, help="Config YAML path (default: config/config.yaml)")
    parser.add_argument("--json", action="store_true", help="Print the plan as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    return parser.parse_args(argv)


def format_report(result: AdvisorResult) -> str:
    """Human-readable plan report."""
    cur = result.profile.currency
    alloc = result.allocation
    summary = projection_summary(result.projection)

    lines = []
    lines.append("=" * 62)
    lines.append("  INVESTMENT PLAN")
    lines.append(f"  Goal           : {result.profile.financial_goal}")
    lines.append(f"  Horizon        : {result.profile.investment_horizon_years:g} years")
    lines.append(f"  Monthly SIP    : {cur}{result.profile.monthly_savings_target:,.0f}")
    lines.append("=" * 62)
    lines.append(f"  Risk score     : {result.risk_score}/100 ({result.investor_type})")
    lines.append(f"  Allocation     : Equity {alloc.equity}% | Debt {alloc.debt}% | Gold {alloc.gold}%")
    lines.append("-" * 62)
    lines.append(f"  Total invested : {cur}{result.total_invested:>14,}")
    lines.append(f"  Projected      : {cur}{result.projected_corpus:>14,}")
    lines.append(f"  Real value     : {cur}{result.inflation_adjusted_corpus:>14,}")
    lines.append(f"  Total gain     : {cur}{summary['total_gain']:>14,}")
    lines.append(f"  Wealth multiple: {summary['wealth_multiple']:.2f}x")
    lines.append(f"  vs savings acct: {cur}{summary['benchmark_gap']:>14,}")
    lines.append("-" * 62)
    lines.append("  YEAR-BY-YEAR")
    lines.append(growth_frame(result.growth_chart).to_string())
    lines.append("-" * 62)
    for label, items in (("ETFs", result.equity_breakdown.etf), ("Stocks", result.equity_breakdown.stocks)):
        lines.append(f"  {label}:")
        for r in items:
            lines.append(f"    {r.symbol:<12} {r.name:<28} {r.allocation_percent:>5.0f}%  {cur}{r.amount:,}")
    if result.ai_explanation:
        lines.append("-" * 62)
        lines.append(result.ai_explanation)
    lines.append("=" * 62)
    lines.append("  Educational projection only; not financial advice.")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    get_logger()
    cfg = load_config(args.config)
    app_cfg = cfg.get("app") or {}
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif not os.getenv("LOG_LEVEL"):
        logging.getLogger().setLevel(str(app_cfg.get("log_level", "INFO")).upper())

    profile = InvestmentProfile(
        age=args.age,
        monthly_income=args.income,
        current_savings=args.savings,
        monthly_savings_target=args.sip,
        risk_tolerance=args.risk,
        investment_horizon_years=args.years,
        financial_goal=args.goal,
        currency=args.currency,
    )

    explainer = suggester = None
    if args.ai and not env_flag("PLANWISE_DISABLE_AI", False):
        client = client_from_config(cfg)
        if client is None:
            logger.warning("--ai requested but no Gemini API key is configured; using static content")
        else:
            explainer, suggester = client.explain, client.suggest

    store = None
    if args.save:
        store = PlanHistory(args.history or app_cfg.get("history_path"))

    user_id = args.user or str(app_cfg.get("user_id", "local"))
    try:
        result = generate_plan(user_id, profile, explainer=explainer, suggester=suggester, store=store)
    except ProfileValidationError as e:
        for field, message in e.errors.items():
            print(f"error: {field}: {message}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_report(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
