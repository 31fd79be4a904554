from __future__ import annotations
import logging
import math

from planwise.investor_profiles import InvestmentProfile, InvestorType, RiskTolerance

__all__ = [
    "BASE_SCORE",
    "MIN_SCORE",
    "MAX_SCORE",
    "LOW_TOLERANCE_CEILING",
    "clamp",
    "round_half_up",
    "calculate_risk_score",
    "determine_investor_type",
]

_log = logging.getLogger(__name__)

BASE_SCORE = 50.0
MIN_SCORE = 10
MAX_SCORE = 95
LOW_TOLERANCE_CEILING = 40

# Stated preference outweighs any combination of the computed factors
PREFERENCE_ADJUSTMENT = {
    RiskTolerance.LOW: -30.0,
    RiskTolerance.MODERATE: 0.0,
    RiskTolerance.HIGH: 25.0,
}


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def round_half_up(x: float, ndigits: int = 0) -> float:
    """
    Round with ties toward +inf (2.5 -> 3, -2.5 -> -2).

    Python's round() is banker's rounding; plan figures must not flip
    between neighbours on exact .5 values (e.g. 65 * 0.9 = 58.5 -> 59).
    """
    if ndigits == 0:
        return float(math.floor(x + 0.5))
    scale = 10 ** ndigits
    return math.floor(x * scale + 0.5) / scale


def _savings_ratio(profile: InvestmentProfile) -> float:
    income = profile.monthly_income
    target = profile.monthly_savings_target
    if income == 0:
        # Degenerate input; callers validate income > 0
        return math.copysign(math.inf, target) if target else 0.0
    return target / income


def calculate_risk_score(profile: InvestmentProfile) -> int:
    """
    Compute the risk score in [10, 95] for a profile.

    Factors:
      1. Base 50
      2. Age: (45 - age) * 0.5  (age 25 -> +10, age 65 -> -10)
      3. Horizon: min(years, 20) * 0.75  (capped at +15)
      4. Savings ratio (SIP / income): > 0.4 -> +10, > 0.2 -> +5
      5. Stated tolerance: Low -30, High +25, Moderate 0
      6. Low tolerance hard ceiling at 40
      7. Round half-up, clamp to [10, 95]

    Never raises; out-of-range inputs are absorbed by the clamp.
    """
    score = BASE_SCORE

    score += (45 - profile.age) * 0.5
    score += min(profile.investment_horizon_years, 20) * 0.75

    ratio = _savings_ratio(profile)
    if ratio > 0.4:
        score += 10
    elif ratio > 0.2:
        score += 5

    tolerance = profile.risk_tolerance
    score += PREFERENCE_ADJUSTMENT.get(tolerance, 0.0)

    if tolerance == RiskTolerance.LOW:
        score = min(score, LOW_TOLERANCE_CEILING)

    final = int(clamp(round_half_up(score), MIN_SCORE, MAX_SCORE))
    _log.debug("risk score raw=%.2f final=%d tolerance=%s", score, final, tolerance)
    return final


def determine_investor_type(score: float) -> InvestorType:
    """Map a risk score to its investor type (<=40, <=70, above)."""
    if score <= 40:
        return "Conservative"
    if score <= 70:
        return "Moderate"
    return "Aggressive"
