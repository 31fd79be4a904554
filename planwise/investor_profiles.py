from __future__ import annotations
import math
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Literal, Dict, Any, Mapping

# Form limits used by the planning front-ends
MIN_AGE = 18
MAX_AGE = 100
MIN_HORIZON = 1
MAX_HORIZON = 50
MAX_MONETARY_VALUE = 1_000_000_000

InvestorType = Literal["Conservative", "Moderate", "Aggressive"]


class RiskTolerance(str, Enum):
    """User-stated risk preference."""
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"

    @classmethod
    def coerce(cls, value: Any) -> "RiskTolerance | str":
        """Case-insensitive lookup; unknown labels are returned unchanged."""
        if isinstance(value, cls):
            return value
        label = str(value).strip()
        for member in cls:
            if member.value.lower() == label.lower():
                return member
        return label


class ProfileValidationError(ValueError):
    """Raised at the boundary when a profile fails the form rules."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(f"Invalid investment profile ({detail})")


@dataclass(frozen=True)
class InvestmentProfile:
    age: int
    monthly_income: float
    current_savings: float
    monthly_savings_target: float  # SIP amount
    risk_tolerance: RiskTolerance | str
    investment_horizon_years: float
    financial_goal: str = "Wealth Creation"
    currency: str = "$"

    def __post_init__(self):
        object.__setattr__(self, "risk_tolerance", RiskTolerance.coerce(self.risk_tolerance))

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        rt = self.risk_tolerance
        out["risk_tolerance"] = rt.value if isinstance(rt, RiskTolerance) else str(rt)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InvestmentProfile":
        """Build a profile from snake_case or camelCase keys."""
        def pick(snake: str, camel: str, default: Any = None) -> Any:
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        missing = [
            name for name, camel in _REQUIRED_KEYS
            if name not in data and camel not in data
        ]
        if missing:
            raise KeyError(f"Missing profile fields: {', '.join(missing)}")

        return cls(
            age=int(pick("age", "age")),
            monthly_income=float(pick("monthly_income", "monthlyIncome")),
            current_savings=float(pick("current_savings", "currentSavings")),
            monthly_savings_target=float(pick("monthly_savings_target", "monthlySavingsTarget")),
            risk_tolerance=pick("risk_tolerance", "riskTolerance"),
            investment_horizon_years=float(pick("investment_horizon_years", "investmentHorizonYears")),
            financial_goal=str(pick("financial_goal", "financialGoal", "Wealth Creation")),
            currency=str(pick("currency", "currency", "$")),
        )


_REQUIRED_KEYS = [
    ("age", "age"),
    ("monthly_income", "monthlyIncome"),
    ("current_savings", "currentSavings"),
    ("monthly_savings_target", "monthlySavingsTarget"),
    ("risk_tolerance", "riskTolerance"),
    ("investment_horizon_years", "investmentHorizonYears"),
]


def _is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def validate_profile(profile: InvestmentProfile) -> Dict[str, str]:
    """
    Apply the planning form rules and return {field: message} for each failure.
    An empty dict means the profile can be handed to the engine.
    """
    errors: Dict[str, str] = {}
    p = profile

    # NaN fails every comparison below, so it is rejected up front
    if _is_nan(p.age) or p.age < MIN_AGE or p.age > MAX_AGE:
        errors["age"] = f"Age must be between {MIN_AGE} and {MAX_AGE}."

    if _is_nan(p.monthly_income) or p.monthly_income <= 0:
        errors["monthly_income"] = "Income must be > 0."
    elif p.monthly_income > MAX_MONETARY_VALUE:
        errors["monthly_income"] = "Max limit reached."

    if _is_nan(p.current_savings) or p.current_savings < 0:
        errors["current_savings"] = "Savings cannot be negative."
    elif p.current_savings > MAX_MONETARY_VALUE:
        errors["current_savings"] = "Max limit reached."

    if _is_nan(p.monthly_savings_target) or p.monthly_savings_target <= 0:
        errors["monthly_savings_target"] = "Investment must be > 0."
    elif p.monthly_savings_target > MAX_MONETARY_VALUE:
        errors["monthly_savings_target"] = "Max limit reached."
    # Income check overrides the others, as on the form
    if p.monthly_savings_target > p.monthly_income:
        errors["monthly_savings_target"] = "Cannot exceed income."

    years = p.investment_horizon_years
    if not math.isfinite(years) or years < MIN_HORIZON or years > MAX_HORIZON:
        errors["investment_horizon_years"] = f"Horizon must be {MIN_HORIZON}-{MAX_HORIZON} years."

    return errors


def ensure_valid_profile(profile: InvestmentProfile) -> InvestmentProfile:
    """Return the profile unchanged or raise ProfileValidationError."""
    errors = validate_profile(profile)
    if errors:
        raise ProfileValidationError(errors)
    return profile


__all__ = [
    "InvestorType",
    "RiskTolerance",
    "InvestmentProfile",
    "ProfileValidationError",
    "validate_profile",
    "ensure_valid_profile",
    "MIN_AGE",
    "MAX_AGE",
    "MIN_HORIZON",
    "MAX_HORIZON",
    "MAX_MONETARY_VALUE",
]
