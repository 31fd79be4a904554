from importlib.metadata import version, PackageNotFoundError
__all__ = ["investor_profiles","risk_profile","portfolio","suggestions","narrative","advisor","history","utils"]
try:
    __version__ = version("planwise")
except PackageNotFoundError:
    __version__ = "0.1.0"

from .investor_profiles import InvestmentProfile, RiskTolerance, ProfileValidationError  # noqa: E402
from .risk_profile import calculate_risk_score, determine_investor_type  # noqa: E402
from .portfolio.allocation import PortfolioAllocation, get_recommended_allocation  # noqa: E402
from .portfolio.simulation import GrowthDataPoint, GrowthProjection, calculate_growth  # noqa: E402
from .advisor import AdvisorResult, generate_plan, resimulate  # noqa: E402

__all__ += [
    "InvestmentProfile",
    "RiskTolerance",
    "ProfileValidationError",
    "calculate_risk_score",
    "determine_investor_type",
    "PortfolioAllocation",
    "get_recommended_allocation",
    "GrowthDataPoint",
    "GrowthProjection",
    "calculate_growth",
    "AdvisorResult",
    "generate_plan",
    "resimulate",
]
