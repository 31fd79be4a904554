from .allocation import PortfolioAllocation, get_recommended_allocation
from .simulation import (
    GrowthDataPoint,
    GrowthProjection,
    calculate_growth,
    expected_annual_return,
    growth_frame,
    projection_summary,
)

__all__ = [
    "PortfolioAllocation",
    "get_recommended_allocation",
    "GrowthDataPoint",
    "GrowthProjection",
    "calculate_growth",
    "expected_annual_return",
    "growth_frame",
    "projection_summary",
]
