"""Long-horizon savings and withdrawal simulations for a personal plan."""

from .config import PlanParameters
from .calculators.accumulation import accumulate
from .calculators.decumulation import decumulate

__all__ = ["PlanParameters", "accumulate", "decumulate"]
