"""Expose component submodules for convenience."""

from .charts import asset_path_chart, distribution_chart, success_gauge, retirement_projection_chart

__all__ = [
    "asset_path_chart",
    "distribution_chart",
    "success_gauge",
    "retirement_projection_chart",
]
