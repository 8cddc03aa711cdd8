# components/charts.py
# Plotly chart helpers for simulation outcomes.
# All functions return a Plotly Figure; rendering is left to the caller.

from typing import Dict, Mapping, Optional, Sequence

import plotly.graph_objects as go

from ..calculators.accumulation import AccumulationOutcome
from ..calculators.decumulation import DecumulationOutcome

_LAYOUT = dict(
    template="plotly_white",
    height=380,
    margin=dict(l=10, r=10, t=40, b=10),
    legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
)


def _line(x: Sequence, y: Sequence[float], name: str, dash: Optional[str] = None,
          x_label: str = "Month") -> go.Scatter:
    return go.Scatter(
        x=list(x), y=list(y), mode="lines", name=name,
        line=dict(dash=dash) if dash else None,
        hovertemplate=x_label + " %{x}<br>%{y:,.0f}<extra></extra>",
    )


# ---------- Accumulation: representative paths ----------
def asset_path_chart(outcome: AccumulationOutcome,
                     target_asset: Optional[float] = None,
                     title: str = "Asset Growth (Representative Paths)") -> go.Figure:
    """Best / median / worst monthly balances, with an optional target line."""
    fig = go.Figure()
    paths = outcome.representative_paths
    longest = 0
    if paths is not None:
        for name, path in paths.as_dict().items():
            months = range(len(path.monthly_assets))
            longest = max(longest, len(path.monthly_assets))
            fig.add_trace(_line(months, path.monthly_assets, name.title()))

    if target_asset is not None and longest:
        fig.add_trace(_line([0, longest - 1], [target_asset, target_asset], "Target", dash="dash"))

    fig.update_layout(title=title, xaxis_title="Month", yaxis_title="Assets", **_LAYOUT)
    return fig


# ---------- Accumulation: years-to-target histogram ----------
def distribution_chart(distribution: Mapping[int, int],
                       title: str = "Years to Target") -> go.Figure:
    """Bar chart of ``{years: trial count}``; empty input gives an empty chart."""
    years = sorted(distribution)
    fig = go.Figure(go.Bar(
        x=years, y=[distribution[y] for y in years], name="Trials",
        hovertemplate="Year %{x}<br>%{y:,} trials<extra></extra>",
    ))
    fig.update_layout(title=title, xaxis_title="Years", yaxis_title="Trials", **_LAYOUT)
    return fig


# ---------- Success gauge ----------
def success_gauge(success_rate: float) -> go.Figure:
    """0–100% radial gauge for the share of successful trials."""
    pct = round(float(success_rate) * 100, 1)
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=pct,
        number={"suffix": "%"},
        gauge={
            "axis": {"range": [0, 100]},
            "bar": {"thickness": 0.35},
            "steps": [
                {"range": [0, 50]},
                {"range": [50, 85]},
                {"range": [85, 100]},
            ],
        }
    ))
    fig.update_layout(template="plotly_white", height=220, margin=dict(l=10, r=10, t=10, b=10))
    return fig


# ---------- Decumulation: yearly balances ----------
def retirement_projection_chart(outcome: DecumulationOutcome,
                                short_term: bool = False,
                                title: str = "Assets After Target") -> go.Figure:
    """Five ranked paths plus the zero-volatility baseline."""
    ranked = outcome.short_term if short_term else outcome.long_term
    series: Dict[str, Sequence[float]] = {
        "Very best": ranked.very_best.yearly_assets,
        "Lucky": ranked.lucky.yearly_assets,
        "Median": ranked.median.yearly_assets,
        "Unlucky": ranked.unlucky.yearly_assets,
        "Very worst": ranked.very_worst.yearly_assets,
    }
    fig = go.Figure()
    for name, values in series.items():
        fig.add_trace(_line(range(len(values)), values, name, x_label="Year"))
    baseline = outcome.deterministic_path.yearly_assets
    fig.add_trace(_line(range(len(baseline)), baseline, "No volatility", dash="dot", x_label="Year"))

    fig.update_layout(title=title, xaxis_title="Year", yaxis_title="Assets", **_LAYOUT)
    return fig
