# hpi_insights/viz.py
from __future__ import annotations
import os
from typing import Optional, Tuple

import numpy as np
import matplotlib
import matplotlib.pyplot as plt
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .series import ChartPayload, ChoroplethPayload, HeatmapPayload

def _ensure_dir(p: Optional[str]) -> None:
    if p:
        d = os.path.dirname(p)
        if d and not os.path.exists(d):
            os.makedirs(d, exist_ok=True)

def _finish(fig: plt.Figure, out_path: Optional[str], show: bool) -> Optional[str]:
    fig.tight_layout()
    saved = None
    if out_path:
        _ensure_dir(out_path)
        fig.savefig(out_path, dpi=150, bbox_inches="tight")
        saved = out_path
    if show:
        plt.show()
    else:
        plt.close(fig)
    return saved

def _as_float(values) -> np.ndarray:
    return np.array([np.nan if v is None else v for v in values], dtype=float)


def plot_bar(
    payload: ChartPayload,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """
    Single-series bar chart in payload order (already ranked by the shaper).
    None values are marked "n/a" instead of being drawn as 0.
    """
    fig, ax = plt.subplots(figsize=(max(8, 0.35 * len(payload.categories)), 5))
    trace = payload.series[0] if payload.series else None
    if trace is not None:
        y = _as_float(trace.y)
        defined = ~np.isnan(y)
        pos = np.arange(len(trace.x))
        ax.bar(pos[defined], y[defined], color=(55/255, 128/255, 191/255, 0.7))
        # undefined values get a label, not a zero-height bar
        for i in pos[~defined]:
            ax.text(i, 0, "n/a", ha="center", va="bottom", fontsize=7, color="grey")
        ax.set_xticks(range(len(trace.x)))
        ax.set_xticklabels(trace.x, rotation=60, ha="right", fontsize=8)
    ax.set_title(payload.title)
    ax.set_xlabel(payload.x_label)
    ax.set_ylabel(payload.y_label)
    return fig, ax, _finish(fig, out_path, show)

def plot_lines(
    payload: ChartPayload,
    out_path: Optional[str] = None,
    show: bool = False,
    *,
    markers: bool = True,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """
    One line per trace. None values break the line instead of dropping to 0.
    """
    fig, ax = plt.subplots(figsize=(10, 5))
    for trace in payload.series:
        if not trace.x:
            continue
        ax.plot(list(trace.x), _as_float(trace.y), marker="o" if markers else None,
                linewidth=2, markersize=5, label=trace.name)
    ax.set_title(payload.title)
    ax.set_xlabel(payload.x_label)
    ax.set_ylabel(payload.y_label)
    if any(t.x for t in payload.series):
        ax.legend(fontsize=8)
    return fig, ax, _finish(fig, out_path, show)

def plot_scatter(
    payload: ChartPayload,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    fig, ax = plt.subplots(figsize=(8, 6))
    for trace in payload.series:
        if not trace.x:
            continue
        ax.scatter(_as_float(trace.x), _as_float(trace.y), s=40, alpha=0.7, label=trace.name)
    ax.set_title(payload.title)
    ax.set_xlabel(payload.x_label)
    ax.set_ylabel(payload.y_label)
    ax.axhline(0, color="grey", linewidth=0.5)
    ax.axvline(0, color="grey", linewidth=0.5)
    if any(t.x for t in payload.series):
        ax.legend(fontsize=8)
    return fig, ax, _finish(fig, out_path, show)

def plot_heatmap(
    payload: HeatmapPayload,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """
    Year x state heat map. Missing cells are masked (left blank) so they read
    as "no data" rather than as a value of 0.
    """
    z = np.ma.masked_invalid(np.array([_as_float(r) for r in payload.rows], dtype=float).reshape(
        len(payload.row_labels), len(payload.col_labels)))
    fig, ax = plt.subplots(figsize=(max(8, 0.3 * len(payload.col_labels)), 5))
    ax.set_title(payload.title)
    if z.size == 0:
        return fig, ax, _finish(fig, out_path, show)
    cmap = matplotlib.colormaps["RdBu_r"].copy()
    cmap.set_bad("white")
    im = ax.imshow(z, aspect="auto", cmap=cmap)
    ax.set_xlabel("State")
    ax.set_ylabel("Year")
    ax.set_xticks(range(len(payload.col_labels)))
    ax.set_xticklabels(payload.col_labels, rotation=45, ha="right", fontsize=7)
    ax.set_yticks(range(len(payload.row_labels)))
    ax.set_yticklabels([str(y) for y in payload.row_labels])
    fig.colorbar(im, ax=ax, label="HPI Value")
    return fig, ax, _finish(fig, out_path, show)

def plot_choropleth_map(
    payload: ChoroplethPayload,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[go.Figure, Optional[str]]:
    """
    US state map shaded with the payload's growth color bins, written as HTML.
    States with no USPS code cannot be placed on the map and are left out;
    states with undefined growth keep the no-data color.
    """
    df = pd.DataFrame({
        "state": list(payload.states),
        "code": list(payload.codes) if payload.codes else [None] * len(payload.states),
        "growth": _as_float(payload.growth),
        "population": list(payload.population) if payload.population else [None] * len(payload.states),
        "color": list(payload.colors),
    }).dropna(subset=["code"])

    if df.empty:
        fig = go.Figure(layout_title_text=payload.title)
    else:
        fig = px.choropleth(
            df,
            locations="code",
            locationmode="USA-states",
            scope="usa",
            color="color",
            color_discrete_map={c: c for c in df["color"].unique()},
            hover_name="state",
            hover_data={"code": False, "color": False, "growth": ":.2f", "population": True},
            title=payload.title,
        )
        fig.update_layout(showlegend=False)

    saved = None
    if out_path:
        _ensure_dir(out_path)
        fig.write_html(out_path, include_plotlyjs="cdn")
        saved = out_path
    if show:
        fig.show()
    return fig, saved


def plot_dashboard(dashboard: dict, out_dir: str) -> dict:
    """Render every payload from build_dashboard() into out_dir; returns name -> saved path."""
    saved = {}
    for name, payload in dashboard.items():
        path = os.path.join(out_dir, f"{name}.png")
        if isinstance(payload, HeatmapPayload):
            _, _, saved[name] = plot_heatmap(payload, path)
        elif isinstance(payload, ChoroplethPayload):
            _, saved[name] = plot_choropleth_map(payload, os.path.join(out_dir, f"{name}.html"))
        elif name == "hpi_vs_inflation":
            _, _, saved[name] = plot_scatter(payload, path)
        elif name.endswith("_lines") or name.endswith("_change"):
            _, _, saved[name] = plot_lines(payload, path)
        else:
            _, _, saved[name] = plot_bar(payload, path)
    return saved
