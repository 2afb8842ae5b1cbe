# hpi_insights/series.py
"""
Shape aggregates into the minimal payload each chart needs.

Every function here is a pure transform of (records, states) into ordered
arrays; nothing is cached between calls. Payloads serialize with ``to_dict()``
into plain lists with ``None`` standing for "no data".
"""
from __future__ import annotations
import logging, math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .config import DashboardConfig
from .data_model import Datasets, PopulationRecord
from .join_index import JoinIndex, PopulationIndex, as_index
from .states import normalize_year, state_code
from .metrics import (endpoint_delta, filter_years, growth_percent, mean_by_state,
                      percent_change_series, state_correlation)

logger = logging.getLogger(__name__)

NO_DATA_COLOR = "#cccccc"
GROWTH_COLOR_STEPS: Tuple[Tuple[float, str], ...] = (
    (100, "#800026"),
    (75, "#BD0026"),
    (50, "#E31A1C"),
    (25, "#FC4E2A"),
    (10, "#FD8D3C"),
    (5, "#FEB24C"),
    (0, "#FED976"),
)
FLOOR_COLOR = "#FFEDA0"


def _clean(v: Any) -> Any:
    if isinstance(v, float) and math.isnan(v):
        return None
    return v


@dataclass(frozen=True)
class Trace:
    name: str
    x: Tuple[Any, ...]
    y: Tuple[Optional[float], ...]
    text: Tuple[str, ...] = ()
    customdata: Tuple[Any, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"name": self.name, "x": list(self.x), "y": [_clean(v) for v in self.y]}
        if self.text:
            d["text"] = list(self.text)
        if self.customdata:
            d["customdata"] = [_clean(v) for v in self.customdata]
        return d


@dataclass(frozen=True)
class ChartPayload:
    title: str
    categories: Tuple[str, ...]
    series: Tuple[Trace, ...]
    x_label: str = ""
    y_label: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "categories": list(self.categories),
            "series": [t.to_dict() for t in self.series],
            "x_label": self.x_label,
            "y_label": self.y_label,
        }


@dataclass(frozen=True)
class HeatmapPayload:
    title: str
    rows: Tuple[Tuple[Optional[float], ...], ...]   # [year_index][state_index]
    row_labels: Tuple[int, ...]
    col_labels: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "rows": [[_clean(v) for v in row] for row in self.rows],
            "row_labels": list(self.row_labels),
            "col_labels": list(self.col_labels),
        }


@dataclass(frozen=True)
class ChoroplethPayload:
    title: str
    states: Tuple[str, ...]
    growth: Tuple[Optional[float], ...]
    colors: Tuple[str, ...]
    population: Tuple[Optional[int], ...] = field(default=())
    codes: Tuple[Optional[str], ...] = field(default=())   # USPS, None when unknown

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "states": list(self.states),
            "growth": [_clean(v) for v in self.growth],
            "colors": list(self.colors),
            "population": list(self.population),
            "codes": list(self.codes),
        }


# ----------------------------
# Bar charts (descending by metric)
# ----------------------------
def _ranked(pairs: List[Tuple[str, float]]) -> List[Tuple[str, float]]:
    # sorted() is stable, so ties keep the order the states were given in
    return sorted(pairs, key=lambda p: p[1], reverse=True)

def average_hpi_bar(hpi, states: Sequence[str]) -> ChartPayload:
    idx = as_index(hpi)
    ranked = _ranked([(s, mean_by_state(idx, s)) for s in states])
    cats = tuple(s for s, _ in ranked)
    trace = Trace(name="Average HPI", x=cats, y=tuple(v for _, v in ranked),
                  text=tuple(f"{v:.2f}" for _, v in ranked))
    return ChartPayload("Average Housing Price Index (HPI) by State", cats, (trace,),
                        x_label="State", y_label="Average HPI")

def hpi_increase_bar(
    hpi,
    population: Iterable[PopulationRecord],
    states: Sequence[str],
    *,
    start_year: int = 2014,
    end_year: int = 2024,
) -> ChartPayload:
    """HPI change between two years per state, largest first, with population attached."""
    idx = as_index(hpi)
    pop = population if isinstance(population, PopulationIndex) else PopulationIndex.build(population)
    ranked = _ranked([(s, endpoint_delta(idx, s, start_year, end_year)) for s in states])
    cats = tuple(s for s, _ in ranked)
    trace = Trace(
        name="HPI Increase",
        x=cats,
        y=tuple(v for _, v in ranked),
        customdata=tuple(pop.population(s) for s in cats),
    )
    return ChartPayload(f"House Price Increase by State ({start_year}-{end_year})", cats, (trace,),
                        x_label="State", y_label="HPI Increase")

def correlation_bar(hpi, inflation, states: Sequence[str]) -> ChartPayload:
    """Per-state correlation of HPI with inflation; undefined correlations sort last as None."""
    h, i = as_index(hpi), as_index(inflation)
    scored = [(s, state_correlation(h, i, s)) for s in states]
    defined = _ranked([p for p in scored if not math.isnan(p[1])])
    undefined = [p for p in scored if math.isnan(p[1])]
    ordered = defined + undefined
    cats = tuple(s for s, _ in ordered)
    trace = Trace(name="Pearson r", x=cats, y=tuple(_clean(v) for _, v in ordered))
    return ChartPayload("Correlation of HPI and Inflation by State", cats, (trace,),
                        x_label="State", y_label="Pearson r")

# ----------------------------
# Time series (chronological per state)
# ----------------------------
def _series_traces(idx: JoinIndex, states: Sequence[str], unit: str) -> Tuple[Trace, ...]:
    traces = []
    for s in states:
        recs = idx.series(s)
        traces.append(Trace(
            name=s,
            x=tuple(r.year for r in recs),
            y=tuple(r.value for r in recs),
            text=tuple(f"{s}\nYear: {r.year}\n{unit}: {r.value:.2f}" for r in recs),
        ))
    return tuple(traces)

def inflation_lines(inflation, states: Sequence[str]) -> ChartPayload:
    traces = _series_traces(as_index(inflation), states, "Inflation Rate")
    return ChartPayload("Inflation Rate by State", tuple(states), traces,
                        x_label="Year", y_label="Inflation Rate (%)")

def hpi_lines(hpi, states: Sequence[str]) -> ChartPayload:
    traces = _series_traces(as_index(hpi), states, "HPI")
    return ChartPayload("Housing Price Index by State", tuple(states), traces,
                        x_label="Year", y_label="HPI")

def percent_change_lines(records, states: Sequence[str], *, label: str = "Inflation Rate") -> ChartPayload:
    idx = as_index(records)
    traces = []
    for s in states:
        changes = percent_change_series(idx, s)
        traces.append(Trace(name=s, x=tuple(c.year for c in changes),
                            y=tuple(c.percent_change for c in changes)))
    return ChartPayload(f"Year-over-Year Change in {label}", tuple(states), tuple(traces),
                        x_label="Year", y_label="Change (%)")

# ----------------------------
# Scatter (cross-dataset join)
# ----------------------------
def hpi_vs_inflation_scatter(hpi, inflation, states: Sequence[str]) -> ChartPayload:
    """x = inflation rate, y = HPI; years missing from either dataset are left out."""
    h, i = as_index(hpi), as_index(inflation)
    traces = []
    for s in states:
        pairs = h.align(i, s)
        traces.append(Trace(
            name=s,
            x=tuple(p[2] for p in pairs),
            y=tuple(p[1] for p in pairs),
            text=tuple(f"{s}\nYear: {y}\nHPI: {hv:.1f}\nInflation: {iv:.1f}%" for y, hv, iv in pairs),
        ))
    return ChartPayload("Housing Prices vs Inflation Rate by State", tuple(states), tuple(traces),
                        x_label="Inflation Rate (%)", y_label="Housing Price Index (HPI)")

# ----------------------------
# Heat map
# ----------------------------
def hpi_heatmap(hpi, states: Sequence[str], years: Optional[Sequence[int]] = None) -> HeatmapPayload:
    """Dense [year][state] matrix of HPI values, None where the cell has no record."""
    idx = as_index(hpi)
    if years is not None:
        years = sorted({y for y in map(normalize_year, years) if y is not None})
    else:
        years = idx.years()
    rows = []
    for y in years:
        row = []
        for s in states:
            rec = idx.lookup(s, y)
            row.append(_clean(rec.value) if rec is not None else None)
        rows.append(tuple(row))
    return HeatmapPayload("Housing Price Index (HPI) by State and Year", tuple(rows),
                          tuple(years), tuple(states))

# ----------------------------
# Choropleth
# ----------------------------
def growth_color(growth: Optional[float]) -> str:
    if growth is None or math.isnan(growth):
        return NO_DATA_COLOR
    for threshold, color in GROWTH_COLOR_STEPS:
        if growth > threshold:
            return color
    return FLOOR_COLOR

def hpi_growth_choropleth(hpi, population: Iterable[PopulationRecord], states: Sequence[str]) -> ChoroplethPayload:
    idx = as_index(hpi)
    pop = population if isinstance(population, PopulationIndex) else PopulationIndex.build(population)
    growth = tuple(growth_percent(idx, s) for s in states)
    return ChoroplethPayload(
        "HPI Growth by State",
        tuple(states),
        growth,
        tuple(growth_color(g) for g in growth),
        tuple(pop.population(s) for s in states),
        tuple(state_code(s) for s in states),
    )

# ----------------------------
# Whole dashboard
# ----------------------------
def build_dashboard(datasets: Datasets, config: DashboardConfig) -> Dict[str, Any]:
    """
    Recompute every chart payload for one configuration.

    Line, scatter, percent-change and correlation charts follow the selected
    states; the heat map, bar charts and map cover every state. A year range,
    when set, windows both metric datasets and becomes the endpoints of the
    increase chart.
    """
    hpi = JoinIndex.build(filter_years(datasets.hpi, config.year_range))
    inflation = JoinIndex.build(filter_years(datasets.inflation, config.year_range))
    population = PopulationIndex.build(datasets.population)
    selected = list(config.selected_states)
    every = list(datasets.states)
    start, end = config.year_range or config.increase_years
    logger.info("Building dashboard for %d selected of %d states", len(selected), len(every))

    return {
        "hpi_lines": hpi_lines(hpi, selected),
        "inflation_lines": inflation_lines(inflation, selected),
        "inflation_change": percent_change_lines(inflation, selected),
        "hpi_vs_inflation": hpi_vs_inflation_scatter(hpi, inflation, selected),
        "correlation": correlation_bar(hpi, inflation, selected),
        "hpi_heatmap": hpi_heatmap(hpi, every),
        "average_hpi": average_hpi_bar(hpi, every),
        "hpi_increase": hpi_increase_bar(hpi, population, every, start_year=start, end_year=end),
        "hpi_growth_map": hpi_growth_choropleth(hpi, population, every),
    }
