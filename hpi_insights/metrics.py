# hpi_insights/metrics.py
from __future__ import annotations
import logging, math
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .data_model import MetricRecord, YearChange
from .errors import DegenerateStatisticsError
from .join_index import JoinIndex, as_index

logger = logging.getLogger(__name__)


def filter_years(records: Iterable[MetricRecord], year_range: Optional[Tuple[int, int]]) -> Tuple[MetricRecord, ...]:
    """Keep records whose year falls in the inclusive range; None keeps everything."""
    if year_range is None:
        return tuple(records)
    start, end = year_range
    return tuple(r for r in records if start <= r.year <= end)

def mean_by_state(records, state) -> float:
    # no data counts as zero for a bar height
    values = np.array([r.value for r in as_index(records).series(state)], dtype=float)
    values = values[~np.isnan(values)]
    if values.size == 0:
        return 0.0
    return float(values.mean())

def endpoint_delta(records, state, year_a, year_b) -> float:
    idx = as_index(records)
    a, b = idx.lookup(state, year_a), idx.lookup(state, year_b)
    if a is None or b is None or math.isnan(a.value) or math.isnan(b.value):
        return 0.0
    return b.value - a.value

def _pct(previous: float, current: float) -> float:
    if math.isnan(previous) or math.isnan(current) or previous == 0:
        raise DegenerateStatisticsError(f"percent change undefined from {previous} to {current}")
    return (current - previous) / previous * 100

def percent_change_series(records, state) -> List[YearChange]:
    """
    Year-over-year percent change over the state's chronological series.
    The first year has no predecessor and is dropped; a zero or missing
    previous value yields percent_change=None.
    """
    series = as_index(records).series(state)
    out = []
    for prev, cur in zip(series, series[1:]):
        try:
            change: Optional[float] = _pct(prev.value, cur.value)
        except DegenerateStatisticsError as e:
            logger.debug("%s %d: %s", cur.state, cur.year, e)
            change = None
        out.append(YearChange(year=cur.year, percent_change=change))
    return out

def _pearson(x: np.ndarray, y: np.ndarray) -> float:
    if x.size < 2:
        raise DegenerateStatisticsError("need at least two points")
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        raise DegenerateStatisticsError("zero variance")
    r = np.corrcoef(x, y)[0, 1]
    return float(np.clip(r, -1.0, 1.0))

def pearson_correlation(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Product-moment correlation of two aligned sequences; NaN when undefined."""
    x = np.asarray(list(xs), dtype=float)
    y = np.asarray(list(ys), dtype=float)
    if x.shape != y.shape:
        raise ValueError(f"sequences must have equal length, got {x.size} and {y.size}")
    try:
        return _pearson(x, y)
    except DegenerateStatisticsError as e:
        logger.debug("correlation undefined: %s", e)
        return math.nan

def state_correlation(hpi: JoinIndex, inflation: JoinIndex, state) -> float:
    """Correlation of HPI against inflation over the years both datasets have."""
    pairs = as_index(hpi).align(as_index(inflation), state)
    return pearson_correlation([p[1] for p in pairs], [p[2] for p in pairs])

def growth_percent(records, state) -> Optional[float]:
    # first-to-last growth, the statistic shaded on the map
    series = as_index(records).series(state)
    if len(series) < 2:
        return None
    try:
        return _pct(series[0].value, series[-1].value)
    except DegenerateStatisticsError:
        return None
