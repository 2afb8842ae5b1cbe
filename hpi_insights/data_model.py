# hpi_insights/data_model.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .states import normalize_state


@dataclass(frozen=True)
class MetricRecord:
    """One (state, year) observation of a metric such as HPI or inflation."""
    state: str
    year: int
    value: float


@dataclass(frozen=True)
class PopulationRecord:
    state: str                      # source label, may carry punctuation ("California*")
    population: Optional[int]       # None when the cell is blank or unparseable


@dataclass(frozen=True)
class YearChange:
    year: int
    percent_change: Optional[float]  # None marks a gap (zero or missing previous value)

    def to_dict(self) -> dict:
        return {"year": self.year, "percent_change": self.percent_change}


@dataclass(frozen=True)
class Datasets:
    """The three base datasets, loaded once and never mutated."""
    hpi: Tuple[MetricRecord, ...] = ()
    inflation: Tuple[MetricRecord, ...] = ()
    population: Tuple[PopulationRecord, ...] = ()
    states: Tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self):
        if not self.states:
            object.__setattr__(self, "states", unique_states(self.hpi))


def unique_states(records) -> Tuple[str, ...]:
    """State labels in order of first appearance, one per normalized name."""
    seen, out = set(), []
    for r in records:
        key = normalize_state(r.state)
        if key and key not in seen:
            seen.add(key)
            out.append(r.state)
    return tuple(out)
