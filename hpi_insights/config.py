# hpi_insights/config.py
from __future__ import annotations
import os
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

DATA_DIR_ENV = "HPI_INSIGHTS_DATA_DIR"
DEFAULT_DATA_DIR = "data"
DEFAULT_STATES: Tuple[str, ...] = ("California",)
INCREASE_YEARS: Tuple[int, int] = (2014, 2024)


@dataclass(frozen=True)
class DashboardConfig:
    """
    Everything a render depends on besides the base datasets: which states are
    selected and which years are in view. Changing the selection means building
    a new config, never editing this one.
    """
    selected_states: Tuple[str, ...] = DEFAULT_STATES
    year_range: Optional[Tuple[int, int]] = None   # inclusive; None = all years
    increase_years: Tuple[int, int] = INCREASE_YEARS
    data_dir: str = DEFAULT_DATA_DIR

    def __post_init__(self):
        object.__setattr__(self, "selected_states", tuple(self.selected_states))
        if self.year_range is not None:
            start, end = (int(y) for y in self.year_range)
            if start > end:
                raise ValueError(f"year_range start {start} is after end {end}")
            object.__setattr__(self, "year_range", (start, end))
        object.__setattr__(self, "increase_years", tuple(int(y) for y in self.increase_years))

    @classmethod
    def from_env(cls, **overrides) -> "DashboardConfig":
        data_dir = os.getenv(DATA_DIR_ENV) or DEFAULT_DATA_DIR
        return cls(**{"data_dir": data_dir, **overrides})

    def with_states(self, states: Iterable[str]) -> "DashboardConfig":
        return replace(self, selected_states=tuple(states))

    def select_all(self, states: Iterable[str]) -> "DashboardConfig":
        return self.with_states(states)

    def clear_selection(self) -> "DashboardConfig":
        return replace(self, selected_states=())

    def with_year_range(self, year_range: Optional[Tuple[int, int]]) -> "DashboardConfig":
        return replace(self, year_range=year_range)
