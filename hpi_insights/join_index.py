# hpi_insights/join_index.py
from __future__ import annotations
import logging, math
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .data_model import MetricRecord, PopulationRecord
from .states import normalize_state, normalize_year
from .errors import MissingJoinError

logger = logging.getLogger(__name__)

Key = Tuple[str, int]


class JoinIndex:
    """
    Lookup structure over one metric dataset, keyed by (normalized state, year)
    and by normalized state alone. Duplicate keys keep the first occurrence.
    """

    def __init__(self, by_key: Dict[Key, MetricRecord], by_state: Dict[str, Tuple[MetricRecord, ...]]):
        self._by_key = by_key
        self._by_state = by_state

    @classmethod
    def build(cls, records: Iterable[MetricRecord]) -> "JoinIndex":
        by_key: Dict[Key, MetricRecord] = {}
        dupes = 0
        for r in records:
            key = (normalize_state(r.state), r.year)
            if key in by_key:
                dupes += 1
                continue
            by_key[key] = r
        if dupes:
            logger.info("Ignored %d duplicate (state, year) rows; first occurrence wins", dupes)

        grouped: Dict[str, List[MetricRecord]] = {}
        for (state, _), r in by_key.items():
            grouped.setdefault(state, []).append(r)
        by_state = {s: tuple(sorted(rs, key=lambda r: r.year)) for s, rs in grouped.items()}
        return cls(by_key, by_state)

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, key: Any) -> bool:
        try:
            state, year = key
        except (TypeError, ValueError):
            return False
        return self.lookup(state, year) is not None

    def lookup(self, state: Any, year: Any) -> Optional[MetricRecord]:
        y = normalize_year(year)
        if y is None:
            return None
        return self._by_key.get((normalize_state(state), y))

    def require(self, state: Any, year: Any) -> MetricRecord:
        rec = self.lookup(state, year)
        if rec is None:
            raise MissingJoinError(state, year)
        return rec

    def series(self, state: Any) -> Tuple[MetricRecord, ...]:
        """The state's records sorted ascending by year."""
        return self._by_state.get(normalize_state(state), ())

    def states(self) -> List[str]:
        return list(self._by_state)

    def years(self, state: Any = None) -> List[int]:
        if state is not None:
            return [r.year for r in self.series(state)]
        return sorted({y for _, y in self._by_key})

    def align(self, other: "JoinIndex", state: Any) -> List[Tuple[int, float, float]]:
        """
        Inner join with another index on year for one state:
        [(year, self value, other value), ...] ascending by year.
        Years missing on either side, or carrying NaN, are left out.
        """
        out = []
        for rec in self.series(state):
            try:
                match = other.require(state, rec.year)
            except MissingJoinError:
                continue
            if math.isnan(rec.value) or math.isnan(match.value):
                continue
            out.append((rec.year, rec.value, match.value))
        return out


class PopulationIndex:
    """Population per normalized state name; first occurrence wins."""

    def __init__(self, by_state: Dict[str, PopulationRecord]):
        self._by_state = by_state

    @classmethod
    def build(cls, records: Iterable[PopulationRecord]) -> "PopulationIndex":
        by_state: Dict[str, PopulationRecord] = {}
        for r in records:
            by_state.setdefault(normalize_state(r.state), r)
        return cls(by_state)

    def __len__(self) -> int:
        return len(self._by_state)

    def __contains__(self, state: Any) -> bool:
        return normalize_state(state) in self._by_state

    def record(self, state: Any) -> Optional[PopulationRecord]:
        return self._by_state.get(normalize_state(state))

    def population(self, state: Any) -> Optional[int]:
        rec = self.record(state)
        return rec.population if rec else None


def as_index(records) -> JoinIndex:
    return records if isinstance(records, JoinIndex) else JoinIndex.build(records)

def lookup(dataset: Sequence[MetricRecord], state: Any, year: Any) -> Optional[MetricRecord]:
    """First record in `dataset` matching (state, year) after normalization, else None."""
    return as_index(dataset).lookup(state, year)
