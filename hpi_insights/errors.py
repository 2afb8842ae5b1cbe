# hpi_insights/errors.py
"""Exception taxonomy for loading, joining and aggregating the state datasets."""


class HPIInsightsError(Exception):
    """Base class for every error raised by this package."""


class LoadError(HPIInsightsError):
    """A source file could not be read or parsed. Fatal for the session."""


class MalformedInputError(LoadError, ValueError):
    """The text has no header row or lacks a required column."""


class MissingJoinError(HPIInsightsError, KeyError):
    """A (state, year) key is absent from one dataset."""

    def __init__(self, state, year):
        super().__init__(f"no record for ({state!r}, {year!r})")
        self.state = state
        self.year = year

    def __str__(self) -> str:
        return self.args[0]


class DegenerateStatisticsError(HPIInsightsError, ArithmeticError):
    """Zero variance or a zero denominator in a statistic."""
