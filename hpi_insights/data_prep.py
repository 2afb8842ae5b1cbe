# hpi_insights/data_prep.py
from __future__ import annotations
import io, logging, math
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from .data_model import Datasets, MetricRecord, PopulationRecord
from .errors import LoadError, MalformedInputError
from .states import normalize_state, normalize_year

logger = logging.getLogger(__name__)

STATE_COL = "State"
YEAR_COL = "Year"
HPI_COL = "HPI"
INFLATION_COL = "Inflation Rate (%)"
POPULATION_COL = "Population"

DATA_FILES: Dict[str, str] = {
    "hpi": "state_hpi.csv",
    "inflation": "state_inflation_rates.csv",
    "population": "State_poplution.csv",
}

# ----------------------------
# Raw text -> typed table
# ----------------------------
def parse_table(text: str) -> pd.DataFrame:
    """
    Parse delimited text with a header row into a frame of string cells.
    Rows whose fields are all blank are dropped.
    """
    if text is None or not text.strip():
        raise MalformedInputError("input is empty; a header row is required")
    try:
        df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False,
                         skip_blank_lines=True, index_col=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise MalformedInputError(f"could not parse delimited text: {e}") from e

    df.columns = [str(c).replace("\ufeff", "").strip() for c in df.columns]
    if all(not c or c.startswith("Unnamed:") for c in df.columns):
        raise MalformedInputError("header row is missing")

    df = df.fillna("")
    blank = df.apply(lambda col: col.astype(str).str.strip() == "").all(axis=1)
    if blank.any():
        logger.debug("Dropping %d blank rows", int(blank.sum()))
    return df.loc[~blank].reset_index(drop=True)

def _to_float(s: pd.Series) -> pd.Series:
    cleaned = s.astype(str).str.strip().str.replace(",", "", regex=False)
    return pd.to_numeric(cleaned, errors="coerce").astype(float)

_INT64_LIMIT = 2 ** 63

def _to_whole(s: pd.Series) -> pd.Series:
    f = _to_float(s)
    # 2014.5 is not a year; anything past int64 cannot be stored as one
    return f.where((f % 1 == 0) & f.abs().lt(_INT64_LIMIT)).astype("Int64")

def coerce_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Coerce the known columns of a parsed table:
      State -> trimmed str, Year -> Int64, HPI / Inflation Rate (%) -> float,
      Population -> Int64 (thousands separators removed).
    Bad cells become NaN/<NA> instead of failing the whole parse.
    """
    out = df.copy()
    if STATE_COL in out.columns:
        out[STATE_COL] = out[STATE_COL].astype(str).str.strip()
    if YEAR_COL in out.columns:
        out[YEAR_COL] = _to_whole(out[YEAR_COL])
    for col in (HPI_COL, INFLATION_COL):
        if col in out.columns:
            out[col] = _to_float(out[col])
    if POPULATION_COL in out.columns:
        out[POPULATION_COL] = _to_whole(out[POPULATION_COL])
    return out

def _require(df: pd.DataFrame, required: Iterable[str]) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise MalformedInputError(f"CSV is missing required columns: {missing}. Found: {list(df.columns)}")

def _as_float(v: Any) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return math.nan

# ----------------------------
# Typed table -> records
# ----------------------------
def metric_records(df: pd.DataFrame, value_column: str) -> Tuple[MetricRecord, ...]:
    _require(df, [STATE_COL, YEAR_COL, value_column])
    df = coerce_columns(df)
    out: List[MetricRecord] = []
    skipped = 0
    for state, year, value in zip(df[STATE_COL], df[YEAR_COL], df[value_column]):
        y = normalize_year(year)
        if not normalize_state(state) or y is None:
            skipped += 1
            continue
        out.append(MetricRecord(state=str(state).strip(), year=y, value=_as_float(value)))
    if skipped:
        logger.warning("Skipped %d %s rows without a usable state or year", skipped, value_column)
    return tuple(out)

def population_records(df: pd.DataFrame) -> Tuple[PopulationRecord, ...]:
    _require(df, [STATE_COL, POPULATION_COL])
    df = coerce_columns(df)
    out = []
    for state, pop in zip(df[STATE_COL], df[POPULATION_COL]):
        if not normalize_state(state):
            continue
        out.append(PopulationRecord(state=str(state).strip(),
                                    population=None if pd.isna(pop) else int(pop)))
    return tuple(out)

def parse_hpi(text: str) -> Tuple[MetricRecord, ...]:
    return metric_records(parse_table(text), HPI_COL)

def parse_inflation(text: str) -> Tuple[MetricRecord, ...]:
    return metric_records(parse_table(text), INFLATION_COL)

def parse_population(text: str) -> Tuple[PopulationRecord, ...]:
    return population_records(parse_table(text))

_PARSERS: Dict[str, Callable[[str], tuple]] = {
    "hpi": parse_hpi,
    "inflation": parse_inflation,
    "population": parse_population,
}

# ----------------------------
# Loading
# ----------------------------
def load_csv(path) -> str:
    path = Path(path)
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"Failed to load {path.name}: {e}") from e

def _load_one(kind: str, path: Path) -> Tuple[str, tuple]:
    text = load_csv(path)
    try:
        records = _PARSERS[kind](text)
    except MalformedInputError as e:
        raise MalformedInputError(f"Failed to load {path.name}: {e}") from e
    except Exception as e:
        raise LoadError(f"Failed to load {path.name}: {e}") from e
    logger.info("Loaded %d %s records from %s", len(records), kind, path.name)
    return kind, records

def load_datasets(data_dir, files: Optional[Dict[str, str]] = None) -> Datasets:
    """
    Load the HPI, inflation and population files concurrently and wait for all
    three. Any single failure raises LoadError; there is no partial result.
    """
    files = {**DATA_FILES, **(files or {})}
    unknown = set(files) - set(_PARSERS)
    if unknown:
        raise ValueError(f"unknown dataset kinds: {sorted(unknown)}")

    data_dir = Path(data_dir)
    results: Dict[str, tuple] = {}
    with ThreadPoolExecutor(max_workers=len(files)) as executor:
        futures = [executor.submit(_load_one, kind, data_dir / name) for kind, name in files.items()]
        for future in as_completed(futures):
            kind, records = future.result()
            results[kind] = records

    return Datasets(hpi=results["hpi"], inflation=results["inflation"], population=results["population"])
