# hpi_insights/states.py
from __future__ import annotations
import math, re
from typing import Any, Dict, Optional

import pandas as pd

_NON_ALPHA = re.compile(r"[^A-Za-z ]")

STATE_CODES: Dict[str, str] = {
    "Alabama": "AL", "Alaska": "AK", "Arizona": "AZ", "Arkansas": "AR", "California": "CA",
    "Colorado": "CO", "Connecticut": "CT", "Delaware": "DE", "District of Columbia": "DC",
    "Florida": "FL", "Georgia": "GA", "Hawaii": "HI", "Idaho": "ID", "Illinois": "IL",
    "Indiana": "IN", "Iowa": "IA", "Kansas": "KS", "Kentucky": "KY", "Louisiana": "LA",
    "Maine": "ME", "Maryland": "MD", "Massachusetts": "MA", "Michigan": "MI", "Minnesota": "MN",
    "Mississippi": "MS", "Missouri": "MO", "Montana": "MT", "Nebraska": "NE", "Nevada": "NV",
    "New Hampshire": "NH", "New Jersey": "NJ", "New Mexico": "NM", "New York": "NY",
    "North Carolina": "NC", "North Dakota": "ND", "Ohio": "OH", "Oklahoma": "OK", "Oregon": "OR",
    "Pennsylvania": "PA", "Puerto Rico": "PR", "Rhode Island": "RI", "South Carolina": "SC",
    "South Dakota": "SD", "Tennessee": "TN", "Texas": "TX", "Utah": "UT", "Vermont": "VT",
    "Virginia": "VA", "Washington": "WA", "West Virginia": "WV", "Wisconsin": "WI", "Wyoming": "WY",
}
_CODES_BY_KEY = {name.lower(): code for name, code in STATE_CODES.items()}


def normalize_state(name: Any) -> str:
    """Canonical join key for a state label: letters and spaces only, trimmed."""
    if name is None:
        return ""
    if not isinstance(name, str):
        if pd.isna(name):
            return ""
        name = str(name)
    return _NON_ALPHA.sub("", name).strip()

def normalize_year(value: Any) -> Optional[int]:
    """'2014', 2014, 2014.0 and ' 2014 ' all map to 2014; anything else to None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(f) or not f.is_integer():
        return None
    return int(f)

def state_code(name: Any) -> Optional[str]:
    """USPS code for a state label ('California*' -> 'CA'), None if unknown."""
    key = " ".join(normalize_state(name).split()).lower()
    return _CODES_BY_KEY.get(key)
