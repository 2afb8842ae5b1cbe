from .config import DashboardConfig
from .data_model import Datasets, MetricRecord, PopulationRecord, YearChange
from .data_prep import load_datasets, parse_hpi, parse_inflation, parse_population
from .errors import DegenerateStatisticsError, LoadError, MalformedInputError, MissingJoinError
from .join_index import JoinIndex, PopulationIndex, lookup
from .metrics import endpoint_delta, growth_percent, mean_by_state, pearson_correlation, percent_change_series
from .series import build_dashboard
from .states import normalize_state, normalize_year, state_code

__version__ = "0.1.0"
