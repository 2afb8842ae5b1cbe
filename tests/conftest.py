import matplotlib

matplotlib.use("Agg")

import pytest

from hpi_insights.data_prep import DATA_FILES, parse_hpi, parse_inflation, parse_population

HPI_CSV = """State,Year,HPI
California,2014,400
California,2024,600
California,2019,500
Texas,2014,200
Texas,2024,260
,,
Texas,2019,230
"""

# Texas has no 2019 row here
INFLATION_CSV = """State,Year,Inflation Rate (%)
California,2014,1.0
California,2019,2.0
California,2024,3.0
Texas,2014,2.0
Texas,2024,4.0
"""

POPULATION_CSV = '''State,Population
"California*","39,500,000"
Texas.,"30,000,000"
'''


@pytest.fixture
def hpi():
    return parse_hpi(HPI_CSV)


@pytest.fixture
def inflation():
    return parse_inflation(INFLATION_CSV)


@pytest.fixture
def population():
    return parse_population(POPULATION_CSV)


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / DATA_FILES["hpi"]).write_text(HPI_CSV, encoding="utf-8")
    (tmp_path / DATA_FILES["inflation"]).write_text(INFLATION_CSV, encoding="utf-8")
    (tmp_path / DATA_FILES["population"]).write_text(POPULATION_CSV, encoding="utf-8")
    return tmp_path
