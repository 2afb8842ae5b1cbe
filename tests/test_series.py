import json

import pytest

from hpi_insights.config import DashboardConfig
from hpi_insights.data_model import Datasets, MetricRecord
from hpi_insights.series import (NO_DATA_COLOR, average_hpi_bar, build_dashboard, correlation_bar,
                                 growth_color, hpi_growth_choropleth, hpi_heatmap, hpi_increase_bar,
                                 hpi_vs_inflation_scatter, inflation_lines, percent_change_lines)


def test_heatmap_scenario():
    recs = [MetricRecord("A", 2014, 5.0)]
    hm = hpi_heatmap(recs, ["A", "B"], years=[2014, 2015])
    assert hm.rows == ((5.0, None), (None, None))
    assert hm.row_labels == (2014, 2015)
    assert hm.col_labels == ("A", "B")


def test_heatmap_normalizes_given_years():
    hm = hpi_heatmap([MetricRecord("A", 2014, 5.0)], ["A"], years=["2014", 2015.0, "bad", 2014])
    assert hm.row_labels == (2014, 2015)
    assert hm.rows == ((5.0,), (None,))


def test_heatmap_years_default_to_data(hpi):
    hm = hpi_heatmap(hpi, ["Texas", "Ohio"])
    assert hm.row_labels == (2014, 2019, 2024)
    assert hm.rows[1] == (230.0, None)


def test_average_bar_sorted_descending(hpi):
    chart = average_hpi_bar(hpi, ["Texas", "California", "Ohio"])
    assert chart.categories == ("California", "Texas", "Ohio")
    assert chart.series[0].y == pytest.approx((500.0, 230.0, 0.0))


def test_bar_ties_keep_given_order():
    recs = [MetricRecord("A", 2014, 1.0), MetricRecord("B", 2014, 1.0)]
    assert average_hpi_bar(recs, ["B", "A"]).categories == ("B", "A")


def test_increase_bar_with_population(hpi, population):
    chart = hpi_increase_bar(hpi, population, ["Texas", "California", "Ohio"])
    trace = chart.series[0]
    assert chart.categories == ("California", "Texas", "Ohio")
    assert trace.y == (200.0, 60.0, 0.0)
    assert trace.customdata == (39500000, 30000000, None)
    assert "2014-2024" in chart.title


def test_inflation_lines_chronological():
    recs = [MetricRecord("Ohio", 2016, 3.0), MetricRecord("Ohio", 2014, 1.0), MetricRecord("Iowa", 2020, 2.0)]
    chart = inflation_lines(recs, ["Ohio", "Iowa"])
    ohio, iowa = chart.series
    assert ohio.x == (2014, 2016)
    assert ohio.y == (1.0, 3.0)
    assert iowa.x == (2020,)


def test_percent_change_lines_keep_gaps():
    recs = [MetricRecord("Ohio", 2014, 0.0), MetricRecord("Ohio", 2015, 1.0), MetricRecord("Ohio", 2016, 2.0)]
    trace = percent_change_lines(recs, ["Ohio"]).series[0]
    assert trace.x == (2015, 2016)
    assert trace.y == (None, 100.0)


def test_scatter_drops_unjoined_years(hpi, inflation):
    chart = hpi_vs_inflation_scatter(hpi, inflation, ["Texas"])
    trace = chart.series[0]
    assert trace.x == (2.0, 4.0)
    assert trace.y == (200.0, 260.0)
    assert "Year: 2014" in trace.text[0]


def test_correlation_bar_puts_undefined_last(hpi, inflation):
    chart = correlation_bar(hpi, inflation, ["Ohio", "Texas"])
    assert chart.categories == ("Texas", "Ohio")
    assert chart.series[0].y[0] == pytest.approx(1.0)
    assert chart.series[0].y[1] is None


@pytest.mark.parametrize("growth,color", [
    (150, "#800026"), (100, "#BD0026"), (30, "#FC4E2A"), (3, "#FED976"),
    (0, "#FFEDA0"), (-10, "#FFEDA0"), (None, NO_DATA_COLOR),
])
def test_growth_color(growth, color):
    assert growth_color(growth) == color


def test_choropleth(hpi, population):
    chart = hpi_growth_choropleth(hpi, population, ["California", "Ohio"])
    assert chart.growth[0] == pytest.approx(50.0)
    assert chart.growth[1] is None
    assert chart.colors == ("#FC4E2A", NO_DATA_COLOR)
    assert chart.population == (39500000, None)
    assert chart.codes == ("CA", "OH")
    assert chart.to_dict()["codes"] == ["CA", "OH"]


def test_choropleth_unknown_state_has_no_code(hpi, population):
    chart = hpi_growth_choropleth(hpi, population, ["California*", "Atlantis"])
    assert chart.codes == ("CA", None)


def test_build_dashboard(hpi, inflation, population):
    ds = Datasets(hpi=hpi, inflation=inflation, population=population)
    board = build_dashboard(ds, DashboardConfig(selected_states=("Texas",)))
    assert set(board) == {"hpi_lines", "inflation_lines", "inflation_change", "hpi_vs_inflation",
                          "correlation", "hpi_heatmap", "average_hpi", "hpi_increase", "hpi_growth_map"}
    assert [t.name for t in board["inflation_lines"].series] == ["Texas"]
    assert board["hpi_heatmap"].col_labels == ("California", "Texas")
    json.dumps({k: v.to_dict() for k, v in board.items()})


def test_build_dashboard_year_range(hpi, inflation, population):
    ds = Datasets(hpi=hpi, inflation=inflation, population=population)
    config = DashboardConfig().with_year_range((2014, 2019))
    board = build_dashboard(ds, config)
    assert board["hpi_heatmap"].row_labels == (2014, 2019)
    increase = board["hpi_increase"]
    assert "2014-2019" in increase.title
    assert increase.series[0].y == (100.0, 30.0)


def test_to_dict_replaces_nan():
    recs = [MetricRecord("Ohio", 2014, float("nan"))]
    d = hpi_heatmap(recs, ["Ohio"]).to_dict()
    assert d["rows"] == [[None]]
