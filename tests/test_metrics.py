import math

import pytest

from hpi_insights.data_model import MetricRecord, YearChange
from hpi_insights.join_index import JoinIndex
from hpi_insights.metrics import (endpoint_delta, filter_years, growth_percent, mean_by_state,
                                  pearson_correlation, percent_change_series, state_correlation)


def test_mean_by_state(hpi):
    assert mean_by_state(hpi, "California") == pytest.approx(500.0)
    assert mean_by_state(JoinIndex.build(hpi), "Texas*") == pytest.approx(230.0)


def test_mean_of_no_match_is_zero(hpi):
    assert mean_by_state(hpi, "Ohio") == 0
    assert mean_by_state([], "California") == 0


def test_mean_skips_nan_values():
    recs = [MetricRecord("Ohio", 2014, float("nan")), MetricRecord("Ohio", 2015, 4.0)]
    assert mean_by_state(recs, "Ohio") == 4.0


def test_endpoint_delta_scenario():
    recs = [MetricRecord("California", 2014, 400.0), MetricRecord("California", 2024, 600.0)]
    assert endpoint_delta(recs, "California", 2014, 2024) == 200


def test_endpoint_delta_antisymmetric(hpi):
    for a, b in [(2014, 2024), (2014, 2019), (2019, 2024)]:
        assert endpoint_delta(hpi, "Texas", a, b) == -endpoint_delta(hpi, "Texas", b, a)


def test_endpoint_delta_missing_endpoint_is_zero(hpi):
    assert endpoint_delta(hpi, "Texas", 2014, 2030) == 0
    assert endpoint_delta(hpi, "Ohio", 2014, 2024) == 0


def test_percent_change_scenario():
    recs = [MetricRecord("Texas", 2020, 2.0), MetricRecord("Texas", 2021, 4.0)]
    assert percent_change_series(recs, "Texas") == [YearChange(year=2021, percent_change=100.0)]


def test_percent_change_length_and_order():
    recs = [MetricRecord("Ohio", y, v) for y, v in [(2016, 3.0), (2014, 1.0), (2015, 2.0), (2017, 6.0)]]
    out = percent_change_series(recs, "Ohio")
    assert len(out) == len(recs) - 1
    assert [c.year for c in out] == [2015, 2016, 2017]
    assert [c.percent_change for c in out] == pytest.approx([100.0, 50.0, 100.0])


def test_percent_change_from_zero_is_a_gap():
    recs = [MetricRecord("Ohio", 2014, 0.0), MetricRecord("Ohio", 2015, 2.0), MetricRecord("Ohio", 2016, 1.0)]
    out = percent_change_series(recs, "Ohio")
    assert out[0].percent_change is None
    assert out[1].percent_change == pytest.approx(-50.0)


def test_percent_change_single_record_is_empty():
    assert percent_change_series([MetricRecord("Ohio", 2014, 1.0)], "Ohio") == []


def test_pearson_self_correlation():
    xs = [1.0, 3.5, 2.0, 8.0, 4.25]
    assert pearson_correlation(xs, xs) == pytest.approx(1.0)


def test_pearson_sign():
    assert pearson_correlation([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
    assert pearson_correlation([1, 2, 3], [6, 4, 2]) == pytest.approx(-1.0)


def test_pearson_degenerate_is_nan():
    assert math.isnan(pearson_correlation([1, 2, 3], [5, 5, 5]))
    assert math.isnan(pearson_correlation([0.1, 0.1, 0.1], [1, 2, 3]))
    assert math.isnan(pearson_correlation([1], [2]))
    assert math.isnan(pearson_correlation([], []))


def test_pearson_unequal_lengths():
    with pytest.raises(ValueError):
        pearson_correlation([1, 2, 3], [1, 2])


def test_state_correlation_uses_shared_years(hpi, inflation):
    h, i = JoinIndex.build(hpi), JoinIndex.build(inflation)
    assert state_correlation(h, i, "Texas") == pytest.approx(1.0)
    assert math.isnan(state_correlation(h, i, "Ohio"))


def test_growth_percent(hpi):
    assert growth_percent(hpi, "California") == pytest.approx(50.0)
    assert growth_percent(hpi, "Texas") == pytest.approx(30.0)
    assert growth_percent([MetricRecord("Ohio", 2014, 1.0)], "Ohio") is None
    assert growth_percent([MetricRecord("Ohio", 2014, 0.0), MetricRecord("Ohio", 2015, 1.0)], "Ohio") is None


def test_filter_years(hpi):
    assert filter_years(hpi, None) == tuple(hpi)
    assert {r.year for r in filter_years(hpi, (2015, 2024))} == {2019, 2024}
