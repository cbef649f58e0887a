"""Unit tests for point_interval and its shortcuts.

Tests cover:
- Point and interval values per group
- Several widths and several columns
- Default column selection
- HDI and mode via ArviZ
- Invalid options
"""

import arviz as az
import numpy as np
import pandas as pd
import pytest

from tidydraws.errors import MissingColumnsError, UnsupportedSpecError
from tidydraws.reshape.gather import gather_draws
from tidydraws.reshape.spread import spread_draws
from tidydraws.summary.point_interval import (
    mean_hdi,
    mean_qi,
    median_qi,
    mode_hdi,
    mode_qi,
    point_interval,
)

SUMMARY_COLUMNS = [".width", ".point", ".interval"]


class TestPointInterval:
    """Tests for grouped summaries."""

    def test_grouped_median_qi(self, draws):
        long = spread_draws(draws, "a[i]")
        result = median_qi(long, "a", by="i")
        assert list(result.columns) == ["i", "a", ".lower", ".upper"] + SUMMARY_COLUMNS
        assert result["i"].tolist() == [1, 2, 3]

        values = draws["a[2]"].to_numpy()
        row = result[result["i"] == 2].iloc[0]
        assert row["a"] == pytest.approx(np.median(values))
        assert row[".lower"] == pytest.approx(np.quantile(values, 0.025))
        assert row[".upper"] == pytest.approx(np.quantile(values, 0.975))
        assert row[".point"] == "median"
        assert row[".interval"] == "qi"

    def test_several_widths(self, draws):
        long = spread_draws(draws, "a[i]")
        result = median_qi(long, "a", by="i", width=[0.5, 0.9])
        assert len(result) == 6
        assert result[".width"].tolist() == [0.5] * 3 + [0.9] * 3
        narrow = result[result[".width"] == 0.5].reset_index(drop=True)
        wide = result[result[".width"] == 0.9].reset_index(drop=True)
        assert (wide[".lower"] <= narrow[".lower"]).all()
        assert (wide[".upper"] >= narrow[".upper"]).all()

    def test_point_inside_interval(self, draws):
        long = spread_draws(draws, "b[i,j]")
        result = mean_qi(long, "b", by=["i", "j"], width=0.8)
        assert len(result) == 6
        assert ((result[".lower"] <= result["b"]) & (result["b"] <= result[".upper"])).all()

    def test_several_columns(self, draws):
        long = spread_draws(draws, "(a, d)[i]")
        result = point_interval(long, "a", "d", by="i")
        assert list(result.columns) == [
            "i",
            "a",
            "a.lower",
            "a.upper",
            "d",
            "d.lower",
            "d.upper",
        ] + SUMMARY_COLUMNS

    def test_without_groups(self, draws):
        result = mean_qi(draws, "mu")
        assert len(result) == 1
        assert result["mu"].item() == pytest.approx(draws["mu"].mean())

    def test_value_column_by_default(self, draws):
        long = gather_draws(draws, "c[k]")
        result = median_qi(long, by=[".variable", "k"])
        assert list(result.columns[:3]) == [".variable", "k", ".value"]
        assert len(result) == 2

    def test_numeric_columns_by_default(self, draws):
        long = spread_draws(draws, "(a, d)[i]")
        result = median_qi(long, by="i")
        assert "a.lower" in result.columns
        assert "d.upper" in result.columns
        assert ".chain" not in result.columns

    def test_shortcut_names(self):
        assert median_qi.__name__ == "median_qi"
        assert mode_hdi.__name__ == "mode_hdi"


class TestArvizSummaries:
    """Tests for the HDI and mode, which use ArviZ."""

    def test_hdi_matches_arviz(self, draws):
        values = draws["mu"].to_numpy()
        result = mean_hdi(draws, "mu", width=0.8)
        lower, upper = az.hdi(values, hdi_prob=0.8)
        assert result[".lower"].item() == pytest.approx(lower)
        assert result[".upper"].item() == pytest.approx(upper)
        assert result[".interval"].item() == "hdi"

    def test_mode_near_peak(self):
        rng = np.random.default_rng(7)
        data = pd.DataFrame({"x": rng.normal(loc=5.0, scale=1.0, size=4000)})
        result = mode_qi(data, "x")
        assert result["x"].item() == pytest.approx(5.0, abs=0.3)

    def test_mode_of_constant(self):
        data = pd.DataFrame({"x": [2.0] * 20})
        assert mode_qi(data, "x")["x"].item() == 2.0


class TestPointIntervalErrors:
    @pytest.mark.parametrize("options", [{"point": "max"}, {"interval": "eti"}])
    def test_unknown_options(self, draws, options):
        with pytest.raises(UnsupportedSpecError):
            point_interval(draws, "mu", **options)

    @pytest.mark.parametrize("width", [0.0, 1.0, 1.5, [0.5, -0.1], []])
    def test_invalid_width(self, draws, width):
        with pytest.raises(UnsupportedSpecError):
            point_interval(draws, "mu", width=width)

    def test_missing_group_column(self, draws):
        with pytest.raises(MissingColumnsError) as exc_info:
            median_qi(draws, "mu", by="i")
        assert exc_info.value.missing == ["i"]

    def test_nothing_to_summarise(self, draws):
        with pytest.raises(MissingColumnsError):
            median_qi(draws[[".chain", ".iteration", ".draw"]])
