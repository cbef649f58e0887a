"""Unit tests for tidy_draws, gather_variables, get_variables and combine_chains."""

import arviz as az
import numpy as np
import pandas as pd
import pytest
import xarray as xr

from tidydraws.errors import (
    DimensionMismatchError,
    DrawsValidationError,
    MissingColumnsError,
    UnsupportedSpecError,
)
from tidydraws.reshape.tidy import combine_chains, gather_variables, get_variables, tidy_draws

IDENTITY = [".chain", ".iteration", ".draw"]


class TestTidyDrawsFromArrays:
    """Tests for mapping input."""

    def test_identity_columns(self, draws):
        """Chains are numbered from 1, iterations restart per chain, draws do not."""
        assert list(draws.columns[:3]) == IDENTITY
        assert draws[".chain"].tolist() == [1] * 5 + [2] * 5
        assert draws[".iteration"].tolist() == [1, 2, 3, 4, 5] * 2
        assert draws[".draw"].tolist() == list(range(1, 11))

    def test_columns_in_c_order(self, draws):
        """Element columns are 1-based and follow C order."""
        b_columns = [c for c in draws.columns if c.startswith("b[")]
        assert b_columns == ["b[1,1]", "b[1,2]", "b[2,1]", "b[2,2]", "b[3,1]", "b[3,2]"]
        assert "mu" in draws.columns
        assert "c[2]" in draws.columns

    def test_values(self, arrays, draws):
        """Values land in the row of their chain and iteration."""
        row = draws[(draws[".chain"] == 2) & (draws[".iteration"] == 3)].iloc[0]
        assert row["b[2,1]"] == arrays["b"][1, 2, 1, 0]
        assert row["mu"] == arrays["mu"][1, 2]

    def test_one_row_per_draw(self, draws):
        assert len(draws) == 10
        assert len(draws.columns) == 3 + 2 + 3 + 3 + 6 + 2

    def test_array_without_draw_dim_raises(self):
        with pytest.raises(DimensionMismatchError, match="mu"):
            tidy_draws({"mu": np.zeros(4)})


class TestTidyDrawsFromXarray:
    """Tests for InferenceData and Dataset input."""

    def test_inference_data_with_sample_stats(self):
        """Sample statistics are appended with a trailing `__`."""
        rng = np.random.default_rng(0)
        idata = az.from_dict(
            posterior={"mu": rng.normal(size=(2, 4)), "b": rng.normal(size=(2, 4, 2))},
            sample_stats={"lp": rng.normal(size=(2, 4))},
        )
        frame = tidy_draws(idata)
        assert list(frame.columns) == IDENTITY + ["mu", "b[0]", "b[1]", "lp__"]
        assert len(frame) == 8

    def test_sample_stats_can_be_excluded(self):
        rng = np.random.default_rng(0)
        idata = az.from_dict(
            posterior={"mu": rng.normal(size=(2, 4))},
            sample_stats={"lp": rng.normal(size=(2, 4))},
        )
        frame = tidy_draws(idata, include_sample_stats=False)
        assert "lp__" not in frame.columns

    def test_inference_data_without_posterior_raises(self):
        idata = az.from_dict(prior={"mu": np.zeros((1, 4))})
        with pytest.raises(MissingColumnsError, match="posterior"):
            tidy_draws(idata)

    def test_dataset_coordinate_labels(self):
        """String coordinates are used verbatim in column names."""
        values = np.arange(2 * 3 * 2, dtype=float).reshape(2, 3, 2)
        dataset = xr.Dataset(
            {"b": (("chain", "draw", "group"), values)},
            coords={"group": ["control", "treated"]},
        )
        frame = tidy_draws(dataset)
        assert list(frame.columns) == IDENTITY + ["b[control]", "b[treated]"]
        assert frame["b[treated]"].tolist() == [1.0, 3.0, 5.0, 7.0, 9.0, 11.0]

    def test_dataset_without_chain_raises(self):
        dataset = xr.Dataset({"mu": (("draw",), np.zeros(3))})
        with pytest.raises(MissingColumnsError, match="chain"):
            tidy_draws(dataset)


class TestTidyDrawsFromFrame:
    """Tests for DataFrame input."""

    def test_identity_columns_moved_first(self):
        frame = pd.DataFrame({"mu": [0.1, 0.2], ".draw": [1, 2], ".chain": [1, 1], ".iteration": [1, 2]})
        result = tidy_draws(frame)
        assert list(result.columns) == IDENTITY + ["mu"]

    def test_missing_identity_raises(self):
        frame = pd.DataFrame({"mu": [0.1], ".draw": [1]})
        with pytest.raises(MissingColumnsError) as exc_info:
            tidy_draws(frame)
        assert exc_info.value.missing == [".chain", ".iteration"]

    def test_repeated_draw_raises(self, draws):
        repeated = pd.concat([draws, draws.iloc[[0]]], ignore_index=True)
        with pytest.raises(DrawsValidationError):
            tidy_draws(repeated)

    def test_non_positive_identity_raises(self, draws):
        broken = draws.copy()
        broken.loc[0, ".chain"] = 0
        with pytest.raises(DrawsValidationError):
            tidy_draws(broken)

    def test_draw_number_repeated_across_chains_raises(self):
        """.draw must be unique on its own, not only with .chain."""
        frame = pd.DataFrame({".chain": [1, 2], ".iteration": [1, 1], ".draw": [1, 1], "mu": [0.1, 0.2]})
        with pytest.raises(DrawsValidationError):
            tidy_draws(frame)

    def test_non_integral_identity_raises(self):
        frame = pd.DataFrame({".chain": [1, 1], ".iteration": [1, 2], ".draw": [1.0, 2.5], "mu": [0.1, 0.2]})
        with pytest.raises(DrawsValidationError):
            tidy_draws(frame)

    def test_integral_float_identity_cast_to_int(self):
        frame = pd.DataFrame({".chain": [1.0, 1.0], ".iteration": [1.0, 2.0], ".draw": [1.0, 2.0], "mu": [0.1, 0.2]})
        result = tidy_draws(frame)
        assert (result[IDENTITY].dtypes == "int64").all()
        assert result[".draw"].tolist() == [1, 2]


class TestTidyDrawsUnsupported:
    def test_unsupported_type_raises(self):
        with pytest.raises(UnsupportedSpecError, match="list"):
            tidy_draws([1, 2, 3])


class TestGatherVariables:
    """Tests for gather_variables."""

    def test_stacks_every_variable(self, draws):
        long = gather_variables(draws)
        assert list(long.columns) == IDENTITY + [".variable", ".value"]
        assert len(long) == 10 * (len(draws.columns) - 3)

    def test_grouped_by_variable_in_column_order(self, draws):
        long = gather_variables(draws)
        assert list(pd.unique(long[".variable"]))[:3] == ["mu", "sigma", "a[1]"]
        first = long[long[".variable"] == "mu"]
        assert first[".value"].tolist() == draws["mu"].tolist()

    def test_skips_dot_columns(self, draws):
        frame = draws.assign(**{".row": 1})
        long = gather_variables(frame)
        assert ".row" not in set(long[".variable"])

    def test_no_variables_raises(self, draws):
        with pytest.raises(MissingColumnsError):
            gather_variables(draws[IDENTITY])


class TestGetVariables:
    def test_base_names_in_column_order(self, draws):
        assert get_variables(draws) == ["mu", "sigma", "a", "d", "b", "c"]

    def test_skips_dot_and_identity_columns(self, draws):
        frame = draws.assign(**{".row": 1, "lp__": 0.0})
        assert get_variables(frame) == ["mu", "sigma", "a", "d", "b", "c", "lp__"]

    def test_custom_draw_indices(self, draws):
        frame = draws.rename(columns={".draw": "draw"})
        assert "draw" not in get_variables(frame, draw_indices=[".chain", ".iteration", "draw"])


class TestCombineChains:
    """Tests for combine_chains."""

    def test_renumbers_by_chain_then_iteration(self, draws):
        shuffled = draws.sample(frac=1.0, random_state=0)
        combined = combine_chains(shuffled)
        assert list(combined.columns) == [".draw"] + list(draws.columns[3:])
        by_draw = combined.set_index(".draw")["mu"]
        expected = draws.set_index(".draw")["mu"]
        pd.testing.assert_series_equal(by_draw.sort_index(), expected, check_names=False)

    def test_long_table_keeps_one_number_per_draw(self, draws):
        long = gather_variables(draws)
        combined = combine_chains(long)
        assert combined[".draw"].nunique() == 10
        assert combined.groupby(".draw").size().eq(len(draws.columns) - 3).all()

    def test_custom_into(self, draws):
        combined = combine_chains(draws.drop(columns=".draw"), into="sample")
        assert combined.columns[0] == "sample"
        assert combined["sample"].tolist() == list(range(1, 11))

    def test_missing_chain_raises(self, draws):
        with pytest.raises(MissingColumnsError) as exc_info:
            combine_chains(draws.drop(columns=".chain"))
        assert exc_info.value.missing == [".chain"]
