"""Unit tests for gather_pairs."""

import pandas as pd
import pytest

from tidydraws.errors import AmbiguousDrawsError, MissingColumnsError, UnsupportedSpecError
from tidydraws.reshape.gather import gather_draws
from tidydraws.reshape.pairs import gather_pairs


@pytest.fixture
def long_vars(draws):
    """mu and sigma stacked into .variable/.value."""
    return gather_draws(draws, "mu", "sigma")


def pair_set(frame: pd.DataFrame) -> set[tuple]:
    return set(frame[[".row", ".col"]].drop_duplicates().itertuples(index=False, name=None))


class TestGatherPairs:
    """Tests for pair selection and value matching."""

    def test_lower_only(self, long_vars):
        pairs = gather_pairs(long_vars, ".variable", ".value")
        assert list(pairs.columns) == [".chain", ".iteration", ".draw", ".row", ".col", ".x", ".y"]
        assert pair_set(pairs) == {("sigma", "mu")}
        assert len(pairs) == 10

    def test_values_within_draw(self, draws, long_vars):
        pairs = gather_pairs(long_vars, ".variable", ".value").set_index(".draw")
        expected = draws.set_index(".draw")
        assert pairs[".x"].tolist() == expected.loc[pairs.index, "mu"].tolist()
        assert pairs[".y"].tolist() == expected.loc[pairs.index, "sigma"].tolist()

    @pytest.mark.parametrize(
        "triangle, expected",
        [
            ("upper only", {("mu", "sigma")}),
            ("both only", {("mu", "sigma"), ("sigma", "mu")}),
            ("lower", {("mu", "mu"), ("sigma", "mu"), ("sigma", "sigma")}),
            ("upper", {("mu", "mu"), ("mu", "sigma"), ("sigma", "sigma")}),
            ("both", {("mu", "mu"), ("mu", "sigma"), ("sigma", "mu"), ("sigma", "sigma")}),
        ],
    )
    def test_triangles(self, long_vars, triangle, expected):
        assert pair_set(gather_pairs(long_vars, ".variable", ".value", triangle=triangle)) == expected

    def test_diagonal_pairs_value_with_itself(self, long_vars):
        pairs = gather_pairs(long_vars, ".variable", ".value", triangle="lower")
        diagonal = pairs[pairs[".row"] == pairs[".col"]]
        assert (diagonal[".x"] == diagonal[".y"]).all()

    def test_categorical_level_order(self, long_vars):
        data = long_vars.assign(
            **{".variable": pd.Categorical(long_vars[".variable"], categories=["sigma", "mu"])}
        )
        pairs = gather_pairs(data, ".variable", ".value")
        assert pair_set(pairs) == {("mu", "sigma")}

    def test_custom_column_names(self, long_vars):
        pairs = gather_pairs(long_vars, ".variable", ".value", row="r", col="c", x="vx", y="vy")
        assert list(pairs.columns[-4:]) == ["r", "c", "vx", "vy"]

    def test_matches_on_other_dimensions(self, draws):
        """Pairs of levels of j stay within the same i."""
        long = gather_draws(draws, "b[i,j]")
        pairs = gather_pairs(long.drop(columns=".variable"), "j", ".value")
        assert list(pairs.columns) == [".chain", ".iteration", ".draw", "i", ".row", ".col", ".x", ".y"]
        assert len(pairs) == 10 * 3
        first = pairs[(pairs[".draw"] == 1) & (pairs["i"] == 2)].iloc[0]
        row = draws[draws[".draw"] == 1].iloc[0]
        assert first[".x"] == row["b[2,1]"]
        assert first[".y"] == row["b[2,2]"]


class TestGatherPairsErrors:
    def test_unknown_triangle(self, long_vars):
        with pytest.raises(UnsupportedSpecError, match="diagonal"):
            gather_pairs(long_vars, ".variable", ".value", triangle="diagonal")

    def test_missing_key(self, long_vars):
        with pytest.raises(MissingColumnsError) as exc_info:
            gather_pairs(long_vars, "term", ".value")
        assert exc_info.value.missing == ["term"]

    def test_nothing_to_match_on(self, long_vars):
        with pytest.raises(MissingColumnsError):
            gather_pairs(long_vars[[".variable", ".value"]], ".variable", ".value")

    def test_repeated_level_rows(self, long_vars):
        data = pd.concat([long_vars, long_vars.iloc[[0]]], ignore_index=True)
        with pytest.raises(AmbiguousDrawsError):
            gather_pairs(data, ".variable", ".value")
