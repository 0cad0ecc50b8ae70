"""Tests for the randomized regression-tree ensemble."""

import numpy as np
import pytest

from siggenie.stats.ensemble import EnsembleRegressor, ForestParams, fit_importances


@pytest.fixture
def signal_data():
    rng = np.random.default_rng(42)
    X = rng.standard_normal((40, 5))
    y = 4.0 * X[:, 2] + 0.1 * rng.standard_normal(40)
    return X, y


class TestForestParams:
    """Tests for ForestParams validation and subsample sizes."""

    def test_subsample_without_replacement(self):
        params = ForestParams(n_trees=10, mtry=1)
        assert params.subsample_size(5) == 4  # ceil(0.632 * 5)
        assert params.subsample_size(100) == 64

    def test_subsample_with_replacement(self):
        assert ForestParams(replace=True).subsample_size(17) == 17

    @pytest.mark.parametrize("kwargs", [
        {"n_trees": 0},
        {"mtry": 0},
        {"min_leaf_size": 0},
        {"sample_fraction": 0.0},
        {"sample_fraction": 1.5},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ForestParams(**kwargs)


class TestEnsembleRegressor:
    """Tests for EnsembleRegressor.fit() importances."""

    def test_informative_predictor_ranks_first(self, signal_data):
        X, y = signal_data
        model = EnsembleRegressor(ForestParams(n_trees=50, mtry=2), random_state=0).fit(X, y)
        assert model.importances_.shape == (5,)
        assert int(np.argmax(model.importances_)) == 2

    def test_importances_are_rss_decrease_not_normalized(self):
        """One tree on all rows with pure leaves removes the full RSS of y."""
        rng = np.random.default_rng(3)
        X = rng.standard_normal((12, 2))
        y = rng.standard_normal(12)
        params = ForestParams(n_trees=1, mtry=2, sample_fraction=1.0)

        importances = fit_importances(X, y, params, seed=5)

        total_rss = float(((y - y.mean()) ** 2).sum())
        assert importances.sum() == pytest.approx(total_rss)
        assert importances.sum() != pytest.approx(1.0)

    def test_constant_response_has_zero_importance(self, signal_data):
        X, _ = signal_data
        y = np.full(X.shape[0], 3.0)
        importances = fit_importances(X, y, ForestParams(n_trees=5, mtry=2), seed=1)
        np.testing.assert_array_equal(importances, np.zeros(5))

    def test_same_seed_is_reproducible(self, signal_data):
        X, y = signal_data
        params = ForestParams(n_trees=20, mtry=2)
        a = fit_importances(X, y, params, seed=11)
        b = fit_importances(X, y, params, seed=11)
        np.testing.assert_array_equal(a, b)

    def test_different_seeds_differ(self, signal_data):
        X, y = signal_data
        params = ForestParams(n_trees=20, mtry=2)
        a = fit_importances(X, y, params, seed=11)
        b = fit_importances(X, y, params, seed=12)
        assert not np.array_equal(a, b)

    def test_mtry_clamped_to_predictor_count(self, signal_data):
        X, y = signal_data
        model = EnsembleRegressor(ForestParams(n_trees=3, mtry=50), random_state=0).fit(X, y)
        assert model.mtry_ == 5

    def test_seed_sequence_accepted(self, signal_data):
        X, y = signal_data
        params = ForestParams(n_trees=5, mtry=2)
        a = fit_importances(X, y, params, seed=np.random.SeedSequence(9))
        b = fit_importances(X, y, params, seed=np.random.SeedSequence(9))
        np.testing.assert_array_equal(a, b)

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="must match y length"):
            EnsembleRegressor(ForestParams(n_trees=2)).fit(np.ones((5, 2)), np.ones(4))

    def test_no_predictors(self):
        with pytest.raises(ValueError, match="at least one predictor"):
            EnsembleRegressor(ForestParams(n_trees=2)).fit(np.ones((5, 0)), np.ones(5))
