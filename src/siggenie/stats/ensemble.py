"""
Randomized regression-tree ensembles with node-purity importances.

Each tree is a scikit-learn ``DecisionTreeRegressor`` grown to full depth on a
row subsample, offering ``mtry`` randomly chosen predictors as split
candidates at every node. The importance of a predictor is the total decrease
of the residual sum of squares (RSS) produced by splits on that predictor,
averaged over the trees ("increase in node purity"). Unlike
``RandomForestRegressor.feature_importances_`` the scores are not normalized
to sum to one, so importances from fits on different responses stay on the
same scale and can be compared directly by the permutation null.

Subsampling:
    With ``replace=False`` (the default) each tree sees ceil(0.632 * n)
    distinct rows; with ``replace=True`` it sees a bootstrap sample of n rows.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from sklearn.tree import DecisionTreeRegressor

__all__ = ['ForestParams', 'EnsembleRegressor', 'fit_importances']

_MAX_TREE_SEED = np.iinfo(np.int32).max


@dataclass(frozen=True)
class ForestParams:
    """Tree-ensemble settings.

    Attributes:
        n_trees: Number of trees in the ensemble.
        mtry: Number of predictors sampled as split candidates at each node.
            Clamped to the number of predictor columns at fit time.
        min_leaf_size: Minimum samples per leaf (1 grows fully developed trees).
        replace: Draw each tree's rows with replacement.
        sample_fraction: Fraction of rows per tree when ``replace`` is False.
    """

    n_trees: int = 1000
    mtry: int = 1
    min_leaf_size: int = 1
    replace: bool = False
    sample_fraction: float = 0.632

    def __post_init__(self):
        if self.n_trees < 1:
            raise ValueError(f"n_trees must be >= 1, got {self.n_trees}")
        if self.mtry < 1:
            raise ValueError(f"mtry must be >= 1, got {self.mtry}")
        if self.min_leaf_size < 1:
            raise ValueError(f"min_leaf_size must be >= 1, got {self.min_leaf_size}")
        if not (0 < self.sample_fraction <= 1):
            raise ValueError(f"sample_fraction must be in (0, 1], got {self.sample_fraction}")

    def subsample_size(self, n_samples: int) -> int:
        """Rows drawn for each tree."""
        if self.replace:
            return n_samples
        return max(1, math.ceil(self.sample_fraction * n_samples))


class EnsembleRegressor:
    """
    Forest of randomized regression trees exposing node-purity importances.

    Args:
        params: Forest settings.
        random_state: Seed, ``SeedSequence`` or ``Generator``. Every random
            draw (row subsamples and per-tree split seeds) comes from the
            single generator built from it.

    Attributes:
        importances_: Mean RSS decrease per predictor, shape (n_predictors,).
        n_features_in_: Number of predictor columns seen during fit.
        mtry_: Split-candidate count actually used (after clamping).

    Examples:
        >>> rng = np.random.default_rng(0)
        >>> X = rng.standard_normal((30, 4))
        >>> y = 3 * X[:, 0] + rng.standard_normal(30) * 0.1
        >>> model = EnsembleRegressor(ForestParams(n_trees=50, mtry=2), random_state=1)
        >>> int(np.argmax(model.fit(X, y).importances_))
        0
    """

    def __init__(
        self,
        params: ForestParams,
        random_state: int | np.random.SeedSequence | np.random.Generator | None = None,
    ):
        self.params = params
        self.random_state = random_state

    def fit(self, X: NDArray[np.float64], y: NDArray[np.float64]) -> EnsembleRegressor:
        X = np.asarray(X, dtype=float)
        y = np.asarray(y, dtype=float).ravel()
        if X.ndim != 2:
            raise ValueError(f"X must be 2D (samples × predictors), got shape {X.shape}")
        if X.shape[0] != y.shape[0]:
            raise ValueError(
                f"X rows ({X.shape[0]}) must match y length ({y.shape[0]})"
            )
        if X.shape[1] == 0:
            raise ValueError("X must contain at least one predictor column")

        rng = np.random.default_rng(self.random_state)
        n_samples, n_predictors = X.shape
        mtry = min(self.params.mtry, n_predictors)
        size = self.params.subsample_size(n_samples)

        importances = np.zeros(n_predictors, dtype=float)
        for _ in range(self.params.n_trees):
            rows = rng.choice(n_samples, size=size, replace=self.params.replace)
            tree = DecisionTreeRegressor(
                criterion="squared_error",
                max_features=mtry,
                min_samples_leaf=self.params.min_leaf_size,
                random_state=int(rng.integers(_MAX_TREE_SEED)),
            )
            tree.fit(X[rows], y[rows])
            # normalize=False yields the RSS decrease divided by the root size
            importances += tree.tree_.compute_feature_importances(normalize=False) * size

        self.importances_ = importances / self.params.n_trees
        self.n_features_in_ = n_predictors
        self.mtry_ = mtry
        return self


def fit_importances(
    X: NDArray[np.float64],
    y: NDArray[np.float64],
    params: ForestParams,
    seed: int | np.random.SeedSequence | np.random.Generator | None = None,
) -> NDArray[np.float64]:
    """Fit one ensemble and return its importance vector."""
    return EnsembleRegressor(params, random_state=seed).fit(X, y).importances_
