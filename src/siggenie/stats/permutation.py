"""
Response permutation null for tree-ensemble importances.

Tests whether a predictor's node-purity importance is distinguishable from
chance by permuting the response vector and refitting the ensemble. Under
the permuted response every predictor is independent of the target, so the
importances of the permuted fits form a per-predictor null distribution.

Per-target procedure:
    1. Fit the ensemble on the observed response (reference fit)
    2. For i in 1..R: permute the response freely, refit, record importances
    3. c_p = number of permuted importances >= observed importance (ties count)
    4. p_p = (c_p + 1) / (R + 1)

The add-one correction keeps every p-value in [1/(R+1), 1].

Reproducibility:
    The seed is expanded with ``SeedSequence.spawn`` into R + 1 child
    sequences: child 0 drives the reference fit, child i drives the i-th
    permutation and its refit. Results are therefore identical for any
    ``n_jobs`` and any scheduling order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from numpy.typing import NDArray

from siggenie.stats.ensemble import ForestParams, fit_importances

__all__ = [
    'ImportancePermutationResult',
    'generate_free_permutation',
    'run_importance_permutation_null',
]

logger = logging.getLogger(__name__)


@dataclass
class ImportancePermutationResult:
    """Result of the importance permutation null for one response.

    Attributes:
        observed_importance: Importance per predictor from the reference fit.
        null_importances: Importances from permuted fits, shape (R, n_predictors).
        n_exceed: Count of permuted importances >= observed, per predictor.
        p_values: Empirical p-values (n_exceed + 1) / (R + 1), per predictor.
        n_permutations: Number of permutations R.
    """

    observed_importance: pd.Series
    null_importances: NDArray[np.float64]
    n_exceed: pd.Series
    p_values: pd.Series
    n_permutations: int

    def to_frame(self) -> pd.DataFrame:
        """Per-predictor summary table."""
        null_std = (
            self.null_importances.std(axis=0, ddof=1)
            if self.n_permutations > 1
            else np.full(len(self.observed_importance), np.nan)
        )
        return pd.DataFrame(
            {
                "importance": self.observed_importance,
                "null_mean": self.null_importances.mean(axis=0),
                "null_std": null_std,
                "n_exceed": self.n_exceed,
                "p_value": self.p_values,
            },
            index=self.observed_importance.index,
        )


def generate_free_permutation(
    values: NDArray,
    rng: np.random.Generator,
) -> NDArray:
    """
    Reassign values to samples uniformly at random.

    Args:
        values: Response vector (n_samples,).
        rng: NumPy random generator.

    Returns:
        Permuted copy of values.
    """
    return rng.permutation(values)


def _permuted_importances(
    X: NDArray[np.float64],
    y: NDArray[np.float64],
    params: ForestParams,
    seed: np.random.SeedSequence,
) -> NDArray[np.float64]:
    rng = np.random.default_rng(seed)
    y_perm = generate_free_permutation(y, rng)
    return fit_importances(X, y_perm, params, rng)


def run_importance_permutation_null(
    X: NDArray[np.float64],
    y: NDArray[np.float64],
    predictor_ids: Sequence[str],
    forest_params: ForestParams,
    n_permutations: int = 1000,
    seed: int | np.random.SeedSequence | None = None,
    n_jobs: int = 1,
) -> ImportancePermutationResult:
    """
    Empirical p-values for ensemble importances by response permutation.

    Args:
        X: Design matrix (n_samples, n_predictors). Never permuted.
        y: Response vector (n_samples,).
        predictor_ids: Identifiers for the columns of X.
        forest_params: Ensemble settings shared by all fits.
        n_permutations: Number of permuted refits R (>= 1).
        seed: Integer seed or SeedSequence for reproducibility.
        n_jobs: Parallel workers for the R + 1 fits (joblib).

    Returns:
        ImportancePermutationResult indexed by predictor_ids.

    Raises:
        ValueError: If shapes disagree or n_permutations < 1.
    """
    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float).ravel()
    predictor_ids = list(predictor_ids)

    if n_permutations < 1:
        raise ValueError(f"n_permutations must be >= 1, got {n_permutations}")
    if X.ndim != 2 or X.shape[1] != len(predictor_ids):
        raise ValueError(
            f"X columns ({X.shape[1] if X.ndim == 2 else X.shape}) must match "
            f"predictor_ids length ({len(predictor_ids)})"
        )

    if not isinstance(seed, np.random.SeedSequence):
        seed = np.random.SeedSequence(seed)
    reference_seed, *permutation_seeds = seed.spawn(n_permutations + 1)

    if n_jobs > 1:
        fits = Parallel(n_jobs=n_jobs, return_as="generator")(
            [delayed(fit_importances)(X, y, forest_params, reference_seed)]
            + [
                delayed(_permuted_importances)(X, y, forest_params, s)
                for s in permutation_seeds
            ]
        )
        observed = next(fits)
        null_fits = fits
    else:
        observed = fit_importances(X, y, forest_params, reference_seed)
        null_fits = (
            _permuted_importances(X, y, forest_params, s) for s in permutation_seeds
        )

    null = np.empty((n_permutations, X.shape[1]), dtype=float)
    for i, importances in enumerate(null_fits):
        null[i] = importances
        if (i + 1) % 100 == 0:
            logger.debug(f"Permutation {i + 1}/{n_permutations}")

    n_exceed = (null >= observed[np.newaxis, :]).sum(axis=0)
    p_values = (n_exceed + 1) / (n_permutations + 1)

    index = pd.Index(predictor_ids)
    return ImportancePermutationResult(
        observed_importance=pd.Series(observed, index=index, name="importance"),
        null_importances=null,
        n_exceed=pd.Series(n_exceed, index=index, name="n_exceed"),
        p_values=pd.Series(p_values, index=index, name="p_value"),
        n_permutations=n_permutations,
    )
