"""
Per-target inference: one target gene against its candidate regulators.

For target t:
    1. usable regulators = regulators \\ {t} (no self-regulation)
    2. mtry from the k policy and the usable-regulator count
    3. X = regulator profiles (samples × usable regulators),
       y = target profile / sample standard deviation of the target
    4. permutation null over the ensemble importances -> p-values
    5. Benjamini-Hochberg q-values within this target's regulators

Targets share no mutable state, so they can be run in any order or in
parallel.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from siggenie.inference.params import (
    InferenceConfigError,
    InferenceParams,
    TargetInferenceError,
    resolve_mtry,
)
from siggenie.stats.ensemble import ForestParams
from siggenie.stats.multiple_testing import apply_fdr_correction
from siggenie.stats.permutation import run_importance_permutation_null

__all__ = ['TargetResult', 'infer_target', 'normalize_response']


@dataclass
class TargetResult:
    """Inference output for one target gene.

    Attributes:
        target: Target gene identifier.
        mtry: Split-candidate count used for this target.
        p_values: Permutation p-value per usable regulator.
        fdr: Benjamini-Hochberg q-value per usable regulator.
        importances: Observed node-purity importance per usable regulator.
    """

    target: str
    mtry: int
    p_values: pd.Series
    fdr: pd.Series
    importances: pd.Series

    @property
    def regulators(self) -> list[str]:
        return self.p_values.index.tolist()


def normalize_response(y: np.ndarray, target: str) -> np.ndarray:
    """Scale a target profile to unit sample standard deviation."""
    sd = float(np.std(y, ddof=1)) if y.size > 1 else float("nan")
    if not np.isfinite(sd) or sd == 0.0:
        raise TargetInferenceError(
            f"Target '{target}' has zero or undefined expression variance "
            f"(sd={sd}); its response cannot be normalized."
        )
    return y / sd


def infer_target(
    expression: pd.DataFrame,
    target: str,
    regulators: Sequence[str],
    params: InferenceParams,
    seed: int | np.random.SeedSequence | None = None,
    n_jobs: int = 1,
) -> TargetResult:
    """
    Significance of every candidate regulator of one target gene.

    Args:
        expression: Samples × genes DataFrame (read only).
        target: Target gene identifier (a column of expression).
        regulators: Candidate regulator identifiers (sorted).
        params: Validated run parameters.
        seed: Seed for this target's reference and permuted fits.
        n_jobs: Workers for this target's permutation fits.

    Returns:
        TargetResult indexed by the usable regulators.

    Raises:
        InferenceConfigError: If no usable regulator remains for the target.
        TargetInferenceError: If the target's response has zero variance.
    """
    usable = [r for r in regulators if r != target]
    if not usable:
        raise InferenceConfigError(
            f"No usable regulator left for target '{target}' once it is excluded "
            f"from the regulator set."
        )
    mtry = resolve_mtry(params.k, len(usable))

    X = expression.loc[:, usable].to_numpy(dtype=float)
    y = normalize_response(expression[target].to_numpy(dtype=float), target)

    null = run_importance_permutation_null(
        X,
        y,
        predictor_ids=usable,
        forest_params=ForestParams(n_trees=params.n_trees, mtry=mtry),
        n_permutations=params.n_permutations,
        seed=seed,
        n_jobs=n_jobs,
    )
    fdr = apply_fdr_correction(null.p_values)

    return TargetResult(
        target=target,
        mtry=mtry,
        p_values=null.p_values,
        fdr=fdr,
        importances=null.observed_importance,
    )
