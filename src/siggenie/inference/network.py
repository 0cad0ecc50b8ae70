"""
Network-level entry point: significance of every regulator -> target link.

``infer_network`` validates its inputs once, runs the per-target inference
for every requested target, and gathers the per-target vectors into
regulator × target matrices of p-values, FDR q-values and importances.

Parallel plan:
    The worker pool is created for the call and torn down when it returns.
    With n_jobs > 1 and several targets, targets are distributed over the
    pool and each target runs its permutations sequentially. With a single
    target, that target's permutation fits are distributed instead.

Reproducibility:
    The root seed is spawned into one SeedSequence per target (in sorted
    target order), and each target spawns one child per fit. Results are
    bit-identical for a fixed seed regardless of n_jobs.

Examples:
    >>> import numpy as np
    >>> import pandas as pd
    >>> from siggenie import infer_network
    >>> rng = np.random.default_rng(0)
    >>> expr = pd.DataFrame(
    ...     rng.integers(1, 10, size=(20, 5)).astype(float),
    ...     index=[f"Gene{i}" for i in range(1, 21)],
    ...     columns=[f"Sample{i}" for i in range(1, 6)],
    ... )
    >>> result = infer_network(expr, regulators=[f"Gene{i}" for i in range(1, 6)],
    ...                        n_trees=10, n_permutations=9, seed=123)
    >>> result.p_values.shape
    (5, 20)
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from siggenie.core.adapters import as_expression_matrix, check_expression_values
from siggenie.inference.genes import resolve_gene_subset
from siggenie.inference.params import (
    InferenceConfigError,
    InferenceParams,
    TargetInferenceError,
)
from siggenie.inference.target import TargetResult, infer_target

__all__ = ['NetworkResult', 'infer_network']

logger = logging.getLogger(__name__)


@dataclass
class NetworkResult:
    """Regulator × target significance matrices.

    Attributes:
        p_values: Permutation p-values; entry (i, j) is the p-value of the
            link from regulator i to target j.
        fdr: Benjamini-Hochberg q-values, corrected within each target column.
        importances: Observed node-purity importances.
        tested: True where a value was computed. Self-pairs and columns of
            failed targets are False.
        failed_targets: Target -> error message for targets that could not
            be processed. Their columns are NaN in every matrix.
        params: Run parameters, including the root seed entropy so that an
            unseeded run can be replayed. A non-finite fill value is stored
            as its string form ("nan", "inf") to keep the params JSON-safe.

    Iterating a NetworkResult yields ``(p_values, fdr)``.
    """

    p_values: pd.DataFrame
    fdr: pd.DataFrame
    importances: pd.DataFrame
    tested: pd.DataFrame
    failed_targets: dict[str, str] = field(default_factory=dict)
    params: dict = field(default_factory=dict)

    def __iter__(self) -> Iterator[pd.DataFrame]:
        yield self.p_values
        yield self.fdr

    @property
    def regulators(self) -> list[str]:
        return self.p_values.index.tolist()

    @property
    def targets(self) -> list[str]:
        return self.p_values.columns.tolist()

    def to_dict(self) -> dict:
        """Serialize the run summary to a JSON-compatible dict."""
        return {
            "n_regulators": len(self.regulators),
            "n_targets": len(self.targets),
            "n_tested_links": int(self.tested.to_numpy().sum()),
            "failed_targets": dict(self.failed_targets),
            "params": dict(self.params),
        }


def _run_target(
    expression: pd.DataFrame,
    target: str,
    regulators: Sequence[str],
    params: InferenceParams,
    seed: np.random.SeedSequence,
    n_jobs: int,
) -> tuple[str, Optional[TargetResult], Optional[str]]:
    try:
        return target, infer_target(expression, target, regulators, params, seed, n_jobs), None
    except TargetInferenceError as e:
        return target, None, str(e)


def _load_expression(expr, gene_ids):
    try:
        matrix = as_expression_matrix(expr, gene_ids=gene_ids)
        check_expression_values(matrix)
    except InferenceConfigError:
        raise
    except (TypeError, ValueError) as e:
        raise InferenceConfigError(f"Invalid expression matrix: {e}") from e
    return matrix


def infer_network(
    expr,
    regulators: Optional[Sequence] = None,
    targets: Optional[Sequence] = None,
    k: str | int = "sqrt",
    n_trees: int = 1000,
    n_jobs: int = 1,
    n_permutations: int = 1000,
    verbose: bool = False,
    seed: Optional[int] = None,
    fill_value: float = 0.0,
    gene_ids: Optional[Sequence[str]] = None,
) -> NetworkResult:
    """
    Infer regulator -> target links with permutation p-values and FDR.

    Args:
        expr: Expression data (genes × samples): DataFrame, ExpressionMatrix,
            ndarray (with gene_ids), or a mapping of assays (first is used).
        regulators: Candidate regulators as gene names or 1-based indices.
            At least 2. None uses every gene.
        targets: Target genes as gene names or 1-based indices. None uses
            every gene.
        k: Candidate regulators per tree node: "sqrt", "all" or an integer.
        n_trees: Trees per ensemble.
        n_jobs: Parallel workers.
        n_permutations: Response permutations per target.
        verbose: Log progress at INFO level.
        seed: Root seed for reproducible results.
        fill_value: Value of entries that are never computed (self-pairs).
        gene_ids: Gene identifiers when expr is a bare ndarray.

    Returns:
        NetworkResult with regulator × target matrices, rows and columns in
        sorted identifier order.

    Raises:
        InferenceConfigError: On any invalid input, before fitting starts.
    """
    params = InferenceParams(
        k=k,
        n_trees=n_trees,
        n_permutations=n_permutations,
        n_jobs=n_jobs,
        seed=seed,
        verbose=verbose,
    )
    if not isinstance(fill_value, numbers.Real) or isinstance(fill_value, bool):
        raise InferenceConfigError(
            f"Parameter fill_value should be a real number, got {fill_value!r}."
        )

    matrix = _load_expression(expr, gene_ids)
    regulator_names = resolve_gene_subset(regulators, matrix.feature_ids, "regulators", min_size=2)
    target_names = resolve_gene_subset(targets, matrix.feature_ids, "targets", min_size=1)

    log = logger.info if params.verbose else logger.debug
    log(
        f"K: {params.k}, number of trees: {params.n_trees}, "
        f"permutations: {params.n_permutations}, "
        f"{len(regulator_names)} regulators x {len(target_names)} targets"
    )

    root_seed = np.random.SeedSequence(params.seed)
    target_seeds = root_seed.spawn(len(target_names))
    expression = matrix.samples_by_genes()

    n_targets = len(target_names)
    if params.n_jobs > 1 and n_targets > 1:
        log(f"Using {params.n_jobs} workers over targets.")
        gathered = Parallel(n_jobs=params.n_jobs, return_as="generator")(
            delayed(_run_target)(expression, t, regulator_names, params, s, 1)
            for t, s in zip(target_names, target_seeds)
        )
        outcomes = []
        for i, outcome in enumerate(gathered):
            log(f"Computing gene {i + 1}/{n_targets}: {outcome[0]}")
            outcomes.append(outcome)
    else:
        if params.n_jobs > 1:
            log(f"Using {params.n_jobs} workers over permutations.")
        else:
            log("Using 1 core.")
        outcomes = []
        for i, (t, s) in enumerate(zip(target_names, target_seeds)):
            log(f"Computing gene {i + 1}/{n_targets}: {t}")
            outcomes.append(_run_target(expression, t, regulator_names, params, s, params.n_jobs))

    rows = pd.Index(regulator_names, name="regulator")
    cols = pd.Index(target_names, name="target")
    p_matrix = pd.DataFrame(float(fill_value), index=rows, columns=cols)
    fdr_matrix = p_matrix.copy()
    importance_matrix = p_matrix.copy()
    tested = pd.DataFrame(False, index=rows, columns=cols)

    failed: dict[str, str] = {}
    mtry: dict[str, int] = {}
    for target, result, error in outcomes:
        if result is None:
            logger.warning(f"Skipping target {target}: {error}")
            failed[target] = error
            p_matrix[target] = np.nan
            fdr_matrix[target] = np.nan
            importance_matrix[target] = np.nan
            continue
        regs = result.regulators
        p_matrix.loc[regs, target] = result.p_values.to_numpy()
        fdr_matrix.loc[regs, target] = result.fdr.to_numpy()
        importance_matrix.loc[regs, target] = result.importances.to_numpy()
        tested.loc[regs, target] = True
        mtry[target] = result.mtry

    if failed:
        logger.warning(f"{len(failed)}/{len(target_names)} targets failed: {', '.join(failed)}")

    run_params = params.to_dict()
    run_params.update(
        seed_entropy=int(root_seed.entropy),
        fill_value=float(fill_value) if np.isfinite(fill_value) else str(float(fill_value)),
        mtry=mtry,
    )

    return NetworkResult(
        p_values=p_matrix,
        fdr=fdr_matrix,
        importances=importance_matrix,
        tested=tested,
        failed_targets=failed,
        params=run_params,
    )
