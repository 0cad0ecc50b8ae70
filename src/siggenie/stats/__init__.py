"""
Statistical machinery for significance-based network inference.

Exports:
- Tree ensembles with node-purity importances
- Response permutation null and empirical p-values
- Multiple testing correction (FDR)
"""

from .ensemble import (
    ForestParams,
    EnsembleRegressor,
    fit_importances,
)
from .permutation import (
    ImportancePermutationResult,
    generate_free_permutation,
    run_importance_permutation_null,
)
from .multiple_testing import apply_fdr_correction

__all__ = [
    "ForestParams",
    "EnsembleRegressor",
    "fit_importances",
    "ImportancePermutationResult",
    "generate_free_permutation",
    "run_importance_permutation_null",
    "apply_fdr_correction",
]
