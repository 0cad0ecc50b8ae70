"""
Regulatory network inference with permutation significance.

Exports:
- infer_network: entry point returning regulator × target p-value / FDR matrices
- infer_target: inference for a single target gene
- InferenceParams, resolve_mtry: run parameters and the mtry policy
- InferenceConfigError, TargetInferenceError: fatal vs. per-target failures
"""

from .params import (
    InferenceConfigError,
    TargetInferenceError,
    InferenceParams,
    resolve_mtry,
    validate_k,
)
from .genes import resolve_gene_subset
from .target import TargetResult, infer_target, normalize_response
from .network import NetworkResult, infer_network

__all__ = [
    "InferenceConfigError",
    "TargetInferenceError",
    "InferenceParams",
    "resolve_mtry",
    "validate_k",
    "resolve_gene_subset",
    "TargetResult",
    "infer_target",
    "normalize_response",
    "NetworkResult",
    "infer_network",
]
