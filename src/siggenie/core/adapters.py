"""
Adapters from supported input containers to ExpressionMatrix.

Network inference accepts expression data in several shapes: a labelled
DataFrame, a bare ndarray plus gene names, an already-built ExpressionMatrix,
or a multi-assay mapping (e.g. ``{"counts": ..., "normalized": ...}``).
``as_expression_matrix`` normalizes each of them to the core's single
genes × samples contract.

Examples:
    >>> import pandas as pd
    >>> from siggenie.core.adapters import as_expression_matrix
    >>> df = pd.DataFrame([[1.0, 2.0], [3.0, 5.0]], index=["G1", "G2"], columns=["S1", "S2"])
    >>> as_expression_matrix(df).n_features
    2
"""

from __future__ import annotations

import warnings
from collections.abc import Mapping
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from siggenie.core.expression import ExpressionMatrix

__all__ = ['as_expression_matrix', 'check_expression_values']

_MATRIX_SHAPE_MESSAGE = (
    "Expression data must be a two-dimensional matrix where each row corresponds "
    "to a gene and each column corresponds to a condition/sample/cell."
)


def _from_matrix(obj: ExpressionMatrix) -> ExpressionMatrix:
    if all(isinstance(g, str) for g in obj.feature_ids):
        return obj
    return ExpressionMatrix(
        data=obj.data,
        feature_ids=pd.Index([str(g) for g in obj.feature_ids]),
        sample_ids=obj.sample_ids,
        sample_metadata=obj.sample_metadata,
    )


def _from_frame(obj: pd.DataFrame) -> ExpressionMatrix:
    non_numeric = [
        str(col) for col, dtype in obj.dtypes.items()
        if not pd.api.types.is_numeric_dtype(dtype) or pd.api.types.is_bool_dtype(dtype)
    ]
    if non_numeric:
        raise ValueError(
            f"{_MATRIX_SHAPE_MESSAGE} Non-numeric sample columns: {', '.join(non_numeric[:5])}"
            + (" ..." if len(non_numeric) > 5 else "")
        )
    if obj.index.hasnans:
        raise ValueError("Expression matrix must contain the names of the genes as row labels.")

    return ExpressionMatrix(
        data=obj.to_numpy(dtype=float),
        feature_ids=pd.Index([str(g) for g in obj.index]),
        sample_ids=pd.Index(obj.columns),
    )


def _from_array(obj: np.ndarray, gene_ids, sample_ids) -> ExpressionMatrix:
    if obj.ndim != 2:
        raise ValueError(f"{_MATRIX_SHAPE_MESSAGE} Got array of shape {obj.shape}.")
    if gene_ids is None:
        raise ValueError("Expression matrix must contain the names of the genes (pass gene_ids).")
    if sample_ids is None:
        sample_ids = [f"S{i + 1}" for i in range(obj.shape[1])]

    return ExpressionMatrix(
        data=obj,
        feature_ids=pd.Index([str(g) for g in gene_ids]),
        sample_ids=pd.Index(sample_ids),
    )


def as_expression_matrix(
    obj,
    gene_ids: Optional[Sequence[str]] = None,
    sample_ids: Optional[Sequence[str]] = None,
) -> ExpressionMatrix:
    """
    Normalize an expression container to ExpressionMatrix.

    Args:
        obj: ExpressionMatrix, DataFrame (genes × samples), ndarray, or a
            mapping of assay name to one of those
        gene_ids: Gene identifiers, required for ndarray input
        sample_ids: Sample identifiers for ndarray input (default S1..Sn)

    Returns:
        ExpressionMatrix with string gene identifiers

    Raises:
        TypeError: If the container type is not supported
        ValueError: If the data cannot be interpreted as a labelled matrix
    """
    if isinstance(obj, ExpressionMatrix):
        return _from_matrix(obj)
    if isinstance(obj, pd.DataFrame):
        return _from_frame(obj)
    if isinstance(obj, np.ndarray):
        return _from_array(obj, gene_ids, sample_ids)
    if isinstance(obj, Mapping):
        if len(obj) == 0:
            raise ValueError("Assay mapping is empty; no expression matrix to analyze.")
        first_name = next(iter(obj))
        if len(obj) > 1:
            warnings.warn(
                f"More than 1 assay is available ({', '.join(map(str, obj))}). "
                f"Only using the first one ('{first_name}').",
                UserWarning,
            )
        return as_expression_matrix(obj[first_name], gene_ids=gene_ids, sample_ids=sample_ids)

    raise TypeError(f"{_MATRIX_SHAPE_MESSAGE} Got unsupported type {type(obj).__name__}.")


def check_expression_values(matrix: ExpressionMatrix) -> None:
    """
    Reject matrices the tree ensembles cannot be fitted on.

    Raises:
        ValueError: If the matrix is empty, has fewer than 2 samples, or
            contains missing or infinite values
    """
    if matrix.n_features == 0:
        raise ValueError("Expression matrix contains no genes.")
    if matrix.n_samples < 2:
        raise ValueError(
            f"Expression matrix needs at least 2 samples, got {matrix.n_samples}."
        )

    n_nan = int(np.isnan(matrix.data).sum())
    if n_nan:
        raise ValueError(
            f"Expression matrix contains {n_nan:,} missing (NaN) values. "
            "Impute or filter them before network inference."
        )
    n_inf = int(np.isinf(matrix.data).sum())
    if n_inf:
        raise ValueError(
            f"Expression matrix contains {n_inf} infinite values. "
            "Please clean data before network inference."
        )
