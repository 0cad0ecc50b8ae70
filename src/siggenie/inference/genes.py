"""
Resolution of regulator and target subsets against the gene universe.

A subset may be given as gene identifiers or as 1-based row indices into the
expression matrix. Resolution validates it, reports identifiers that are not
in the matrix, and returns the subset as identifiers in canonical
(lexicographic) order.
"""

from __future__ import annotations

import numbers
import warnings
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from siggenie.inference.params import InferenceConfigError

__all__ = ['resolve_gene_subset']


def _as_entries(subset, role: str) -> list:
    if isinstance(subset, str):
        return [subset]
    if isinstance(subset, (pd.Index, pd.Series, np.ndarray)):
        if getattr(subset, "ndim", 1) != 1:
            raise InferenceConfigError(
                f"Parameter '{role}' must be a vector (of indices or gene names)."
            )
        return subset.tolist()
    if isinstance(subset, (list, tuple)):
        return list(subset)
    raise InferenceConfigError(
        f"Parameter '{role}' must be a vector (of indices or gene names), "
        f"got {type(subset).__name__}."
    )


def resolve_gene_subset(
    subset: Optional[Sequence],
    gene_ids: pd.Index,
    role: str,
    min_size: int = 1,
) -> list[str]:
    """
    Resolve a regulator/target subset to sorted gene identifiers.

    Args:
        subset: None (all genes), gene identifiers, or 1-based indices.
        gene_ids: Gene universe, in matrix row order.
        role: Parameter name used in messages ("regulators" or "targets").
        min_size: Minimum number of genes required, both as given and after
            resolution.

    Returns:
        Sorted list of gene identifiers.

    Raises:
        InferenceConfigError: Empty or too small subset, duplicated entries,
            indices out of range, mixed identifier/index entries, or no
            identifier present in the matrix.

    Warns:
        UserWarning: If only some identifiers are present; the intersection
            is used.

    Examples:
        >>> genes = pd.Index(["G3", "G1", "G2"])
        >>> resolve_gene_subset([1, 2], genes, "regulators", min_size=2)
        ['G1', 'G3']
    """
    universe = [str(g) for g in gene_ids]

    if subset is None:
        resolved = universe
    else:
        entries = _as_entries(subset, role)

        if len(entries) < min_size:
            if min_size == 1:
                raise InferenceConfigError(f"Parameter '{role}' must not be empty.")
            raise InferenceConfigError(
                f"Provide at least {min_size} potential {role} (got {len(entries)})."
            )

        is_number = [isinstance(e, numbers.Real) and not isinstance(e, bool) for e in entries]
        is_name = [isinstance(e, str) for e in entries]

        if all(is_number):
            # whole-valued floats, e.g. np.array([1.0, 2.0]), count as indices
            if not all(float(e).is_integer() for e in entries):
                raise InferenceConfigError(
                    f"The indexes in '{role}' must be whole numbers."
                )
            indices = [int(e) for e in entries]
            if max(indices) > len(universe):
                raise InferenceConfigError(
                    f"At least one index in '{role}' exceeds the number of genes ({len(universe)})."
                )
            if min(indices) < 1:
                raise InferenceConfigError(f"The indexes in '{role}' should be >= 1.")
            if len(set(indices)) < len(indices):
                raise InferenceConfigError(
                    f"Please, provide each {role[:-1]} (index) only once."
                )
            resolved = [universe[i - 1] for i in indices]
        elif all(is_name):
            if len(set(entries)) < len(entries):
                duplicated = sorted({e for e in entries if entries.count(e) > 1})
                raise InferenceConfigError(
                    f"Please, provide each {role[:-1]} (name/ID) only once. "
                    f"Duplicated: {', '.join(duplicated)}"
                )
            present = set(universe)
            resolved = [e for e in entries if e in present]
            if not resolved:
                raise InferenceConfigError(
                    f"None of the genes in '{role}' are in the expression matrix."
                )
            if len(resolved) < len(entries):
                missing = [e for e in entries if e not in present]
                warnings.warn(
                    f"Only {len(resolved)} out of {len(entries)} {role} (IDs/names) are in "
                    f"the expression matrix. Missing: {', '.join(missing[:10])}"
                    + (" ..." if len(missing) > 10 else ""),
                    UserWarning,
                )
        else:
            raise InferenceConfigError(
                f"Parameter '{role}' must contain either only gene names or only "
                f"1-based integer indices."
            )

    if len(resolved) < min_size:
        raise InferenceConfigError(
            f"Provide at least {min_size} potential {role} present in the expression matrix "
            f"(got {len(resolved)})."
        )

    return sorted(resolved)
