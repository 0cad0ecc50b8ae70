"""
Run parameters, their validation, and the split-candidate (mtry) policy.

All parameter checks happen once, at entry, before any ensemble is fitted.
A failed check raises InferenceConfigError naming the offending parameter.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import asdict, dataclass
from typing import Optional, Union

__all__ = [
    'InferenceConfigError',
    'TargetInferenceError',
    'InferenceParams',
    'resolve_mtry',
    'validate_k',
]

MtryPolicy = Union[str, int]

_K_MESSAGE = 'Parameter k must be "sqrt", or "all", or a strictly positive integer.'


class InferenceConfigError(ValueError):
    """Fatal configuration error detected before any computation."""


class TargetInferenceError(RuntimeError):
    """Inference failed for a single target gene; other targets are unaffected."""


def _is_int(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _check_positive_int(value, name: str) -> int:
    if not _is_int(value) or value < 1:
        raise InferenceConfigError(
            f"Parameter {name} should be a strictly positive integer, got {value!r}."
        )
    return int(value)


def validate_k(k) -> MtryPolicy:
    """Return the normalized mtry policy or raise InferenceConfigError."""
    if isinstance(k, str):
        if k not in ("sqrt", "all"):
            raise InferenceConfigError(f"{_K_MESSAGE} Got {k!r}.")
        return k
    if not _is_int(k) or k < 1:
        raise InferenceConfigError(f"{_K_MESSAGE} Got {k!r}.")
    return int(k)


def resolve_mtry(k: MtryPolicy, n_regulators: int) -> int:
    """
    Number of candidate regulators offered at each tree node.

    Args:
        k: "sqrt", "all", or a positive integer.
        n_regulators: Usable regulators for the current target.

    Returns:
        "sqrt": sqrt(n) rounded half up (floor(sqrt(n) + 0.5)), at least 1.
        "all": n.
        integer: min(k, n).

    Examples:
        >>> resolve_mtry("sqrt", 9)
        3
        >>> resolve_mtry("sqrt", 2)
        1
        >>> resolve_mtry(10, 4)
        4
    """
    k = validate_k(k)
    if n_regulators < 1:
        raise InferenceConfigError(
            f"At least one usable regulator is required, got {n_regulators}."
        )
    if k == "sqrt":
        return max(1, math.floor(math.sqrt(n_regulators) + 0.5))
    if k == "all":
        return n_regulators
    return min(k, n_regulators)


@dataclass(frozen=True)
class InferenceParams:
    """Validated settings for one inference run.

    Attributes:
        k: Split-candidate policy ("sqrt", "all" or a positive integer).
        n_trees: Trees per ensemble.
        n_permutations: Response permutations per target.
        n_jobs: Parallel workers.
        seed: Root seed (non-negative integer) or None for fresh entropy.
        verbose: Log per-target progress at INFO level.
    """

    k: MtryPolicy = "sqrt"
    n_trees: int = 1000
    n_permutations: int = 1000
    n_jobs: int = 1
    seed: Optional[int] = None
    verbose: bool = False

    def __post_init__(self):
        object.__setattr__(self, "k", validate_k(self.k))
        object.__setattr__(self, "n_trees", _check_positive_int(self.n_trees, "n_trees"))
        object.__setattr__(
            self, "n_permutations", _check_positive_int(self.n_permutations, "n_permutations")
        )
        object.__setattr__(self, "n_jobs", _check_positive_int(self.n_jobs, "n_jobs"))
        if self.seed is not None:
            if not _is_int(self.seed) or self.seed < 0:
                raise InferenceConfigError(
                    f"Parameter seed should be a non-negative integer or None, got {self.seed!r}."
                )
            object.__setattr__(self, "seed", int(self.seed))
        if not isinstance(self.verbose, bool):
            raise InferenceConfigError(
                f"Parameter verbose should be a boolean, got {self.verbose!r}."
            )

    def to_dict(self) -> dict:
        return asdict(self)
