"""
Core data structure for gene expression matrices.

ExpressionMatrix couples a numerical genes × samples matrix with its gene and
sample labels. It is the single matrix contract consumed by the inference core:
every supported input container is normalized to it by
:mod:`siggenie.core.adapters` before any computation starts.

Biological Context:
    Expression matrices are the fundamental input for network inference:
    - Rows = genes (candidate regulators and targets)
    - Columns = samples (conditions, time points, cells)
    - Values = expression levels (counts, intensities, normalized abundances)

    Regulatory inference models one gene's profile from the profiles of other
    genes, so per-gene column access on the transposed (samples × genes)
    matrix is the dominant access pattern.

Engineering Design:
    - Immutable: Operations return new instances (functional style)
    - Type-safe: NumPy arrays for data, Pandas for labels and metadata
    - Validated: Constructor checks shape consistency and label uniqueness

Examples:
    >>> import numpy as np
    >>> import pandas as pd
    >>> from siggenie.core.expression import ExpressionMatrix
    >>>
    >>> matrix = ExpressionMatrix(
    ...     data=np.array([[1.0, 2.0, 3.0], [3.0, 1.0, 2.0]]),
    ...     feature_ids=pd.Index(["GeneA", "GeneB"]),
    ...     sample_ids=pd.Index(["S1", "S2", "S3"]),
    ... )
    >>> matrix.samples_by_genes()["GeneA"].tolist()
    [1.0, 2.0, 3.0]
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd

__all__ = ['ExpressionMatrix']


class ExpressionMatrix:
    """
    Immutable container for a labelled genes × samples expression matrix.

    Attributes:
        data: Numerical expression matrix (genes × samples)
        feature_ids: Row identifiers (gene names), unique strings
        sample_ids: Column identifiers (samples)
        sample_metadata: Optional sample annotations, indexed by sample_ids

    Shape Invariants:
        - data.shape[0] == len(feature_ids)
        - data.shape[1] == len(sample_ids)
        - sample_metadata.index equals sample_ids
        - feature_ids has no missing and no duplicated values
    """

    def __init__(
        self,
        data: np.ndarray,
        feature_ids: pd.Index,
        sample_ids: pd.Index,
        sample_metadata: Optional[pd.DataFrame] = None,
    ):
        """
        Initialize ExpressionMatrix with validation.

        Args:
            data: Expression matrix (genes × samples), numeric
            feature_ids: Gene identifiers, one per row
            sample_ids: Sample identifiers, one per column
            sample_metadata: DataFrame with sample annotations. Must have an
                index matching sample_ids. Defaults to an empty frame.

        Raises:
            TypeError: If data or labels have the wrong container type
            ValueError: If shapes are inconsistent, data is not numeric, or
                gene identifiers are missing or duplicated
        """
        if not isinstance(data, np.ndarray):
            raise TypeError(f"data must be np.ndarray, got {type(data)}")
        if not isinstance(feature_ids, pd.Index):
            raise TypeError(f"feature_ids must be pd.Index, got {type(feature_ids)}")
        if not isinstance(sample_ids, pd.Index):
            raise TypeError(f"sample_ids must be pd.Index, got {type(sample_ids)}")
        if sample_metadata is None:
            sample_metadata = pd.DataFrame(index=sample_ids)
        if not isinstance(sample_metadata, pd.DataFrame):
            raise TypeError(f"sample_metadata must be pd.DataFrame, got {type(sample_metadata)}")

        if data.ndim != 2:
            raise ValueError(f"data must be 2D, got shape {data.shape}")
        if not (np.issubdtype(data.dtype, np.number) and not np.issubdtype(data.dtype, np.complexfloating)):
            raise ValueError(f"data must be real-valued numeric, got dtype {data.dtype}")

        n_features, n_samples = data.shape

        if len(feature_ids) != n_features:
            raise ValueError(
                f"feature_ids length ({len(feature_ids)}) must match data rows ({n_features})"
            )
        if len(sample_ids) != n_samples:
            raise ValueError(
                f"sample_ids length ({len(sample_ids)}) must match data columns ({n_samples})"
            )

        if feature_ids.hasnans:
            raise ValueError("feature_ids must not contain missing gene identifiers")
        if feature_ids.has_duplicates:
            duplicated = feature_ids[feature_ids.duplicated()].unique().tolist()
            raise ValueError(
                "The following gene IDs are not unique: "
                + ", ".join(str(g) for g in duplicated)
            )

        if not sample_metadata.index.equals(sample_ids):
            raise ValueError(
                "sample_metadata.index must match sample_ids exactly. "
                f"Got {len(sample_metadata.index)} metadata rows for {len(sample_ids)} samples."
            )

        self._data = data.astype(float, copy=False)
        self._feature_ids = feature_ids
        self._sample_ids = sample_ids
        self._sample_metadata = sample_metadata

    @property
    def data(self) -> np.ndarray:
        """Expression matrix (genes × samples)."""
        return self._data

    @property
    def feature_ids(self) -> pd.Index:
        """Gene identifiers (rows)."""
        return self._feature_ids

    @property
    def sample_ids(self) -> pd.Index:
        """Sample identifiers (columns)."""
        return self._sample_ids

    @property
    def sample_metadata(self) -> pd.DataFrame:
        """Sample annotations."""
        return self._sample_metadata

    @property
    def shape(self) -> tuple[int, int]:
        """Matrix dimensions (n_features, n_samples)."""
        return self._data.shape

    @property
    def n_features(self) -> int:
        return self._data.shape[0]

    @property
    def n_samples(self) -> int:
        return self._data.shape[1]

    def select_features(self, selector: np.ndarray | pd.Series | Sequence[str]) -> ExpressionMatrix:
        """
        Subset matrix by genes (rows).

        Args:
            selector: Boolean mask over rows, or a sequence of gene identifiers.
                Identifiers are returned in the order given.

        Returns:
            New ExpressionMatrix restricted to the selected genes

        Raises:
            ValueError: If a mask has the wrong length
            KeyError: If an identifier is not present
        """
        if isinstance(selector, pd.Series):
            selector = selector.values
        selector = np.asarray(selector)

        if selector.dtype == bool:
            if len(selector) != self.n_features:
                raise ValueError(
                    f"mask length ({len(selector)}) must match n_features ({self.n_features})"
                )
            rows = np.flatnonzero(selector)
        else:
            rows = self._feature_ids.get_indexer(selector)
            if (rows < 0).any():
                missing = [str(g) for g, r in zip(selector, rows) if r < 0]
                raise KeyError(f"Genes not present in matrix: {', '.join(missing)}")

        return ExpressionMatrix(
            data=self._data[rows, :],
            feature_ids=self._feature_ids[rows],
            sample_ids=self._sample_ids,
            sample_metadata=self._sample_metadata,
        )

    def to_frame(self) -> pd.DataFrame:
        """Genes × samples DataFrame view of the matrix."""
        return pd.DataFrame(self._data, index=self._feature_ids, columns=self._sample_ids)

    def samples_by_genes(self) -> pd.DataFrame:
        """Transposed (samples × genes) DataFrame for per-gene column access."""
        return pd.DataFrame(self._data.T, index=self._sample_ids, columns=self._feature_ids)

    def copy(self, deep: bool = True) -> ExpressionMatrix:
        """
        Create a copy of this matrix.

        Args:
            deep: If True, copy all arrays. If False, share arrays.
        """
        if deep:
            return ExpressionMatrix(
                data=self._data.copy(),
                feature_ids=self._feature_ids.copy(),
                sample_ids=self._sample_ids.copy(),
                sample_metadata=self._sample_metadata.copy(),
            )
        return ExpressionMatrix(
            data=self._data,
            feature_ids=self._feature_ids,
            sample_ids=self._sample_ids,
            sample_metadata=self._sample_metadata,
        )

    def __repr__(self) -> str:
        if self.n_features == 0 or self.n_samples == 0:
            return f"ExpressionMatrix({self.n_features} genes × {self.n_samples} samples)"
        return (
            f"ExpressionMatrix({self.n_features} genes × {self.n_samples} samples)\n"
            f"  Genes: {self.feature_ids[0]}...{self.feature_ids[-1]}\n"
            f"  Samples: {self.sample_ids[0]}...{self.sample_ids[-1]}"
        )

    def __str__(self) -> str:
        return self.__repr__()
