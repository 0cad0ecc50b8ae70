"""
Loaders for expression matrices and gene lists.

Expected expression file layout (CSV or tab-delimited):
    - First column: gene identifiers (unique)
    - Header row: sample identifiers
    - Remaining cells: numeric expression values

Example:
```
"","Sample1","Sample2","Sample3"
"Gene1",612,1056,830
"Gene2",0,1,4
```

Examples:
    >>> from pathlib import Path
    >>> from siggenie.io.loaders import load_expression_matrix, read_gene_list
    >>> matrix = load_expression_matrix(Path("expression.tsv"))
    >>> regulators = read_gene_list(Path("tfs.txt"))
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from siggenie.core.expression import ExpressionMatrix

__all__ = ['load_expression_matrix', 'read_gene_list', 'sniff_delimiter']

logger = logging.getLogger(__name__)


def sniff_delimiter(path: Path, sample_size: int = 8192) -> str:
    """
    Auto-detect delimiter from file content.

    Uses Python's csv.Sniffer with a first-line counting fallback.

    Raises:
        ValueError: If delimiter cannot be determined
    """
    with open(path, 'r', encoding='utf-8', errors='ignore') as f:
        sample = f.read(sample_size)

    try:
        dialect = csv.Sniffer().sniff(sample, delimiters='\t,;|')
        return dialect.delimiter
    except csv.Error:
        pass

    first_line = sample.split('\n')[0]
    counts = {
        '\t': first_line.count('\t'),
        ',': first_line.count(','),
        ';': first_line.count(';'),
    }

    if max(counts.values()) == 0:
        raise ValueError(
            f"Could not detect delimiter in {path}. "
            "Please specify it explicitly."
        )

    return max(counts, key=counts.get)


def load_expression_matrix(path: Path, delimiter: Optional[str] = None) -> ExpressionMatrix:
    """
    Load a genes × samples expression file into an ExpressionMatrix.

    Args:
        path: Path to CSV/TSV file
        delimiter: Field delimiter; sniffed from the file when None

    Returns:
        ExpressionMatrix with gene identifiers from the first column

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the file is empty, has duplicate gene identifiers,
            non-numeric values, or infinite values
    """
    if not isinstance(path, Path):
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Expression file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    if delimiter is None:
        delimiter = sniff_delimiter(path)
        logger.debug(f"Sniffed delimiter: {repr(delimiter)}")

    try:
        df = pd.read_csv(path, sep=delimiter, index_col=0)
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"Expression file is empty: {path}") from e
    except Exception as e:
        raise ValueError(f"Failed to read expression file {path}: {e}") from e

    if df.empty or df.shape[1] == 0:
        raise ValueError(f"Expression file contains no data: {path}")

    if df.index.hasnans:
        raise ValueError(f"Expression file has rows without a gene identifier: {path}")

    if df.index.duplicated().any():
        duplicated = df.index[df.index.duplicated()].unique().tolist()
        raise ValueError(
            "The following gene IDs are not unique: "
            + ", ".join(str(g) for g in duplicated[:10])
            + (" ..." if len(duplicated) > 10 else "")
        )

    try:
        data = df.to_numpy(dtype=float)
    except ValueError as e:
        non_numeric = []
        for i, row in enumerate(df.values):
            for j, val in enumerate(row):
                try:
                    float(val)
                except (ValueError, TypeError):
                    non_numeric.append(f"row {i} ('{df.index[i]}'), col {j} ('{df.columns[j]}'): {val}")
                    if len(non_numeric) >= 5:
                        break
            if len(non_numeric) >= 5:
                break
        raise ValueError(
            "Expression file contains non-numeric values:\n"
            + "\n".join(f"  - {x}" for x in non_numeric)
        ) from e

    if np.isinf(data).any():
        raise ValueError(
            f"Expression file contains {int(np.isinf(data).sum())} infinite values. "
            "Please clean data before loading."
        )

    matrix = ExpressionMatrix(
        data=data,
        feature_ids=pd.Index([str(g) for g in df.index]),
        sample_ids=pd.Index(df.columns),
    )
    logger.info(f"Loaded {matrix.n_features:,} genes x {matrix.n_samples:,} samples from {path}")
    return matrix


def read_gene_list(path: Path) -> list[str]:
    """
    Read gene identifiers, one per line.

    Blank lines and lines starting with '#' are ignored; surrounding
    whitespace is stripped.
    """
    if not isinstance(path, Path):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Gene list not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        genes = [line.strip() for line in f]
    return [g for g in genes if g and not g.startswith('#')]
