"""
Core data structures for gene regulatory network inference.

1. ExpressionMatrix: labelled genes × samples matrix (the core matrix contract)
2. as_expression_matrix: adapters from DataFrame / ndarray / assay mappings

Examples:
    >>> from siggenie.core import ExpressionMatrix, as_expression_matrix
    >>> matrix = as_expression_matrix(df)  # df: genes × samples DataFrame
"""

from siggenie.core.expression import ExpressionMatrix
from siggenie.core.adapters import as_expression_matrix, check_expression_values

__all__ = [
    'ExpressionMatrix',
    'as_expression_matrix',
    'check_expression_values',
]
