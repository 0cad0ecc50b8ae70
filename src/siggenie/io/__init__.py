"""
Input/output for expression data and inference results.

- load_expression_matrix: genes × samples CSV/TSV -> ExpressionMatrix
- read_gene_list: one identifier per line (regulator / target lists)
- write_network_result: p-value, FDR and importance matrices + run.json
"""

from siggenie.io.loaders import load_expression_matrix, read_gene_list, sniff_delimiter
from siggenie.io.writers import write_network_result

__all__ = [
    'load_expression_matrix',
    'read_gene_list',
    'sniff_delimiter',
    'write_network_result',
]
