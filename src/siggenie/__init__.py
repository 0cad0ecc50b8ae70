"""
siggenie - Gene regulatory network inference with significance estimates

Infers directed regulator -> target links from expression data with
ensembles of regression trees, and assigns every link a permutation p-value
and a Benjamini-Hochberg FDR q-value instead of an unthresholded importance.
"""

__version__ = "0.1.0"

from siggenie.core.expression import ExpressionMatrix
from siggenie.inference.network import NetworkResult, infer_network
from siggenie.inference.params import InferenceConfigError, TargetInferenceError

__all__ = [
    "ExpressionMatrix",
    "NetworkResult",
    "infer_network",
    "InferenceConfigError",
    "TargetInferenceError",
]
