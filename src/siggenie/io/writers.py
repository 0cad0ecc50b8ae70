"""
Writers for network inference results.

Output directory layout:
    pvalues.csv      regulator × target permutation p-values
    fdr.csv          regulator × target Benjamini-Hochberg q-values
    importances.csv  regulator × target observed importances
    run.json         run parameters, seed entropy, failed targets, timestamp

Matrices keep the regulator identifiers as the first column and the target
identifiers as the header, so they load back with
``pd.read_csv(path, index_col=0)``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from siggenie.inference.network import NetworkResult
from siggenie.utils.fileio import atomic_write_csv, atomic_write_json

__all__ = ['write_network_result']

logger = logging.getLogger(__name__)


def write_network_result(result: NetworkResult, output_dir: Path) -> dict[str, Path]:
    """
    Write a NetworkResult to output_dir.

    Args:
        result: Inference result
        output_dir: Directory, created if needed. Existing files are replaced.

    Returns:
        Mapping of output name -> written path

    Raises:
        TypeError: If result is not a NetworkResult
    """
    if not isinstance(result, NetworkResult):
        raise TypeError(f"result must be NetworkResult, got {type(result)}")

    if not isinstance(output_dir, Path):
        output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = {
        "p_values": output_dir / "pvalues.csv",
        "fdr": output_dir / "fdr.csv",
        "importances": output_dir / "importances.csv",
        "run": output_dir / "run.json",
    }

    atomic_write_csv(paths["p_values"], result.p_values)
    atomic_write_csv(paths["fdr"], result.fdr)
    atomic_write_csv(paths["importances"], result.importances)

    summary = result.to_dict()
    summary["timestamp"] = datetime.now().isoformat()
    atomic_write_json(paths["run"], summary, allow_nan=False)

    for name, path in paths.items():
        logger.info(f"Saved {name}: {path}")
    return paths
