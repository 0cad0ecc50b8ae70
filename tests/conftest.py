"""
Pytest configuration and shared fixtures.

Provides synthetic expression generators with known regulatory structure so
that inference results can be checked against ground truth.
"""

import numpy as np
import pandas as pd
import pytest

from siggenie.core.expression import ExpressionMatrix


def generate_synthetic_expression(
    n_genes: int,
    n_samples: int,
    links: dict[str, list[str]] | None = None,
    noise: float = 0.1,
    seed: int = 42,
) -> pd.DataFrame:
    """
    Generate a genes × samples expression DataFrame.

    Args:
        n_genes: Number of genes, named GENE_00..GENE_NN
        n_samples: Number of samples
        links: target -> regulators; each target is rewritten as the sum of
            its regulators plus Gaussian noise
        noise: Standard deviation of the noise added to regulated targets
        seed: Random seed for reproducibility

    Returns:
        DataFrame with gene identifiers as index and sample identifiers as columns
    """
    rng = np.random.default_rng(seed)
    genes = [f"GENE_{i:02d}" for i in range(n_genes)]
    samples = [f"SAMPLE_{j:03d}" for j in range(n_samples)]
    df = pd.DataFrame(
        rng.lognormal(mean=2, sigma=0.5, size=(n_genes, n_samples)),
        index=genes,
        columns=samples,
    )

    for target, regulators in (links or {}).items():
        df.loc[target] = df.loc[regulators].sum(axis=0) + rng.normal(0, noise, n_samples)

    return df


@pytest.fixture
def regulated_expression():
    """8 genes × 40 samples; GENE_05 is driven by GENE_01."""
    return generate_synthetic_expression(
        n_genes=8,
        n_samples=40,
        links={"GENE_05": ["GENE_01"]},
        noise=0.05,
        seed=7,
    )


@pytest.fixture
def small_counts():
    """20 genes × 5 samples of integer counts, as in a quick-start example."""
    rng = np.random.default_rng(123)
    data = rng.integers(1, 11, size=(20, 5)).astype(float)
    # Guarantee non-constant profiles so that every target is testable
    data[:, 0] = 1.0
    data[:, 1] = 10.0
    return pd.DataFrame(
        data,
        index=[f"Gene{i}" for i in range(1, 21)],
        columns=[f"Sample{j}" for j in range(1, 6)],
    )


@pytest.fixture
def small_matrix(regulated_expression):
    """ExpressionMatrix wrapping regulated_expression."""
    df = regulated_expression
    return ExpressionMatrix(
        data=df.to_numpy(),
        feature_ids=pd.Index(df.index),
        sample_ids=pd.Index(df.columns),
    )


@pytest.fixture
def expression_tsv(tmp_path, regulated_expression):
    """regulated_expression written as a tab-delimited file."""
    path = tmp_path / "expression.tsv"
    regulated_expression.to_csv(path, sep="\t")
    return path
