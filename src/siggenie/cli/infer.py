"""
siggenie infer command - regulatory network inference with significance.

Fits one tree ensemble per target gene, estimates a permutation null for
every regulator importance, and writes regulator × target matrices of
p-values and FDR q-values.

Usage:
    siggenie infer --input expression.tsv --output results/network \\
        --regulators-file tfs.txt --n-trees 1000 --n-permutations 1000 --seed 42
"""

import argparse
import sys
from pathlib import Path

from siggenie.cli._validators import _mtry_policy, _non_negative_int, _positive_int
from siggenie.cli.config import ConfigSchema


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the infer subcommand."""
    defaults = ConfigSchema()

    parser = subparsers.add_parser(
        "infer",
        help="Infer regulator -> target links with permutation p-values and FDR",
        description=(
            "Infer a gene regulatory network from expression data. Every "
            "regulator -> target link gets a permutation p-value for its "
            "tree-ensemble importance and a Benjamini-Hochberg q-value."
        )
    )

    parser.add_argument("--config", "-c", type=Path, default=None,
                        help="Path to YAML/JSON config file (optional, CLI args override config values)")

    # Input/output
    parser.add_argument("--input", "-i", type=Path, default=defaults.input,
                        help="Expression data CSV/TSV (genes x samples)")
    parser.add_argument("--output", "-o", type=Path, default=defaults.output,
                        help="Output directory for result matrices")

    # Gene subsets
    parser.add_argument("--regulators", nargs="+", default=defaults.regulators,
                        help="Candidate regulator gene names (default: all genes)")
    parser.add_argument("--regulators-file", type=Path, default=defaults.regulators_file,
                        help="File with one candidate regulator per line")
    parser.add_argument("--targets", nargs="+", default=defaults.targets,
                        help="Target gene names (default: all genes)")
    parser.add_argument("--targets-file", type=Path, default=defaults.targets_file,
                        help="File with one target gene per line")

    # Forest
    parser.add_argument("--k", type=_mtry_policy, default=defaults.forest.k,
                        help="Candidate regulators per tree node: sqrt, all, or an integer (default: sqrt)")
    parser.add_argument("--n-trees", type=_positive_int, default=defaults.forest.n_trees,
                        help=f"Trees per ensemble (default: {defaults.forest.n_trees})")

    # Permutation null
    parser.add_argument("--n-permutations", type=_positive_int,
                        default=defaults.permutation.n_permutations,
                        help=f"Response permutations per target (default: {defaults.permutation.n_permutations})")
    parser.add_argument("--seed", type=_non_negative_int, default=defaults.permutation.seed,
                        help="Random seed for reproducible results")

    # Execution / output
    parser.add_argument("--n-jobs", type=_positive_int, default=defaults.n_jobs,
                        help="Parallel workers (default: 1)")
    parser.add_argument("--fill-value", type=float, default=defaults.fill_value,
                        help="Value written for self-pairs that are never tested (default: 0.0)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Report progress for every target gene")

    parser.set_defaults(func=run_infer)


def _gene_subset(args, role, explicit, read_gene_list):
    names = getattr(args, role)
    path = getattr(args, f"{role}_file")
    if names and path:
        # an explicit flag overrides the other form coming from the config file
        names_explicit = role in explicit
        path_explicit = f"{role}_file" in explicit
        if names_explicit == path_explicit:
            raise ValueError(
                f"Give either --{role} or --{role}-file, not both"
            )
        if names_explicit:
            return names
        return read_gene_list(path)
    if path:
        return read_gene_list(path)
    return names


def run_infer(args: argparse.Namespace) -> int:
    """Execute the infer command."""
    import logging
    from siggenie.inference.network import infer_network
    from siggenie.inference.params import InferenceConfigError
    from siggenie.io.loaders import load_expression_matrix, read_gene_list
    from siggenie.io.writers import write_network_result

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger = logging.getLogger(__name__)

    from siggenie.cli.config import _explicit_args

    cli_args = getattr(args, "_cli_args", None)
    if cli_args is None:
        cli_args = sys.argv[2:]  # Skip 'siggenie infer'
    explicit = _explicit_args(cli_args)

    if args.config:
        from siggenie.cli.config import load_config, merge_config_with_args, validate_config

        logger.info(f"Loading configuration from: {args.config}")
        try:
            config = load_config(args.config)
            validate_config(config)
            args = merge_config_with_args(config, args, cli_args)
        except (FileNotFoundError, ValueError) as e:
            print(f"ERROR: Config file error: {e}", file=sys.stderr)
            return 2

    if not args.input:
        print("ERROR: --input is required (via CLI or config file)", file=sys.stderr)
        return 2
    if not args.output:
        print("ERROR: --output is required (via CLI or config file)", file=sys.stderr)
        return 2

    try:
        regulators = _gene_subset(args, "regulators", explicit, read_gene_list)
        targets = _gene_subset(args, "targets", explicit, read_gene_list)
        matrix = load_expression_matrix(args.input)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    logger.info(f"Matrix: {matrix.n_features} genes x {matrix.n_samples} samples")

    try:
        result = infer_network(
            matrix,
            regulators=regulators,
            targets=targets,
            k=args.k,
            n_trees=args.n_trees,
            n_jobs=args.n_jobs,
            n_permutations=args.n_permutations,
            verbose=args.verbose,
            seed=args.seed,
            fill_value=args.fill_value,
        )
    except InferenceConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    write_network_result(result, args.output)

    n_tested = int(result.tested.to_numpy().sum())
    n_significant = int(((result.fdr < 0.05) & result.tested).to_numpy().sum())
    logger.info(
        f"{len(result.regulators)} regulators x {len(result.targets)} targets: "
        f"{n_tested} links tested, {n_significant} with FDR < 0.05"
    )
    if result.failed_targets:
        logger.warning(f"Failed targets: {', '.join(result.failed_targets)}")

    logger.info(f"Results saved to: {args.output}")
    return 0
