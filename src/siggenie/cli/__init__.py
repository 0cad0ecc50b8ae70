"""
siggenie CLI - Command-line interface for significance-based network inference.

Commands:
    siggenie infer   - Infer regulator -> target links with p-values and FDR
"""

import argparse
import sys
from typing import Optional, List

from siggenie import __version__


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI dispatcher for siggenie."""
    parser = argparse.ArgumentParser(
        prog="siggenie",
        description="Gene regulatory network inference with permutation significance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  infer         Infer regulator -> target links with p-values and FDR

Examples:
  siggenie infer --input expression.tsv --output results/network --seed 42
  siggenie infer --config network.yaml --n-jobs 8
        """
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    from siggenie.cli import infer
    infer.register_parser(subparsers)

    raw_args = sys.argv[1:] if args is None else list(args)
    parsed_args = parser.parse_args(raw_args)

    if parsed_args.command is None:
        parser.print_help()
        return 0

    # Subcommand arguments, used to tell explicit flags from config values
    parsed_args._cli_args = raw_args[1:]
    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
