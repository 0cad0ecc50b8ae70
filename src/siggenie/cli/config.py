"""
Configuration file support for the siggenie CLI.

Supports YAML and JSON config files with CLI argument override.

Example config (YAML):
```
input: data/expression.tsv
output: results/network
regulators_file: data/tfs.txt
n_jobs: 4
forest:
  k: sqrt
  n_trees: 1000
permutation:
  n_permutations: 1000
  seed: 42
```
"""

import json
from argparse import Namespace
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml


@dataclass
class ForestConfig:
    """Tree-ensemble configuration."""
    k: Union[str, int] = "sqrt"
    n_trees: int = 1000


@dataclass
class PermutationConfig:
    """Permutation null configuration."""
    n_permutations: int = 1000
    seed: Optional[int] = None


@dataclass
class ConfigSchema:
    """
    Complete configuration schema for the siggenie infer command.

    Mirrors the CLI argument structure for consistency.
    """
    input: Optional[Path] = None
    output: Optional[Path] = None
    regulators: Optional[List[str]] = None
    regulators_file: Optional[Path] = None
    targets: Optional[List[str]] = None
    targets_file: Optional[Path] = None
    n_jobs: int = 1
    fill_value: float = 0.0
    forest: ForestConfig = field(default_factory=ForestConfig)
    permutation: PermutationConfig = field(default_factory=PermutationConfig)


# config key -> (section or None, argparse destination)
_CONFIG_TO_ARG = {
    'input': (None, 'input'),
    'output': (None, 'output'),
    'regulators': (None, 'regulators'),
    'regulators_file': (None, 'regulators_file'),
    'targets': (None, 'targets'),
    'targets_file': (None, 'targets_file'),
    'n_jobs': (None, 'n_jobs'),
    'fill_value': (None, 'fill_value'),
    'k': ('forest', 'k'),
    'n_trees': ('forest', 'n_trees'),
    'n_permutations': ('permutation', 'n_permutations'),
    'seed': ('permutation', 'seed'),
}

_PATH_ARGS = ('input', 'output', 'regulators_file', 'targets_file')

_SHORT_TO_LONG = {
    'i': 'input',
    'o': 'output',
    'c': 'config',
    'v': 'verbose',
}


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Parameters:
        config_path: Path to config file (.yaml, .yml, or .json)

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported or invalid

    Examples:
        >>> config = load_config(Path("network.yaml"))
        >>> print(config['forest']['n_trees'])
        1000
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    try:
        with open(config_path, 'r') as f:
            if suffix in ('.yaml', '.yml'):
                config = yaml.safe_load(f)
            elif suffix == '.json':
                config = json.load(f)
            else:
                raise ValueError(
                    f"Unsupported config format: {suffix}. "
                    f"Use .yaml, .yml, or .json"
                )
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}") from e

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ValueError("Config file must contain a dictionary/mapping at top level")

    return config


def _merge_value(cli_value: Any, config_value: Any, was_explicitly_set: bool) -> Any:
    """
    Merge a single config value with CLI argument.

    Rules:
    - CLI args ALWAYS override config if explicitly set
    - If CLI arg not set, use config value
    - If neither set, keep CLI default
    """
    if was_explicitly_set:
        return cli_value
    if config_value is not None:
        return config_value
    return cli_value


def _explicit_args(cli_args: Optional[List[str]]) -> set:
    explicit = set()
    for arg in cli_args or []:
        if arg.startswith('--'):
            explicit.add(arg[2:].split('=', 1)[0].replace('-', '_'))
        elif arg.startswith('-') and len(arg) == 2 and arg[1] in _SHORT_TO_LONG:
            explicit.add(_SHORT_TO_LONG[arg[1]])
    return explicit


def _config_lookup(config: Dict[str, Any], section: Optional[str], key: str) -> tuple[bool, Any]:
    source = config if section is None else config.get(section) or {}
    if key in source:
        return True, source[key]
    return False, None


def merge_config_with_args(config: Dict[str, Any], args: Namespace, cli_args: Optional[List[str]] = None) -> Namespace:
    """
    Merge config file values with CLI arguments.

    Priority (highest to lowest):
    1. Explicitly provided CLI arguments
    2. Config file values
    3. CLI argument defaults

    Parameters:
        config: Configuration dictionary from load_config()
        args: Parsed CLI arguments (argparse.Namespace)
        cli_args: Raw CLI arguments list (for detecting explicit values)
                  If None, assumes all args are defaults

    Returns:
        Updated Namespace with merged values
    """
    explicit = _explicit_args(cli_args)
    merged = Namespace(**vars(args))

    for key, (section, arg_name) in _CONFIG_TO_ARG.items():
        found, config_value = _config_lookup(config, section, key)
        if not found:
            continue
        if config_value is not None and arg_name in _PATH_ARGS:
            config_value = Path(config_value)
        setattr(
            merged,
            arg_name,
            _merge_value(getattr(merged, arg_name, None), config_value, arg_name in explicit),
        )

    return merged


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate configuration structure and values.

    Parameters:
        config: Configuration dictionary

    Raises:
        ValueError: If configuration is invalid
    """
    known_top = {key for key, (section, _) in _CONFIG_TO_ARG.items() if section is None}
    known_top |= {'forest', 'permutation'}
    unknown = set(config) - known_top
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    for section in ('forest', 'permutation'):
        if section in config and not isinstance(config[section], dict):
            raise ValueError(f"Config section '{section}' must be a mapping")

    forest = config.get('forest') or {}
    if 'k' in forest:
        k = forest['k']
        if not (k in ('sqrt', 'all') or _is_positive_int(k)):
            raise ValueError(
                f"Invalid forest.k '{k}'. Use 'sqrt', 'all' or a positive integer"
            )
    if 'n_trees' in forest and not _is_positive_int(forest['n_trees']):
        raise ValueError(f"forest.n_trees must be a positive integer, got: {forest['n_trees']}")

    permutation = config.get('permutation') or {}
    if 'n_permutations' in permutation and not _is_positive_int(permutation['n_permutations']):
        raise ValueError(
            f"permutation.n_permutations must be a positive integer, got: {permutation['n_permutations']}"
        )
    seed = permutation.get('seed')
    if seed is not None and not (isinstance(seed, int) and not isinstance(seed, bool) and seed >= 0):
        raise ValueError(f"permutation.seed must be a non-negative integer, got: {seed}")

    if 'n_jobs' in config and not _is_positive_int(config['n_jobs']):
        raise ValueError(f"n_jobs must be a positive integer, got: {config['n_jobs']}")

    if 'fill_value' in config:
        fill_value = config['fill_value']
        if not isinstance(fill_value, (int, float)) or isinstance(fill_value, bool):
            raise ValueError(f"fill_value must be a number, got: {fill_value}")

    for key in ('regulators', 'targets'):
        if key in config and config[key] is not None and not isinstance(config[key], list):
            raise ValueError(f"{key} must be a list of gene identifiers")
