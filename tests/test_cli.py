"""Tests for the siggenie command-line interface."""

import argparse
import json
from pathlib import Path

import pandas as pd
import pytest
import yaml

from siggenie.cli import main
from siggenie.cli._validators import _mtry_policy, _non_negative_int, _positive_int
from siggenie.cli.config import load_config, merge_config_with_args, validate_config
from siggenie.cli.infer import register_parser


def _parse(argv):
    parser = argparse.ArgumentParser()
    subparsers = parser.add_subparsers(dest="command")
    register_parser(subparsers)
    return parser.parse_args(argv)


class TestValidators:
    """Tests for argparse type validators."""

    def test_positive_int(self):
        assert _positive_int("3") == 3
        with pytest.raises(argparse.ArgumentTypeError):
            _positive_int("0")

    def test_non_negative_int(self):
        assert _non_negative_int("0") == 0
        with pytest.raises(argparse.ArgumentTypeError):
            _non_negative_int("-1")

    @pytest.mark.parametrize("value, expected", [("sqrt", "sqrt"), ("all", "all"), ("4", 4)])
    def test_mtry_policy(self, value, expected):
        assert _mtry_policy(value) == expected

    @pytest.mark.parametrize("value", ["half", "0", "-3"])
    def test_mtry_policy_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            _mtry_policy(value)


class TestConfig:
    """Tests for config loading, validation and merging."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "network.yaml"
        path.write_text("forest:\n  n_trees: 50\npermutation:\n  seed: 3\n")
        config = load_config(path)
        assert config["forest"]["n_trees"] == 50
        assert config["permutation"]["seed"] == 3

    def test_load_json(self, tmp_path):
        path = tmp_path / "network.json"
        path.write_text(json.dumps({"n_jobs": 2}))
        assert load_config(path) == {"n_jobs": 2}

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == {}

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "network.toml"
        path.write_text("n_jobs = 2\n")
        with pytest.raises(ValueError, match="Unsupported config format"):
            load_config(path)

    def test_missing_config(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    @pytest.mark.parametrize("config, match", [
        ({"bogus": 1}, "Unknown config keys"),
        ({"forest": {"k": "half"}}, "forest.k"),
        ({"forest": {"n_trees": 0}}, "n_trees"),
        ({"permutation": {"n_permutations": -1}}, "n_permutations"),
        ({"permutation": {"seed": -2}}, "seed"),
        ({"n_jobs": 0}, "n_jobs"),
        ({"fill_value": "zero"}, "fill_value"),
        ({"regulators": "GENE_01"}, "regulators"),
        ({"forest": [1, 2]}, "mapping"),
    ])
    def test_validate_rejects(self, config, match):
        with pytest.raises(ValueError, match=match):
            validate_config(config)

    def test_validate_accepts(self):
        validate_config({
            "input": "expr.tsv",
            "targets": ["GENE_05"],
            "fill_value": 0,
            "forest": {"k": 3, "n_trees": 10},
            "permutation": {"n_permutations": 9, "seed": 0},
        })

    def test_explicit_cli_args_override_config(self):
        config = {
            "input": "expr.tsv",
            "forest": {"n_trees": 50, "k": "all"},
            "permutation": {"n_permutations": 99},
        }
        cli_args = ["--config", "network.yaml", "--n-trees", "7"]
        args = _parse(["infer"] + cli_args)
        merged = merge_config_with_args(config, args, cli_args)
        assert merged.n_trees == 7
        assert merged.k == "all"
        assert merged.n_permutations == 99
        assert merged.input == Path("expr.tsv")

    def test_equals_syntax_counts_as_explicit(self):
        config = {"permutation": {"seed": 1}}
        cli_args = ["--seed=5"]
        merged = merge_config_with_args(config, _parse(["infer"] + cli_args), cli_args)
        assert merged.seed == 5


class TestInferCommand:
    """End-to-end tests for `siggenie infer`."""

    def test_writes_results(self, tmp_path, expression_tsv):
        out = tmp_path / "results"
        code = main([
            "infer",
            "--input", str(expression_tsv),
            "--output", str(out),
            "--targets", "GENE_05", "GENE_06",
            "--n-trees", "3",
            "--n-permutations", "2",
            "--seed", "42",
        ])
        assert code == 0
        p = pd.read_csv(out / "pvalues.csv", index_col=0)
        assert p.shape == (8, 2)
        summary = json.loads((out / "run.json").read_text())
        assert summary["params"]["seed"] == 42

    def test_config_file_run(self, tmp_path, expression_tsv):
        regulators = tmp_path / "tfs.txt"
        regulators.write_text("GENE_01\nGENE_02\nGENE_03\n")
        out = tmp_path / "from_config"
        config_path = tmp_path / "network.yaml"
        config_path.write_text(yaml.safe_dump({
            "input": str(expression_tsv),
            "output": str(out),
            "regulators_file": str(regulators),
            "targets": ["GENE_05"],
            "forest": {"n_trees": 3},
            "permutation": {"n_permutations": 2, "seed": 1},
        }))
        assert main(["infer", "--config", str(config_path)]) == 0
        p = pd.read_csv(out / "pvalues.csv", index_col=0)
        assert p.index.tolist() == ["GENE_01", "GENE_02", "GENE_03"]
        assert p.columns.tolist() == ["GENE_05"]

    def test_missing_input(self, tmp_path, capsys):
        code = main(["infer", "--output", str(tmp_path / "out")])
        assert code == 2
        assert "--input is required" in capsys.readouterr().err

    def test_single_regulator_is_config_error(self, tmp_path, expression_tsv, capsys):
        code = main([
            "infer",
            "--input", str(expression_tsv),
            "--output", str(tmp_path / "out"),
            "--regulators", "GENE_01",
            "--n-trees", "2",
            "--n-permutations", "1",
        ])
        assert code == 2
        assert "at least 2 potential regulators" in capsys.readouterr().err
        assert not (tmp_path / "out").exists()

    def test_list_and_file_conflict(self, tmp_path, expression_tsv, capsys):
        tfs = tmp_path / "tfs.txt"
        tfs.write_text("GENE_01\nGENE_02\n")
        code = main([
            "infer",
            "--input", str(expression_tsv),
            "--output", str(tmp_path / "out"),
            "--regulators", "GENE_01", "GENE_02",
            "--regulators-file", str(tfs),
        ])
        assert code == 2
        assert "not both" in capsys.readouterr().err

    def test_explicit_regulators_override_config_file_list(self, tmp_path, expression_tsv):
        tfs = tmp_path / "tfs.txt"
        tfs.write_text("GENE_01\nGENE_02\nGENE_03\n")
        out = tmp_path / "override"
        config_path = tmp_path / "network.yaml"
        config_path.write_text(yaml.safe_dump({
            "input": str(expression_tsv),
            "output": str(out),
            "regulators_file": str(tfs),
            "targets": ["GENE_05"],
            "forest": {"n_trees": 3},
            "permutation": {"n_permutations": 2, "seed": 1},
        }))
        code = main([
            "infer", "--config", str(config_path),
            "--regulators", "GENE_04", "GENE_06",
        ])
        assert code == 0
        p = pd.read_csv(out / "pvalues.csv", index_col=0)
        assert p.index.tolist() == ["GENE_04", "GENE_06"]

    def test_config_with_both_subset_forms(self, tmp_path, expression_tsv, capsys):
        tfs = tmp_path / "tfs.txt"
        tfs.write_text("GENE_01\nGENE_02\n")
        config_path = tmp_path / "network.yaml"
        config_path.write_text(yaml.safe_dump({
            "input": str(expression_tsv),
            "output": str(tmp_path / "out"),
            "regulators": ["GENE_03", "GENE_04"],
            "regulators_file": str(tfs),
        }))
        assert main(["infer", "--config", str(config_path)]) == 2
        assert "not both" in capsys.readouterr().err

    def test_bad_config_returns_2(self, tmp_path, capsys):
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("forest:\n  n_trees: 0\n")
        assert main(["infer", "--config", str(config_path)]) == 2
        assert "Config file error" in capsys.readouterr().err

    def test_invalid_n_trees_rejected_by_parser(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["infer", "--input", "x.tsv", "--output", str(tmp_path), "--n-trees", "0"])

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "infer" in capsys.readouterr().out
