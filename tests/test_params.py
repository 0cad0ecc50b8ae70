"""Tests for run parameter validation and the mtry policy."""

import pytest

from siggenie.inference.params import (
    InferenceConfigError,
    InferenceParams,
    resolve_mtry,
    validate_k,
)


class TestResolveMtry:
    """Tests for resolve_mtry()."""

    @pytest.mark.parametrize("n, expected", [
        (1, 1),
        (2, 1),
        (3, 2),
        (4, 2),
        (6, 2),
        (7, 3),
        (9, 3),
        (19, 4),
        (100, 10),
    ])
    def test_sqrt_rounds_half_up(self, n, expected):
        assert resolve_mtry("sqrt", n) == expected

    def test_all_uses_every_regulator(self):
        assert resolve_mtry("all", 7) == 7

    def test_integer_is_clamped(self):
        assert resolve_mtry(3, 10) == 3
        assert resolve_mtry(10, 4) == 4

    def test_no_regulators(self):
        with pytest.raises(InferenceConfigError, match="usable regulator"):
            resolve_mtry("sqrt", 0)


class TestValidateK:
    """Tests for validate_k()."""

    @pytest.mark.parametrize("k", ["sqrt", "all", 1, 25])
    def test_valid(self, k):
        assert validate_k(k) == k

    @pytest.mark.parametrize("k", ["half", 0, -2, 1.5, True, None])
    def test_invalid(self, k):
        with pytest.raises(InferenceConfigError, match="Parameter k"):
            validate_k(k)


class TestInferenceParams:
    """Tests for InferenceParams validation."""

    def test_defaults(self):
        params = InferenceParams()
        assert params.k == "sqrt"
        assert params.n_trees == 1000
        assert params.n_permutations == 1000
        assert params.n_jobs == 1
        assert params.seed is None
        assert params.verbose is False

    @pytest.mark.parametrize("name", ["n_trees", "n_permutations", "n_jobs"])
    @pytest.mark.parametrize("value", [0, -1, 2.5, "10", True])
    def test_positive_int_parameters(self, name, value):
        with pytest.raises(InferenceConfigError, match=f"Parameter {name} should be a strictly positive integer"):
            InferenceParams(**{name: value})

    @pytest.mark.parametrize("seed", [-1, 1.5, "42"])
    def test_invalid_seed(self, seed):
        with pytest.raises(InferenceConfigError, match="seed"):
            InferenceParams(seed=seed)

    def test_invalid_verbose(self):
        with pytest.raises(InferenceConfigError, match="verbose"):
            InferenceParams(verbose="yes")

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            InferenceParams(n_trees=0)

    def test_to_dict(self):
        params = InferenceParams(k=3, n_trees=10, n_permutations=5, seed=1)
        assert params.to_dict() == {
            "k": 3,
            "n_trees": 10,
            "n_permutations": 5,
            "n_jobs": 1,
            "seed": 1,
            "verbose": False,
        }
