import numbers

import numpy as np
import pytest

from spotfit.utils.check_params import check_params
from spotfit.fitting.check_fit_params import check_fit_params


def test_missing_key_gets_default():
    params = {}
    assert check_params(params, "solver", [str], default="auto")
    assert params["solver"] == "auto"


def test_missing_required_key_fails():
    assert not check_params({}, "start_params", [list])


def test_wrong_type_fails():
    assert not check_params({"debug": "no"}, "debug", [bool])


def test_none_only_when_allowed():
    assert check_params({"p": None}, "p", [list, type(None)])
    assert not check_params({"p": None}, "p", [list])


def test_acceptable_data_and_range():
    assert not check_params({"s": "bfgs"}, "s", [str], acceptable_data=["auto"])
    assert check_params({"n": 3}, "n", [int], acceptable_range=[0, 5])
    assert not check_params({"n": 9}, "n", [int], acceptable_range=[0, 5])


def test_list_length_and_element_types():
    kw = dict(list_acceptable_data_types=[numbers.Real], list_len=3)
    assert check_params({"p": [1, 2.0, np.float32(3)]}, "p", [list], **kw)
    assert not check_params({"p": [1, 2]}, "p", [list], **kw)
    assert not check_params({"p": [1, 2, "3"]}, "p", [list], **kw)
    assert check_params({"p": [1, 2]}, "p", [list], list_acceptable_data_types=[int], list_len=-1)


def test_check_fit_params_defaults():
    fit_params = {}
    assert check_fit_params(fit_params)
    assert fit_params == {"symmetric": False, "debug": False, "start_params": None, "solver": "auto"}


def test_check_fit_params_normalizes_start_params():
    fit_params = {"start_params": np.arange(6)}
    assert check_fit_params(fit_params)
    assert fit_params["start_params"] == (0.0, 1.0, 2.0, 3.0, 4.0, 5.0)
    assert all(type(p) is float for p in fit_params["start_params"])


@pytest.mark.parametrize(
    "fit_params",
    [{"symmetric": 1}, {"start_params": [1.0] * 7}, {"start_params": [np.nan] * 6}, {"solver": None}],
)
def test_check_fit_params_rejects(fit_params):
    assert not check_fit_params(fit_params)
