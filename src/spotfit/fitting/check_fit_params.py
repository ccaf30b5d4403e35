import numbers

import numpy as np
import toolviper.utils.logger as logger

from spotfit.utils.check_params import check_params

_BOOL_TYPES = [bool, np.bool_]


def check_fit_params(fit_params):
    """
    Validate (and default) the options of a spot fit in place.

    Keys: ``mode``, ``symmetric``, ``debug``, ``start_params``, ``solver``.
    ``mode`` is checked separately since it may be an enum member.
    """
    params_passed = True

    if not (check_params(fit_params, "symmetric", _BOOL_TYPES, default=False)):
        params_passed = False
    if not (check_params(fit_params, "debug", _BOOL_TYPES, default=False)):
        params_passed = False
    if "start_params" not in fit_params:
        fit_params["start_params"] = None
    if not (
        check_params(
            fit_params,
            "start_params",
            [list, tuple, np.ndarray, type(None)],
            list_acceptable_data_types=[numbers.Real],
            list_len=6,
        )
    ):
        params_passed = False
    if not (
        check_params(
            fit_params,
            "solver",
            [str],
            acceptable_data=["auto", "least_squares", "nelder-mead"],
            default="auto",
        )
    ):
        params_passed = False

    if params_passed and fit_params["start_params"] is not None:
        start = np.asarray(fit_params["start_params"], dtype=float)
        if not np.all(np.isfinite(start)):
            logger.error("Parameter start_params must be finite.")
            params_passed = False
        else:
            fit_params["start_params"] = tuple(float(p) for p in start)

    return params_passed
