# file: src/spotfit/fitting/spot_gaussian2d_fit.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, NamedTuple, Optional, Sequence, Tuple, Union
import numpy as np
import dask.array as da
import xarray as xr
import toolviper.utils.logger as logger
from scipy.optimize import least_squares, minimize

from spotfit.fitting.check_fit_params import check_fit_params
from spotfit.model.spot_model import _pixel_grid, _spot_gauss2d

ArrayOrDA = Union[np.ndarray, da.Array, xr.DataArray]

# Amplitude reported for a fit whose solver did not converge.
FAILED_FIT_AMPLITUDE = 0.0001


class InvalidInputError(ValueError):
    """Spot image or fit options that cannot be fit."""


class FitMode(Enum):
    """Which Gaussian parameters the solver is allowed to move."""

    FULL = "full"
    VARS = "vars"
    BACKGROUND = "background"


class GaussianParams(NamedTuple):
    x_cen: float
    y_cen: float
    x_var: float
    y_var: float
    bkgnd: float
    amp: float


@dataclass(frozen=True)
class FitConfig:
    mode: FitMode = FitMode.FULL
    symmetric: bool = False
    debug: bool = False
    start_params: Optional[GaussianParams] = None
    solver: str = "auto"


def is_failed_fit(params: Sequence[float]) -> bool:
    """True if ``params`` carries the non-convergence amplitude."""
    return float(params[5]) == FAILED_FIT_AMPLITUDE


# ---------- Input normalization ----------

def _ensure_spot_image(data: ArrayOrDA) -> np.ndarray:
    """
    Return a float 2D numpy copy of a spot image, or raise InvalidInputError.
    """
    arr: Any = data.data if isinstance(data, xr.DataArray) else data
    if isinstance(arr, da.Array):
        arr = arr.compute()
    if not isinstance(arr, np.ndarray):
        raise InvalidInputError(
            "Unsupported input type; use numpy.ndarray, dask.array.Array, or xarray.DataArray."
        )
    if arr.ndim > 2:
        raise InvalidInputError(
            f"Must pass a 2D image only, not a movie; got shape {arr.shape}."
        )
    if arr.ndim != 2:
        raise InvalidInputError(f"Spot image must be 2D; got shape {arr.shape}.")
    if arr.size == 0:
        raise InvalidInputError("Spot image is empty.")
    if not np.issubdtype(arr.dtype, np.number) or np.iscomplexobj(arr):
        raise InvalidInputError(f"Spot image must be real-valued numeric; got dtype {arr.dtype}.")
    z = np.asarray(arr, dtype=float)
    if not np.all(np.isfinite(z)):
        raise InvalidInputError("Spot image contains non-finite pixel values.")
    return z


def _parse_fit_mode(mode: Union[FitMode, str]) -> FitMode:
    if isinstance(mode, FitMode):
        return mode
    if isinstance(mode, str):
        try:
            return FitMode(mode.lower())
        except ValueError:
            pass
    raise InvalidInputError(
        f"Mode {mode!r} not recognized; use one of {[m.value for m in FitMode]}."
    )


def _make_fit_config(mode: Union[FitMode, str], **options: Any) -> FitConfig:
    fit_mode = _parse_fit_mode(mode)
    fit_params = dict(options)
    if not check_fit_params(fit_params):
        raise InvalidInputError("Spot fit options failed validation; see log for details.")
    start = fit_params["start_params"]
    return FitConfig(
        mode=fit_mode,
        symmetric=bool(fit_params["symmetric"]),
        debug=bool(fit_params["debug"]),
        start_params=None if start is None else GaussianParams(*start),
        solver=fit_params["solver"],
    )


# ---------- Initial guess ----------

def _initial_params(
    z: np.ndarray,
    start_params: Optional[GaussianParams],
    symmetric: bool,
) -> GaussianParams:
    """
    Heuristic starting point, replaced wholesale by ``start_params`` if given.

    Assumes the spot sits near the middle of the patch and spans about half
    of it.
    """
    if start_params is not None:
        init = GaussianParams(*(float(p) for p in start_params))
    else:
        ny, nx = z.shape
        init = GaussianParams(
            x_cen=nx / 2.0,
            y_cen=ny / 2.0,
            x_var=1.0 / (nx / 4.0),
            y_var=1.0 / (ny / 4.0),
            bkgnd=float(np.min(z)),
            amp=float(np.max(z)),
        )
    if symmetric:
        init = init._replace(y_var=init.x_var)
    return init


# ---------- Free / fixed parameter layout ----------

@dataclass(frozen=True)
class _ParamLayout:
    """
    Names of the free (solver-moved) and fixed (pinned) parameters, in vector
    order. ``bkgnd`` and ``amp`` always close the free vector. A symmetric
    layout never carries ``y_var``; it is rebuilt from ``x_var``.
    """

    free: Tuple[str, ...]
    fixed: Tuple[str, ...]
    symmetric: bool


_LAYOUTS = MappingProxyType({
    (FitMode.FULL, False): _ParamLayout(
        ("x_cen", "y_cen", "x_var", "y_var", "bkgnd", "amp"), (), False),
    (FitMode.FULL, True): _ParamLayout(
        ("x_cen", "y_cen", "x_var", "bkgnd", "amp"), (), True),
    (FitMode.VARS, False): _ParamLayout(
        ("x_var", "y_var", "bkgnd", "amp"), ("x_cen", "y_cen"), False),
    (FitMode.VARS, True): _ParamLayout(
        ("x_var", "bkgnd", "amp"), ("x_cen", "y_cen"), True),
    (FitMode.BACKGROUND, False): _ParamLayout(
        ("bkgnd", "amp"), ("x_cen", "y_cen", "x_var", "y_var"), False),
    (FitMode.BACKGROUND, True): _ParamLayout(
        ("bkgnd", "amp"), ("x_cen", "y_cen", "x_var"), True),
})


def _get_layout(mode: FitMode, symmetric: bool) -> _ParamLayout:
    return _LAYOUTS[(mode, bool(symmetric))]


def _split_params(params: GaussianParams, layout: _ParamLayout) -> Tuple[np.ndarray, np.ndarray]:
    """
    Full parameter tuple -> (free vector, fixed vector).
    """
    values = params._asdict()
    free = np.array([values[name] for name in layout.free], dtype=float)
    fixed = np.array([values[name] for name in layout.fixed], dtype=float)
    return free, fixed


def _join_params(free: np.ndarray, fixed: np.ndarray, layout: _ParamLayout) -> GaussianParams:
    """
    Inverse of _split_params.
    """
    values = dict(zip(layout.fixed, fixed))
    values.update(zip(layout.free, free))
    if layout.symmetric:
        values["y_var"] = values["x_var"]
    return GaussianParams(**{name: float(values[name]) for name in GaussianParams._fields})


# ---------- Residual ----------

def _spot_residual(
    free: np.ndarray,
    fixed: np.ndarray,
    layout: _ParamLayout,
    z: np.ndarray,
    grid: Tuple[np.ndarray, np.ndarray],
    output: str = "vector",
) -> Union[np.ndarray, float]:
    """
    Data minus model over the pixel grid.

    output="vector" returns the flattened per-pixel residual for
    least_squares; output="scalar" returns its sum of squares for simplex
    search.
    """
    X, Y = grid
    diff = z - _spot_gauss2d(X, Y, *_join_params(free, fixed, layout))
    if output == "vector":
        return diff.ravel()
    if output == "scalar":
        return float(np.sum(diff**2))
    raise ValueError(f"output must be 'vector' or 'scalar'; got {output!r}.")


# ---------- Solvers ----------

class _SolverOutcome(NamedTuple):
    x: np.ndarray
    exitflag: int
    solver: str


def _primary_solver_available(n_residuals: int, n_free: int) -> bool:
    """
    Levenberg-Marquardt can only run with at least as many residuals as
    free parameters.
    """
    return n_residuals >= n_free


def _run_solver(
    p0: np.ndarray,
    fixed: np.ndarray,
    layout: _ParamLayout,
    z: np.ndarray,
    grid: Tuple[np.ndarray, np.ndarray],
    solver: str = "auto",
) -> _SolverOutcome:
    """
    least_squares on the residual vector, else Nelder-Mead on its sum of
    squares. Exit flags <= 0 mean the chosen solver did not converge.
    """
    if solver == "auto":
        use_primary = _primary_solver_available(z.size, p0.size)
    elif solver == "least_squares":
        use_primary = True
    else:
        use_primary = False

    if use_primary:
        try:
            res = least_squares(
                _spot_residual,
                p0,
                args=(fixed, layout, z, grid, "vector"),
                method="lm",
                verbose=0,
            )
            return _SolverOutcome(np.asarray(res.x, dtype=float), int(res.status), "least_squares")
        except ValueError as exc:
            logger.debug("least_squares could not run (" + str(exc) + "), using Nelder-Mead.")
    else:
        logger.debug(
            "least_squares not used (solver=" + solver + ", " + str(z.size)
            + " residuals, " + str(p0.size) + " free parameters), using Nelder-Mead."
        )

    res = minimize(
        _spot_residual,
        p0,
        args=(fixed, layout, z, grid, "scalar"),
        method="Nelder-Mead",
        options={"disp": False},
    )
    return _SolverOutcome(np.asarray(res.x, dtype=float), 1 if res.success else 0, "nelder-mead")


# ---------- Result assembly ----------

def _assemble_result(
    outcome: _SolverOutcome,
    fixed: np.ndarray,
    layout: _ParamLayout,
    init: GaussianParams,
) -> GaussianParams:
    """
    Six-tuple from the solver vector. A failed solve keeps the starting
    values and flags itself with FAILED_FIT_AMPLITUDE.
    """
    if outcome.exitflag <= 0:
        return init._replace(amp=FAILED_FIT_AMPLITUDE)
    return _join_params(outcome.x, fixed, layout)


# ---------- Public API ----------

def fit_spot_gaussian2d(
    spot_image: ArrayOrDA,
    mode: Union[FitMode, str] = FitMode.FULL,
    *,
    debug: bool = False,
    symmetric: bool = False,
    start_params: Optional[Sequence[float]] = None,
    solver: str = "auto",
) -> GaussianParams:
    """
    Fit an axis-aligned 2D Gaussian to an image patch holding one spot.

    The model is ``bkgnd + amp * exp(-x_var*(x-x_cen)**2 - y_var*(y-y_cen)**2)``
    on 1-based pixel coordinates (x along columns, y along rows).

    Parameters
    ----------
    spot_image
        2-D numpy.ndarray, dask.array.Array, or xarray.DataArray.
    mode
        FitMode or one of "full", "vars", "background":
          - "full": fit all six parameters (five when symmetric).
          - "vars": keep the center at its start value, fit widths,
            background and amplitude.
          - "background": keep center and widths, fit background and
            amplitude.
        "vars" and "background" are meant to be used with ``start_params``.
    debug
        Log the layout, solver path and result at INFO level.
    symmetric
        Force ``y_var == x_var``.
    start_params
        (x_cen, y_cen, x_var, y_var, bkgnd, amp) replacing all heuristic
        starting values.
    solver
        "auto" (least_squares when it can run, else Nelder-Mead),
        "least_squares", or "nelder-mead".

    Returns
    -------
    GaussianParams
        Always fully populated. When the solver does not converge, the
        starting values are returned with ``amp == FAILED_FIT_AMPLITUDE``;
        see :func:`is_failed_fit`.

    Raises
    ------
    InvalidInputError
        For images that are not 2-D (e.g. a movie stack), empty or
        non-finite images, unknown modes and malformed options.
    """
    z = _ensure_spot_image(spot_image)
    config = _make_fit_config(
        mode,
        debug=debug,
        symmetric=symmetric,
        start_params=start_params,
        solver=solver,
    )

    if config.mode is not FitMode.FULL and config.start_params is None:
        logger.warning(
            "Mode '" + config.mode.value + "' without start_params; "
            "pinned parameters use heuristic starting values."
        )

    layout = _get_layout(config.mode, config.symmetric)
    init = _initial_params(z, config.start_params, config.symmetric)
    p0, fixed = _split_params(init, layout)
    grid = _pixel_grid(z.shape)

    outcome = _run_solver(p0, fixed, layout, z, grid, solver=config.solver)
    result = _assemble_result(outcome, fixed, layout, init)

    if outcome.exitflag <= 0:
        logger.warning(
            outcome.solver + " did not converge (exitflag " + str(outcome.exitflag)
            + "), returning starting values."
        )
    if config.debug:
        logger.info("free parameters " + str(layout.free) + ", fixed " + str(layout.fixed))
        logger.info("start " + str(init))
        logger.info("solver " + outcome.solver + ", exitflag " + str(outcome.exitflag))
        logger.info("result " + str(result))

    return result
