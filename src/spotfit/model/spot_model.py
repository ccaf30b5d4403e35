from __future__ import annotations

from typing import Literal, Sequence, Tuple, Union
import numpy as np
import xarray as xr

OutputKind = Literal["numpy", "xarray"]


def _pixel_grid(shape: Tuple[int, int]) -> Tuple[np.ndarray, np.ndarray]:
    """
    (X, Y) pixel coordinate grids for an image of ``shape`` (ny, nx).

    Columns map to x and rows to y, both counted from 1 so that the
    geometric center of a patch of width W sits near x = W/2.
    """
    ny, nx = shape
    Y, X = np.mgrid[1 : ny + 1, 1 : nx + 1]
    return X.astype(float), Y.astype(float)


def _spot_gauss2d(
    X: np.ndarray,
    Y: np.ndarray,
    x_cen: float,
    y_cen: float,
    x_var: float,
    y_var: float,
    bkgnd: float,
    amp: float,
) -> np.ndarray:
    """
    Axis-aligned 2D Gaussian plus constant background.

    ``x_var``/``y_var`` multiply the squared offsets directly in the exponent.
    """
    return bkgnd + amp * np.exp(-x_var * (X - x_cen) ** 2 - y_var * (Y - y_cen) ** 2)


def make_spot_gauss2d(
    shape: Tuple[int, int],
    params: Sequence[float],
    output: OutputKind = "numpy",
) -> Union[np.ndarray, xr.DataArray]:
    """
    Render a spot Gaussian over a pixel grid.

    Parameters
    ----------
    shape
        (ny, nx) of the grid, e.g. ``spot_image.shape``.
    params
        (x_cen, y_cen, x_var, y_var, bkgnd, amp). A
        :class:`spotfit.fitting.GaussianParams` works as is.
    output
        "numpy" for a plain array, "xarray" for a DataArray with dims
        ("y", "x") carrying the 1-based pixel coordinates.

    Returns
    -------
    numpy.ndarray or xarray.DataArray
        Surface of shape ``shape``.
    """
    if len(shape) != 2:
        raise ValueError("shape must be (ny, nx).")
    if len(params) != 6:
        raise ValueError(
            "params must be (x_cen, y_cen, x_var, y_var, bkgnd, amp); "
            f"got {len(params)} values."
        )
    if output not in ("numpy", "xarray"):
        raise ValueError("output must be 'numpy' or 'xarray'.")

    X, Y = _pixel_grid((int(shape[0]), int(shape[1])))
    surface = _spot_gauss2d(X, Y, *(float(p) for p in params))

    if output == "xarray":
        return xr.DataArray(
            surface,
            dims=("y", "x"),
            coords={"y": Y[:, 0], "x": X[0, :]},
            name="spot_model",
        )
    return surface
