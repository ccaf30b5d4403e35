from typing import Optional, Sequence, Tuple

import numpy as np
import xarray as xr

from spotfit.model.spot_model import make_spot_gauss2d


def plot_spot_fit(
    spot_image,
    params: Sequence[float],
    zlim: Optional[Tuple[float, float]] = None,
    show: bool = True,
):
    """
    Surface plots of a spot image against its fitted Gaussian.

    Four panels: original image, best-fit Gaussian, the two overlaid, and
    the difference (image minus fit).

    Parameters
    ----------
    spot_image : numpy.ndarray or xarray.DataArray
        The 2D image that was fit.
    params : sequence of float
        (x_cen, y_cen, x_var, y_var, bkgnd, amp), e.g. the result of
        ``fit_spot_gaussian2d``.
    zlim : tuple of float, optional
        Shared z-axis limits, e.g. (0, 1) for normalized images.
    show : bool
        Call ``plt.show()`` before returning.

    Returns
    -------
    matplotlib.figure.Figure
    """
    try:
        import matplotlib.pyplot as plt  # type: ignore
    except Exception as exc:  # pragma: no cover
        raise RuntimeError("Matplotlib is required for plot_spot_fit.") from exc

    z = np.asarray(spot_image.values if isinstance(spot_image, xr.DataArray) else spot_image, dtype=float)
    if z.ndim != 2:
        raise ValueError("plot_spot_fit expects a 2D spot image.")

    model = make_spot_gauss2d(z.shape, params, output="xarray")
    X, Y = np.meshgrid(model.coords["x"].values, model.coords["y"].values)
    fit = model.values

    fig = plt.figure(figsize=(9, 7))
    panels = [
        ("Original image", [(z, "surface", "gray")]),
        ("Best-fit Gaussian", [(fit, "surface", "jet")]),
        ("Overlay", [(z, "surface", "pink"), (fit, "wireframe", None)]),
        ("Difference", [(z - fit, "surface", "hot")]),
    ]
    for i, (title, layers) in enumerate(panels):
        ax = fig.add_subplot(2, 2, i + 1, projection="3d")
        for surface, kind, cmap in layers:
            if kind == "surface":
                ax.plot_surface(X, Y, surface, cmap=cmap)
            else:
                ax.plot_wireframe(X, Y, surface, color="k", linewidth=0.5)
        ax.set_title(title, fontsize=14)
        ax.set_xlabel("x")
        ax.set_ylabel("y")
        if zlim is not None:
            ax.set_zlim(*zlim)

    plt.tight_layout()
    if show:
        plt.show()
    return fig
