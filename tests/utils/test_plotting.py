import os

import numpy as np
import pytest
import xarray as xr

os.environ.setdefault("MPLBACKEND", "Agg")
import matplotlib
import matplotlib.pyplot as plt

from spotfit.model import make_spot_gauss2d
from spotfit.utils.plotting import plot_spot_fit

PARAMS = (6.0, 5.0, 0.3, 0.2, 0.1, 0.8)


@pytest.fixture(autouse=True)
def _silence_plots(monkeypatch: pytest.MonkeyPatch) -> None:
    matplotlib.use("Agg", force=True)
    plt.ioff()
    monkeypatch.setattr(plt, "show", lambda *a, **k: None, raising=False)
    yield
    plt.close("all")


def test_four_titled_panels():
    z = make_spot_gauss2d((10, 12), PARAMS)
    fig = plot_spot_fit(z, PARAMS)
    titles = [ax.get_title() for ax in fig.axes]
    assert titles == ["Original image", "Best-fit Gaussian", "Overlay", "Difference"]


def test_zlim_and_dataarray_input():
    z = xr.DataArray(make_spot_gauss2d((10, 12), PARAMS), dims=("y", "x"))
    fig = plot_spot_fit(z, PARAMS, zlim=(0, 1), show=False)
    for ax in fig.axes:
        assert ax.get_zlim() == pytest.approx((0, 1))


def test_rejects_stack():
    with pytest.raises(ValueError):
        plot_spot_fit(np.zeros((2, 4, 4)), PARAMS)
