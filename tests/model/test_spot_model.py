import numpy as np
import pytest
import xarray as xr

from spotfit.model import make_spot_gauss2d


class TestMakeSpotGauss2d:
    def test_peak_sits_on_one_based_center(self) -> None:
        z = make_spot_gauss2d((5, 7), (4.0, 3.0, 1.0, 1.0, 2.0, 10.0))
        assert z.shape == (5, 7)
        # x = column + 1, y = row + 1
        assert np.unravel_index(np.argmax(z), z.shape) == (2, 3)
        assert z[2, 3] == pytest.approx(12.0)

    def test_width_coefficients_used_directly_in_exponent(self) -> None:
        z = make_spot_gauss2d((1, 3), (2.0, 1.0, 0.5, 0.0, 0.0, 1.0))
        assert z[0, 0] == pytest.approx(np.exp(-0.5))
        assert z[0, 2] == pytest.approx(np.exp(-0.5))

    def test_zero_amplitude_is_flat_background(self) -> None:
        z = make_spot_gauss2d((4, 4), (2.0, 2.0, 0.3, 0.3, 7.5, 0.0))
        assert np.all(z == 7.5)

    def test_xarray_output_carries_pixel_coords(self) -> None:
        out = make_spot_gauss2d((3, 4), (2.0, 2.0, 1.0, 1.0, 0.0, 1.0), output="xarray")
        assert isinstance(out, xr.DataArray)
        assert out.dims == ("y", "x")
        assert np.array_equal(out.coords["x"].values, [1.0, 2.0, 3.0, 4.0])
        assert np.array_equal(out.coords["y"].values, [1.0, 2.0, 3.0])
        assert float(out.sel(x=2.0, y=2.0)) == pytest.approx(1.0)

    def test_bad_arguments(self) -> None:
        with pytest.raises(ValueError):
            make_spot_gauss2d((3, 3), (1.0, 2.0, 3.0))
        with pytest.raises(ValueError):
            make_spot_gauss2d((3, 3, 3), (1.0, 1.0, 1.0, 1.0, 0.0, 1.0))
        with pytest.raises(ValueError):
            make_spot_gauss2d((3, 3), (1.0, 1.0, 1.0, 1.0, 0.0, 1.0), output="dask")
