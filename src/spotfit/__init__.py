from .fitting import (
    FAILED_FIT_AMPLITUDE,
    FitMode,
    GaussianParams,
    InvalidInputError,
    fit_spot_gaussian2d,
    is_failed_fit,
)
from .model import make_spot_gauss2d

__version__ = "0.1.0"
