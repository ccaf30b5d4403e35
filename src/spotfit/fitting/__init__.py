from .spot_gaussian2d_fit import (
    FAILED_FIT_AMPLITUDE,
    FitConfig,
    FitMode,
    GaussianParams,
    InvalidInputError,
    fit_spot_gaussian2d,
    is_failed_fit,
)
