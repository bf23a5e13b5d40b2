"""Classical and residual-learning denoisers."""

from .classical import gaussian_blur, nl_means, smooth_field
from .residual import DenoiserLoadResult, ResidualDenoiser

__all__ = [
    "gaussian_blur",
    "nl_means",
    "smooth_field",
    "ResidualDenoiser",
    "DenoiserLoadResult",
]
