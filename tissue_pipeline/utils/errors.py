"""
Exception types raised by the tissue pipeline.

Model loading problems are recoverable (the pipeline switches to a classical
denoiser); input problems always propagate to the caller.
"""


class TissuePipelineError(Exception):
    """Base class for all pipeline errors."""


class ModelLoadError(TissuePipelineError):
    """The residual denoising model artifact is missing or cannot be loaded."""


class InferenceError(TissuePipelineError):
    """The residual denoising model failed while running on an image."""


class InvalidInputError(TissuePipelineError, ValueError):
    """An empty or malformed field, image or mask was passed in."""


class DegenerateInputError(TissuePipelineError):
    """
    The body region of a slice is too small to segment.

    Raised by the body-mask step and converted into empty masks by the
    segmenter, so callers only see it when they use the step directly.
    """

    def __init__(self, body_pixels: int, min_body_pixels: int) -> None:
        super().__init__(
            f"Body mask has {body_pixels} pixels, "
            f"fewer than the required {min_body_pixels}"
        )
        self.body_pixels = body_pixels
        self.min_body_pixels = min_body_pixels
