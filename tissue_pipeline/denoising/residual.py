"""
Residual-learning denoiser adapter.

Wraps a pretrained model that predicts the noise in an 8-bit image and
recovers the clean image as ``clamp(input - residual, 0, 1)``.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np
import torch

from ..models.dncnn import ResidualDenoisingCNN
from ..utils.errors import InferenceError, ModelLoadError
from ..utils.validation import check_image

logger = logging.getLogger(__name__)


class ResidualDenoiser:
    """
    Inference wrapper around a residual (noise-predicting) model.

    Supported artifacts:
    - TorchScript archives (``torch.jit.save``)
    - Torch checkpoints holding a ``ResidualDenoisingCNN`` state dict, either
      bare or under the ``"model_state"`` key
    - ONNX graphs (``.onnx``), run through OpenCV's DNN module

    The loaded model is read-only after construction, so one instance can be
    reused for any number of images.
    """

    def __init__(
        self,
        model_path: Union[str, Path],
        device: Union[str, torch.device] = "cpu",
        num_layers: int = 17,
        features: int = 64,
    ) -> None:
        """
        Load the model artifact.

        Args:
            model_path: Path to the model artifact.
            device: Torch device for TorchScript/checkpoint models.
            num_layers: Depth of ``ResidualDenoisingCNN`` for state-dict checkpoints.
            features: Width of ``ResidualDenoisingCNN`` for state-dict checkpoints.

        Raises:
            ModelLoadError: If the artifact is missing or cannot be loaded.
        """
        self.model_path = Path(model_path)
        self.device = torch.device(device)
        self.num_layers = num_layers
        self.features = features

        self._model: Optional[torch.nn.Module] = None
        self._net = None

        if not self.model_path.is_file():
            raise ModelLoadError(f"Model artifact not found: {self.model_path}")

        try:
            if self.model_path.suffix.lower() == ".onnx":
                self._net = self._load_onnx()
            else:
                self._model = self._load_torch()
        except ModelLoadError:
            raise
        except Exception as e:
            raise ModelLoadError(
                f"Could not load model from {self.model_path}: {e}"
            ) from e

        logger.info(f"Loaded residual denoiser ({self.backend}): {self.model_path.name}")

    @classmethod
    def try_load(
        cls,
        model_path: Optional[Union[str, Path]],
        **kwargs,
    ) -> "DenoiserLoadResult":
        """
        Load a denoiser without raising.

        Args:
            model_path: Path to the model artifact, or None if none is configured.
            **kwargs: Additional arguments for ResidualDenoiser.

        Returns:
            DenoiserLoadResult holding either the denoiser or the load error.
        """
        if model_path is None:
            return DenoiserLoadResult(error=ModelLoadError("No model path configured"))

        try:
            return DenoiserLoadResult(denoiser=cls(model_path, **kwargs))
        except ModelLoadError as e:
            return DenoiserLoadResult(error=e)

    @property
    def backend(self) -> str:
        """Name of the inference backend ("torch" or "onnx")."""
        return "onnx" if self._net is not None else "torch"

    def _load_onnx(self):
        net = cv2.dnn.readNetFromONNX(str(self.model_path))
        if net.empty():
            raise ModelLoadError(f"ONNX graph is empty: {self.model_path}")
        return net

    def _load_torch(self) -> torch.nn.Module:
        try:
            model = torch.jit.load(str(self.model_path), map_location=self.device)
        except (RuntimeError, ValueError):
            # Not TorchScript: expect a state dict for ResidualDenoisingCNN
            checkpoint = torch.load(
                self.model_path, map_location=self.device, weights_only=True
            )
            if isinstance(checkpoint, dict) and "model_state" in checkpoint:
                checkpoint = checkpoint["model_state"]

            model = ResidualDenoisingCNN(
                channels=1,
                num_layers=self.num_layers,
                features=self.features,
            )
            model.load_state_dict(checkpoint)

        model = model.to(self.device)
        model.eval()
        return model

    def predict_residual(self, normalized: np.ndarray) -> np.ndarray:
        """
        Run the model on a [0, 1] float image.

        Args:
            normalized: 2-D float32 image in [0, 1].

        Returns:
            Predicted noise residual with the same shape as the input.

        Raises:
            InferenceError: If the model fails or returns a mismatched shape.
        """
        try:
            if self._net is not None:
                blob = cv2.dnn.blobFromImage(normalized)
                self._net.setInput(blob)
                output = self._net.forward()
            else:
                with torch.no_grad():
                    input_tensor = (
                        torch.from_numpy(normalized)
                        .unsqueeze(0)
                        .unsqueeze(0)
                        .to(self.device)
                    )
                    output = self._model(input_tensor).cpu().numpy()
        except Exception as e:
            raise InferenceError(f"Residual model failed: {e}") from e

        output = np.asarray(output, dtype=np.float32)
        if output.size != normalized.size:
            raise InferenceError(
                f"Residual has {output.size} values, expected {normalized.size} "
                f"for an image of shape {normalized.shape}"
            )

        return output.reshape(normalized.shape)

    def denoise(self, image: np.ndarray) -> np.ndarray:
        """
        Denoise a uint8 visualization image.

        Args:
            image: Single-channel uint8 image.

        Returns:
            Denoised uint8 image of the same shape.
        """
        image = check_image(image)

        normalized = image.astype(np.float32) / 255.0
        residual = self.predict_residual(normalized)

        # The model predicts noise, so the clean image is input minus residual
        clean = np.clip(normalized - residual, 0.0, 1.0)

        return np.rint(clean * 255.0).astype(np.uint8)


@dataclass
class DenoiserLoadResult:
    """Outcome of ``ResidualDenoiser.try_load``: exactly one field is set."""

    denoiser: Optional[ResidualDenoiser] = None
    error: Optional[ModelLoadError] = None

    def __post_init__(self):
        if (self.denoiser is None) == (self.error is None):
            raise ValueError("Exactly one of denoiser or error must be set")

    @property
    def ok(self) -> bool:
        return self.denoiser is not None

    def unwrap(self) -> ResidualDenoiser:
        """Return the denoiser or raise the stored ModelLoadError."""
        if self.error is not None:
            raise self.error
        return self.denoiser
