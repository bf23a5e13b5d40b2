"""Shared fixtures: synthetic CT phantoms and small models."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest
import torch
from torch import nn

from tissue_pipeline.configs.config import SegmentationConfig

SIZE = 96
CENTER = SIZE // 2
AIR = -1024.0


class ConstantResidual(nn.Module):
    """Predicts the same noise value everywhere."""

    def __init__(self, value: float) -> None:
        super().__init__()
        self.value = value

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return torch.full_like(x, self.value)


class CroppedResidual(nn.Module):
    """Returns a residual with the wrong spatial size."""

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return x[:, :, :1, :]


def _radius_grid():
    yy, xx = np.mgrid[:SIZE, :SIZE]
    return np.hypot(yy - CENTER, xx - CENTER), yy, xx


def make_phantom() -> np.ndarray:
    """
    Body-like HU phantom.

    Disc of muscle (40 HU) with a fat rim (-100 HU, radius 32-40), a bone
    core (700 HU, radius 9) and a small gas pocket (-900 HU) inside the
    muscle, surrounded by air.
    """
    r, yy, xx = _radius_grid()
    field = np.full((SIZE, SIZE), AIR, dtype=np.float32)
    field[r <= 40] = -100.0
    field[r <= 32] = 40.0
    field[r <= 9] = 700.0
    field[np.hypot(yy - (CENTER - 15), xx - CENTER) <= 3] = -900.0
    return field


@pytest.fixture
def phantom() -> np.ndarray:
    return make_phantom()


@pytest.fixture
def noisy_phantom() -> np.ndarray:
    rng = np.random.default_rng(0)
    return make_phantom() + rng.normal(0.0, 5.0, size=(SIZE, SIZE)).astype(np.float32)


@pytest.fixture
def air_field() -> np.ndarray:
    return np.full((32, 32), AIR, dtype=np.float32)


@pytest.fixture
def permissive_config() -> SegmentationConfig:
    """All morphology and size filters disabled, any body size accepted."""
    return SegmentationConfig(
        body_close_radius=0,
        min_body_pixels=1,
        bone_close_radius=0,
        muscle_open_radius=0,
        muscle_close_radius=0,
        fat_open_radius=0,
        fat_min_area=0,
        muscle_min_area=0,
        bone_min_area=0,
        bone_erosion_radius=0,
    )


@pytest.fixture
def torchscript_model(tmp_path):
    """Factory saving a scripted module and returning its path."""

    def _save(module: nn.Module, name: str = "model.pt"):
        path = tmp_path / name
        torch.jit.save(torch.jit.script(module), str(path))
        return path

    return _save
