import numpy as np
import pytest

from tissue_pipeline.configs.config import WindowConfig
from tissue_pipeline.data.preprocessing.windowing import preset_bounds, window_to_uint8


def test_window_endpoints_and_clamping():
    field = np.array([[-1024.0, 40.0], [400.0, 3000.0]], dtype=np.float32)
    image = window_to_uint8(field, 40.0, 400.0)

    assert image.dtype == np.uint8
    assert image.tolist() == [[0, 0], [255, 255]]


def test_window_is_monotonic():
    field = np.linspace(-200, 600, 81, dtype=np.float32).reshape(9, 9)
    image = window_to_uint8(field).ravel().astype(int)
    assert (np.diff(image) >= 0).all()


def test_invalid_window_raises():
    with pytest.raises(ValueError):
        window_to_uint8(np.zeros((2, 2)), 100.0, 100.0)


def test_musculoskeletal_preset_is_default_window():
    default = WindowConfig()
    assert preset_bounds("musculoskeletal") == (default.low, default.high)
    assert preset_bounds("bone") == (-350.0, 1150.0)


def test_unknown_preset_raises():
    with pytest.raises(ValueError):
        preset_bounds("lung_fancy")
