import cv2
import numpy as np

from tissue_pipeline.segmentation.postprocessing import (
    apply_erosion,
    apply_morphological_closing,
    apply_morphological_opening,
    disk,
    fill_holes,
    remove_small_components,
)


def test_disk_sizes():
    assert disk(1).shape == (3, 3)
    assert disk(2).shape == (5, 5)


def test_disk_matches_opencv_ellipse():
    for radius in (1, 2, 3):
        size = 2 * radius + 1
        expected = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (size, size))
        assert np.array_equal(disk(radius), expected.astype(bool))

    element = disk(2)
    assert element[1:4].all()
    assert element[0].tolist() == [False, False, True, False, False]


def test_fill_holes_fills_enclosed_background_only():
    mask = np.zeros((7, 7), dtype=bool)
    mask[1:6, 1:6] = True
    mask[3, 3] = False  # enclosed

    filled = fill_holes(mask)

    assert filled[3, 3]
    assert not filled[0, 0]
    assert not filled[6, 6]
    assert filled.sum() == 25


def test_fill_holes_keeps_border_open_cavities():
    mask = np.zeros((5, 5), dtype=bool)
    mask[1:4, 1:4] = True
    mask[2, 2] = False
    mask[2, 1] = False  # opens the hole to the outside ring

    filled = fill_holes(mask)
    assert not filled[2, 2]


def test_remove_small_components():
    mask = np.zeros((10, 10), dtype=bool)
    mask[0:3, 0:3] = True  # 9 pixels
    mask[7, 7] = True  # 1 pixel

    filtered = remove_small_components(mask, min_size=5)
    assert filtered[1, 1]
    assert not filtered[7, 7]

    assert np.array_equal(remove_small_components(mask, min_size=0), mask)


def test_opening_removes_speck_closing_bridges_gap():
    mask = np.zeros((12, 12), dtype=bool)
    mask[2:10, 2:5] = True
    mask[2:10, 6:9] = True  # one-pixel gap at column 5
    mask[0, 11] = True  # speck

    opened = apply_morphological_opening(mask, radius=1)
    assert not opened[0, 11]
    assert opened[5, 3]

    closed = apply_morphological_closing(mask, radius=1)
    assert closed[5, 5]


def test_closing_does_not_erode_border_regions():
    mask = np.zeros((6, 6), dtype=bool)
    mask[:, :3] = True

    closed = apply_morphological_closing(mask, radius=2)
    assert closed[:, :3].all()


def test_zero_radius_is_identity():
    mask = np.eye(5, dtype=bool)
    for op in (apply_morphological_opening, apply_morphological_closing, apply_erosion):
        out = op(mask, radius=0)
        assert np.array_equal(out, mask)
        assert out is not mask
