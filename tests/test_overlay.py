import numpy as np
import pytest

from tissue_pipeline.configs.config import OverlayConfig
from tissue_pipeline.rendering.evidence import morphology_evidence
from tissue_pipeline.rendering.overlay import OverlayRenderer, mask_outline
from tissue_pipeline.segmentation.tissue import TissueMaskSet
from tissue_pipeline.utils.errors import InvalidInputError


def _masks(shape=(20, 20)):
    fat = np.zeros(shape, dtype=bool)
    fat[2:8, 2:8] = True
    muscle = np.zeros(shape, dtype=bool)
    muscle[10:16, 2:8] = True
    bone = np.zeros(shape, dtype=bool)
    bone[10:16, 10:16] = True
    return TissueMaskSet(fat=fat, muscle=muscle, bone=bone)


def test_blend_without_outlines():
    base = np.full((20, 20), 100, dtype=np.uint8)
    renderer = OverlayRenderer(OverlayConfig(draw_outlines=False))

    overlay = renderer.render(base, _masks())

    assert overlay.shape == (20, 20, 3)
    assert overlay.dtype == np.uint8
    # Unmasked pixels keep the gray value in all channels
    assert overlay[0, 19].tolist() == [100, 100, 100]
    # 0.45 * 100 + 0.55 * (0, 200, 255)
    assert overlay[4, 4].tolist() == [45, 155, 185]
    # Bone colour (255, 255, 0)
    assert overlay[12, 12].tolist() == [185, 185, 45]


def test_outlines_use_darker_class_colour():
    base = np.zeros((20, 20), dtype=np.uint8)
    renderer = OverlayRenderer(OverlayConfig(alpha=0.6, outline_shade=0.5))
    masks = _masks()

    overlay = renderer.render(base, masks)

    edges = mask_outline(masks.bone, renderer.config.outline_thickness)
    assert edges.any()
    ys, xs = np.nonzero(edges & masks.bone)
    # Bone outline colour is half of (255, 255, 0)
    assert overlay[ys[0], xs[0]].tolist() == [128, 128, 0]


def test_bgr_base_is_accepted_and_not_modified():
    base = np.full((20, 20, 3), 50, dtype=np.uint8)
    before = base.copy()

    overlay = OverlayRenderer().render(base, _masks())

    assert overlay.shape == base.shape
    assert np.array_equal(base, before)


def test_empty_masks_return_gray_copy():
    base = np.arange(400, dtype=np.uint8).reshape(20, 20)
    overlay = OverlayRenderer().render(base, TissueMaskSet.empty((20, 20)))

    for channel in range(3):
        assert np.array_equal(overlay[:, :, channel], base)


def test_shape_mismatch_raises():
    base = np.zeros((10, 10), dtype=np.uint8)
    with pytest.raises(InvalidInputError):
        OverlayRenderer().render(base, _masks())


def test_non_uint8_base_raises():
    with pytest.raises(InvalidInputError):
        OverlayRenderer().render(np.zeros((20, 20), dtype=np.float32), _masks())


def test_morphology_evidence_outputs():
    rng = np.random.default_rng(3)
    image = rng.integers(0, 256, size=(32, 32), dtype=np.uint8)

    evidence = morphology_evidence(image)

    assert set(evidence) == {"smoothed", "edges", "erosion", "dilation", "tophat", "blackhat"}
    for output in evidence.values():
        assert output.shape == image.shape
        assert output.dtype == np.uint8
    assert (evidence["erosion"] <= image).all()
    assert (evidence["dilation"] >= image).all()
