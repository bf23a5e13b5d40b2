import numpy as np
import pytest

from tissue_pipeline.configs.config import SegmentationConfig
from tissue_pipeline.evaluation.statistics import compute_slice_stats
from tissue_pipeline.segmentation.tissue import (
    TissueMaskSet,
    TissueSegmenter,
    resolve_priority,
)
from tissue_pipeline.utils.errors import DegenerateInputError, InvalidInputError

from .conftest import AIR, CENTER


def test_phantom_classes(phantom):
    masks = TissueSegmenter().segment(phantom)

    assert masks.is_disjoint()
    assert not masks.degenerate
    assert masks.bone[CENTER, CENTER]
    assert masks.muscle[CENTER, CENTER + 20]
    assert masks.fat[CENTER, CENTER + 36]

    for _, mask in masks.items():
        assert not mask[2, 2]


def test_gas_pocket_counts_as_body_and_muscle(phantom):
    segmenter = TissueSegmenter()
    gas = (CENTER - 15, CENTER)

    assert phantom[gas] < segmenter.config.body_threshold
    assert segmenter.body_mask(phantom)[gas]
    assert segmenter.segment(phantom).muscle[gas]


def test_noisy_phantom_masks_disjoint(noisy_phantom):
    masks = TissueSegmenter().segment(noisy_phantom)
    assert masks.is_disjoint()
    assert masks.bone.sum() > 0 and masks.muscle.sum() > 0 and masks.fat.sum() > 0


def test_isolated_bright_speck_is_not_bone(phantom):
    field = phantom.copy()
    field[CENTER, CENTER + 36] = 500.0  # inside the fat rim

    masks = TissueSegmenter().segment(field)
    assert not masks.bone[CENTER, CENTER + 36]


def test_all_background_gives_empty_masks(air_field):
    masks = TissueSegmenter().segment(air_field)

    assert masks.degenerate
    assert masks.shape == air_field.shape
    for _, mask in masks.items():
        assert not mask.any()

    stats = compute_slice_stats(air_field, masks)
    for tissue in stats.as_dict().values():
        assert (tissue.pixel_count, tissue.mean, tissue.std) == (0, 0.0, 0.0)


def test_body_mask_raises_degenerate(air_field):
    with pytest.raises(DegenerateInputError) as exc_info:
        TissueSegmenter().body_mask(air_field)
    assert exc_info.value.body_pixels == 0


def test_minimal_four_by_four_field(permissive_config):
    field = np.full((4, 4), -1024.0, dtype=np.float32)
    field[0, 0] = -100.0
    field[1, 2] = 50.0
    field[3, 1] = 500.0

    segmenter = TissueSegmenter(permissive_config)
    body = segmenter.body_mask(field)
    assert body.sum() == 3

    masks = segmenter.segment(field)
    assert np.argwhere(masks.fat).tolist() == [[0, 0]]
    assert np.argwhere(masks.muscle).tolist() == [[1, 2]]
    assert np.argwhere(masks.bone).tolist() == [[3, 1]]

    stats = compute_slice_stats(field, masks)
    assert stats.fat.pixel_count == 1 and stats.fat.mean == pytest.approx(-100.0)
    assert stats.muscle.pixel_count == 1 and stats.muscle.mean == pytest.approx(50.0)
    assert stats.bone.pixel_count == 1 and stats.bone.mean == pytest.approx(500.0)


def test_segmentation_is_deterministic_and_stable(noisy_phantom):
    segmenter = TissueSegmenter()
    first = segmenter.segment(noisy_phantom)
    second = segmenter.segment(noisy_phantom.copy())
    assert first.equals(second)

    resolved_again = resolve_priority(first.fat, first.muscle, first.bone)
    assert resolved_again.equals(first)


def test_resegmenting_own_output_is_stable(noisy_phantom, permissive_config):
    segmenter = TissueSegmenter(permissive_config)
    first = segmenter.segment(noisy_phantom)

    union = first.fat | first.muscle | first.bone
    restricted = np.where(union, noisy_phantom, AIR).astype(np.float32)
    second = segmenter.segment(restricted)

    assert second.equals(first)
    # Gas pocket is still absorbed by the muscle hole fill
    assert second.muscle[CENTER - 15, CENTER]


def test_priority_muscle_next_to_bone_is_cleared():
    bone = np.zeros((9, 9), dtype=bool)
    bone[2:7, 2:7] = True

    # Muscle candidate overlapping the whole bone block and its right neighbour
    muscle = np.zeros_like(bone)
    muscle[2:7, 2:8] = True

    fat = np.zeros_like(bone)
    fat[:, 6:] = True

    masks = resolve_priority(fat, muscle, bone, bone_erosion_radius=1)

    assert masks.is_disjoint()
    assert np.array_equal(masks.bone, bone)
    assert not (masks.muscle & bone).any()
    assert masks.muscle[2:7, 7].all()
    # Fat loses to both bone and muscle
    assert not masks.fat[2:7, 6:8].any()
    assert masks.fat[0, 6] and masks.fat[8, 8]


def test_resolve_priority_shape_mismatch():
    with pytest.raises(InvalidInputError):
        resolve_priority(np.zeros((4, 4)), np.zeros((4, 5)), np.zeros((4, 4)))


@pytest.mark.parametrize(
    "field",
    [
        np.zeros((0, 0), dtype=np.float32),
        np.zeros((4, 4, 4), dtype=np.float32),
        np.array([[0.0, np.nan], [1.0, 2.0]], dtype=np.float32),
        None,
    ],
)
def test_invalid_fields_raise(field):
    with pytest.raises(InvalidInputError):
        TissueSegmenter().segment(field)


def test_mask_set_is_read_only(phantom):
    masks = TissueSegmenter().segment(phantom)
    with pytest.raises(ValueError):
        masks.bone[0, 0] = True


def test_mask_set_rejects_mismatched_shapes():
    with pytest.raises(InvalidInputError):
        TissueMaskSet(
            fat=np.zeros((4, 4), bool),
            muscle=np.zeros((4, 4), bool),
            bone=np.zeros((5, 4), bool),
        )


def test_config_bands_are_used(phantom):
    # Moving the muscle band away from 40 HU leaves the disc unclassified
    config = SegmentationConfig(muscle_range=(60.0, 120.0))
    masks = TissueSegmenter(config).segment(phantom)
    assert not masks.muscle[CENTER, CENTER + 20]
    assert masks.bone[CENTER, CENTER]
