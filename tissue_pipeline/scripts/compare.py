#!/usr/bin/env python3
"""
Denoising comparison for CT slices.

Usage:
    python -m tissue_pipeline.scripts.compare --input volume.nii.gz --slice 40 --output ./outputs
    python -m tissue_pipeline.scripts.compare --input slice.npy --model dncnn.pt --figure
"""

import argparse
import logging
from pathlib import Path

import cv2
from tqdm.auto import tqdm

from tissue_pipeline.configs.config import Config
from tissue_pipeline.data.preprocessing.windowing import WINDOW_PRESETS, preset_bounds
from tissue_pipeline.pipeline.comparison import ComparisonPipeline
from tissue_pipeline.rendering.evidence import morphology_evidence
from tissue_pipeline.utils.io import load_slice, save_comparison
from tissue_pipeline.visualization.figure import plot_comparison

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Compare raw, classical and residual-CNN denoising by tissue segmentation"
    )

    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="HU volume or slice (.npy, .npz, .nii, .nii.gz)",
    )
    parser.add_argument(
        "--slice",
        type=int,
        nargs="+",
        default=[0],
        help="Slice index (or indices) to process",
    )
    parser.add_argument(
        "--axis",
        type=int,
        default=None,
        help="Slice axis (default: last for NIfTI, first for NPY/NPZ)",
    )
    parser.add_argument(
        "--window",
        choices=sorted(WINDOW_PRESETS),
        help="Display window preset (overrides config window)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML configuration file",
    )
    parser.add_argument(
        "--model",
        type=Path,
        help="Residual denoiser artifact (overrides config)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("outputs"),
        help="Output directory",
    )
    parser.add_argument(
        "--figure",
        action="store_true",
        help="Also save a side-by-side comparison figure",
    )
    parser.add_argument(
        "--evidence",
        action="store_true",
        help="Also save edge and morphology intermediate images",
    )

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    if not args.input.exists():
        logger.error(f"Input not found: {args.input}")
        return 1

    config = Config.from_yaml(args.config) if args.config else Config()
    if args.model:
        config.denoise.model_path = args.model
    if args.window:
        config.window.low, config.window.high = preset_bounds(args.window)

    pipeline = ComparisonPipeline(config)

    for index in tqdm(args.slice, desc="Slices"):
        hu_field = load_slice(args.input, index=index, axis=args.axis)
        result = pipeline.run(hu_field)

        slice_dir = args.output / f"slice_{index:04d}"
        save_comparison(result, slice_dir)

        if args.figure:
            plot_comparison(result, output_path=slice_dir / "comparison.png")

        if args.evidence:
            evidence_dir = slice_dir / "intermediates"
            evidence_dir.mkdir(parents=True, exist_ok=True)
            for name, image in morphology_evidence(result.variant("raw").image).items():
                cv2.imwrite(str(evidence_dir / f"{name}.png"), image)

        logger.info(
            f"Slice {index} (advanced: {result.advanced_method})\n"
            f"{result.statistics_table().round(1).to_string()}"
        )

    logger.info(f"Saved to: {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
