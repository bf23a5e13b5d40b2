"""
Comparison figure for the denoising variants.

One column per variant plus the extra NLMeans column. Overlay row on top,
denoised grayscale row below and the raw-slice tissue statistics as a table.
"""

from pathlib import Path
from typing import Optional, Union

import matplotlib.pyplot as plt

TITLES = {
    "raw": "Original",
    "classical": "Gaussian",
    "advanced": {"residual": "Residual CNN", "nl_means": "NLMeans"},
}
EXTRA_TITLES = {"nl_means": "NLMeans (classical masks)"}


def _title(variant) -> str:
    title = TITLES.get(variant.name, variant.name)
    if isinstance(title, dict):
        title = title.get(variant.method, variant.method)
    return title


def plot_comparison(
    result,
    output_path: Optional[Union[str, Path]] = None,
    show: bool = False,
    figsize: tuple = (19, 11),
) -> plt.Figure:
    """
    Plot a ComparisonResult side by side.

    Args:
        result: ComparisonResult from ComparisonPipeline.run.
        output_path: Optional path to save figure.
        show: Whether to display the plot.
        figsize: Figure size (width, height).

    Returns:
        Matplotlib Figure object.
    """
    columns = [(_title(v), v.overlay, v.image) for v in result.variants]
    for name, overlay in result.extra_overlays.items():
        columns.append(
            (EXTRA_TITLES.get(name, name), overlay, result.extra_images.get(name))
        )

    fig = plt.figure(figsize=figsize)
    gs = fig.add_gridspec(3, len(columns), height_ratios=[4, 4, 1.2])

    for col, (title, overlay, image) in enumerate(columns):
        # Overlays are BGR
        ax_overlay = fig.add_subplot(gs[0, col])
        ax_overlay.imshow(overlay[:, :, ::-1])
        ax_overlay.set_title(title)
        ax_overlay.axis("off")

        ax_gray = fig.add_subplot(gs[1, col])
        ax_gray.axis("off")
        if image is not None:
            ax_gray.imshow(image, cmap="gray", vmin=0, vmax=255)

    table_ax = fig.add_subplot(gs[2, :])
    table_ax.axis("off")

    df = result.statistics_table()
    cell_text = [
        [f"{row.mean:.1f}", f"{row.std:.1f}", f"{int(row.pixel_count)}"]
        for row in df.itertuples()
    ]
    table = table_ax.table(
        cellText=cell_text,
        rowLabels=[name.capitalize() for name in df.index],
        colLabels=["Mean HU", "Std HU", "Pixels"],
        loc="center",
    )
    table.scale(1, 1.4)

    plt.tight_layout()

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=150, bbox_inches="tight")

    if show:
        plt.show()
    else:
        plt.close(fig)

    return fig
