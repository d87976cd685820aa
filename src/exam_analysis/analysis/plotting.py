"""
Plotting utilities for analysis results visualization.
"""

from collections.abc import Mapping

import numpy as np
from matplotlib.figure import Figure

from exam_analysis.analysis.data_models import AnalysisResult

# Items below this discrimination are customarily reviewed or revised
DISCRIMINATION_GUIDE = 0.2


def plot_item_map(result: AnalysisResult) -> Figure:
    """
    Scatter of difficulty against discrimination, one point per question.

    Questions without both statistics are left out.
    """
    import matplotlib.pyplot as plt

    points = [
        (r.question_id, r.difficulty_index, r.discrimination_index)
        for r in result.question_results
        if r.difficulty_index is not None
        and r.discrimination_index is not None
    ]

    fig, ax = plt.subplots(figsize=(8, 6))
    if points:
        _, difficulty, discrimination = zip(*points, strict=True)
        ax.scatter(difficulty, discrimination, color="tab:blue")
        for label, x, y in points:
            ax.annotate(
                label,
                (x, y),
                textcoords="offset points",
                xytext=(4, 4),
                fontsize=8,
            )

    ax.axhline(
        DISCRIMINATION_GUIDE,
        color="tab:red",
        linestyle="--",
        linewidth=1,
        label=f"D = {DISCRIMINATION_GUIDE}",
    )
    ax.set_xlim(0, 1)
    ax.set_ylim(-1, 1)
    ax.set_xlabel("Difficulty index (proportion correct)")
    ax.set_ylabel("Discrimination index")
    ax.set_title(f"Item Map: {result.exam_title}")
    ax.legend(loc="lower right")

    fig.tight_layout()
    return fig


def plot_similarity_heatmap(
    matrix: Mapping[str, Mapping[str, float]], title: str
) -> Figure:
    """Heatmap of a square similarity matrix keyed by label."""
    import matplotlib.pyplot as plt

    labels = list(matrix)
    values = np.array(
        [[matrix[row].get(col, 0.0) for col in labels] for row in labels],
        dtype=np.float64,
    ).reshape(len(labels), len(labels))

    size = max(4.0, 0.5 * len(labels) + 2)
    fig, ax = plt.subplots(figsize=(size + 1, size))
    image = ax.imshow(values, cmap="Reds", vmin=0.0, vmax=1.0)
    fig.colorbar(image, ax=ax, label="Similarity")

    ax.set_xticks(range(len(labels)))
    ax.set_yticks(range(len(labels)))
    ax.set_xticklabels(labels, rotation=90)
    ax.set_yticklabels(labels)

    # Annotate cells only while they stay legible
    if len(labels) <= 15:
        for i in range(len(labels)):
            for j in range(len(labels)):
                ax.text(
                    j,
                    i,
                    f"{values[i, j]:.2f}",
                    ha="center",
                    va="center",
                    color="black",
                    fontsize=8,
                )

    ax.set_title(title)

    fig.tight_layout()
    return fig
