"""
Visualization utilities for the TSP genetic algorithm.

Plots best-length convergence curves and, for instances with coordinates,
the best tour itself.
"""

from pathlib import Path
from typing import Dict, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np

from .data_models import Instance


def plot_convergence(
    histories: Dict[str, list[float]],
    output_path: Union[str, Path],
    title: str = "Best tour length per generation",
    figsize: Tuple[int, int] = (10, 6)
) -> Path:
    """
    Plot one or more best-length traces on a shared axis.

    Args:
        histories: Mapping of run label to best-length trace
        output_path: Path to save PNG file
        title: Figure title
        figsize: Figure size (width, height) in inches

    Returns:
        Path to saved figure

    Example:
        plot_convergence(
            {'tournament': result_a.history, 'proportional': result_b.history},
            Path("results/convergence.png")
        )
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=figsize)

    for label, history in histories.items():
        ax.plot(range(len(history)), history, label=f"{label} ({history[-1]:.2f})")

    ax.set_xlabel("Generation")
    ax.set_ylabel("Best tour length")
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.legend()

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)

    return output_path


def plot_tour(
    instance: Instance,
    tour: np.ndarray,
    output_path: Union[str, Path],
    title: str = "",
    figsize: Tuple[int, int] = (8, 8)
) -> Path:
    """
    Draw a closed tour over the instance's node coordinates.

    Raises:
        ValueError: If the instance carries no coordinates
    """
    if instance.coords is None:
        raise ValueError(f"Instance '{instance.name}' has no coordinates to plot")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Close the cycle by repeating the start node
    ordered = instance.coords[np.append(tour, tour[0])]

    fig, ax = plt.subplots(figsize=figsize)
    ax.plot(ordered[:, 0], ordered[:, 1], '-', color='steelblue', linewidth=1.2, zorder=1)
    ax.scatter(instance.coords[:, 0], instance.coords[:, 1], s=25, color='red', zorder=2)
    ax.scatter(*instance.coords[tour[0]], s=80, color='green', marker='s', zorder=3, label='start')

    for node, (x, y) in enumerate(instance.coords):
        ax.annotate(str(node), (x, y), textcoords='offset points', xytext=(3, 3), fontsize=7)

    ax.set_title(title or f"Tour for {instance.name}")
    ax.set_aspect('equal', adjustable='datalim')
    ax.legend(loc='best')

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)

    return output_path
