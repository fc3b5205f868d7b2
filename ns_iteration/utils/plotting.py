"""Plotting helpers for singular-value trajectories."""

from __future__ import annotations

import math
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

Point = Tuple[int, Tuple[float, float, float]]


def singular_value_path(snapshots: Sequence) -> List[Point]:
    """(step, (σ1, σ2, σ3)) for every snapshot whose singular values are all finite."""
    return [
        (snap.step, tuple(snap.singular_values))
        for snap in snapshots
        if all(math.isfinite(v) for v in snap.singular_values)
    ]


def scale_path(
    points: Sequence[Point], extent: float = 1.5
) -> Tuple[List[Point], Tuple[float, float, float]]:
    """Rescale the path so its largest component is at most `extent`.

    Components below 1 are never blown up: the scale is extent / max(1, max |σ|).
    Returns the scaled points and the target (1, 1, 1) under the same scale.
    """
    if not points:
        return [], (0.0, 0.0, 0.0)
    peak = max(1.0, max(abs(v) for _, vec in points for v in vec))
    s = extent / peak
    scaled = [(step, tuple(v * s for v in vec)) for step, vec in points]
    return scaled, (s, s, s)


def plot_singular_value_path(snapshots: Sequence, out_png: str) -> Optional[Path]:
    points, target = scale_path(singular_value_path(snapshots))
    if not points:
        print("Not enough valid singular values to plot a trajectory.")
        return None

    xyz = np.array([vec for _, vec in points])
    fig = plt.figure(figsize=(6, 6))
    ax = fig.add_subplot(projection="3d")
    ax.plot(xyz[:, 0], xyz[:, 1], xyz[:, 2], color="#0ea5e9", linewidth=1.5)
    ax.scatter(xyz[:-1, 0], xyz[:-1, 1], xyz[:-1, 2], color="#0ea5e9", s=20, label="Trajectory point")
    ax.scatter(*xyz[-1], color="#f97316", s=60, marker="X", label="Final step")
    ax.scatter(*target, color="#22c55e", s=60, label="Target (1,1,1)")
    for step, vec in points:
        ax.text(*vec, str(step), fontsize=7)
    ax.set_xlabel(r"$\sigma_1$")
    ax.set_ylabel(r"$\sigma_2$")
    ax.set_zlabel(r"$\sigma_3$")
    ax.legend(loc="upper left")

    out_path = Path(out_png).with_suffix(".png")
    fig.savefig(out_path, dpi=200, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved singular value path to {out_path.resolve()}")
    return out_path
