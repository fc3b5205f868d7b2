"""Plain-text rendering of snapshots."""

from __future__ import annotations

import math


def format_number(value: float) -> str:
    if not math.isfinite(value):
        return "NaN"
    return f"{value:.4f}"


def format_snapshot(snapshot) -> str:
    lines = [f"Step {snapshot.step}" + ("  [unstable]" if snapshot.unstable else "")]
    for row in snapshot.matrix.tolist():
        lines.append("  " + "  ".join(f"{format_number(v):>10}" for v in row))
    lines.append(
        "  "
        + "  ".join(
            f"s{k + 1}={format_number(v)}" for k, v in enumerate(snapshot.singular_values)
        )
    )
    return "\n".join(lines)
