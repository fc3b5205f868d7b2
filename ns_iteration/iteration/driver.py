"""Iterate an odd polynomial on a 3×3 matrix and record every step."""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import torch

from ns_iteration.iteration.polynomial import (
    OddPolynomial,
    build_polynomial,
    get_default_coefficients,
)
from ns_iteration.utils.matrix_ops import (
    MatrixLike,
    as_matrix,
    clone,
    identity,
    is_finite,
    normalize,
)
from ns_iteration.utils.metrics import (
    NAN_SINGULAR_VALUES,
    ExtractionFailure,
    singular_values,
)


@dataclass(frozen=True, eq=False)
class RunConfig:
    matrix: Optional[MatrixLike] = None
    degree: int = 3
    coefficients: Optional[Sequence[float]] = None  # None -> registered defaults
    iterations: int = 6
    normalize: bool = True
    norm_eps: float = 0.0
    polynomial: OddPolynomial = field(init=False, repr=False)

    def __post_init__(self):
        if isinstance(self.iterations, bool) or not isinstance(self.iterations, numbers.Integral):
            raise ValueError(f"iterations must be an integer, got {self.iterations!r}")
        if self.iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {self.iterations}")
        matrix = identity() if self.matrix is None else as_matrix(self.matrix)
        object.__setattr__(self, "matrix", matrix)
        # fail fast on a bad degree/coefficient pair
        object.__setattr__(self, "polynomial", self._build_polynomial())

    def _build_polynomial(self) -> OddPolynomial:
        coeffs = self.coefficients
        if coeffs is None:
            coeffs = get_default_coefficients(self.degree)
        return build_polynomial(self.degree, coeffs)


@dataclass(frozen=True, eq=False)
class Snapshot:
    """One recorded step.

    `matrix` is a private copy of the iterate. The dataclass is frozen but the
    tensor is not, so callers must treat it as read-only.
    """

    step: int
    matrix: torch.Tensor
    singular_values: Tuple[float, float, float]
    unstable: bool


@dataclass(frozen=True, eq=False)
class IterationResult:
    snapshots: List[Snapshot]
    first_unstable_step: Optional[int]

    @property
    def final(self) -> Snapshot:
        return self.snapshots[-1]


def record_snapshot(matrix: torch.Tensor, step: int) -> Snapshot:
    """Snapshot `matrix`; singular values are only extracted from finite matrices."""
    unstable = not is_finite(matrix)
    sigma = NAN_SINGULAR_VALUES
    if not unstable:
        try:
            sigma = singular_values(matrix)
        except ExtractionFailure:
            unstable = True
    return Snapshot(step=step, matrix=clone(matrix), singular_values=sigma, unstable=unstable)


def run(cfg: RunConfig) -> List[Snapshot]:
    """Apply cfg.polynomial up to cfg.iterations times, stopping after the first unstable step."""
    current = clone(cfg.matrix)
    if cfg.normalize:
        current = normalize(current, eps=cfg.norm_eps)

    snapshots = [record_snapshot(current, 0)]
    for step in range(1, cfg.iterations + 1):
        if snapshots[-1].unstable:
            break
        current = cfg.polynomial(current)
        snapshots.append(record_snapshot(current, step))
    return snapshots


def first_unstable_step(snapshots: Sequence[Snapshot]) -> Optional[int]:
    for snap in snapshots:
        if snap.unstable:
            return snap.step
    return None


def run_with_summary(cfg: RunConfig) -> IterationResult:
    snapshots = run(cfg)
    return IterationResult(snapshots, first_unstable_step(snapshots))
