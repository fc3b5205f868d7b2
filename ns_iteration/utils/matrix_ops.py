"""Fixed-shape 3×3 matrix helpers.

Every function returns a fresh float64 tensor and leaves its inputs alone.
Non-finite entries are legal values here: NaN and Inf simply propagate.
"""

from __future__ import annotations

import math
from typing import Sequence, Union

import torch

SHAPE = (3, 3)
DTYPE = torch.float64

MatrixLike = Union[torch.Tensor, Sequence[Sequence[float]]]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def as_matrix(rows: MatrixLike) -> torch.Tensor:
    """Build a 3×3 float64 matrix from nested numbers or an existing tensor."""
    if isinstance(rows, torch.Tensor):
        M = rows.detach().to(dtype=DTYPE, device="cpu").clone()
    else:
        M = torch.tensor(rows, dtype=DTYPE)
    if tuple(M.shape) != SHAPE:
        raise ValueError(f"Expected a 3x3 matrix, got shape {tuple(M.shape)}")
    return M


def clone(A: torch.Tensor) -> torch.Tensor:
    return A.clone()


def identity() -> torch.Tensor:
    return torch.eye(3, dtype=DTYPE)


def zeros() -> torch.Tensor:
    return torch.zeros(SHAPE, dtype=DTYPE)


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------


def transpose(A: torch.Tensor) -> torch.Tensor:
    return A.transpose(-2, -1).clone()


def add(A: torch.Tensor, B: torch.Tensor) -> torch.Tensor:
    return A + B


def scale(A: torch.Tensor, s: float) -> torch.Tensor:
    return A * s


def multiply(A: torch.Tensor, B: torch.Tensor) -> torch.Tensor:
    """Matrix product, one 3-term dot product per cell."""
    C = torch.empty(SHAPE, dtype=DTYPE)
    for i in range(3):
        for j in range(3):
            C[i, j] = A[i, 0] * B[0, j] + A[i, 1] * B[1, j] + A[i, 2] * B[2, j]
    return C


def gram(X: torch.Tensor) -> torch.Tensor:
    """X Xᵀ"""
    return multiply(X, transpose(X))


# ---------------------------------------------------------------------------
# Norms & finiteness
# ---------------------------------------------------------------------------


def frobenius_norm(A: torch.Tensor) -> float:
    return math.sqrt((A * A).sum().item())


def is_finite(A: torch.Tensor) -> bool:
    """True iff all nine entries are finite reals."""
    return bool(torch.isfinite(A).all())


def normalize(A: torch.Tensor, eps: float = 0.0) -> torch.Tensor:
    """Divide by the Frobenius norm unless the norm is non-finite or <= eps."""
    n = frobenius_norm(A)
    if math.isfinite(n) and n > eps:
        return scale(A, 1.0 / n)
    return clone(A)
