"""Singular values and orthogonality diagnostics for 3×3 matrices."""

from __future__ import annotations

import math
from typing import Tuple

import torch

from .matrix_ops import frobenius_norm, identity, is_finite, multiply, transpose

NAN_SINGULAR_VALUES: Tuple[float, float, float] = (math.nan, math.nan, math.nan)

_PAIRS = ((0, 1), (0, 2), (1, 2))


class ExtractionFailure(RuntimeError):
    """Raised when the Jacobi sweep cannot produce singular values."""


@torch.no_grad()
def singular_values(
    A: torch.Tensor, max_sweeps: int = 30, tol: float = 1e-14
) -> Tuple[float, float, float]:
    """Singular values of a finite 3×3 matrix, largest first.

    One-sided Jacobi: rotate column pairs of A until they are mutually
    orthogonal, then the column norms are the singular values. A is first
    divided by its largest absolute entry so the squared column norms cannot
    overflow, and the result is multiplied back at the end.
    """
    if not is_finite(A):
        raise ExtractionFailure("matrix has non-finite entries")
    peak = A.abs().max().item()
    if peak == 0.0:
        return (0.0, 0.0, 0.0)

    U = A / peak
    # columns whose squared norm falls below this are rounding noise
    negligible = (tol * tol) * (U * U).sum().item()
    for _ in range(max_sweeps):
        rotated = False
        for p, q in _PAIRS:
            alpha = torch.dot(U[:, p], U[:, p]).item()
            beta = torch.dot(U[:, q], U[:, q]).item()
            gamma = torch.dot(U[:, p], U[:, q]).item()
            if min(alpha, beta) <= negligible:
                continue
            if abs(gamma) <= tol * math.sqrt(alpha * beta):
                continue
            rotated = True
            zeta = (beta - alpha) / (2.0 * gamma)
            t = math.copysign(1.0, zeta) / (abs(zeta) + math.sqrt(1.0 + zeta * zeta))
            c = 1.0 / math.sqrt(1.0 + t * t)
            s = c * t
            col_p = U[:, p].clone()
            col_q = U[:, q].clone()
            U[:, p] = c * col_p - s * col_q
            U[:, q] = s * col_p + c * col_q
        if not rotated:
            break
    else:
        raise ExtractionFailure(f"Jacobi sweep did not converge in {max_sweeps} sweeps")

    sigma = sorted((peak * torch.linalg.vector_norm(U[:, k]).item() for k in range(3)), reverse=True)
    if not all(math.isfinite(v) for v in sigma):
        raise ExtractionFailure("singular values are not finite")
    return (sigma[0], sigma[1], sigma[2])


@torch.no_grad()
def orth_error(A: torch.Tensor) -> float:
    """Frobenius norm of AᵀA - I."""
    return frobenius_norm(multiply(transpose(A), A) - identity())
