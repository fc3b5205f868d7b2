"""Odd matrix polynomials of degree 3 and 5.

Implements:
- `OddPolynomial`, a frozen (degree, coefficients) value applied to a matrix
- validation errors for unsupported degrees and mismatched coefficients
- a registry of default coefficient sets per degree
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import torch

from ns_iteration.utils.matrix_ops import add, gram, multiply, scale

SUPPORTED_DEGREES = (3, 5)


class UnsupportedDegree(ValueError):
    pass


class InvalidCoefficients(ValueError):
    pass


def coefficient_count(degree: int) -> int:
    """Number of coefficients an odd polynomial of `degree` takes."""
    if degree not in SUPPORTED_DEGREES:
        raise UnsupportedDegree(
            f"Unsupported degree {degree}, choose one of {SUPPORTED_DEGREES}"
        )
    return (degree + 1) // 2


def _check_coefficients(degree: int, coefficients: Sequence[float]) -> Tuple[float, ...]:
    expected = coefficient_count(degree)
    coeffs = tuple(coefficients)
    if len(coeffs) != expected:
        raise InvalidCoefficients(
            f"Degree {degree} takes {expected} coefficients, got {len(coeffs)}"
        )
    for c in coeffs:
        if isinstance(c, bool) or not isinstance(c, numbers.Real):
            raise InvalidCoefficients(f"Coefficient {c!r} is not a real number")
    return tuple(float(c) for c in coeffs)


# ---------- Polynomial ----------
@dataclass(frozen=True)
class OddPolynomial:
    """p(X) = a0 X + a1 (XXᵀ)X [+ a2 (XXᵀ)²X]"""

    degree: int
    coefficients: Tuple[float, ...]

    def __post_init__(self):
        object.__setattr__(
            self, "coefficients", _check_coefficients(self.degree, self.coefficients)
        )

    @torch.no_grad()
    def apply(self, X: torch.Tensor) -> torch.Tensor:
        G = gram(X)
        GX = multiply(G, X)
        out = add(scale(X, self.coefficients[0]), scale(GX, self.coefficients[1]))
        if self.degree == 5:
            out = add(out, scale(multiply(G, GX), self.coefficients[2]))
        return out

    def __call__(self, X: torch.Tensor) -> torch.Tensor:
        return self.apply(X)


def build_polynomial(degree: int, coefficients: Sequence[float]) -> OddPolynomial:
    return OddPolynomial(degree, tuple(coefficients))


# ---------- Default coefficients ----------
_DEFAULT_COEFFICIENTS: Dict[int, Tuple[float, ...]] = {}


def get_degree_names() -> list[int]:
    """Degrees that have a registered coefficient set."""
    return list(_DEFAULT_COEFFICIENTS.keys())


def register_coefficients(degree: int, coefficients: Sequence[float]):
    _DEFAULT_COEFFICIENTS[degree] = _check_coefficients(degree, coefficients)


def get_default_coefficients(degree: int) -> Tuple[float, ...]:
    if degree not in _DEFAULT_COEFFICIENTS:
        raise UnsupportedDegree(f"No default coefficients for degree {degree}")
    return _DEFAULT_COEFFICIENTS[degree]


# Register defaults (classic cubic Newton-Schulz and the Muon quintic)
register_coefficients(3, (1.5, -0.5))
register_coefficients(5, (3.4445, -4.775, 2.0315))
