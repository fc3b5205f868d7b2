from .iteration.driver import RunConfig, Snapshot, first_unstable_step, run, run_with_summary
from .iteration.polynomial import (
    InvalidCoefficients,
    OddPolynomial,
    UnsupportedDegree,
    build_polynomial,
)
from .utils.metrics import singular_values
__all__ = [
    "RunConfig",
    "Snapshot",
    "run",
    "run_with_summary",
    "first_unstable_step",
    "OddPolynomial",
    "build_polynomial",
    "UnsupportedDegree",
    "InvalidCoefficients",
    "singular_values",
]
