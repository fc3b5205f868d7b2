from .driver import IterationResult, RunConfig, Snapshot, record_snapshot, run
from .polynomial import OddPolynomial, build_polynomial, get_default_coefficients
