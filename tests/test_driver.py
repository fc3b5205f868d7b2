import math

import pytest
import torch

from ns_iteration.iteration.driver import (
    RunConfig,
    first_unstable_step,
    record_snapshot,
    run,
    run_with_summary,
)
from ns_iteration.iteration.polynomial import InvalidCoefficients, UnsupportedDegree
from ns_iteration.utils.matrix_ops import identity, scale, zeros
from ns_iteration.utils.metrics import ExtractionFailure


def test_zero_iterations_identity_normalized():
    snaps = run(RunConfig(matrix=identity(), degree=5, iterations=0, normalize=True))
    assert len(snaps) == 1
    s = snaps[0]
    k = 1 / math.sqrt(3)
    assert s.step == 0
    assert not s.unstable
    assert torch.allclose(s.matrix, scale(identity(), k))
    for v in s.singular_values:
        assert v == pytest.approx(k)


def test_blow_up_stops_early():
    cfg = RunConfig(
        matrix=scale(identity(), 10.0),
        degree=3,
        coefficients=[1, 1],
        iterations=50,
        normalize=False,
    )
    result = run_with_summary(cfg)
    assert len(result.snapshots) < 51
    assert result.final.unstable
    assert result.first_unstable_step == result.final.step
    assert all(not s.unstable for s in result.snapshots[:-1])
    assert all(math.isnan(v) for v in result.final.singular_values)


def test_runs_are_reproducible():
    g = torch.Generator().manual_seed(0)
    M = torch.randn(3, 3, generator=g, dtype=torch.float64)
    cfg = RunConfig(matrix=M, degree=5, iterations=8)
    a, b = run(cfg), run(cfg)
    assert len(a) == len(b)
    for x, y in zip(a, b):
        assert x.step == y.step
        assert torch.equal(x.matrix, y.matrix)
        assert x.singular_values == y.singular_values
        assert x.unstable == y.unstable


def test_zero_matrix_normalize_is_noop():
    snaps = run(RunConfig(matrix=zeros(), iterations=3, normalize=True))
    assert torch.equal(snaps[0].matrix, zeros())
    assert not any(s.unstable for s in snaps)
    assert len(snaps) == 4


def test_cubic_converges_towards_orthogonal():
    M = [[2.0, 1.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 0.5]]
    snaps = run(RunConfig(matrix=M, degree=3, iterations=40, normalize=True))
    assert len(snaps) == 41
    for v in snaps[-1].singular_values:
        assert v == pytest.approx(1.0, abs=1e-6)


def test_input_matrix_is_not_mutated():
    M = scale(identity(), 2.0)
    before = M.clone()
    cfg = RunConfig(matrix=M, iterations=3)
    run(cfg)
    assert torch.equal(M, before)
    assert torch.equal(cfg.matrix, before)


def test_steps_are_sequential():
    snaps = run(RunConfig(iterations=5))
    assert [s.step for s in snaps] == list(range(6))
    assert first_unstable_step(snaps) is None


def test_default_matrix_and_coefficients():
    cfg = RunConfig()
    assert torch.equal(cfg.matrix, identity())
    assert cfg.polynomial.coefficients == (1.5, -0.5)
    assert RunConfig(degree=5).polynomial.coefficients == (3.4445, -4.775, 2.0315)


def test_bad_configuration_fails_fast():
    with pytest.raises(UnsupportedDegree):
        RunConfig(degree=4)
    with pytest.raises(InvalidCoefficients):
        RunConfig(degree=5, coefficients=[1.0, 0.0])
    with pytest.raises(ValueError):
        RunConfig(iterations=-1)


def test_non_finite_initial_matrix():
    M = identity()
    M[1, 1] = float("inf")
    snaps = run(RunConfig(matrix=M, iterations=10, normalize=True))
    assert len(snaps) == 1
    assert snaps[0].unstable
    assert first_unstable_step(snaps) == 0


def test_extraction_failure_marks_unstable(monkeypatch):
    import ns_iteration.iteration.driver as driver

    def _fail(_):
        raise ExtractionFailure("no convergence")

    monkeypatch.setattr(driver, "singular_values", _fail)
    snap = record_snapshot(identity(), 3)
    assert snap.unstable
    assert snap.step == 3
    assert all(math.isnan(v) for v in snap.singular_values)


def test_snapshot_owns_its_matrix():
    M = identity()
    snap = record_snapshot(M, 0)
    M[0, 0] = 5.0
    assert snap.matrix[0, 0].item() == 1.0


def test_finite_matrix_with_overflowing_singular_values():
    M = torch.full((3, 3), 1e308, dtype=torch.float64)
    snap = record_snapshot(M, 0)
    assert snap.unstable
    assert all(math.isnan(v) for v in snap.singular_values)

    snaps = run(RunConfig(matrix=M, iterations=5, normalize=True))
    assert len(snaps) == 1
    assert snaps[0].unstable
    assert first_unstable_step(snaps) == 0


@pytest.mark.parametrize("iterations", [2.5, "3", True])
def test_non_integer_iterations_rejected(iterations):
    with pytest.raises(ValueError):
        RunConfig(iterations=iterations)
