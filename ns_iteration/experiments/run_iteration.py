"""Hydra-powered CLI to run one Newton-Schulz trajectory on a 3×3 matrix.

Example:
    python -m ns_iteration.experiments.run_iteration degree=5 iterations=10 \
        'matrix=[[2,1,0],[0,1,0],[0,0,0.5]]' plot=true
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import hydra
import matplotlib
import wandb
from hydra.core.config_store import ConfigStore
from omegaconf import DictConfig, OmegaConf

from ns_iteration.iteration.driver import RunConfig, run_with_summary
from ns_iteration.iteration.polynomial import get_degree_names
from ns_iteration.utils.metrics import orth_error
from ns_iteration.utils.plotting import plot_singular_value_path
from ns_iteration.utils.readout import format_snapshot
from ns_iteration.utils.wandb_process import (
    data_which_histogram_looks_like_an_arr,
    snapshot_log_dict,
)


# -----------------------------------------------------------------------------
#  Configuration
# -----------------------------------------------------------------------------
@dataclass
class WandbCfg:
    project: str = "newton-schulz-iteration"
    mode: str = "disabled"  # "online", "offline" or "disabled"


@dataclass
class Config:
    matrix: List[List[float]] = field(
        default_factory=lambda: [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]
    )
    degree: int = 3  # one of get_degree_names()
    coefficients: Optional[List[float]] = None  # None -> defaults for `degree`
    iterations: int = 6
    normalize: bool = True
    norm_eps: float = 0.0
    plot: bool = False
    out_file: str = "singular_value_path"
    wandb: WandbCfg = field(default_factory=WandbCfg)


cs = ConfigStore.instance()
cs.store(name="run_iteration_cfg", node=Config)


def build_run_config(cfg: DictConfig) -> RunConfig:
    coeffs = cfg.coefficients
    return RunConfig(
        matrix=[[float(v) for v in row] for row in cfg.matrix],
        degree=int(cfg.degree),
        coefficients=None if coeffs is None else [float(c) for c in coeffs],
        iterations=int(cfg.iterations),
        normalize=bool(cfg.normalize),
        norm_eps=float(cfg.norm_eps),
    )


def describe_polynomial(run_cfg: RunConfig) -> str:
    degrees = ", ".join(str(d) for d in sorted(get_degree_names()))
    return (
        f"Polynomial: degree={run_cfg.polynomial.degree} (available: {degrees}), "
        f"coefficients={list(run_cfg.polynomial.coefficients)}"
    )


# -----------------------------------------------------------------------------
#  Entry point
# -----------------------------------------------------------------------------
@hydra.main(version_base="1.3", config_name="run_iteration_cfg")
def main(cfg: DictConfig):
    print("==== Newton-Schulz iteration ====")
    print(OmegaConf.to_yaml(cfg))
    run_cfg = build_run_config(cfg)
    print(describe_polynomial(run_cfg))

    wandb.init(
        project=cfg.wandb.project,
        mode=cfg.wandb.mode,
        config=OmegaConf.to_container(cfg, resolve=True),
    )
    result = run_with_summary(run_cfg)
    for snap in result.snapshots:
        print(format_snapshot(snap))
        err = float("nan") if snap.unstable else orth_error(snap.matrix)
        wandb.log(snapshot_log_dict(snap, err))

    final = result.final
    if not final.unstable:
        peak = max(1.0, max(final.singular_values))
        hist_data, _ = data_which_histogram_looks_like_an_arr(
            [v / peak for v in final.singular_values]
        )
        if hist_data:
            wandb.log({"final_sigma_hist": wandb.Histogram(hist_data)})

    if result.first_unstable_step is not None:
        print(
            f"Numerical instability detected at step {result.first_unstable_step}. "
            "Iteration stopped afterwards."
        )
    else:
        print(f"Completed {len(result.snapshots) - 1} steps without instability.")

    if cfg.plot:
        matplotlib.use("Agg")
        plot_singular_value_path(result.snapshots, cfg.out_file)
    wandb.finish()


if __name__ == "__main__":
    main()
