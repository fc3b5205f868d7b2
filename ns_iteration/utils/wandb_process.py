import math


def data_which_histogram_looks_like_an_arr(
    arr: list[float], scale: float = 1000.0
) -> tuple[list[float], float]:
    """

    Because wandb doesn't support visualizing lists of floats, we need to process the data,
    so that it's histogram looks like the original array.

    Non-finite and negative heights contribute no samples.

    """

    integer_heights = [int(x * scale) if math.isfinite(x) and x > 0 else 0 for x in arr]

    out = []
    # `val = ind - 0.5` will appear in `out` the number of times equal to `integer_heights[ind]`
    for ind, height in enumerate(integer_heights):
        out.extend([ind - 0.5] * height)

    return out, scale


def snapshot_log_dict(snapshot, orth_err: float) -> dict:
    """Flatten one snapshot into wandb.log keys."""
    log_dict = {
        "step": snapshot.step,
        "unstable": int(snapshot.unstable),
        "orth_error": orth_err,
    }
    for k, v in enumerate(snapshot.singular_values):
        log_dict[f"sigma/{k + 1}"] = v
    return log_dict
