"""
Turns a size budget and a duration into a constant target bitrate.
"""
import math


def plan_bitrate(target_budget_kib: float, duration_seconds: float) -> int:
    """
    First-order estimate of the bitrate that fits `target_budget_kib` into
    `duration_seconds`: `floor(budget * 8 / duration)` kbps.

    Container overhead is ignored; budgets are chosen below the hard ceiling
    to absorb it.

    Raises:
        ValueError: If the duration is not positive.
    """
    if duration_seconds <= 0:
        raise ValueError(f"Duration must be positive, got {duration_seconds}")
    return math.floor(target_budget_kib * 8 / duration_seconds)
