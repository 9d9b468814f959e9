"""
Selection of the threshold levels to trace.
"""
import logging

import numpy as np

logger = logging.getLogger(__name__)


def select_levels(max_value, step):
    """Ascending levels step, 2*step, ... up to the largest multiple of `step` not above `max_value`.

    Args:
        `max_value` (float): largest finite value of the field.
        `step` (float): level step, must be positive.

    Returns:
        list: the levels, empty when `max_value` is missing, not finite or below one step.
    """
    if step is None or not step > 0:
        raise ValueError('Level step must be strictly positive, got {}'.format(step))
    if max_value is None or not np.isfinite(max_value) or max_value <= 0:
        logger.warning('No levels to trace for maximum value %s', max_value)
        return []

    n_levels = int(np.floor(max_value / step))
    # guard against round-off just below an exact multiple
    if (n_levels + 1) * step <= max_value * (1 + 1e-9):
        n_levels += 1
    return [step * n for n in range(1, n_levels + 1)]

def is_heavy(level, heavy_step, rtol=1e-9):
    """Check whether `level` is an exact multiple of the coarse `heavy_step`."""
    ratio = level / heavy_step
    return abs(ratio - round(ratio)) <= rtol * max(1., abs(ratio))
