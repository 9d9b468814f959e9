"""
Filtering of the finished runs of a level.
"""
from .levels import is_heavy
from .utils import bbox_area


def keep_run(run, level, field, config):
    """Decide whether a finished run is drawn.

    Runs with fewer than 2 points are never kept. Heavy levels keep every other run, the runs of the remaining
    levels need at least `config.min_run_points` points and a bounding box of at least
    `config.min_bbox_cells` grid cells.
    """
    if len(run) < 2:
        return False
    if is_heavy(level, config.heavy_step):
        return True
    if len(run) < config.min_run_points:
        return False
    return bbox_area(run.points) >= config.min_bbox_cells * field.cell_area

def filter_runs(runs, level, field, config):
    return [run for run in runs if keep_run(run, level, field, config)]
