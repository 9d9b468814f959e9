"""
Module to reassemble open runs of one level that were fragmented by the tracer.

Two runs are joined when a pair of their endpoints is within tolerance and the local tangent directions at
those endpoints are compatible. The scan is first-match: the first pair of runs (and the first of the four
end pairings) that passes both checks is merged, and the scan restarts until a full pass merges nothing.
"""
import enum
import logging

import numpy as np

from .runs import Run, RunKind
from .utils import points_close, unit_vector

logger = logging.getLogger(__name__)


class Pairing(enum.Enum):
    END_START = 'end-start'
    END_END = 'end-end'
    START_START = 'start-start'
    START_END = 'start-end'


# fixed enumeration order of the end pairings of a run pair (A, B)
PAIRINGS = (Pairing.END_START, Pairing.END_END, Pairing.START_START, Pairing.START_END)


class RunArena():
    """
    Runs of one level addressed by index.

    Merging never mutates a run in place: the merged run is appended to the arena and the working set of live
    indices is replaced, with the merged run taking the slot of the first run and the second run removed.
    """
    def __init__(self, runs):
        self._runs = list(runs)
        self._live = tuple(range(len(self._runs)))

    def __getitem__(self, index):
        return self._runs[index]

    def __len__(self):
        return len(self._live)

    @property
    def live(self):
        return self._live

    def runs(self):
        return [self._runs[index] for index in self._live]

    def merge(self, i, j, pairing, eps=1e-9):
        """Merge live runs `i` and `j` along `pairing`.

        Returns:
            tuple: the new working set of live indices.
        """
        merged = Run(join_points(self._runs[i].points, self._runs[j].points, pairing, eps), RunKind.OPEN)
        self._runs.append(merged)
        new_index = len(self._runs) - 1
        self._live = tuple(new_index if index == i else index for index in self._live if index != j)
        return self._live


def join_points(a, b, pairing, eps=1e-9):
    """Concatenate two point arrays in the orientation implied by `pairing`, a coincident joint is kept once."""
    if pairing is Pairing.END_START:
        first, second = a, b
    elif pairing is Pairing.END_END:
        first, second = a, b[::-1]
    elif pairing is Pairing.START_START:
        first, second = a[::-1], b
    else:
        first, second = b, a
    if points_close(first[-1], second[0], eps):
        second = second[1:]
    return np.vstack((first, second))

def end_direction(run, which):
    """Unit tangent at an end of a run, oriented along the run (first to second point, or second-last to last)."""
    if len(run) < 2:
        return None
    if which == 'start':
        return unit_vector(run.points[0], run.points[1])
    return unit_vector(run.points[-2], run.points[-1])

def directions_compatible(a, b, pairing, cos_threshold=0.85):
    """Check if the tangents of runs `a` and `b` at the joint of `pairing` are aligned within `cos_threshold`."""
    if pairing is Pairing.END_START:
        dir_a, dir_b = end_direction(a, 'end'), end_direction(b, 'start')
    elif pairing is Pairing.END_END:
        dir_a, dir_b = end_direction(a, 'end'), end_direction(b, 'end')
        dir_b = -dir_b if dir_b is not None else None
    elif pairing is Pairing.START_START:
        dir_a, dir_b = end_direction(a, 'start'), end_direction(b, 'start')
        dir_a = -dir_a if dir_a is not None else None
    else:
        dir_a, dir_b = end_direction(b, 'end'), end_direction(a, 'start')
    if dir_a is None or dir_b is None:
        return False
    return float(np.dot(dir_a, dir_b)) >= cos_threshold

def endpoints_close(p, q, field, config):
    """Check if two endpoints are within the axis scaled join tolerance, tighter on the boundary of the field."""
    tol_year = config.join_tol_cells * field.year_step
    tol_age = config.join_tol_cells * field.age_step
    if field.on_boundary(p, config.boundary_eps) or field.on_boundary(q, config.boundary_eps):
        tol_year *= config.boundary_tol_factor
        tol_age *= config.boundary_tol_factor
    return abs(p[0] - q[0]) <= tol_year and abs(p[1] - q[1]) <= tol_age

def same_wall(p, q, field, eps=1e-6):
    """Both endpoints terminate on the top or both on the bottom edge of the field."""
    return ((field.on_top(p, eps) and field.on_top(q, eps))
            or (field.on_bottom(p, eps) and field.on_bottom(q, eps)))

def find_pairing(a, b, field, config):
    """First pairing of runs `a` and `b`, in the fixed enumeration order, that passes both join checks."""
    ends = {
        Pairing.END_START: (a.end, b.start),
        Pairing.END_END: (a.end, b.end),
        Pairing.START_START: (a.start, b.start),
        Pairing.START_END: (a.start, b.end),
    }
    for pairing in PAIRINGS:
        p, q = ends[pairing]
        if same_wall(p, q, field, config.boundary_eps):
            continue
        if not endpoints_close(p, q, field, config):
            continue
        if not directions_compatible(a, b, pairing, config.cos_threshold):
            continue
        return pairing
    return None

def stitch_runs(runs, field, config):
    """Merge the open runs of one level until no pair can be joined.

    Args:
        `runs` (list): runs of one level, closed runs are passed through untouched.
        `field` (GridField): the field, used for grid steps and boundary checks.
        `config` (ContourConfig): tolerances.

    Returns:
        list, int: closed runs followed by the stitched open runs, and the number of merges.
    """
    closed = [run for run in runs if run.closed]
    arena = RunArena(run for run in runs if not run.closed)

    merges = 0
    merged = True
    while merged:
        merged = False
        live = arena.live
        for i_pos, i in enumerate(live):
            for j in live[i_pos + 1:]:
                pairing = find_pairing(arena[i], arena[j], field, config)
                if pairing is None:
                    continue
                logger.debug('merge runs %d and %d along %s', i, j, pairing.value)
                arena.merge(i, j, pairing, config.point_eps)
                merges += 1
                merged = True
                break
            if merged:
                break

    return closed + arena.runs(), merges
