"""
Module for tracing raw contour lines for a list of levels in a field on an age,year grid.

Two tracers are provided:
- `trace_rings` runs marching squares over the grid and returns rings of (fractional column, fractional row)
  points per level, these still need splitting, stitching and snapping,
- `trace_columns` sweeps the year columns and chains the analytic column crossings into runs of (year, age)
  points per level.
"""
import logging

import contourpy
import numpy as np

logger = logging.getLogger(__name__)


# marching squares
def trace_rings(z, levels):
    """Trace the rings of every level in a 2D field with marching squares.

    Args:
        `z` (array_like): 2D (rows, cols) array of values, NaN for missing values.
        `levels` (list): ascending threshold levels.

    Returns:
        list: per level a list of rings, each ring an (n,2) array of (fractional column, fractional row) points.
              Closed rings repeat their first point, open rings end on the grid boundary or on missing values.
    """
    z = np.ma.masked_invalid(np.asarray(z, dtype=float))
    if z.ndim != 2:
        raise ValueError('z must be 2D')
    if z.count() == 0 or min(z.shape) < 2:
        return [[] for _ in levels]

    generator = contourpy.contour_generator(z=z, line_type=contourpy.LineType.Separate)

    rings = []
    for level in levels:
        rings.append([np.asarray(line, dtype=float) for line in generator.lines(level)])
    return rings

def flatten_rings(entries):
    """Flatten tracer output for one level that nests rings inside polygons.

    A tracer may return either a list of rings or a list of polygons that each hold a list of rings,
    both are accepted. Entries that can not be interpreted are skipped.

    Returns:
        list: the rings.
    """
    rings = []
    for entry in entries:
        try:
            depth = np.ndim(entry[0][0]) if len(entry) else 0
        except (TypeError, IndexError):
            depth = 0
        if depth == 1:
            # polygon of rings
            rings.extend(entry)
        else:
            rings.append(entry)
    return rings

def validate_ring(ring):
    """Convert a raw ring to an (n,2) float array.

    Returns:
        ndarray: the ring, or None if it has fewer than 2 points, the wrong shape or non-finite coordinates.
    """
    try:
        points = np.asarray(ring, dtype=float)
    except (TypeError, ValueError):
        return None
    if points.ndim != 2 or points.shape[1] != 2 or points.shape[0] < 2:
        return None
    if not np.all(np.isfinite(points)):
        return None
    return points


# column sweep
def match_ordered(a, c, max_dist):
    """Order preserving matching of two sorted sequences.

    Maximizes the number of matched pairs (a[i], c[j]) with |a[i] - c[j]| <= max_dist, and among those the
    total distance is minimized. Neither sequence may be crossed over: matches are increasing in i and j.

    Args:
        `a` (list): sorted values, e.g. the last ages of the active runs.
        `c` (list): sorted values, e.g. the crossing ages in the next column.
        `max_dist` (float): maximum distance of a matched pair.

    Returns:
        list: matched (i, j) index pairs.
    """
    m, n = len(a), len(c)
    # best[i][j] = (matches, cost) for the suffixes a[i:], c[j:], choice 0: skip a, 1: skip c, 2: match
    best = [[(0, 0.)] * (n + 1) for _ in range(m + 1)]
    choice = [[-1] * (n + 1) for _ in range(m + 1)]
    for i in range(m - 1, -1, -1):
        for j in range(n - 1, -1, -1):
            current = best[i + 1][j]
            current_choice = 0
            skip_c = best[i][j + 1]
            if skip_c[0] > current[0] or (skip_c[0] == current[0] and skip_c[1] < current[1]):
                current, current_choice = skip_c, 1
            dist = abs(a[i] - c[j])
            if dist <= max_dist:
                nxt = best[i + 1][j + 1]
                candidate = (nxt[0] + 1, nxt[1] + dist)
                if candidate[0] > current[0] or (candidate[0] == current[0] and candidate[1] < current[1]):
                    current, current_choice = candidate, 2
            best[i][j] = current
            choice[i][j] = current_choice

    matches = []
    i, j = 0, 0
    while i < m and j < n:
        if choice[i][j] == 2:
            matches.append((i, j))
            i += 1
            j += 1
        elif choice[i][j] == 1:
            j += 1
        else:
            i += 1
    return matches

def trace_columns(field, levels, max_join_age_steps=2, optimal=True):
    """Trace every level by chaining the analytic crossings of consecutive year columns.

    Args:
        `field` (GridField): the field.
        `levels` (list): threshold levels.
        `max_join_age_steps` (float, optional): maximum age jump between chained crossings in age steps. Defaults to 2.
        `optimal` (bool, optional): [True] order preserving optimal matching of runs and crossings,
                                    [False] greedy nearest crossing per run. Defaults to True.

    Returns:
        list: per level a list of (n,2) arrays of (year, age) points, each with at least 2 points.
    """
    max_join_age = max_join_age_steps * field.age_step
    runs_by_level = []
    for level in levels:
        crossings_by_col = [field.crossings_along_column(level, col) for col in range(field.cols)]

        finished = []
        active = []
        for col, year in enumerate(field.years):
            crossings = crossings_by_col[col]
            used = np.zeros(len(crossings), dtype=bool)
            next_active = []

            if optimal and active and len(crossings):
                active_sorted = sorted(range(len(active)), key=lambda k: active[k][-1][1])
                last_ages = [active[k][-1][1] for k in active_sorted]
                matched = set()
                for i_a, i_c in match_ordered(last_ages, crossings, max_join_age):
                    run = active[active_sorted[i_a]]
                    run.append((float(year), float(crossings[i_c])))
                    used[i_c] = True
                    next_active.append(run)
                    matched.add(active_sorted[i_a])
                finished.extend(run for k, run in enumerate(active) if k not in matched)
            else:
                for run in active:
                    dist = np.abs(crossings - run[-1][1])
                    dist[used] = np.inf
                    i_best = int(np.argmin(dist)) if dist.size else -1
                    if i_best >= 0 and dist[i_best] <= max_join_age:
                        run.append((float(year), float(crossings[i_best])))
                        used[i_best] = True
                        next_active.append(run)
                    else:
                        finished.append(run)

            # unmatched crossings start new runs
            for i_c in np.nonzero(~used)[0]:
                next_active.append([(float(year), float(crossings[i_c]))])
            active = next_active
        finished.extend(active)

        runs = [np.array(run) for run in finished if len(run) >= 2]
        logger.debug('column sweep level=%s runs=%d', level, len(runs))
        runs_by_level.append(runs)

    return runs_by_level
