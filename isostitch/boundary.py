"""
Module to place the endpoints of open runs exactly on the outer rectangle of the field.

The tracer only approximates where an isoline leaves the grid. The snapper recomputes each endpoint from the
analytic crossing of the level along the nearest side of the rectangle, and the age-zero re-assigner makes sure
that distinct runs ending on the age-zero edge claim distinct crossings.
"""
import logging

import numpy as np
from scipy import spatial

from .utils import clamp

logger = logging.getLogger(__name__)

SIDES = ('top', 'bottom', 'left', 'right')


def nearest_side(point, field, eps=1e-6):
    """Side of the rectangle nearest to `point`, among the sides within one grid step, None if there is none."""
    year, age = point
    distances = {
        'top': abs(age - field.age_min),
        'bottom': abs(field.age_max - age),
        'left': abs(year - field.year_min),
        'right': abs(field.year_max - year),
    }
    steps = {'top': field.age_step, 'bottom': field.age_step, 'left': field.year_step, 'right': field.year_step}
    candidates = [side for side in SIDES if distances[side] <= steps[side] + eps]
    if not candidates:
        return None
    # stable on ties: top, bottom, left, right
    return min(candidates, key=lambda side: distances[side])

def snap_endpoint(point, level, field, eps=1e-6):
    """Replace an approximate endpoint by the analytic crossing of `level` on the nearest side of the field.

    Args:
        `point` (tuple): (year, age) endpoint.
        `level` (float): the level of the run.
        `field` (GridField): the field.
        `eps` (float, optional): boundary tolerance. Defaults to 1e-6.

    Returns:
        tuple: the snapped (year, age), or `point` unchanged if no side qualifies or the level does not cross it.
    """
    side = nearest_side(point, field, eps)
    if side is None:
        return point
    year, age = point

    if side in ('top', 'bottom'):
        age_fixed = field.age_min if side == 'top' else field.age_max
        year_target = clamp(year, field.year_min, field.year_max)
        year_cross = field.nearest_row_crossing(level, age_fixed, year_target)
        if year_cross is None:
            return point
        return (clamp(year_cross, field.year_min, field.year_max), age_fixed)

    col = 0 if side == 'left' else field.cols - 1
    age_cross = field.age_crossing(level, col, field.row_below(age))
    if age_cross is None:
        return point
    return (float(field.years[col]), age_cross)

def snap_runs(runs, level, field, eps=1e-6):
    """Snap the first and last point of every open run, interior points are left untouched.

    Returns:
        int: number of endpoints that moved.
    """
    n_snapped = 0
    for run in runs:
        if run.closed or len(run) < 2:
            continue
        for which in ('start', 'end'):
            point = run.start if which == 'start' else run.end
            snapped = snap_endpoint(tuple(point), level, field, eps)
            if snapped == tuple(point):
                continue
            if which == 'start':
                run.set_start(snapped)
            else:
                run.set_end(snapped)
            n_snapped += 1
    return n_snapped

def nearest_unclaimed(dist_row, claimed):
    """Index of the smallest distance whose crossing is not claimed yet, None if all are claimed."""
    dist_row = np.array(dist_row, dtype=float)
    if claimed:
        dist_row[list(claimed)] = np.inf
    i_min = int(np.argmin(dist_row))
    if not np.isfinite(dist_row[i_min]):
        return None
    return i_min

def reassign_age0_endpoints(runs, level, field, tol_cells=0.75, eps=1e-6, decimals=6):
    """Give every open run endpoint on the age-zero edge its own analytic boundary crossing.

    Endpoints are assigned greedily, closest first, to the nearest unclaimed crossing within `tol_cells` year
    steps. Endpoints left unassigned that share a crossing with an earlier endpoint then claim the nearest
    crossing still free, regardless of distance.

    Args:
        `runs` (list): runs of one level, modified in place.
        `level` (float): the level.
        `field` (GridField): the field.
        `tol_cells` (float, optional): assignment tolerance in year steps. Defaults to 0.75.
        `eps` (float, optional): boundary tolerance. Defaults to 1e-6.
        `decimals` (int, optional): rounding of the crossing key. Defaults to 6.

    Returns:
        int: number of endpoints assigned a crossing.
    """
    crossings = field.crossings_along_row(level, field.age_min, tol=eps)
    if crossings.size == 0:
        return 0

    endpoints = []
    for i_run, run in enumerate(runs):
        if run.closed or len(run) < 2:
            continue
        if field.on_top(run.start, eps):
            endpoints.append((i_run, 'start'))
        if field.on_top(run.end, eps):
            endpoints.append((i_run, 'end'))
    if not endpoints:
        return 0

    def current_year(endpoint):
        run = runs[endpoint[0]]
        return (run.start if endpoint[1] == 'start' else run.end).year

    def assign(endpoint, i_crossing):
        run = runs[endpoint[0]]
        point = (float(crossings[i_crossing]), field.age_min)
        if endpoint[1] == 'start':
            run.set_start(point)
        else:
            run.set_end(point)

    years = np.array([current_year(endpoint) for endpoint in endpoints]).reshape(-1, 1)
    dist = spatial.distance.cdist(years, crossings.reshape(-1, 1), metric='cityblock')
    tol_year = tol_cells * field.year_step

    claimed = set()
    assigned = np.zeros(len(endpoints), dtype=bool)
    for k in np.argsort(dist.min(axis=1), kind='stable'):
        i_crossing = nearest_unclaimed(dist[k], claimed)
        if i_crossing is None or dist[k, i_crossing] > tol_year:
            continue
        claimed.add(i_crossing)
        assign(endpoints[k], i_crossing)
        assigned[k] = True

    # endpoints sharing a key with an earlier endpoint get a chance at a free crossing
    seen_keys = set()
    n_second = 0
    for k, endpoint in enumerate(endpoints):
        year = current_year(endpoint)
        key = round(year, decimals)
        if key not in seen_keys:
            seen_keys.add(key)
            continue
        if assigned[k]:
            continue
        i_crossing = nearest_unclaimed(np.abs(crossings - year), claimed)
        if i_crossing is None:
            continue
        claimed.add(i_crossing)
        assign(endpoint, i_crossing)
        n_second += 1

    n_assigned = int(assigned.sum()) + n_second
    logger.debug('age-zero level=%s endpoints=%d crossings=%d assigned=%d', level, len(endpoints),
                 crossings.size, n_assigned)
    return n_assigned
