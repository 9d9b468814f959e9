"""
Module to turn raw tracer rings into clean runs of (year, age) points.

A run is a polyline of one isoline level, either closed (a full ring that never touches the boundary of the
field) or open (an arc between two boundary crossings, or a fragment that still needs stitching).
"""
import enum
import math
from typing import NamedTuple

import numpy as np

from .utils import points_close


class Point(NamedTuple):
    year: float
    age: float


class RunKind(enum.Enum):
    CLOSED = 'closed'
    OPEN = 'open'


class Run():
    """Ordered (n,2) array of (year, age) points tagged closed or open."""
    def __init__(self, points, kind=None, eps=1e-9):
        self.points = np.array(points, dtype=float).reshape(-1, 2)
        if kind is None:
            kind = RunKind.CLOSED if self.is_ring(eps) else RunKind.OPEN
        self.kind = kind

    def __len__(self):
        return self.points.shape[0]

    def __repr__(self):
        return 'Run({}, n={})'.format(self.kind.value, len(self))

    @property
    def closed(self):
        return self.kind is RunKind.CLOSED

    @property
    def start(self):
        return Point(*self.points[0])

    @property
    def end(self):
        return Point(*self.points[-1])

    def is_ring(self, eps=1e-9):
        return len(self) >= 2 and points_close(self.points[0], self.points[-1], eps)

    def reversed(self):
        return Run(self.points[::-1], self.kind)

    def set_start(self, point):
        self.points[0] = point

    def set_end(self, point):
        self.points[-1] = point

    def as_points(self):
        return [Point(float(year), float(age)) for year, age in self.points]


# normalization
def normalize_points(points, eps=1e-9):
    """Collapse consecutive points whose year and age both differ by less than `eps`, keeping the first."""
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    if points.shape[0] < 2:
        return points
    keep = [0]
    for i in range(1, points.shape[0]):
        if not points_close(points[keep[-1]], points[i], eps):
            keep.append(i)
    return points[keep]

def run_signature(run, decimals=6):
    """Orientation independent signature of a run.

    The closing point of a closed run is ignored, coordinates are rounded to `decimals` and the smaller of the
    forward and reversed point strings is returned.
    """
    points = run.points[:-1] if run.closed and run.is_ring() else run.points
    keys = ['{},{}'.format(round(float(year), decimals) + 0., round(float(age), decimals) + 0.)
            for year, age in points]
    forward = '|'.join(keys)
    backward = '|'.join(reversed(keys))
    return min(forward, backward)

def dedupe_runs(runs, decimals=6):
    """Keep only the first run per signature, later duplicates and reversed duplicates are dropped."""
    seen = set()
    out = []
    for run in runs:
        sig = run_signature(run, decimals)
        if sig in seen:
            continue
        seen.add(sig)
        out.append(run)
    return out


# ring splitting
def split_ring(ring, field, eps=1e-6, point_eps=1e-9, closed=None):
    """Split a raw tracer ring at the vertices that touch the outer rectangle of the grid.

    A closed ring is cut into arcs between consecutive boundary vertices, wrapping around its end. An open line
    (one that stops on the boundary or at missing values) is cut the same way without wrapping, its first and
    last vertex are always arc ends.

    Args:
        `ring` (ndarray): (n,2) array of (fractional column, fractional row) points.
        `field` (GridField): the field the ring was traced on.
        `eps` (float, optional): boundary tolerance in grid units. Defaults to 1e-6.
        `point_eps` (float, optional): duplicate point tolerance in domain units. Defaults to 1e-9.
        `closed` (bool, optional): [None] closed if the ring repeats its first vertex, [True] implicitly closed,
                                   [False] open. Defaults to None.

    Returns:
        list: closed or open runs in (year, age), each normalized and with at least 2 points.
    """
    ring = np.asarray(ring, dtype=float)
    repeated = ring.shape[0] > 2 and bool(np.all(np.abs(ring[0] - ring[-1]) < eps))
    if closed is None:
        closed = repeated
    # drop the explicit closing vertex, closure is carried by `closed` from here on
    if repeated:
        ring = ring[:-1]
    n = ring.shape[0]
    if n < 2:
        return []
    on_boundary = np.array([field.on_grid_boundary(col, row, eps) for col, row in ring], dtype=bool)

    if not np.any(on_boundary):
        points = normalize_points(field.to_domain(ring), point_eps)
        if points.shape[0] < 2:
            return []
        if not closed:
            return [Run(points, RunKind.OPEN)]
        if not points_close(points[0], points[-1], point_eps):
            points = np.vstack((points, points[0]))
        return [Run(points, RunKind.CLOSED)]

    split_idx = np.nonzero(on_boundary)[0]
    if closed:
        indices = list(split_idx) + [split_idx[0] + n]
    else:
        indices = sorted(set([0] + list(split_idx) + [n - 1]))
    runs = []
    for start, end in zip(indices[:-1], indices[1:]):
        idx = np.arange(start, end + 1) % n
        if idx.size < 2:
            continue
        # an arc running along the wall does not cross the interior
        if np.count_nonzero(on_boundary[idx]) / idx.size > 0.5:
            continue
        points = normalize_points(field.to_domain(ring[idx]), point_eps)
        if points.shape[0] >= 2 and points_close(points[0], points[-1], point_eps):
            points = points[:-1]
        if points.shape[0] < 2:
            continue
        runs.append(Run(points, RunKind.OPEN))
    return runs


# splitting of traced runs
def split_on_jumps(run, year_step, age_step, year_mult=1.1, age_mult=1.8):
    """Cut a run wherever consecutive points are implausibly far apart.

    At a segment longer than `year_step*year_mult` in year or `age_step*age_mult` in age the current fragment is
    closed and the next one starts with that segment. No cut is made while the current fragment has fewer
    than 2 points.

    Returns:
        list: the fragments, `[run]` if there is no jump.
    """
    points = run.points
    if len(run) < 2:
        return []
    delta = np.abs(np.diff(points, axis=0))
    jumps = (delta[:, 0] > year_step * year_mult) | (delta[:, 1] > age_step * age_mult)
    if not np.any(jumps):
        return [run]

    fragments = []
    current = [0]
    for i in range(1, len(run)):
        if jumps[i - 1] and len(current) >= 2:
            fragments.append(current)
            current = [i - 1, i]
        else:
            current.append(i)
    if len(current) >= 2:
        fragments.append(current)
    if len(fragments) == 1:
        return [run]
    return [Run(points[idx]) for idx in fragments]

def split_on_turns(run, angle_deg):
    """Cut a run where two consecutive segments turn by more than `angle_deg` degrees.

    The fragment after the cut starts with the turning segment, so both fragments share the turning vertex.
    """
    if len(run) < 3:
        return [run]
    cos_thresh = math.cos(math.radians(angle_deg))
    points = run.points
    fragments = []
    current = [0, 1]
    for i in range(2, len(run)):
        u = points[i - 1] - points[i - 2]
        v = points[i] - points[i - 1]
        un, vn = np.hypot(*u), np.hypot(*v)
        dot = float(np.dot(u, v) / (un * vn)) if un and vn else 1.
        if dot < cos_thresh and len(current) >= 2:
            fragments.append(current)
            current = [i - 1, i]
        else:
            current.append(i)
    if len(current) >= 2:
        fragments.append(current)
    if len(fragments) == 1:
        return [run]
    return [Run(points[idx]) for idx in fragments]
