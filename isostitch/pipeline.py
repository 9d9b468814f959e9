"""
Module running the complete isoline pipeline on a GridField.

For every level, independently:
    trace -> split rings -> normalize/dedupe -> split jumps -> stitch -> snap -> re-assign age zero -> filter

The result is an ordered list of (level, points) entries plus a diagnostics report of what every stage did.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field as dc_field
from typing import NamedTuple

import numpy as np

from .boundary import reassign_age0_endpoints, snap_runs
from .config import ContourConfig
from .errors import IntegrityError
from .filters import filter_runs
from .levels import select_levels
from .runs import Run, RunKind, dedupe_runs, normalize_points, split_on_jumps, split_on_turns, split_ring
from .stitcher import stitch_runs
from .tracer import flatten_rings, trace_columns, trace_rings, validate_ring

logger = logging.getLogger(__name__)


@dataclass
class LevelReport:
    level: float
    rings: int = 0
    skipped_rings: int = 0
    runs: int = 0
    deduped: int = 0
    after_jumps: int = 0
    merges: int = 0
    snapped: int = 0
    reassigned: int = 0
    kept: int = 0
    points: int = 0
    messages: list = dc_field(default_factory=list)


@dataclass
class Diagnostics:
    """What every stage did, per level, instead of printing it."""
    levels: list = dc_field(default_factory=list)
    messages: list = dc_field(default_factory=list)

    def note(self, message):
        self.messages.append(message)

    def summary(self):
        lines = []
        for report in self.levels:
            if report.kept == 0:
                continue
            lines.append('level={:g} runs={} pts={}'.format(report.level, report.kept, report.points))
        return '\n'.join(lines)


class IsolineEntry(NamedTuple):
    level: float
    points: tuple


class ContourResult():
    """Ordered isoline entries, grouped by ascending level, with the diagnostics of the run that made them."""
    def __init__(self, entries=None, diagnostics=None):
        self.entries = list(entries or [])
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    @property
    def levels(self):
        return sorted(set(entry.level for entry in self.entries))

    def validate(self):
        """Raise IntegrityError if any entry is too short or holds a non-finite coordinate."""
        for index, entry in enumerate(self.entries):
            if len(entry.points) < 2:
                raise IntegrityError(entry.level, entry.points, index)
            for point in entry.points:
                if not (np.isfinite(point.year) and np.isfinite(point.age)):
                    raise IntegrityError(entry.level, point, index)
        return self

    def to_records(self):
        """JSON ready list of {level, points: [{year, age}, ...]} dicts."""
        self.validate()
        return [{'level': float(entry.level),
                 'points': [{'year': float(p.year), 'age': float(p.age)} for p in entry.points]}
                for entry in self.entries]


# per level stages
def runs_from_rings(entries, field, config, report):
    """Validate and split the raw rings of one level into normalized runs."""
    runs = []
    for ring in flatten_rings(entries):
        points = validate_ring(ring)
        if points is None:
            report.skipped_rings += 1
            continue
        report.rings += 1
        runs.extend(split_ring(points, field, config.boundary_eps, config.point_eps))
    return runs

def runs_from_columns(traced, config):
    runs = []
    for points in traced:
        points = normalize_points(points, config.point_eps)
        if points.shape[0] >= 2:
            runs.append(Run(points, RunKind.OPEN))
    return runs

def process_level(level, runs, field, config, report):
    """Run every stage after tracing on the runs of one level.

    Args:
        `level` (float): the level.
        `runs` (list): runs of the level, fresh from the ring splitter or the column sweep.
        `field` (GridField): the field.
        `config` (ContourConfig): the configuration.
        `report` (LevelReport): filled in with the counts of every stage.

    Returns:
        list: the runs that survive filtering.
    """
    report.runs = len(runs)
    runs = dedupe_runs(runs, config.signature_decimals)
    report.deduped = len(runs)

    if config.method == 'rings':
        runs = [fragment for run in runs
                for fragment in split_on_jumps(run, field.year_step, field.age_step,
                                               config.jump_year_mult, config.jump_age_mult)]
        if config.turn_split_angle is not None:
            runs = [fragment for run in runs for fragment in split_on_turns(run, config.turn_split_angle)]
        report.after_jumps = len(runs)
        runs, report.merges = stitch_runs(runs, field, config)
    else:
        report.after_jumps = len(runs)

    report.snapped = snap_runs(runs, level, field, config.boundary_eps)
    if runs:
        report.reassigned = reassign_age0_endpoints(runs, level, field, config.age0_tol_cells,
                                                    config.boundary_eps, config.signature_decimals)

    runs = filter_runs(runs, level, field, config)
    report.kept = len(runs)
    report.points = sum(len(run) for run in runs)
    logger.debug('level=%g rings=%d runs=%d deduped=%d after_jumps=%d merges=%d kept=%d', level, report.rings,
                 report.runs, report.deduped, report.after_jumps, report.merges, report.kept)
    return runs

def trace_level(level, field, config, tracer, report):
    """Raw runs of one level from the configured tracer, empty if the tracer fails for this level."""
    if config.method == 'columns':
        traced = trace_columns(field, [level], config.column_join_age_steps, config.column_optimal_pairing)
        return runs_from_columns(traced[0], config)

    try:
        traced = tracer(field.z, [level])
    except (ValueError, TypeError, RuntimeError) as error:
        logger.warning('Tracer failed for level=%g: %s', level, error)
        report.messages.append('tracer failed for level={:g}: {}'.format(level, error))
        return []
    entries = traced[0] if traced else []
    return runs_from_rings(entries, field, config, report)


def compute_isolines(field, levels=None, config=None, tracer=None):
    """Compute the labeled isolines of a GridField.

    Args:
        `field` (GridField): the field to contour.
        `levels` (list, optional): ascending levels, defaults to multiples of `config.level_step` up to the
                                   maximum of the field.
        `config` (ContourConfig, optional): tolerances and options. Defaults to ContourConfig().
        `tracer` (callable, optional): raw tracer `tracer(z, levels)` returning per level a list of rings of
                                       (fractional column, fractional row) points. Defaults to `trace_rings`.

    Raises:
        IntegrityError: if a non-finite coordinate reaches the output.

    Returns:
        ContourResult: entries grouped by ascending level, and the diagnostics.
    """
    config = config or ContourConfig()
    tracer = tracer or trace_rings
    diagnostics = Diagnostics()

    if not field.valid:
        logger.warning('Nothing to draw, malformed grid: %r', field)
        diagnostics.note('malformed grid: {!r}'.format(field))
        return ContourResult([], diagnostics)

    if levels is None:
        levels = select_levels(field.max_value(), config.level_step)
    levels = sorted(set(float(level) for level in levels))
    if not levels:
        logger.warning('Nothing to draw, no levels to trace')
        diagnostics.note('no levels to trace')
        return ContourResult([], diagnostics)

    def run_level(level):
        report = LevelReport(level=level)
        runs = trace_level(level, field, config, tracer, report)
        return report, process_level(level, runs, field, config, report)

    if config.workers > 1 and len(levels) > 1:
        with ThreadPoolExecutor(max_workers=min(config.workers, len(levels))) as executor:
            results = list(executor.map(run_level, levels))
    else:
        results = [run_level(level) for level in levels]

    entries = []
    for report, runs in results:
        diagnostics.levels.append(report)
        diagnostics.messages.extend(report.messages)
        for run in runs:
            entries.append(IsolineEntry(report.level, tuple(run.as_points())))
        if runs:
            logger.info('level=%g runs=%d pts=%d', report.level, report.kept, report.points)

    return ContourResult(entries, diagnostics).validate()
