"""Tests for isostitch.filters module."""

from isostitch.filters import filter_runs, keep_run
from isostitch.runs import Run, RunKind


class TestKeepRun:
    """Tests for keep_run function."""

    def test_short_run_kept_on_heavy_level(self, zero_field, config):
        """Should keep a run below the minimum point count on a heavy level."""
        run = Run([(2001, 1), (2002, 1)], RunKind.OPEN)
        assert keep_run(run, 5e6, zero_field, config)

    def test_short_run_dropped_on_other_level(self, zero_field, config):
        """Should drop the same run on a non-heavy level."""
        run = Run([(2001, 1), (2002, 1)], RunKind.OPEN)
        assert not keep_run(run, 1e6, zero_field, config)

    def test_single_point_never_kept(self, zero_field, config):
        """Should drop runs of a single point even on a heavy level."""
        run = Run([(2001, 1)], RunKind.OPEN)
        assert not keep_run(run, 10e6, zero_field, config)

    def test_tiny_bbox_dropped(self, zero_field, config):
        """Should drop a run whose bounding box is below a quarter cell."""
        run = Run([(2001, 1), (2001.1, 1.1), (2001.2, 1.2), (2001.3, 1.3)], RunKind.OPEN)
        assert not keep_run(run, 1e6, zero_field, config)

    def test_regular_run_kept(self, zero_field, config):
        """Should keep a run with enough points and extent."""
        run = Run([(2001, 1), (2002, 2), (2003, 3), (2004, 4)], RunKind.OPEN)
        assert keep_run(run, 1e6, zero_field, config)

    def test_filter_runs_keeps_order(self, zero_field, config):
        """Should keep the surviving runs in order."""
        a = Run([(2001, 1), (2002, 2), (2003, 3), (2004, 4)], RunKind.OPEN)
        b = Run([(2001, 1), (2002, 1)], RunKind.OPEN)
        c = Run([(2005, 1), (2006, 2), (2007, 3), (2008, 4)], RunKind.OPEN)
        assert filter_runs([a, b, c], 1e6, zero_field, config) == [a, c]
