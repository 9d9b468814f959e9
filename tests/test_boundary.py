"""Tests for isostitch.boundary module."""

import numpy as np
import pytest

from isostitch.boundary import nearest_side, reassign_age0_endpoints, snap_endpoint, snap_runs
from isostitch.grid import GridField
from isostitch.runs import Run, RunKind


@pytest.fixture
def wavy_top_field():
    """Top row alternating 0 and 2, so level 1 crosses the age zero edge half way between all columns."""
    z = np.array([[0., 2., 0., 2., 0.], [.5] * 5, [.5] * 5])
    return GridField(3, 5, z.ravel(), [0., 1., 2.], [2000., 2001., 2002., 2003., 2004.])


class TestNearestSide:
    """Tests for nearest_side function."""

    def test_left(self, ramp_field):
        """Should pick the left side for a point on the first year column."""
        assert nearest_side((2000., 0.6), ramp_field) == 'left'

    def test_tie_prefers_top(self, ramp_field):
        """Should prefer the top side in a corner."""
        assert nearest_side((2000., 0.), ramp_field) == 'top'

    def test_far_from_all_sides(self, zero_field):
        """Should return None in the interior of a large field."""
        assert nearest_side((2005., 5.), zero_field) is None


class TestSnapEndpoint:
    """Tests for snap_endpoint function."""

    def test_snaps_to_left_column_crossing(self, ramp_field):
        """Should move a left endpoint to the analytic column crossing."""
        assert snap_endpoint((2000., 0.6), 1., ramp_field) == (2000., 0.5)

    def test_snaps_to_top_row_crossing(self, ramp_field):
        """Should move a top endpoint to the analytic row crossing."""
        assert snap_endpoint((2000.6, 0.), 1., ramp_field) == (2000.5, 0.)

    def test_no_crossing_unchanged(self, ramp_field):
        """Should leave the point alone when the level does not cross the side."""
        assert snap_endpoint((2000., 0.6), 100., ramp_field) == (2000., 0.6)

    def test_snap_runs_only_endpoints(self, ramp_field):
        """Should move the endpoints of open runs and leave interior points."""
        run = Run([(2000.6, 0.), (2001., 1.), (2000., 0.6)], RunKind.OPEN)
        assert snap_runs([run], 1., ramp_field) == 2
        assert run.points.tolist() == [[2000.5, 0.], [2001., 1.], [2000., 0.5]]

    def test_snap_runs_skips_closed(self, ramp_field):
        """Should not touch closed runs."""
        run = Run([(2000.6, 0.), (2001., 1.), (2000.6, 0.)])
        assert snap_runs([run], 1., ramp_field) == 0


class TestReassignAge0:
    """Tests for reassign_age0_endpoints function."""

    def test_moves_to_nearest_crossing(self, wavy_top_field):
        """Should move an endpoint on the age zero edge to the nearest crossing."""
        run = Run([(2001.3, 0.), (2001.3, 1.)], RunKind.OPEN)
        assert reassign_age0_endpoints([run], 1., wavy_top_field) == 1
        assert run.start == (2001.5, 0.)

    def test_out_of_tolerance_untouched(self, wavy_top_field):
        """Should not move a lone endpoint further than the tolerance."""
        run = Run([(2001.3, 0.), (2001.3, 1.)], RunKind.OPEN)
        assert reassign_age0_endpoints([run], 1., wavy_top_field, tol_cells=0.1) == 0
        assert run.start == (2001.3, 0.)

    def test_shared_crossing_resolved(self, wavy_top_field):
        """Should give two runs ending on the same crossing distinct crossings."""
        a = Run([(2001.5, 1.), (2001.5, 0.)], RunKind.OPEN)
        b = Run([(2001.5, 0.), (2001.6, 1.)], RunKind.OPEN)
        assert reassign_age0_endpoints([a, b], 1., wavy_top_field) == 2
        assert a.end.year != b.start.year
        assert {a.end.year, b.start.year} <= {2000.5, 2001.5, 2002.5, 2003.5}

    def test_no_endpoints_on_edge(self, wavy_top_field):
        """Should do nothing without endpoints on the age zero edge."""
        run = Run([(2001.5, 1.), (2001.5, 2.)], RunKind.OPEN)
        assert reassign_age0_endpoints([run], 1., wavy_top_field) == 0
