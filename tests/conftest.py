"""Pytest fixtures with synthetic survivor grids."""

import numpy as np
import pytest

from isostitch.config import ContourConfig
from isostitch.grid import GridField

YEARS = np.arange(2000, 2011, dtype=float)
AGES = np.arange(0, 11, dtype=float)


def make_field(func, years=YEARS, ages=AGES):
    year_grid, age_grid = np.meshgrid(years, ages)
    values = func(year_grid, age_grid)
    return GridField(ages.size, years.size, values.ravel(), ages, years)


@pytest.fixture
def tilted_field():
    """Survivors decreasing with age and growing over the years, no grid node lies exactly on a level."""
    return make_field(lambda year, age: 1e6 * (10.5 - age + 0.37 * (year - 2000)))


@pytest.fixture
def age_field():
    """Survivors depending on age only, every level is a horizontal line half way between two rows."""
    return make_field(lambda year, age: 1e6 * (10.5 - age))


@pytest.fixture
def zero_field():
    return make_field(lambda year, age: np.zeros_like(year))


@pytest.fixture
def peak_field():
    """3x3 field with a single interior peak."""
    z = np.array([[0., 0., 0.], [0., 1., 0.], [0., 0., 0.]])
    return GridField(3, 3, z.ravel(), [0., 5., 10.], [2000., 2005., 2010.])


@pytest.fixture
def ramp_field():
    """3x3 field whose top row and left column both run 0, 2, 4."""
    z = np.array([[0., 2., 4.], [2., 4., 6.], [4., 6., 8.]])
    return GridField(3, 3, z.ravel(), [0., 1., 2.], [2000., 2001., 2002.])


@pytest.fixture
def config():
    return ContourConfig()


@pytest.fixture
def fake_tracer():
    """Build a tracer returning the same rings for every requested level."""
    def build(rings):
        def tracer(z, levels):
            return [[np.asarray(ring, dtype=float) for ring in rings] for _ in levels]
        return tracer
    return build
