"""
Module holding the regular scalar field the isolines are traced on.

The GridField can:
- be built from tidy (year, age, value) rows,
- map fractional grid coordinates (column, row) to (year, age),
- interpolate the field along a year column or along a fixed age,
- find the analytic crossings of a level along the rows and columns of the grid.
"""
import numpy as np

from .utils import find


def interval_crossings(coords, data, level):
    """Vectorized linear crossings of `level` by a piecewise linear profile.

    Each interval [coords[i], coords[i+1]] whose end values bracket `level` (inclusive) yields one crossing,
    intervals with a missing value or a flat profile are skipped.

    Args:
        `coords` (ndarray): 1D array of the coordinates of the profile samples.
        `data` (ndarray): 1D array of the profile values, NaN for missing values.
        `level` (float): the level to intersect with.

    Returns:
        ndarray, ndarray: crossing coordinates and the index of the interval they were found in.
    """
    coords = np.asarray(coords, dtype=float)
    data = np.asarray(data, dtype=float)
    if coords.size < 2:
        return np.array([]), np.array([], dtype=int)

    v0 = data[:-1]
    v1 = data[1:]
    with np.errstate(divide='ignore', invalid='ignore'):
        valid = np.isfinite(v0) & np.isfinite(v1) & (v0 != v1)
        mask = valid & (np.minimum(v0, v1) <= level) & (level <= np.maximum(v0, v1))
        t = (level - v0) / (v1 - v0)
        x = coords[:-1] + t * (coords[1:] - coords[:-1])

    i_interval = np.nonzero(mask)[0]
    return x[mask], i_interval


class GridField():
    """
    Regular scalar field, rows correspond to ages and columns to years, values are stored row-major.

    A field that does not satisfy the shape invariants can be constructed, `valid` is then False and the
    pipeline treats it as having nothing to draw.
    """
    def __init__(self, rows, cols, values, ages, years):
        self._rows = int(rows)
        self._cols = int(cols)
        # None and NaN both mark missing values
        self._values = np.array(values, dtype=float).ravel()
        self._ages = np.array(ages, dtype=float).ravel()
        self._years = np.array(years, dtype=float).ravel()
        for arr in (self._values, self._ages, self._years):
            arr.setflags(write=False)

        self._valid = self._check()
        if self._valid:
            self._z = self._values.reshape(self._rows, self._cols)
        else:
            self._z = None

    @classmethod
    def from_rows(cls, rows):
        """Build a GridField from (year, age, value) rows.

        The axes are the sorted unique years and ages, cells without a row are missing (NaN).
        When a (year, age) pair occurs more than once the last row wins.

        Args:
            `rows` (iterable): (year, age, value) triples.

        Returns:
            GridField: the field, empty if there are no rows.
        """
        data = np.asarray([tuple(row)[:3] for row in rows], dtype=float).reshape(-1, 3)
        years = np.unique(data[:, 0])
        ages = np.unique(data[:, 1])

        values = np.full((ages.size, years.size), np.nan)
        i_col = np.searchsorted(years, data[:, 0])
        i_row = np.searchsorted(ages, data[:, 1])
        values[i_row, i_col] = data[:, 2]

        return cls(ages.size, years.size, values.ravel(), ages, years)

    def _check(self):
        if self._rows < 2 or self._cols < 2:
            return False
        if self._values.size != self._rows * self._cols:
            return False
        if self._ages.size != self._rows or self._years.size != self._cols:
            return False
        for axis in (self._ages, self._years):
            if not np.all(np.isfinite(axis)) or not np.all(np.diff(axis) > 0):
                return False
        return True

    def __repr__(self):
        return 'GridField(rows={}, cols={}, valid={})'.format(self._rows, self._cols, self._valid)

    # read-only accessors
    @property
    def rows(self):
        return self._rows

    @property
    def cols(self):
        return self._cols

    @property
    def values(self):
        return self._values

    @property
    def ages(self):
        return self._ages

    @property
    def years(self):
        return self._years

    @property
    def valid(self):
        return self._valid

    @property
    def z(self):
        """2D (rows, cols) view of the values, None for an invalid field."""
        return self._z

    @property
    def year_min(self):
        return float(self._years[0])

    @property
    def year_max(self):
        return float(self._years[-1])

    @property
    def age_min(self):
        return float(self._ages[0])

    @property
    def age_max(self):
        return float(self._ages[-1])

    @property
    def year_step(self):
        return float(self._years[1] - self._years[0]) if self._years.size > 1 else 1.

    @property
    def age_step(self):
        return float(self._ages[1] - self._ages[0]) if self._ages.size > 1 else 1.

    @property
    def cell_area(self):
        return self.year_step * self.age_step

    def max_value(self):
        """Largest finite value of the field, None if the field holds no finite value."""
        finite = self._values[np.isfinite(self._values)]
        if finite.size == 0:
            return None
        return float(finite.max())

    def value(self, row, col):
        """Bounds-checked lookup of a grid value, None if out of bounds or missing."""
        if not self._valid or not (0 <= row < self._rows and 0 <= col < self._cols):
            return None
        v = self._z[row, col]
        return float(v) if np.isfinite(v) else None

    # coordinate mapping
    def to_domain(self, grid_points):
        """Map (fractional column, fractional row) points to (year, age).

        Args:
            `grid_points` (array_like): (n,2) array of grid coordinates.

        Returns:
            ndarray: (n,2) array of (year, age).
        """
        grid_points = np.asarray(grid_points, dtype=float).reshape(-1, 2)
        year = np.interp(grid_points[:, 0], np.arange(self._cols), self._years)
        age = np.interp(grid_points[:, 1], np.arange(self._rows), self._ages)
        return np.column_stack((year, age))

    def on_grid_boundary(self, col, row, eps=1e-6):
        """Check if a grid coordinate lies on the outer rectangle of the grid."""
        return (col <= eps or row <= eps or col >= self._cols - 1 - eps or row >= self._rows - 1 - eps)

    def on_top(self, point, eps=1e-6):
        return abs(point[1] - self.age_min) < eps

    def on_bottom(self, point, eps=1e-6):
        return abs(point[1] - self.age_max) < eps

    def on_boundary(self, point, eps=1e-6):
        """Check if a (year, age) point lies on the outer rectangle of the field."""
        return (self.on_top(point, eps) or self.on_bottom(point, eps)
                or abs(point[0] - self.year_min) < eps or abs(point[0] - self.year_max) < eps)

    def within_bounds(self, point, eps=1e-6):
        return (self.year_min - eps <= point[0] <= self.year_max + eps
                and self.age_min - eps <= point[1] <= self.age_max + eps)

    # interpolation
    def row_below(self, age):
        """Index of the row interval containing `age`, clamped to the first and last interval."""
        if age <= self._ages[0]:
            return 0
        if age >= self._ages[-1]:
            return self._rows - 2
        return int(np.clip(np.searchsorted(self._ages, age, side='left') - 1, 0, self._rows - 2))

    def _row_interval(self, age):
        # first interval containing age, None outside the age axis
        if age < self._ages[0] or age > self._ages[-1]:
            return None
        return self.row_below(age)

    def profile_at_age(self, age):
        """Values of all year columns linearly interpolated at `age`, NaN where missing."""
        row = self._row_interval(age)
        if not self._valid or row is None:
            return np.full(self._cols, np.nan)
        t = (age - self._ages[row]) / (self._ages[row + 1] - self._ages[row])
        return self._z[row] + t * (self._z[row + 1] - self._z[row])

    # analytic crossings
    def age_crossing(self, level, col, row):
        """Age at which year column `col` crosses `level` within row interval [row, row+1], None if it does not."""
        if not self._valid or not (0 <= col < self._cols and 0 <= row < self._rows - 1):
            return None
        ages, _ = interval_crossings(self._ages[row:row + 2], self._z[row:row + 2, col], level)
        return float(ages[0]) if ages.size else None

    def crossings_along_column(self, level, col):
        """Sorted ages at which year column `col` crosses `level`, one per bracketing row interval."""
        if not self._valid:
            return np.array([])
        ages, _ = interval_crossings(self._ages, self._z[:, col], level)
        return np.sort(ages)

    def crossings_along_row(self, level, age, tol=1e-6):
        """Sorted, deduplicated years at which the field, interpolated at a fixed `age`, crosses `level`.

        Args:
            `level` (float): the level to intersect with.
            `age` (float): the fixed age.
            `tol` (float, optional): crossings closer than `tol` are merged. Defaults to 1e-6.

        Returns:
            ndarray: crossing years.
        """
        years, _ = interval_crossings(self._years, self.profile_at_age(age), level)
        years = np.sort(years)
        if years.size < 2:
            return years
        keep = np.concatenate(([True], np.diff(years) >= tol))
        return years[keep]

    def nearest_row_crossing(self, level, age, year):
        """Crossing of `level` along the fixed `age` nearest to `year`, None if there is none."""
        years, _ = interval_crossings(self._years, self.profile_at_age(age), level)
        i_nearest = find(year, years)
        if i_nearest is None:
            return None
        return float(years[i_nearest])
