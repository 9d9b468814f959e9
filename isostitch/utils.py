"""
A collection of general numerical or Python utilities useful across the package
"""
import os

import numpy as np


def number(x):
    """Convert a string cell to a float, empty or unparsable cells become NaN.

    Args:
        `x` (str,int,float): the value to be converted.

    Returns:
        float: `x` as float, or NaN if `x` is not a number.
    """
    if isinstance(x, str):
        x = x.strip()
        if not x:
            return np.nan
    try:
        return float(x)
    except (TypeError, ValueError):
        return np.nan

def find(val, arr):
    """Find the index of the value in an array closest to `val`, ignoring non-finite entries.

    Args:
        `val` (float): the sought after value.
        `arr` (ndarray,list): the array to search in for val.

    Returns:
        int: index of the closest value, or None if `arr` holds no finite value.
    """
    arr_ = np.asarray(arr, dtype=float)
    if arr_.size == 0 or not np.isfinite(val):
        return None
    dist = np.abs(arr_ - val)
    dist[~np.isfinite(dist)] = np.inf
    i_min = int(np.argmin(dist))
    if not np.isfinite(dist[i_min]):
        return None
    return i_min

def points_close(a, b, eps=1e-9):
    """Check whether two (year, age) points coincide within `eps` along both axes.

    Args:
        `a`, `b` (array_like): points as (year, age).
        `eps` (float, optional): tolerance per axis. Defaults to 1e-9.

    Returns:
        bool: True if the points are equal within tolerance.
    """
    return abs(a[0] - b[0]) < eps and abs(a[1] - b[1]) < eps

def unit_vector(a, b):
    """Compute the unit vector pointing from point `a` to point `b`.

    Returns:
        ndarray: unit vector, or None for a zero-length segment.
    """
    d = np.asarray(b, dtype=float) - np.asarray(a, dtype=float)
    n = np.hypot(d[0], d[1])
    if not n or not np.isfinite(n):
        return None
    return d / n

def bbox_area(points):
    """Area of the axis aligned bounding box of an (n,2) array of points."""
    points = np.asarray(points, dtype=float)
    if points.size == 0:
        return 0.
    extent = points.max(axis=0) - points.min(axis=0)
    return float(extent[0] * extent[1])

def clamp(x, x_min, x_max):
    return max(x_min, min(x_max, x))

def read_file(f_path, mode='r'):
    """Read the contents of a file to a list of lines, with automatic path validity checks.

    Args:
        `f_path` (str): path to the file, including the file name.
        `mode` (str, optional): reading mode of open(). Defaults to 'r'.

    Raises:
        `ValueError`: if the directory of `f_path` is not a valid path
        `ValueError`: if `f_path` is not a valid file

    Returns:
        `list`: a list of the lines read from the file
    """
    path = os.path.dirname(f_path) or '.'
    # check if the provided path exists
    if not os.path.isdir(path):
        raise ValueError('{} is not a valid path to a directory!'.format(path))
    # check if the provided file name exists in the path
    if not os.path.isfile(f_path):
        raise ValueError('The file {} does not exist!'.format(f_path))
    with open(f_path, mode) as f:
        lines = f.readlines()

    return lines
