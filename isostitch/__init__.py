import sys
from importlib.metadata import version, PackageNotFoundError

if sys.version_info < (3,8):
    raise Exception("isostitch does not support Python < 3.8")

from .config import ContourConfig
from .errors import IsolineError, IntegrityError
from .grid import GridField
from .levels import select_levels
from .pipeline import compute_isolines, ContourResult, Diagnostics
from .tracer import trace_rings, trace_columns


__all__= [
    "ContourConfig",
    "ContourResult",
    "Diagnostics",
    "GridField",
    "IntegrityError",
    "IsolineError",
    "compute_isolines",
    "select_levels",
    "trace_columns",
    "trace_rings",
]

try:
    __version__ = version('isostitch')
except PackageNotFoundError:
    __version__ = 'unknown'
