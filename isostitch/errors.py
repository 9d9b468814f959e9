"""
Exceptions raised by isostitch.
"""


class IsolineError(ValueError):
    """Base class for isoline extraction errors."""


class IntegrityError(IsolineError):
    """Raised when an output point is not finite, the result can not be persisted."""

    def __init__(self, level, point, index=None):
        self.level = level
        self.point = point
        self.index = index
        msg = 'Invalid contour point at level={}: {}'.format(level, point)
        if index is not None:
            msg += ' (entry {})'.format(index)
        super().__init__(msg)
