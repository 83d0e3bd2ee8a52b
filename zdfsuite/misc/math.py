"""
Common definitions.
"""

import numpy as np

INTEGER_TYPES = (
    int,
    np.integer,
)

FLOAT_TYPES = (
    float,
    np.floating,
)

REAL_TYPES = (
    *INTEGER_TYPES,
    *FLOAT_TYPES,
)


def in_range(x, bounds):
    """
    Test if a real number lies within closed bounds.

    Parameters
    ----------
    x : int OR float
        The number to test.
    bounds : (float, float)
        Inclusive ``(minimum, maximum)``.

    Returns
    -------
    bool
        Whether or not ``x`` is real and within ``bounds``.
    """
    if isinstance(x, bool) or not isinstance(x, REAL_TYPES):
        return False
    return bounds[0] <= x <= bounds[1]
