"""Half-up rounding shared by every 0-100 score."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with ties going up.

    The built-in ``round`` sends ties to the even neighbour (12.5 -> 12).
    Sums of float weights carry representation noise, so the value is
    settled to 9 decimals before rounding.
    """
    return math.floor(round(value, 9) + 0.5)
