import math
from typing import Union

Number = Union[int, float]


def round_half_up(value: Number) -> int:
    """Round to the nearest integer with halves rounded up (66.5 -> 67, -0.5 -> 0)."""
    return int(math.floor(value + 0.5))
