import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, sending .5 up (round() would send 2.5 to 2)."""
    return math.floor(value + 0.5)
