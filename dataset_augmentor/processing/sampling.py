"""
Parameter sampling for randomized operators.

All functions take an explicitly seeded `random.Random`, never the global one.
"""
import math
import random


def sample_triangular(rng: random.Random, low: float, mode: float, high: float) -> float:
    """
    Draws from a triangular distribution over [low, high] peaked at `mode`.

    Uses the inverse CDF so that exactly one uniform draw is consumed per sample.
    """
    if high <= low:
        return low

    u = rng.random()
    c = (mode - low) / (high - low)
    if u < c:
        value = low + math.sqrt(u * (high - low) * (mode - low))
    else:
        value = high - math.sqrt((1.0 - u) * (high - low) * (high - mode))
    # Guard against float drift at the edges
    return min(max(value, low), high)


def enforce_minimum_effect(rng: random.Random, value: float, threshold: float) -> float:
    """
    Replaces a negligible value by a jump to exactly +/- `threshold`.

    If |value| is already at or above the threshold it is returned unchanged and
    no randomness is consumed. Otherwise the sign is a fair coin flip.
    """
    if abs(value) >= threshold:
        return value
    return threshold if rng.random() < 0.5 else -threshold


def sample_shift(rng: random.Random, dimension: int, frac_min: float = 0.10, frac_max: float = 0.30) -> int:
    """
    Samples a cyclic shift distance along an axis of length `dimension`.

    The distance is a fraction of the dimension in [frac_min, frac_max), clamped
    to [1, dimension - 1]. With probability 1/2 the complementary wrap distance
    (dimension - shift) is used instead. Axes of length <= 1 are never shifted.
    """
    if dimension <= 1:
        return 0

    fraction = frac_min + (frac_max - frac_min) * rng.random()
    # Round half up, the shift is always positive here
    shift = int(math.floor(dimension * fraction + 0.5))
    shift = min(max(shift, 1), dimension - 1)

    if rng.random() < 0.5:
        return shift
    return dimension - shift
