"""Small numeric helpers shared by the component calculators."""
import math
from typing import Optional, Sequence, Tuple


def interpolate_knots(
    x: float,
    knots: Sequence[Tuple[float, float]],
    tail_slope: float = 0.0,
    cap: Optional[float] = None,
) -> float:
    """
    Piecewise-linear curve through (x, y) knots.

    Below the first knot the curve holds the first y value; past the last knot
    it keeps rising at tail_slope. The result never exceeds cap.
    """
    if x <= knots[0][0]:
        y = knots[0][1]
    elif x >= knots[-1][0]:
        y = knots[-1][1] + (x - knots[-1][0]) * tail_slope
    else:
        y = knots[-1][1]
        for (x0, y0), (x1, y1) in zip(knots, knots[1:]):
            if x0 <= x <= x1:
                y = y0 + (x - x0) / (x1 - x0) * (y1 - y0)
                break
    if cap is not None:
        y = min(cap, y)
    return y


def log_compress(total: float, base: float, scale: float = 10.0) -> float:
    """Map a non-negative total onto 0-scale, reaching scale when total == base."""
    if total <= 0:
        return 0.0
    return min(scale, math.log(1 + total) / math.log(1 + base) * scale)


def leverage(p: float, floor: float) -> float:
    """How much a swing from p matters: peaks at 0.25 for a coin flip."""
    return max(floor, p * (1 - p))
