from __future__ import annotations

import math

MAX_STARS = 5


def star_states(rating: float) -> list[str]:
    """
    Five star slots for a 0-5 rating: "filled", "half" or "empty".

    Whole stars come from the floor of the rating; the next slot is half-filled when the
    fractional part is at least 0.5.
    """

    full = math.floor(rating)
    has_half = (rating % 1) >= 0.5
    states: list[str] = []
    for i in range(MAX_STARS):
        if i < full:
            states.append("filled")
        elif i == full and has_half:
            states.append("half")
        else:
            states.append("empty")
    return states
