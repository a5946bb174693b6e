"""Trigger evaluation and cross-rate lookup.

Both functions are pure: no I/O, no state, and they never raise for
inputs of the declared types.
"""

import math
from typing import Optional

from ratewatch.models import AlertCondition, RateSnapshot

# Absorbs floating-point noise from the cross-rate division so a rate
# sitting on the threshold does not flap between passes.
TOLERANCE = 1e-4


def evaluate(condition: AlertCondition, target_rate: float, current_rate: float) -> bool:
    """Decide whether an alert condition is met.

    Args:
        condition: ``"above"`` or ``"below"``.
        target_rate: Alert threshold.
        current_rate: Current cross-rate for the pair.

    Returns:
        True if ``current_rate`` is beyond the threshold by more than
        ``TOLERANCE`` in the alert's direction, False otherwise.
    """
    if condition == "above":
        return current_rate > target_rate + TOLERANCE
    if condition == "below":
        return current_rate < target_rate - TOLERANCE
    return False


def cross_rate(
    from_currency: str, to_currency: str, snapshot: Optional[RateSnapshot]
) -> Optional[float]:
    """Compute the rate for converting ``from_currency`` into ``to_currency``.

    Both legs are read against the snapshot's base currency, so the cross
    rate is ``rates[to] / rates[from]``.

    Returns:
        The cross rate, or None when there is no snapshot, either currency
        is missing, or the ``from`` rate is zero.
    """
    if snapshot is None:
        return None

    from_rate = snapshot.rate_for(from_currency)
    to_rate = snapshot.rate_for(to_currency)
    if from_rate is None or to_rate is None:
        return None
    if from_rate == 0:
        return None

    rate = to_rate / from_rate
    if not math.isfinite(rate):
        return None
    return rate
