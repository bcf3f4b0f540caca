"""
Fixed-precision money helpers.

Amounts are rounded to cents with ROUND_HALF_UP. Pools are split with
the largest-remainder method so the parts always add up to the pool.
"""

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Dict, Hashable, Iterable, Mapping, TypeVar

K = TypeVar("K", bound=Hashable)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")
PERCENT_STEP = Decimal("0.0001")


def to_money(value) -> Decimal:
    """Round a number to cents."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def fits_percent_precision(value: Decimal) -> bool:
    """True when a percentage has at most four decimal places, the stored precision."""
    return value == value.quantize(PERCENT_STEP)


def percent_of(amount: Decimal, percentage: Decimal) -> Decimal:
    """``amount * percentage / 100`` rounded to cents."""
    return to_money(amount * percentage / HUNDRED)


def split_by_weights(total: Decimal, weights: Mapping[K, Decimal]) -> Dict[K, Decimal]:
    """
    Split ``total`` across keys in proportion to their weights.

    Non-positive weights get nothing. Each key first receives its share
    rounded down to the cent; leftover cents go one each to the keys with
    the largest fractional remainders (ties keep mapping order). The
    result sums exactly to ``to_money(total)``.

    Returns an empty dict when there is nothing to split or no positive
    weight to split it by.
    """
    positive = [(key, Decimal(w)) for key, w in weights.items() if w > 0]
    weight_sum = sum((w for _, w in positive), ZERO)
    total_cents = int(to_money(total) / CENT)
    if total_cents <= 0 or weight_sum <= 0:
        return {}

    floors: Dict[K, int] = {}
    remainders = []
    for index, (key, weight) in enumerate(positive):
        exact = Decimal(total_cents) * weight / weight_sum
        floor = int(exact.to_integral_value(rounding=ROUND_FLOOR))
        floors[key] = floor
        remainders.append((exact - floor, index, key))

    leftover = total_cents - sum(floors.values())
    remainders.sort(key=lambda item: (-item[0], item[1]))
    for _, _, key in remainders[:leftover]:
        floors[key] += 1

    return {key: Decimal(cents) * CENT for key, cents in floors.items()}


def split_evenly(total: Decimal, keys: Iterable[K]) -> Dict[K, Decimal]:
    """Split ``total`` into equal parts, one per key."""
    return split_by_weights(total, {key: Decimal(1) for key in keys})
