"""
enumcast/oracle.py — verdict for one (enum value space, range-set) pair.

The oracle is one-sided: it proves that *no* value the operand may still
take on the current path names an enumerator (``WARN``), and otherwise
says nothing stronger than ``SAFE``.

    decide(V, R) = WARN   ⟺   V ∩ R = ∅

Each interval of ``R`` costs one binary search over ``V``, so a call is
``O(|R| · log |V|)`` and stops at the first interval that hits.
"""

from __future__ import annotations

from bisect import bisect_left
from enum import Enum
from typing import Sequence, Union

from enumcast.enum_space import EnumDescriptor
from enumcast.errors import RangeContractViolation
from enumcast.ranges import NEG_INF, Interval, RangeSet


class Verdict(Enum):
    SAFE = "safe"
    WARN = "warn"


def _hits(values: Sequence[int], iv: Interval) -> bool:
    """Does any element of the sorted *values* fall inside *iv*?"""
    idx = 0 if iv.lo is NEG_INF else bisect_left(values, iv.lo)
    return idx < len(values) and values[idx] <= iv.hi


def decide(
    values: Union[EnumDescriptor, Sequence[int]],
    ranges: RangeSet,
) -> Verdict:
    """
    Decide whether a cast into an enum with value space *values* can
    yield a declared enumerator for some value in *ranges*.

    Parameters
    ----------
    values : EnumDescriptor or sorted sequence of int
    ranges : RangeSet
        Path-sensitive range of the cast operand.

    Raises
    ------
    RangeContractViolation
        If *ranges* is not a :class:`RangeSet` (for instance an empty
        list passed by a collaborator that skipped validation).
    """
    if not isinstance(ranges, RangeSet):
        raise RangeContractViolation("oracle expects a RangeSet", ranges)
    if isinstance(values, EnumDescriptor):
        values = values.values

    if not values:
        return Verdict.WARN
    for iv in ranges:
        if _hits(values, iv):
            return Verdict.SAFE
    return Verdict.WARN


__all__ = ["Verdict", "decide"]
