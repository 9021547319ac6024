"""
enumcast/ranges.py
══════════════════

Shared range types: closed integer intervals with explicit unbounded
edges, and the path-sensitive range-set a value-tracking engine reports
for an operand.

    ┌──────────────────────────────────────────────────────────────┐
    │  Bound      = int | NEG_INF | POS_INF                         │
    │  Interval   = [lo, hi]            lo ≤ hi                     │
    │  RangeSet   = I₁ ∪ I₂ ∪ … ∪ Iₙ   n ≥ 1, sorted, disjoint     │
    │  RangeResult = RangeSet | UNAVAILABLE                         │
    └──────────────────────────────────────────────────────────────┘

Unbounded edges are sentinel objects rather than ``±2**63`` or
``float('inf')``, so comparisons at the edge are exact for integers of
any width.  A ``RangeSet`` can never be empty: an empty set would mean
the path itself is infeasible, and the constructor rejects it with
:class:`~enumcast.errors.RangeContractViolation`.

>>> r = RangeSet.normalized([Interval(3, 5), Interval(-2, 1), Interval(2, 2)])
>>> r
RangeSet([-2, 5])
>>> RangeSet.full().excluding([0])
RangeSet([-∞, -1] ∪ [1, +∞])
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import (
    Any,
    ClassVar,
    Dict,
    Final,
    Iterable,
    Iterator,
    List,
    Protocol,
    Tuple,
    Union,
    runtime_checkable,
)

from enumcast.errors import RangeContractViolation


# ═══════════════════════════════════════════════════════════════════════════
#  PART 0 — SENTINELS
# ═══════════════════════════════════════════════════════════════════════════

@functools.total_ordering
class _Unbounded:
    """An unbounded interval edge; ordered below / above every ``int``."""

    __slots__ = ("_sign",)
    _instances: ClassVar[Dict[int, "_Unbounded"]] = {}

    def __new__(cls, sign: int) -> "_Unbounded":
        if sign not in cls._instances:
            inst = super().__new__(cls)
            inst._sign = sign
            cls._instances[sign] = inst
        return cls._instances[sign]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, _Unbounded):
            return self._sign == other._sign
        return False

    def __lt__(self, other: object) -> bool:
        if isinstance(other, _Unbounded):
            return self._sign < other._sign
        if isinstance(other, int):
            return self._sign < 0
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("__UNBOUNDED__", self._sign))

    def __reduce__(self):
        return (_Unbounded, (self._sign,))

    def __repr__(self) -> str:
        return "-∞" if self._sign < 0 else "+∞"


class _Unavailable:
    """Returned by a range query when it does not track the operand."""

    _instance: ClassVar[Any] = None

    def __new__(cls) -> "_Unavailable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNAVAILABLE"


NEG_INF: Final = _Unbounded(-1)
POS_INF: Final = _Unbounded(1)
UNAVAILABLE: Final = _Unavailable()

Bound = Union[int, _Unbounded]


def _is_int(v: object) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — INTERVAL
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Interval:
    """Closed integer interval ``[lo, hi]`` with optional unbounded edges."""

    lo: Bound
    hi: Bound

    def __post_init__(self) -> None:
        if not (_is_int(self.lo) or self.lo is NEG_INF):
            raise RangeContractViolation("interval lower edge must be an int or NEG_INF", self.lo)
        if not (_is_int(self.hi) or self.hi is POS_INF):
            raise RangeContractViolation("interval upper edge must be an int or POS_INF", self.hi)
        if self.lo > self.hi:
            raise RangeContractViolation("inverted interval", (self.lo, self.hi))

    # ---- Constructors ----------------------------------------------------

    @classmethod
    def point(cls, n: int) -> Interval:
        return cls(n, n)

    @classmethod
    def full(cls) -> Interval:
        return cls(NEG_INF, POS_INF)

    @classmethod
    def at_least(cls, lo: int) -> Interval:
        return cls(lo, POS_INF)

    @classmethod
    def at_most(cls, hi: int) -> Interval:
        return cls(NEG_INF, hi)

    # ---- Predicates ------------------------------------------------------

    def is_point(self) -> bool:
        return self.lo == self.hi

    def is_full(self) -> bool:
        return self.lo is NEG_INF and self.hi is POS_INF

    def contains(self, n: int) -> bool:
        return self.lo <= n <= self.hi

    def __str__(self) -> str:
        return f"[{self.lo!r}, {self.hi!r}]"


def _touches(hi: Bound, lo: Bound) -> bool:
    """Whether an interval ending at *hi* overlaps or abuts one starting at *lo*."""
    if hi is POS_INF or lo is NEG_INF:
        return True
    return lo <= hi + 1


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — RANGE SET
# ═══════════════════════════════════════════════════════════════════════════

class RangeSet:
    """
    Non-empty, sorted, pairwise-disjoint union of :class:`Interval`.

    The constructor only *checks* the invariants; use
    :meth:`normalized` to sort and merge arbitrary intervals.

    Raises
    ------
    RangeContractViolation
        If the intervals are empty, not sorted, or overlap.
    """

    __slots__ = ("_intervals",)

    def __init__(self, intervals: Iterable[Interval]) -> None:
        ivs = tuple(intervals)
        if not ivs:
            raise RangeContractViolation("empty range-set (infeasible path)")
        for iv in ivs:
            if not isinstance(iv, Interval):
                raise RangeContractViolation("range-set member is not an Interval", iv)
        for a, b in zip(ivs, ivs[1:]):
            if not a.hi < b.lo:
                raise RangeContractViolation(
                    "range-set intervals must be sorted and disjoint", (str(a), str(b))
                )
        self._intervals: Tuple[Interval, ...] = ivs

    # ---- Constructors ----------------------------------------------------

    @classmethod
    def normalized(cls, intervals: Iterable[Interval]) -> RangeSet:
        """Sort *intervals* by lower edge and merge overlapping or adjacent ones."""
        ordered = sorted(intervals, key=lambda iv: iv.lo)
        merged: List[Interval] = []
        for iv in ordered:
            if merged and _touches(merged[-1].hi, iv.lo):
                last = merged[-1]
                merged[-1] = Interval(last.lo, max(last.hi, iv.hi))
            else:
                merged.append(iv)
        return cls(merged)

    @classmethod
    def full(cls) -> RangeSet:
        return cls((Interval.full(),))

    @classmethod
    def point(cls, n: int) -> RangeSet:
        return cls((Interval.point(n),))

    @classmethod
    def between(cls, lo: Bound, hi: Bound) -> RangeSet:
        return cls((Interval(lo, hi),))

    # ---- Queries ---------------------------------------------------------

    @property
    def intervals(self) -> Tuple[Interval, ...]:
        return self._intervals

    @property
    def lo(self) -> Bound:
        return self._intervals[0].lo

    @property
    def hi(self) -> Bound:
        return self._intervals[-1].hi

    def is_full(self) -> bool:
        return len(self._intervals) == 1 and self._intervals[0].is_full()

    def contains(self, n: int) -> bool:
        return any(iv.contains(n) for iv in self._intervals)

    def excluding(self, points: Iterable[int]) -> RangeSet:
        """Return this set with each integer in *points* removed.

        Raises :class:`RangeContractViolation` if nothing is left.
        """
        holes = sorted(set(points))
        out: List[Interval] = []
        for iv in self._intervals:
            lo = iv.lo
            for p in holes:
                if not iv.contains(p) or p < lo:
                    continue
                if lo is NEG_INF or lo <= p - 1:
                    out.append(Interval(lo, p - 1))
                lo = p + 1
            if iv.hi is POS_INF or lo <= iv.hi:
                out.append(Interval(lo, iv.hi))
        return RangeSet(out)

    # ---- Dunder ----------------------------------------------------------

    def __iter__(self) -> Iterator[Interval]:
        return iter(self._intervals)

    def __len__(self) -> int:
        return len(self._intervals)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RangeSet):
            return NotImplemented
        return self._intervals == other._intervals

    def __hash__(self) -> int:
        return hash(self._intervals)

    def __repr__(self) -> str:
        return "RangeSet(" + " ∪ ".join(str(iv) for iv in self._intervals) + ")"


RangeResult = Union[RangeSet, _Unavailable]


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 — RANGE QUERY PROTOCOL
# ═══════════════════════════════════════════════════════════════════════════

@runtime_checkable
class PathRangeQuery(Protocol):
    """
    Interface of the engine that tracks operand values per path.

    ``range_of`` returns a :class:`RangeSet` covering every value of
    *operand* consistent with the branch conditions taken so far on the
    path described by *path_state*, or :data:`UNAVAILABLE` when the
    operand is not a scalar the engine tracks.  It is a synchronous,
    side-effect free read.
    """

    def range_of(self, operand: Any, path_state: Any) -> RangeResult:
        ...


__all__ = [
    "NEG_INF",
    "POS_INF",
    "UNAVAILABLE",
    "Bound",
    "Interval",
    "RangeSet",
    "RangeResult",
    "PathRangeQuery",
]
