"""
enumcast/z3_ranges.py — operand ranges from z3 path conditions.

For symbolic-execution engines that keep their path condition as a list
of z3 boolean terms, :class:`Z3RangeQuery` bounds an integer or
bit-vector operand term under those constraints with ``z3.Optimize``:

    lo = min  t   s.t.  g₁ ∧ … ∧ gₙ
    hi = max  t   s.t.  g₁ ∧ … ∧ gₙ

and reports the hull ``[lo, hi]``.  The hull covers every consistent
value, so the checker stays sound; holes inside the hull are not
recovered.  Bit-vectors are read as signed (two's complement).
"""

from __future__ import annotations

import logging
import time
from typing import Any, Iterable, List, Optional

from enumcast.config import AnalysisConfig
from enumcast.errors import RangeContractViolation
from enumcast.ranges import NEG_INF, POS_INF, UNAVAILABLE, Bound, RangeResult, RangeSet

logger = logging.getLogger(__name__)


class Z3RangeQuery:
    """:class:`~enumcast.ranges.PathRangeQuery` backed by Z3.

    *path_state* passed to :meth:`range_of` is an iterable of z3
    ``BoolRef`` constraints (the path guard).
    """

    def __init__(self, timeout_ms: int = 5000) -> None:
        try:
            import z3
        except ImportError:
            raise ImportError("Z3 Python bindings ('z3-solver') required for Z3RangeQuery")
        self._z3 = z3
        self.timeout_ms = timeout_ms

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> "Z3RangeQuery":
        return cls(timeout_ms=config.solver_timeout_ms)

    def _objective(self, term: Any) -> Optional[Any]:
        z3 = self._z3
        if z3.is_bv(term):
            return z3.BV2Int(term, is_signed=True)
        if z3.is_int(term):
            return term
        return None

    def _optimum(self, constraints: List[Any], objective: Any, maximize: bool) -> Optional[Bound]:
        z3 = self._z3
        opt = z3.Optimize()
        opt.set("timeout", self.timeout_ms)
        for c in constraints:
            opt.add(c)
        handle = opt.maximize(objective) if maximize else opt.minimize(objective)

        t0 = time.monotonic()
        result = opt.check()
        logger.debug(
            "z3 %s of %s: %s in %.1fms",
            "max" if maximize else "min", objective, result,
            (time.monotonic() - t0) * 1000.0,
        )
        if result == z3.unsat:
            raise RangeContractViolation("path constraints are unsatisfiable")
        if result != z3.sat:
            return None

        value = handle.value()
        if z3.is_int_value(value):
            return value.as_long()
        # Unbounded objectives come back as an expression over oo.
        return POS_INF if maximize else NEG_INF

    def range_of(self, operand: Any, path_state: Optional[Iterable[Any]]) -> RangeResult:
        objective = self._objective(operand)
        if objective is None:
            return UNAVAILABLE
        constraints = list(path_state or [])

        lo = self._optimum(constraints, objective, maximize=False)
        if lo is None:
            logger.info("z3 could not bound %s from below; range unavailable", operand)
            return UNAVAILABLE
        hi = self._optimum(constraints, objective, maximize=True)
        if hi is None:
            logger.info("z3 could not bound %s from above; range unavailable", operand)
            return UNAVAILABLE
        return RangeSet.between(lo, hi)


__all__ = ["Z3RangeQuery"]
