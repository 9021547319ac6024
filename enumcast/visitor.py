"""
enumcast/visitor.py
═══════════════════

Per-cast driver.  The traversal engine calls :meth:`CastSiteVisitor.visit`
once for every (cast expression, explored path) pair; the same textual
cast reached through different branch histories is visited once per
path and may get different verdicts.

    visit(site, path_state)
      │
      ├─ classify(site.target_type) ── NOT_ENUM ──────────────▶ NOT_ENUM
      ├─ space.fetch(handle)                         (build-or-hit)
      ├─ range_of(site.operand, path_state) ── UNAVAILABLE ───▶ ABSTAINED
      ├─ decide(values, ranges) ── SAFE ──────────────────────▶ SAFE
      └─ WARN ── sink.emit(Diagnostic) ───────────────────────▶ WARN

The visitor is purely observational: it never narrows path constraints
or affects feasibility.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Hashable, Optional

from enumcast.config import AnalysisConfig
from enumcast.diagnostics import (
    Diagnostic,
    DiagnosticSeverity,
    DiagnosticSink,
    SourceLocation,
)
from enumcast.enum_space import EnumValueSpace, PlainEnum, TypeQuery
from enumcast.errors import RangeContractViolation
from enumcast.oracle import Verdict, decide
from enumcast.ranges import UNAVAILABLE, PathRangeQuery

logger = logging.getLogger(__name__)

ERROR_ID = "enumCastOutOfRange"
FAULT_ERROR_ID = "enumCastRangeFault"
CATEGORY = "Enum cast out of range"
MESSAGE = (
    "The value provided to the cast expression is not in the valid range "
    "of values for the enum."
)


class CastOutcome(Enum):
    NOT_ENUM = "not-enum"
    ABSTAINED = "abstained"
    SAFE = "safe"
    WARN = "warn"
    CONTRACT_FAULT = "contract-fault"


@dataclass(frozen=True)
class CastSite:
    """
    One cast expression as seen on one explored path.

    Attributes
    ----------
    expr        : the cast expression itself (engine-specific)
    target_type : the type being cast to
    operand     : the expression being converted
    path_id     : identifier of the explored path
    location    : source location reported on a finding
    """
    expr: Any
    target_type: Any
    operand: Any
    path_id: Hashable = 0
    location: SourceLocation = SourceLocation()


class CastSiteVisitor:
    """
    Parameters
    ----------
    type_query  : TypeQuery
    range_query : PathRangeQuery
    space       : EnumValueSpace
        Session cache shared by every visitor of the session.
    sink        : DiagnosticSink
    config      : AnalysisConfig, optional
    """

    def __init__(
        self,
        type_query: TypeQuery,
        range_query: PathRangeQuery,
        space: EnumValueSpace,
        sink: DiagnosticSink,
        config: Optional[AnalysisConfig] = None,
    ) -> None:
        self.type_query = type_query
        self.range_query = range_query
        self.space = space
        self.sink = sink
        self.config = config or AnalysisConfig()
        self._stats: Counter = Counter()
        self._stats_lock = threading.Lock()

    @property
    def stats(self) -> Dict[str, int]:
        with self._stats_lock:
            return {outcome.value: self._stats[outcome] for outcome in CastOutcome}

    def _count(self, outcome: CastOutcome) -> CastOutcome:
        with self._stats_lock:
            self._stats[outcome] += 1
        return outcome

    def visit(self, site: CastSite, path_state: Any = None) -> CastOutcome:
        """Evaluate *site* under *path_state* and report a finding on WARN."""
        kind = self.type_query.classify(site.target_type)
        if not isinstance(kind, PlainEnum):
            return self._count(CastOutcome.NOT_ENUM)

        desc = self.space.fetch(kind.handle)

        try:
            ranges = self.range_query.range_of(site.operand, path_state)
            if ranges is UNAVAILABLE:
                logger.debug("%s: operand range unavailable, abstaining", site.location)
                return self._count(CastOutcome.ABSTAINED)
            verdict = decide(desc, ranges)
        except RangeContractViolation as exc:
            logger.warning(
                "%s: malformed range for cast operand on path %r: %s",
                site.location, site.path_id, exc,
            )
            if self.config.report_contract_faults:
                self.sink.emit(Diagnostic(
                    error_id=FAULT_ERROR_ID,
                    category="Internal consistency fault",
                    message=f"Range information for the cast operand is inconsistent: {exc.detail}",
                    severity=DiagnosticSeverity.INFORMATION,
                    location=site.location,
                    path_id=site.path_id,
                ))
            return self._count(CastOutcome.CONTRACT_FAULT)

        if verdict is Verdict.SAFE:
            return self._count(CastOutcome.SAFE)

        logger.info(
            "%s: no value of the operand can name an enumerator of %s (path %r)",
            site.location, desc.handle.display_name(), site.path_id,
        )
        self.sink.emit(Diagnostic(
            error_id=ERROR_ID,
            category=CATEGORY,
            message=MESSAGE,
            severity=self.config.severity,
            location=site.location,
            path_id=site.path_id,
            cwe=self.config.cwe,
            evidence={
                "enum": desc.handle.display_name(),
                "enumerators": list(desc.values),
                "ranges": [str(iv) for iv in ranges],
                "path": site.path_id,
            },
        ))
        return self._count(CastOutcome.WARN)


__all__ = [
    "ERROR_ID",
    "FAULT_ERROR_ID",
    "CATEGORY",
    "MESSAGE",
    "CastOutcome",
    "CastSite",
    "CastSiteVisitor",
]
