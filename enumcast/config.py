"""
enumcast/config.py — options for one analysis session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet

from enumcast.diagnostics import DiagnosticSeverity
from enumcast.errors import ConfigError

CAST_KINDS: FrozenSet[str] = frozenset({"c_style", "static_cast"})
OUTPUT_FORMATS: FrozenSet[str] = frozenset({"json", "gcc", "summary"})


@dataclass
class AnalysisConfig:
    """Configuration for the enum cast checker and its addon driver."""
    # Reporting
    severity: DiagnosticSeverity = DiagnosticSeverity.WARNING
    cwe: int = 704
    report_contract_faults: bool = False
    dedup: bool = True
    output: str = "json"                    # "json", "gcc", "summary"

    # Cast sites
    cast_kinds: FrozenSet[str] = field(default_factory=lambda: CAST_KINDS)

    # z3 range adapter
    solver_timeout_ms: int = 5000

    verbose: int = 0

    def validate(self) -> "AnalysisConfig":
        if not isinstance(self.severity, DiagnosticSeverity):
            raise ConfigError("severity", f"expected DiagnosticSeverity, got {self.severity!r}")
        if self.cwe < 0:
            raise ConfigError("cwe", "must be >= 0")
        if self.output not in OUTPUT_FORMATS:
            raise ConfigError("output", f"expected one of {sorted(OUTPUT_FORMATS)}")
        unknown = set(self.cast_kinds) - CAST_KINDS
        if unknown:
            raise ConfigError("cast_kinds", f"unknown cast kinds {sorted(unknown)}")
        if self.solver_timeout_ms <= 0:
            raise ConfigError("solver_timeout_ms", "must be positive")
        return self

    @classmethod
    def from_args(cls, args: Any) -> "AnalysisConfig":
        """Build a validated config from an ``argparse.Namespace``."""
        try:
            severity = DiagnosticSeverity(getattr(args, "severity", "warning"))
        except ValueError as exc:
            raise ConfigError("severity", str(exc)) from exc
        kinds = getattr(args, "cast_kinds", None)
        return cls(
            severity=severity,
            report_contract_faults=bool(getattr(args, "report_faults", False)),
            dedup=not getattr(args, "no_dedup", False),
            output=getattr(args, "output", "json"),
            cast_kinds=frozenset(kinds) if kinds else CAST_KINDS,
            solver_timeout_ms=int(getattr(args, "solver_timeout", 5000)),
            verbose=int(getattr(args, "verbose", 0) or 0),
        ).validate()


__all__ = ["AnalysisConfig", "CAST_KINDS", "OUTPUT_FORMATS"]
