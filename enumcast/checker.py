"""
enumcast/checker.py
═══════════════════

Cppcheck addon driver for the enum cast range check.

Architecture
────────────

  ┌──────────────────────────────────────────────────────────┐
  │  run_addon(dump_files)                                   │
  │    └─ for each configuration:  EnumCastChecker           │
  │         1. configure()         ─ scope namespace         │
  │         2. collect_evidence()  ─ iter_cast_sites(cfg)    │
  │         3. diagnose()          ─ CastSiteVisitor.visit   │
  │         4. report()            ─ collected Diagnostics    │
  └──────────────────────────────────────────────────────────┘

Usage::

    cppcheck --dump myfile.c
    enumcast myfile.c.dump
    python -m enumcast --output gcc myfile.c.dump
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Sequence
from xml.etree import ElementTree

from enumcast.config import AnalysisConfig, CAST_KINDS
from enumcast.diagnostics import CollectingSink, Diagnostic, DiagnosticSeverity
from enumcast.enum_space import EnumValueSpace
from enumcast.errors import ConfigError, DumpLoadError
from enumcast.valueflow import CppcheckTypeQuery, ValueFlowRangeQuery, iter_cast_sites
from enumcast.visitor import ERROR_ID, FAULT_ERROR_ID, CastSite, CastSiteVisitor

_log = logging.getLogger("enumcast")

EXIT_OK: int = 0
EXIT_FINDINGS: int = 1
EXIT_INFRA: int = 2


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — CHECKER
# ═════════════════════════════════════════════════════════════════════════

class EnumCastChecker:
    """
    Flags casts to an enum whose operand, on some explored path, can only
    hold values that name no enumerator.

    One checker instance serves one analysis session and keeps a single
    enum value space for it.  Each call to :meth:`configure` starts a new
    identity namespace for enum scopes, because cppcheck scope ids are
    only unique within one configuration of one dump.
    """

    name: ClassVar[str] = "enum-cast-out-of-range"
    description: ClassVar[str] = "Integer-to-enum casts that can never name an enumerator"
    error_ids: ClassVar[frozenset] = frozenset({ERROR_ID, FAULT_ERROR_ID})

    def __init__(self, config: Optional[AnalysisConfig] = None) -> None:
        self.config = config or AnalysisConfig()
        self.type_query = CppcheckTypeQuery()
        self.space = EnumValueSpace(self.type_query)
        self.sink = CollectingSink(dedup=self.config.dedup)
        self.visitor: Optional[CastSiteVisitor] = None
        self._sites: List[CastSite] = []
        self._cfg_serial = 0

    def configure(self, cfg: Any) -> None:
        self._cfg_serial += 1
        self.type_query.namespace = (self._cfg_serial, getattr(cfg, "name", "") or "")
        if self.visitor is None:
            self.visitor = CastSiteVisitor(
                type_query=self.type_query,
                range_query=ValueFlowRangeQuery(),
                space=self.space,
                sink=self.sink,
                config=self.config,
            )

    def collect_evidence(self, cfg: Any) -> None:
        self._sites = list(iter_cast_sites(cfg, self.config))
        _log.debug("collected %d cast site(s)", len(self._sites))

    def diagnose(self, cfg: Any) -> None:
        if self.visitor is None:
            self.configure(cfg)
        for site in self._sites:
            self.visitor.visit(site, site.path_id)
        self._sites = []

    def report(self) -> List[Diagnostic]:
        return self.sink.diagnostics

    def run(self, cfg: Any) -> List[Diagnostic]:
        """Run the whole lifecycle on one cppcheck Configuration."""
        self.configure(cfg)
        self.collect_evidence(cfg)
        self.diagnose(cfg)
        return self.report()

    @property
    def stats(self) -> Dict[str, int]:
        return self.visitor.stats if self.visitor is not None else {}


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — RUN RESULTS
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerRunResults:
    """Aggregate results of running the checker over one or more dumps."""
    diagnostics: List[Diagnostic] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)
    files: List[str] = field(default_factory=list)

    @property
    def finding_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.error_id == ERROR_ID)

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_file(self, file: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.location.file == file]

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        lines = [
            f"enum cast check: {self.finding_count} finding(s) in "
            f"{len(self.files)} dump file(s)",
        ]
        for key in sorted(self.stats):
            val = self.stats[key]
            if isinstance(val, float):
                lines.append(f"  {key}: {val:.1f}")
            else:
                lines.append(f"  {key}: {val}")
        return "\n".join(lines)


def run_configurations(
    configurations: Sequence[Any],
    config: Optional[AnalysisConfig] = None,
    checker: Optional[EnumCastChecker] = None,
) -> CheckerRunResults:
    """Run one checker session over already-parsed cppcheck configurations."""
    checker = checker or EnumCastChecker(config)
    results = CheckerRunResults()
    t0 = time.monotonic()
    for cfg in configurations:
        checker.run(cfg)
    results.diagnostics = checker.report()
    results.stats.update(checker.stats)
    results.stats["enums_cached"] = len(checker.space)
    results.stats["elapsed_ms"] = (time.monotonic() - t0) * 1000.0
    return results


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — ADDON ENTRY POINT
# ═════════════════════════════════════════════════════════════════════════

def _load_dump(path: str) -> Any:
    try:
        import cppcheckdata  # type: ignore[import-untyped]
    except ImportError as exc:
        raise DumpLoadError(path, exc) from exc
    try:
        return cppcheckdata.parsedump(path)
    except (OSError, ValueError, ElementTree.ParseError) as exc:
        raise DumpLoadError(path, exc) from exc


def run_addon(
    dump_files: Sequence[str],
    config: Optional[AnalysisConfig] = None,
    out=None,
) -> int:
    """
    Check every configuration of every dump file and print the findings.

    Returns
    -------
    Exit code (0 = clean, 1 = findings, 2 = a dump could not be loaded)
    """
    config = config or AnalysisConfig()
    out = out or sys.stdout
    checker = EnumCastChecker(config)
    combined = CheckerRunResults()
    exit_code = EXIT_OK
    t0 = time.monotonic()

    for path in dump_files:
        if not os.path.isfile(path):
            _log.error("dump file not found: %s", path)
            exit_code = EXIT_INFRA
            continue
        try:
            data = _load_dump(path)
        except DumpLoadError as exc:
            _log.error("%s", exc)
            exit_code = EXIT_INFRA
            continue
        _log.info("checking %s", path)
        partial = run_configurations(getattr(data, "configurations", []), checker=checker)
        combined.files.append(path)
        combined.diagnostics = partial.diagnostics
        combined.stats = partial.stats

    combined.stats["elapsed_ms"] = (time.monotonic() - t0) * 1000.0

    if config.output == "json":
        for diag in combined.diagnostics:
            out.write(diag.to_json_str() + "\n")
    elif config.output == "gcc":
        for diag in combined.diagnostics:
            out.write(diag.to_gcc_format() + "\n")
    else:
        out.write(combined.summary() + "\n")

    if exit_code == EXIT_OK and combined.finding_count:
        exit_code = EXIT_FINDINGS
    return exit_code


def _configure_logging(verbosity: int) -> None:
    """Set up the ``enumcast`` logger: 0 → WARNING, 1 → INFO, 2+ → DEBUG."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("enumcast")
    root.setLevel(level)
    root.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="enumcast",
        description="Cppcheck addon: casts to an enum that can never yield an enumerator",
    )
    parser.add_argument("dump_files", nargs="+", help="Path to .dump file(s)")
    parser.add_argument(
        "--output", choices=["json", "gcc", "summary"],
        default="json", help="Output format",
    )
    parser.add_argument(
        "--severity", default="warning",
        choices=[s.value for s in DiagnosticSeverity],
        help="Severity reported for findings",
    )
    parser.add_argument(
        "--cast-kinds", nargs="*", choices=sorted(CAST_KINDS), default=None,
        help="Cast forms to inspect (default: all)",
    )
    parser.add_argument(
        "--report-faults", action="store_true",
        help="Report inconsistent ValueFlow data as information diagnostics",
    )
    parser.add_argument(
        "--no-dedup", action="store_true",
        help="Keep repeated findings for the same cast and path",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def _main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for ``enumcast`` / ``python -m enumcast``."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    try:
        config = AnalysisConfig.from_args(args)
    except ConfigError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA
    return run_addon(args.dump_files, config)


def main() -> None:
    sys.exit(_main())


if __name__ == "__main__":
    main()


__all__ = [
    "EnumCastChecker",
    "CheckerRunResults",
    "run_configurations",
    "run_addon",
    "build_parser",
    "main",
]
