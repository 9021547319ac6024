"""
enumcast/diagnostics.py
═══════════════════════

Diagnostic model and sinks.

A :class:`Diagnostic` serialises directly to cppcheck's JSON addon
protocol (one object per line on stdout) or to GCC-style text.  Sinks
are append-only; deduplicating repeated findings for the same
(cast, path) pair is the sink's business, never the checker's.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Dict,
    Hashable,
    List,
    Optional,
    Protocol,
    Set,
    TextIO,
    Tuple,
)

logger = logging.getLogger(__name__)

ADDON_NAME = "enumcast"


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    """cppcheck-compatible severity levels."""
    ERROR = "error"
    WARNING = "warning"
    STYLE = "style"
    PERFORMANCE = "performance"
    PORTABILITY = "portability"
    INFORMATION = "information"


@dataclass(frozen=True)
class SourceLocation:
    """A specific point in source code."""
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single finding.

    Attributes
    ----------
    error_id  : Unique identifier (e.g., "enumCastOutOfRange")
    category  : Short human-readable bug category
    message   : Human-readable description
    severity  : DiagnosticSeverity
    location  : Source location of the cast expression
    path_id   : Identifier of the explored path the finding was made on
    cwe       : CWE identifier (0 = none)
    addon     : Addon name for the cppcheck protocol
    evidence  : Machine-readable context for downstream tooling
    """
    error_id: str
    category: str
    message: str
    severity: DiagnosticSeverity
    location: SourceLocation
    path_id: Hashable = 0
    cwe: int = 0
    addon: str = ADDON_NAME
    evidence: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def dedup_key(self) -> Tuple[str, SourceLocation, Hashable]:
        return (self.error_id, self.location, self.path_id)

    def to_cppcheck_json(self) -> Dict[str, Any]:
        """Serialize to cppcheck's JSON addon output format."""
        result: Dict[str, Any] = {
            "file": self.location.file,
            "linenr": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "message": self.message,
            "addon": self.addon,
            "errorId": self.error_id,
            "extra": self.category,
        }
        if self.cwe:
            result["cwe"] = self.cwe
        return result

    def to_json_str(self) -> str:
        """Single-line JSON string for cppcheck addon stdout."""
        return json.dumps(self.to_cppcheck_json())

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message."""
        sev = self.severity.value
        return f"{self.location}: {sev}: {self.message} [{self.error_id}]"


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — SINKS
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSink(Protocol):
    def emit(self, diag: Diagnostic) -> None:
        ...


class CollectingSink:
    """
    Keeps diagnostics in memory.

    With ``dedup=True`` a second diagnostic with the same
    ``(error_id, location, path_id)`` is dropped.
    """

    def __init__(self, dedup: bool = False) -> None:
        self.dedup = dedup
        self._diagnostics: List[Diagnostic] = []
        self._seen: Set[Tuple[str, SourceLocation, Hashable]] = set()
        self._lock = threading.Lock()

    def emit(self, diag: Diagnostic) -> None:
        with self._lock:
            if self.dedup:
                key = diag.dedup_key()
                if key in self._seen:
                    return
                self._seen.add(key)
            self._diagnostics.append(diag)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        with self._lock:
            return list(self._diagnostics)

    def __len__(self) -> int:
        with self._lock:
            return len(self._diagnostics)


class StreamSink:
    """Writes each diagnostic as one line (``json`` or ``gcc``) to *stream*."""

    def __init__(self, stream: TextIO, fmt: str = "json") -> None:
        if fmt not in ("json", "gcc"):
            raise ValueError(f"unknown diagnostic format: {fmt!r}")
        self.stream = stream
        self.fmt = fmt
        self.count = 0

    def emit(self, diag: Diagnostic) -> None:
        line = diag.to_json_str() if self.fmt == "json" else diag.to_gcc_format()
        self.stream.write(line + "\n")
        self.count += 1


__all__ = [
    "ADDON_NAME",
    "DiagnosticSeverity",
    "SourceLocation",
    "Diagnostic",
    "DiagnosticSink",
    "CollectingSink",
    "StreamSink",
]
