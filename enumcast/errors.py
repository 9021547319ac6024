# enumcast/errors.py
"""
Error types for the enum cast range checker.

Hierarchy
─────────
::

    EnumCastError (base)
    ├── RangeContractViolation  - a range collaborator broke the RangeSet
    │                             contract (empty, unsorted, overlapping,
    │                             inverted bounds, infeasible path)
    ├── ConfigError             - invalid AnalysisConfig values
    └── DumpLoadError           - a cppcheck dump file could not be loaded

Benign outcomes (range unavailable, enum without enumerators, an
enumerator whose value cannot be evaluated) are never raised.
"""

from __future__ import annotations

from typing import Any, Optional


class EnumCastError(Exception):
    """Base class for every error raised by :mod:`enumcast`."""


class RangeContractViolation(EnumCastError):
    """A range-set handed to the checker does not satisfy its invariants.

    This is an internal-consistency fault of the collaborator that
    produced the range, and is kept distinct from a normal "no finding"
    outcome.

    Attributes
    ----------
    detail : str
        What was wrong with the range.
    payload : Any
        The offending value, for logging.
    """

    def __init__(self, detail: str, payload: Any = None) -> None:
        self.detail = detail
        self.payload = payload
        if payload is None:
            super().__init__(detail)
        else:
            super().__init__(f"{detail}: {payload!r}")


class ConfigError(EnumCastError):
    """Raised by :meth:`AnalysisConfig.validate`."""

    def __init__(self, option: str, message: str) -> None:
        self.option = option
        super().__init__(f"invalid option '{option}': {message}")


class DumpLoadError(EnumCastError):
    """A ``.dump`` file could not be parsed."""

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.cause = cause
        msg = f"cannot load dump file '{path}'"
        if cause is not None:
            msg += f" ({cause})"
        super().__init__(msg)


__all__ = [
    "EnumCastError",
    "RangeContractViolation",
    "ConfigError",
    "DumpLoadError",
]
