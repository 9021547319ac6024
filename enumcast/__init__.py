"""
enumcast — Enum Cast Range Checking for Cppcheck Addons
=======================================================

Decides, for every integer-to-enum cast reached on an explored path,
whether the operand can still hold a declared enumerator value or
whether every path-consistent value names no enumerator.

Core modules
------------
ranges
    Intervals with explicit unbounded edges, non-empty range-sets, and
    the ``PathRangeQuery`` protocol.
enum_space
    Enum classification (``NOT_ENUM`` / ``PlainEnum``) and the
    session-scoped cache of enumerator value spaces.
oracle
    ``decide(values, ranges) -> Verdict``.
visitor
    ``CastSiteVisitor``, run once per (cast, path).
diagnostics
    Diagnostic model and sinks (cppcheck JSON / GCC text).
valueflow
    Adapters over Cppcheck dump files.
checker
    Addon driver and CLI.

Addon modules
-------------
z3_ranges
    Operand ranges from z3 path conditions (needs ``z3-solver``).

Quick start
-----------
>>> from enumcast import RangeSet, Interval, decide
>>> decide((-4, -3, 1, 2, 4), RangeSet.between(-2, -1))
<Verdict.WARN: 'warn'>
"""

from __future__ import annotations

import importlib
import logging
import sys
import warnings
from typing import TYPE_CHECKING, List

__version__ = "0.1.0"
__license__ = "MIT"
__all__: List[str] = []

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal registry: (module_name, list_of_names_to_import)
#
#   CORE  — always imported; failure is fatal
#   ADDON — failure only warns (package still usable)
# ---------------------------------------------------------------------------

_CORE_MODULES = {
    "errors": [
        "EnumCastError",
        "RangeContractViolation",
        "ConfigError",
        "DumpLoadError",
    ],
    "ranges": [
        "NEG_INF",
        "POS_INF",
        "UNAVAILABLE",
        "Interval",
        "RangeSet",
        "PathRangeQuery",
    ],
    "enum_space": [
        "EnumHandle",
        "NOT_ENUM",
        "PlainEnum",
        "TypeQuery",
        "EnumDescriptor",
        "EnumValueSpace",
    ],
    "oracle": [
        "Verdict",
        "decide",
    ],
    "diagnostics": [
        "DiagnosticSeverity",
        "SourceLocation",
        "Diagnostic",
        "CollectingSink",
        "StreamSink",
    ],
    "config": [
        "AnalysisConfig",
    ],
    "visitor": [
        "CastOutcome",
        "CastSite",
        "CastSiteVisitor",
    ],
    "valueflow": [
        "CppcheckTypeQuery",
        "ValueFlowRangeQuery",
        "iter_cast_sites",
    ],
    "checker": [
        "EnumCastChecker",
        "run_addon",
    ],
}

_ADDON_MODULES = {
    "z3_ranges": [
        "Z3RangeQuery",
    ],
}


def _import_names(module_rel_name: str, names: List[str], *, fatal: bool = True) -> None:
    """Import *names* from a submodule and bind them in the package namespace."""
    fq_name = f"{__name__}.{module_rel_name}"
    try:
        mod = importlib.import_module(fq_name)
    except ImportError as exc:
        if fatal:
            raise ImportError(
                f"enumcast: required submodule '{module_rel_name}' "
                f"failed to import: {exc}"
            ) from exc
        warnings.warn(
            f"enumcast: optional submodule '{module_rel_name}' "
            f"could not be imported ({exc}); related symbols will be unavailable.",
            ImportWarning,
            stacklevel=2,
        )
        _log.debug("Skipped optional module %s: %s", module_rel_name, exc)
        return

    current_module = sys.modules[__name__]
    for name in names:
        if not hasattr(mod, name):
            msg = f"enumcast.{module_rel_name} does not export '{name}'"
            if fatal:
                raise AttributeError(msg)
            _log.warning(msg)
            continue
        setattr(current_module, name, getattr(mod, name))
        __all__.append(name)


for _mod, _names in _CORE_MODULES.items():
    _import_names(_mod, _names, fatal=True)

for _mod, _names in _ADDON_MODULES.items():
    _import_names(_mod, _names, fatal=False)

del _mod, _names

__all__ += ["__version__"]

if TYPE_CHECKING:
    from .errors import (
        EnumCastError as EnumCastError,
        RangeContractViolation as RangeContractViolation,
        ConfigError as ConfigError,
        DumpLoadError as DumpLoadError,
    )
    from .ranges import (
        NEG_INF as NEG_INF,
        POS_INF as POS_INF,
        UNAVAILABLE as UNAVAILABLE,
        Interval as Interval,
        RangeSet as RangeSet,
        PathRangeQuery as PathRangeQuery,
    )
    from .enum_space import (
        EnumHandle as EnumHandle,
        NOT_ENUM as NOT_ENUM,
        PlainEnum as PlainEnum,
        TypeQuery as TypeQuery,
        EnumDescriptor as EnumDescriptor,
        EnumValueSpace as EnumValueSpace,
    )
    from .oracle import Verdict as Verdict, decide as decide
    from .diagnostics import (
        DiagnosticSeverity as DiagnosticSeverity,
        SourceLocation as SourceLocation,
        Diagnostic as Diagnostic,
        CollectingSink as CollectingSink,
        StreamSink as StreamSink,
    )
    from .config import AnalysisConfig as AnalysisConfig
    from .visitor import (
        CastOutcome as CastOutcome,
        CastSite as CastSite,
        CastSiteVisitor as CastSiteVisitor,
    )
    from .valueflow import (
        CppcheckTypeQuery as CppcheckTypeQuery,
        ValueFlowRangeQuery as ValueFlowRangeQuery,
        iter_cast_sites as iter_cast_sites,
    )
    from .checker import EnumCastChecker as EnumCastChecker, run_addon as run_addon
    from .z3_ranges import Z3RangeQuery as Z3RangeQuery
