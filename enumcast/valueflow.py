"""
enumcast/valueflow.py
═════════════════════

Collaborator adapters for Cppcheck dump files (``cppcheck --dump``).

* :class:`CppcheckTypeQuery`   — enum classification of a ``ValueType``
  and evaluation of the enumerators declared in an ``Enum`` scope.
* :class:`ValueFlowRangeQuery` — path-sensitive operand ranges read from
  Cppcheck's ValueFlow annotations (``Token.values``).
* :func:`iter_cast_sites`      — one :class:`~enumcast.visitor.CastSite`
  per (cast token, ValueFlow path).

Only attributes of the ``cppcheckdata`` object model are used, through
``getattr`` with defaults, so the adapters work on parsed dumps and on
lightweight stand-ins alike.

ValueFlow → RangeSet
────────────────────
For one path id, every value whose ``path`` is that id or ``0`` (valid on
all paths) is considered:

  known                    →  exactly [v, v]
  impossible, bound Upper  →  x ≥ v + 1
  impossible, bound Lower  →  x ≤ v − 1
  impossible, bound Point  →  x ≠ v
  possible / inconclusive  →  ignored (not exhaustive)

With no usable value the operand may still be anything: the full range.
"""

from __future__ import annotations

import logging
from typing import (
    Any,
    FrozenSet,
    Hashable,
    Iterator,
    List,
    Optional,
    Set,
)

from enumcast.config import AnalysisConfig
from enumcast.diagnostics import SourceLocation
from enumcast.enum_space import NOT_ENUM, EnumHandle, PlainEnum, TypeKind
from enumcast.errors import RangeContractViolation
from enumcast.ranges import NEG_INF, POS_INF, UNAVAILABLE, RangeResult, RangeSet
from enumcast.visitor import CastSite

logger = logging.getLogger(__name__)

INTEGRAL_TYPES: FrozenSet[str] = frozenset({
    "bool", "char", "short", "wchar_t", "char16_t", "char32_t",
    "int", "long", "long long", "unknown int",
})

_LITERAL_SUFFIX = "uUlL"


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — TOKEN HELPERS
# ═════════════════════════════════════════════════════════════════════════

def _tok_str(tok: Any) -> str:
    return getattr(tok, "str", "") or ""


def _tok_loc(tok: Any) -> SourceLocation:
    return SourceLocation(
        file=getattr(tok, "file", "") or "",
        line=getattr(tok, "linenr", 0) or 0,
        column=getattr(tok, "column", 0) or 0,
    )


def _get_valueflow_values(tok: Any) -> list:
    return list(getattr(tok, "values", None) or [])


def _value_path(val: Any) -> int:
    raw = getattr(val, "path", 0)
    try:
        return int(raw or 0)
    except (TypeError, ValueError):
        return 0


def _value_int(val: Any) -> Optional[int]:
    iv = getattr(val, "intvalue", None)
    if iv is None or isinstance(iv, bool):
        return None
    try:
        return int(iv)
    except (TypeError, ValueError):
        return None


def _parse_int_literal(text: str) -> Optional[int]:
    body = text.rstrip(_LITERAL_SUFFIX)
    if body.startswith(("0b", "0B", "0x", "0X")):
        base_text = body
    elif len(body) > 1 and body.startswith("0") and body.isdigit():
        base_text = "0o" + body[1:]
    else:
        base_text = body
    try:
        return int(base_text, 0)
    except ValueError:
        return None


def _known_int(tok: Any) -> Optional[int]:
    """Known integer value of *tok*, or ``None``."""
    if tok is None:
        return None
    getter = getattr(tok, "getKnownIntValue", None)
    if callable(getter):
        kv = getter()
        if isinstance(kv, int) and not isinstance(kv, bool):
            return kv
    for val in _get_valueflow_values(tok):
        if getattr(val, "valueKind", "") == "known":
            iv = _value_int(val)
            if iv is not None:
                return iv
    if getattr(tok, "isNumber", False) is True:
        return _parse_int_literal(_tok_str(tok))
    return None


def _is_integral(vt: Any) -> bool:
    if vt is None:
        return False
    if getattr(vt, "pointer", 0):
        return False
    return getattr(vt, "type", "") in INTEGRAL_TYPES


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — TYPE QUERY
# ═════════════════════════════════════════════════════════════════════════

class CppcheckTypeQuery:
    """:class:`~enumcast.enum_space.TypeQuery` over cppcheck ``ValueType`` / ``Scope``.

    Scope ``Id`` values are addresses from the cppcheck process that wrote
    the dump, so they only identify an enum within one configuration.
    When *namespace* is set, handle keys are ``(namespace, scope.Id)``;
    the addon driver assigns a fresh namespace to every configuration it
    checks.
    """

    def __init__(self, namespace: Hashable = None) -> None:
        self.namespace = namespace

    def classify(self, type_: Any) -> TypeKind:
        if type_ is None or getattr(type_, "pointer", 0):
            return NOT_ENUM
        scope = getattr(type_, "typeScope", None)
        if scope is None or getattr(scope, "type", "") != "Enum":
            return NOT_ENUM
        key = getattr(scope, "Id", id(scope))
        if self.namespace is not None:
            key = (self.namespace, key)
        return PlainEnum(EnumHandle(
            key=key,
            name=getattr(scope, "className", "") or "",
            origin=scope,
        ))

    def declared_constants(self, handle: EnumHandle) -> List[Optional[int]]:
        scope = handle.origin
        start = getattr(scope, "bodyStart", None)
        if start is not None and getattr(scope, "bodyEnd", None) is not None:
            return self._from_body(start, scope.bodyEnd)
        # No body tokens: fall back to the enumerators cppcheck lists as
        # scope variables.
        return [
            _known_int(getattr(var, "nameToken", None))
            for var in getattr(scope, "varlist", None) or []
        ]

    @staticmethod
    def _from_body(start: Any, end: Any) -> List[Optional[int]]:
        values: List[Optional[int]] = []
        previous: Optional[int] = -1
        expecting_name = True
        tok = getattr(start, "next", None)
        while tok is not None and tok is not end:
            s = _tok_str(tok)
            if expecting_name and getattr(tok, "isName", False):
                value = _known_int(tok)
                nxt = getattr(tok, "next", None)
                if value is None and _tok_str(nxt) == "=":
                    value = CppcheckTypeQuery._initializer_value(nxt)
                elif value is None:
                    value = None if previous is None else previous + 1
                values.append(value)
                previous = value
                expecting_name = False
            elif s in ("(", "[", "{") and getattr(tok, "link", None) is not None:
                tok = tok.link
            elif s == ",":
                expecting_name = True
            tok = getattr(tok, "next", None)
        return values

    @staticmethod
    def _initializer_value(eq_tok: Any) -> Optional[int]:
        root = getattr(eq_tok, "astOperand2", None)
        if root is not None:
            return _known_int(root)
        first = getattr(eq_tok, "next", None)
        after = getattr(first, "next", None)
        if _tok_str(after) in (",", "}"):
            return _known_int(first)
        return None


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — RANGE QUERY
# ═════════════════════════════════════════════════════════════════════════

class ValueFlowRangeQuery:
    """:class:`~enumcast.ranges.PathRangeQuery` over ``Token.values``.

    *path_state* is the ValueFlow path id (``0`` = values valid on every
    path).
    """

    def range_of(self, operand: Any, path_state: Any) -> RangeResult:
        if operand is None or not _is_integral(getattr(operand, "valueType", None)):
            return UNAVAILABLE
        path = int(path_state or 0)

        lo, hi = NEG_INF, POS_INF
        holes: Set[int] = set()
        known: Optional[int] = None
        for val in _get_valueflow_values(operand):
            if _value_path(val) not in (0, path):
                continue
            iv = _value_int(val)
            if iv is None:
                continue
            kind = getattr(val, "valueKind", "")
            if kind == "known":
                known = iv
            elif kind == "impossible":
                bound = getattr(val, "bound", None) or "Point"
                if bound == "Upper":
                    lo = max(lo, iv + 1)
                elif bound == "Lower":
                    hi = min(hi, iv - 1)
                else:
                    holes.add(iv)

        if lo > hi:
            raise RangeContractViolation(
                f"contradictory ValueFlow bounds on path {path}", (lo, hi)
            )
        ranges = RangeSet.between(lo, hi)
        if holes:
            ranges = ranges.excluding(holes)
        if known is not None:
            if not ranges.contains(known):
                raise RangeContractViolation(
                    f"known value contradicts impossible values on path {path}", known
                )
            return RangeSet.point(known)
        return ranges


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — CAST SITE TRAVERSAL
# ═════════════════════════════════════════════════════════════════════════

def _cast_operand(tok: Any, kinds: FrozenSet[str]) -> Optional[Any]:
    if _tok_str(tok) != "(":
        return None
    op1 = getattr(tok, "astOperand1", None)
    op2 = getattr(tok, "astOperand2", None)
    if "static_cast" in kinds and _tok_str(op1) == "static_cast":
        return op2
    if "c_style" in kinds and getattr(tok, "isCast", False) is True:
        return op1 if op1 is not None else op2
    return None


def _path_ids(operand: Any) -> List[int]:
    ids = {_value_path(v) for v in _get_valueflow_values(operand)}
    ids.discard(0)
    return sorted(ids) or [0]


def iter_cast_sites(cfg: Any, config: Optional[AnalysisConfig] = None) -> Iterator[CastSite]:
    """Yield one :class:`CastSite` per cast token and ValueFlow path in *cfg*."""
    kinds = (config or AnalysisConfig()).cast_kinds
    for tok in getattr(cfg, "tokenlist", None) or []:
        operand = _cast_operand(tok, kinds)
        if operand is None:
            continue
        loc = _tok_loc(tok)
        for path in _path_ids(operand):
            yield CastSite(
                expr=tok,
                target_type=getattr(tok, "valueType", None),
                operand=operand,
                path_id=path,
                location=loc,
            )


__all__ = [
    "INTEGRAL_TYPES",
    "CppcheckTypeQuery",
    "ValueFlowRangeQuery",
    "iter_cast_sites",
]
