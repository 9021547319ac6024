# tests/conftest.py
"""
Shared fixtures and lightweight stand-ins for the cppcheckdata object
model (Token, Value, ValueType, Scope, Configuration, CppcheckData), plus
in-memory type/range collaborators for driving the visitor directly.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pytest

from enumcast.enum_space import NOT_ENUM, EnumHandle, PlainEnum
from enumcast.ranges import UNAVAILABLE

SCENARIO_VALUES = (-4, -3, 1, 2, 4)


# ── cppcheckdata stand-ins ───────────────────────────────────────

class MockValue:
    def __init__(self, intvalue: Optional[int], valueKind: str = "known",
                 bound: str = "Point", path: int = 0) -> None:
        self.intvalue = intvalue
        self.valueKind = valueKind
        self.bound = bound
        self.path = path
        self.condition = None
        self.tokvalue = None


class MockValueType:
    def __init__(self, type: str = "int", sign: str = "signed", pointer: int = 0,
                 typeScope: Any = None) -> None:
        self.type = type
        self.sign = sign
        self.pointer = pointer
        self.typeScope = typeScope


class MockToken:
    _next_id = 0

    def __init__(self, str: str = "", **attrs: Any) -> None:
        MockToken._next_id += 1
        self.Id = f"tok{MockToken._next_id}"
        self.str = str
        self.next = None
        self.previous = None
        self.link = None
        self.astOperand1 = None
        self.astOperand2 = None
        self.astParent = None
        self.isCast = False
        self.isName = str.isidentifier()
        self.isNumber = bool(str) and str[0].isdigit()
        self.valueType = None
        self.values: List[MockValue] = []
        self.file = "test.c"
        self.linenr = 1
        self.column = 1
        for key, val in attrs.items():
            setattr(self, key, val)

    def getKnownIntValue(self) -> Optional[int]:
        for v in self.values:
            if v.valueKind == "known" and v.intvalue is not None:
                return v.intvalue
        return None

    def __repr__(self) -> str:
        return f"MockToken({self.str!r})"


class MockVariable:
    def __init__(self, nameToken: MockToken) -> None:
        self.nameToken = nameToken


class MockScope:
    def __init__(self, Id: str, type: str = "Enum", className: str = "",
                 bodyStart: Any = None, bodyEnd: Any = None,
                 varlist: Optional[List[MockVariable]] = None) -> None:
        self.Id = Id
        self.type = type
        self.className = className
        self.bodyStart = bodyStart
        self.bodyEnd = bodyEnd
        self.varlist = varlist or []


class MockConfiguration:
    def __init__(self, tokenlist: List[MockToken], scopes: Optional[List[MockScope]] = None,
                 name: str = "") -> None:
        self.tokenlist = tokenlist
        self.scopes = scopes or []
        self.name = name


class MockData:
    def __init__(self, configurations: List[MockConfiguration]) -> None:
        self.configurations = configurations


def make_token_chain(specs: Sequence[Union[str, Dict[str, Any]]]) -> List[MockToken]:
    """Build linked tokens from strings or attribute dicts."""
    tokens = []
    for spec in specs:
        if isinstance(spec, str):
            tokens.append(MockToken(spec))
        else:
            attrs = dict(spec)
            tokens.append(MockToken(attrs.pop("str", ""), **attrs))
    for a, b in zip(tokens, tokens[1:]):
        a.next = b
        b.previous = a
    return tokens


def make_cfg(tokens: List[MockToken], scopes: Optional[List[MockScope]] = None) -> MockConfiguration:
    return MockConfiguration(tokens, scopes)


def make_data(cfgs: List[MockConfiguration]) -> MockData:
    return MockData(cfgs)


def make_number(value: int) -> MockToken:
    """An integer literal token (negative values become a folded unary minus)."""
    tok = MockToken(str(value) if value >= 0 else "-")
    tok.valueType = MockValueType("int")
    tok.values = [MockValue(value)]
    return tok


EnumeratorSpec = Tuple[str, Union[int, None, str]]


def make_enum_scope(name: str, enumerators: Sequence[EnumeratorSpec],
                    scope_id: Optional[str] = None) -> MockScope:
    """
    Build an ``Enum`` scope whose body tokens declare *enumerators*.

    Each spec is ``(name, init)`` where *init* is an int (explicit
    initializer), ``None`` (no initializer) or ``"?"`` (an initializer
    that cannot be evaluated, ``= f()``).
    """
    toks: List[MockToken] = [MockToken("{")]
    for i, (ename, init) in enumerate(enumerators):
        if i:
            toks.append(MockToken(","))
        toks.append(MockToken(ename))
        if init is None:
            continue
        eq = MockToken("=")
        toks.append(eq)
        if init == "?":
            call_name = MockToken("f")
            lpar, rpar = MockToken("("), MockToken(")")
            lpar.link, rpar.link = rpar, lpar
            eq.astOperand2 = lpar
            toks.extend([call_name, lpar, rpar])
        else:
            lit = make_number(int(init))
            eq.astOperand2 = lit
            toks.append(lit)
    toks.append(MockToken("}"))
    toks[0].link, toks[-1].link = toks[-1], toks[0]
    for a, b in zip(toks, toks[1:]):
        a.next = b
        b.previous = a
    return MockScope(
        Id=scope_id or f"scope-{name}",
        className=name,
        bodyStart=toks[0],
        bodyEnd=toks[-1],
    )


def scenario_scope() -> MockScope:
    """``enum E { A = -4, B, C = 1, D, F = 4 };`` → {-4, -3, 1, 2, 4}."""
    return make_enum_scope("E", [("A", -4), ("B", None), ("C", 1), ("D", None), ("F", 4)])


def make_operand(values: Iterable[MockValue] = (), type: str = "int",
                 pointer: int = 0) -> MockToken:
    tok = MockToken("x")
    tok.valueType = MockValueType(type, pointer=pointer)
    tok.values = list(values)
    return tok


def make_cast(operand: MockToken, target_scope: Optional[MockScope], linenr: int = 10,
              static: bool = False) -> List[MockToken]:
    """Tokens for ``(E)x`` or ``static_cast<E>(x)``; returns the token list."""
    target = MockValueType("int", typeScope=target_scope)
    lpar = MockToken("(", linenr=linenr, column=5)
    lpar.valueType = target
    if static:
        kw = MockToken("static_cast", linenr=linenr)
        lpar.astOperand1 = kw
        lpar.astOperand2 = operand
        tokens = [kw, lpar, operand]
    else:
        lpar.isCast = True
        lpar.astOperand1 = operand
        tokens = [lpar, operand]
    operand.linenr = linenr
    operand.astParent = lpar
    return tokens


# ── in-memory collaborators ──────────────────────────────────────

class DictTypeQuery:
    """Type names listed in *enums* are enumerations with those constants."""

    def __init__(self, enums: Dict[str, Sequence[Optional[int]]]) -> None:
        self.enums = dict(enums)
        self.calls: List[str] = []

    def classify(self, type_: Any):
        if type_ in self.enums:
            return PlainEnum(EnumHandle(key=type_, name=type_))
        return NOT_ENUM

    def declared_constants(self, handle: EnumHandle):
        self.calls.append(handle.key)
        return list(self.enums[handle.key])


class TableRangeQuery:
    """Answers ``range_of`` from a ``{(operand, path_state): result}`` table."""

    def __init__(self, table: Dict[Tuple[Any, Any], Any]) -> None:
        self.table = dict(table)

    def range_of(self, operand: Any, path_state: Any):
        return self.table.get((operand, path_state), UNAVAILABLE)


@pytest.fixture
def scenario_query() -> DictTypeQuery:
    return DictTypeQuery({"E": [-4, -3, 1, 2, 4], "Empty": [], "int": []})
