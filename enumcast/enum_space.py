"""
enumcast/enum_space.py
══════════════════════

Per-enumeration valid-value spaces and the session cache that holds them.

An enumeration's value space is the sorted, duplicate-free set of the
integer values of its declared enumerators.  Exact membership is what
counts: values that merely fit in the bit-width spanned by the smallest
and largest enumerator are *not* part of the space.

The type system is reached only through :class:`TypeQuery`, whose
``classify`` answers with a tagged result (:data:`NOT_ENUM` or
:class:`PlainEnum`) instead of probing a type hierarchy.

Usage
-----
>>> space = EnumValueSpace(my_type_query)
>>> kind = my_type_query.classify(target_type)
>>> if isinstance(kind, PlainEnum):
...     desc = space.fetch(kind.handle)
...     desc.values
(-4, -3, 1, 2, 4)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import (
    Any,
    ClassVar,
    Dict,
    Hashable,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — TYPE CAPABILITY QUERY
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class EnumHandle:
    """
    Identity of one enumeration type.

    Attributes
    ----------
    key    : cache key; two handles with equal keys denote the same enum
    name   : display name (tag, or ``""`` for anonymous enums)
    origin : collaborator-specific object (e.g. a cppcheck ``Scope``);
             excluded from equality and hashing
    """
    key: Hashable
    name: str = ""
    origin: Any = field(default=None, compare=False, repr=False)

    def display_name(self) -> str:
        return f"enum {self.name}" if self.name else "enum <anonymous>"


class _NotEnum:
    """Tag returned by :meth:`TypeQuery.classify` for non-enum types."""

    _instance: ClassVar[Any] = None

    def __new__(cls) -> "_NotEnum":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_ENUM"


NOT_ENUM = _NotEnum()


@dataclass(frozen=True)
class PlainEnum:
    """Tag returned by :meth:`TypeQuery.classify` for enumeration types."""
    handle: EnumHandle


TypeKind = Union[_NotEnum, PlainEnum]


class TypeQuery(Protocol):
    """Interface to the front-end type system and constant evaluator."""

    def classify(self, type_: Any) -> TypeKind:
        """Return :class:`PlainEnum` for enumeration types, else :data:`NOT_ENUM`."""
        ...

    def declared_constants(self, handle: EnumHandle) -> Sequence[Optional[int]]:
        """Values of the declared enumerators, in declaration order.

        An enumerator whose value cannot be evaluated is reported as
        ``None``.
        """
        ...


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — DESCRIPTOR
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class EnumDescriptor:
    """Immutable value space of one enumeration.

    ``values`` is sorted ascending and free of duplicates; it may be empty.
    """
    handle: EnumHandle
    values: Tuple[int, ...] = ()
    unresolved: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.values

    def __contains__(self, value: object) -> bool:
        return value in self.values

    def __len__(self) -> int:
        return len(self.values)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return int(value)
    return None


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 — SESSION CACHE
# ═══════════════════════════════════════════════════════════════════════════

class EnumValueSpace:
    """
    Session-scoped map from enumeration identity to :class:`EnumDescriptor`.

    Descriptors are built lazily on first :meth:`fetch` and never mutated
    afterwards.  The map is guarded by a lock so that parallel path
    workers racing on the first build of the same enum end up sharing a
    single descriptor.

    Parameters
    ----------
    type_query : TypeQuery
        Source of declared enumerator values.
    """

    def __init__(self, type_query: TypeQuery) -> None:
        self._type_query = type_query
        self._cache: Dict[Hashable, EnumDescriptor] = {}
        self._lock = threading.Lock()

    def build(self, handle: EnumHandle) -> EnumDescriptor:
        """Compute the descriptor for *handle* without touching the cache.

        Constants that did not evaluate to a concrete integer are left
        out; the rest of the enum is still usable.
        """
        resolved = set()
        unresolved = 0
        for raw in self._type_query.declared_constants(handle):
            value = _as_int(raw)
            if value is None:
                unresolved += 1
                continue
            resolved.add(value)
        if unresolved:
            logger.debug(
                "%s: %d enumerator(s) without a concrete value were skipped",
                handle.display_name(), unresolved,
            )
        return EnumDescriptor(
            handle=handle,
            values=tuple(sorted(resolved)),
            unresolved=unresolved,
        )

    def fetch(self, handle: EnumHandle) -> EnumDescriptor:
        """Return the cached descriptor for *handle*, building it once."""
        with self._lock:
            desc = self._cache.get(handle.key)
            if desc is None:
                desc = self.build(handle)
                self._cache[handle.key] = desc
                logger.debug(
                    "built value space for %s: %s",
                    handle.display_name(), desc.values,
                )
            return desc

    def invalidate(self) -> None:
        """Drop every cached descriptor (start of a new session)."""
        with self._lock:
            self._cache.clear()

    def __contains__(self, handle: object) -> bool:
        key = handle.key if isinstance(handle, EnumHandle) else handle
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


__all__ = [
    "EnumHandle",
    "NOT_ENUM",
    "PlainEnum",
    "TypeKind",
    "TypeQuery",
    "EnumDescriptor",
    "EnumValueSpace",
]
