# tests/test_enum_space.py
"""
Tests for enum classification tags and the session value-space cache.
"""

import dataclasses
import threading
import time
from unittest.mock import MagicMock

import pytest

from enumcast.enum_space import (
    NOT_ENUM,
    EnumDescriptor,
    EnumHandle,
    EnumValueSpace,
    PlainEnum,
)
from tests.conftest import SCENARIO_VALUES, DictTypeQuery


class TestEnumHandle:

    def test_origin_ignored_for_equality(self):
        a = EnumHandle("k", "E", origin=object())
        b = EnumHandle("k", "E", origin=object())
        assert a == b
        assert hash(a) == hash(b)

    def test_display_name(self):
        assert EnumHandle("k", "Color").display_name() == "enum Color"
        assert EnumHandle("k").display_name() == "enum <anonymous>"


class TestClassification:

    def test_not_enum_is_singleton(self):
        assert type(NOT_ENUM)() is NOT_ENUM
        assert repr(NOT_ENUM) == "NOT_ENUM"

    def test_plain_enum_wraps_handle(self, scenario_query):
        kind = scenario_query.classify("E")
        assert isinstance(kind, PlainEnum)
        assert kind.handle.key == "E"

    def test_non_enum(self, scenario_query):
        assert scenario_query.classify("double") is NOT_ENUM


class TestBuild:

    def test_scenario_values(self, scenario_query):
        space = EnumValueSpace(scenario_query)
        desc = space.build(EnumHandle("E"))
        assert desc.values == SCENARIO_VALUES
        assert desc.unresolved == 0

    def test_sorted_and_deduplicated(self):
        tq = DictTypeQuery({"Dup": [3, 1, 3, -2, 1]})
        desc = EnumValueSpace(tq).build(EnumHandle("Dup"))
        assert desc.values == (-2, 1, 3)

    def test_unresolved_enumerators_skipped(self):
        tq = DictTypeQuery({"Partial": [0, None, 7, None]})
        desc = EnumValueSpace(tq).build(EnumHandle("Partial"))
        assert desc.values == (0, 7)
        assert desc.unresolved == 2

    def test_bools_are_not_values(self):
        tq = DictTypeQuery({"B": [True, 2]})
        desc = EnumValueSpace(tq).build(EnumHandle("B"))
        assert desc.values == (2,)

    def test_empty_enum(self, scenario_query):
        desc = EnumValueSpace(scenario_query).build(EnumHandle("Empty"))
        assert desc.is_empty
        assert len(desc) == 0

    def test_exact_membership_not_bit_width(self, scenario_query):
        desc = EnumValueSpace(scenario_query).build(EnumHandle("E"))
        assert 3 not in desc
        assert -1 not in desc
        assert 4 in desc

    def test_build_does_not_cache(self, scenario_query):
        space = EnumValueSpace(scenario_query)
        space.build(EnumHandle("E"))
        assert len(space) == 0


class TestFetch:

    def test_builds_once(self, scenario_query):
        space = EnumValueSpace(scenario_query)
        first = space.fetch(EnumHandle("E"))
        second = space.fetch(EnumHandle("E", origin="other"))
        assert first is second
        assert scenario_query.calls == ["E"]
        assert EnumHandle("E") in space
        assert "E" in space

    def test_distinct_enums_distinct_entries(self, scenario_query):
        space = EnumValueSpace(scenario_query)
        space.fetch(EnumHandle("E"))
        space.fetch(EnumHandle("Empty"))
        assert len(space) == 2

    def test_invalidate(self, scenario_query):
        space = EnumValueSpace(scenario_query)
        space.fetch(EnumHandle("E"))
        space.invalidate()
        assert len(space) == 0
        space.fetch(EnumHandle("E"))
        assert scenario_query.calls == ["E", "E"]

    def test_concurrent_first_fetch_shares_descriptor(self):
        tq = MagicMock()

        def slow_constants(handle):
            time.sleep(0.01)
            return list(SCENARIO_VALUES)

        tq.declared_constants.side_effect = slow_constants
        space = EnumValueSpace(tq)
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(space.fetch(EnumHandle("E")))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 8
        assert all(r is results[0] for r in results)
        assert tq.declared_constants.call_count == 1


class TestDescriptor:

    def test_frozen(self):
        desc = EnumDescriptor(EnumHandle("E"), (1, 2))
        with pytest.raises(dataclasses.FrozenInstanceError):
            desc.values = (3,)
