# tests/test_oracle.py
"""
Tests for decide(V, R): WARN exactly when no value in R names an
enumerator of V.
"""

import itertools

import pytest

from enumcast.enum_space import EnumDescriptor, EnumHandle
from enumcast.errors import RangeContractViolation
from enumcast.oracle import Verdict, decide
from enumcast.ranges import NEG_INF, POS_INF, Interval, RangeSet
from tests.conftest import SCENARIO_VALUES


V = SCENARIO_VALUES


class TestScenarios:
    """V = {-4, -3, 1, 2, 4} against the operand ranges of each branch."""

    @pytest.mark.parametrize("ranges, expected", [
        # A: x in [-2, -1]
        (RangeSet.between(-2, -1), Verdict.WARN),
        # B: x in [-1, 0]
        (RangeSet.between(-1, 0), Verdict.WARN),
        # C: x == 3
        (RangeSet.point(3), Verdict.WARN),
        # D: x in [-3, -2]
        (RangeSet.between(-3, -2), Verdict.SAFE),
        # E: x in [5, +inf)
        (RangeSet.between(5, POS_INF), Verdict.WARN),
        # F: x in [0, 1]
        (RangeSet.between(0, 1), Verdict.SAFE),
    ], ids=["A", "B", "C", "D", "E", "F"])
    def test_branch(self, ranges, expected):
        assert decide(V, ranges) is expected


class TestEdgeCases:

    def test_empty_value_space_always_warns(self):
        assert decide((), RangeSet.full()) is Verdict.WARN
        assert decide((), RangeSet.point(0)) is Verdict.WARN

    def test_full_range_safe_when_any_enumerator(self):
        assert decide((7,), RangeSet.full()) is Verdict.SAFE

    def test_unbounded_below(self):
        assert decide(V, RangeSet.between(NEG_INF, -5)) is Verdict.WARN
        assert decide(V, RangeSet.between(NEG_INF, -4)) is Verdict.SAFE

    def test_multi_interval_hit_in_later_interval(self):
        rs = RangeSet([Interval(-2, -1), Interval(3, 3), Interval(4, 10)])
        assert decide(V, rs) is Verdict.SAFE

    def test_multi_interval_all_in_gaps(self):
        rs = RangeSet([Interval(-2, 0), Interval(3, 3), Interval(5, POS_INF)])
        assert decide(V, rs) is Verdict.WARN

    def test_accepts_descriptor(self):
        desc = EnumDescriptor(EnumHandle("E"), V)
        assert decide(desc, RangeSet.point(2)) is Verdict.SAFE
        assert decide(desc, RangeSet.point(0)) is Verdict.WARN

    def test_bit_width_values_do_not_count(self):
        # 3 fits in the bits spanned by {-4 .. 4} but is not an enumerator
        assert decide(V, RangeSet.point(3)) is Verdict.WARN

    @pytest.mark.parametrize("bad", [[], None, (Interval(0, 1),), "0..1"])
    def test_non_rangeset_is_contract_violation(self, bad):
        with pytest.raises(RangeContractViolation):
            decide(V, bad)


class TestAgainstBruteForce:
    """Compare with set intersection over a small closed domain."""

    DOMAIN = range(-6, 7)

    def _interval_sets(self):
        bounds = list(self.DOMAIN)
        for lo, hi in itertools.combinations_with_replacement(bounds, 2):
            yield RangeSet.between(lo, hi)
        for a, b, c, d in [(-6, -5, -2, 0), (-1, 0, 3, 3), (0, 0, 5, 6), (-6, -4, 1, 1)]:
            yield RangeSet([Interval(a, b), Interval(c, d)])

    @pytest.mark.parametrize("values", [(), (0,), V, (-6, 6), tuple(range(-6, 7, 3))])
    def test_matches_intersection(self, values):
        for rs in self._interval_sets():
            members = {n for n in self.DOMAIN if rs.contains(n)}
            expected = Verdict.SAFE if members & set(values) else Verdict.WARN
            assert decide(values, rs) is expected, (values, rs)
