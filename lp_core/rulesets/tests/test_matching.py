import pytest

from lp_core.rulesets.matching import find_overlaps, first_match, matches, ranges_overlap


@pytest.mark.parametrize("lo,hi", [(0, 0), (1, 4), (5, 6), (7, 14), (3, 3)])
def test_matches_is_inclusive_on_both_ends(lo, hi):
    for value in range(lo - 3, hi + 4):
        assert matches(value, (lo, hi)) is (lo <= value <= hi)

    assert matches(lo, (lo, hi)) is True
    assert matches(hi, (lo, hi)) is True
    assert matches(lo - 1, (lo, hi)) is False
    assert matches(hi + 1, (lo, hi)) is False


def test_matches_empty_range_never_matches():
    assert matches(5, (6, 5)) is False


def test_first_match_prefers_earlier_declaration():
    items = [("a", (1, 10)), ("b", (5, 20)), ("c", (5, 6))]

    for _ in range(3):
        assert first_match(items, 5, lambda x: x[1])[0] == "a"
    assert first_match(items, 15, lambda x: x[1])[0] == "b"
    assert first_match(items, 21, lambda x: x[1]) is None


def test_first_match_on_empty_sequence():
    assert first_match([], 1, lambda x: x) is None


def test_find_overlaps_reports_index_pairs():
    ranges = [(1, 10), (11, 20), (20, 30), (40, 50), (45, 45)]

    assert find_overlaps(ranges) == [(1, 2), (3, 4)]
    assert ranges_overlap((1, 4), (4, 8)) is True
    assert ranges_overlap((1, 4), (5, 8)) is False


def test_find_overlaps_none_for_disjoint_buckets():
    assert find_overlaps([(1, 10), (11, 50), (51, 100)]) == []
