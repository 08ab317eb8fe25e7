"""
Unit tests for duplicate pair finding and ranking.
"""

import math

import pytest

from fair_directory.services.duplicates.exceptions import DuplicateValidationError
from fair_directory.services.duplicates.pair_finder import (
    DuplicatePair,
    find_duplicate_pairs,
    rank_pairs,
    validate_threshold,
)


def identity(text: str) -> str:
    return text


class TestFindDuplicatePairs:
    """Tests for find_duplicate_pairs."""

    def test_split_word_excluded_at_half(self):
        pairs = find_duplicate_pairs(
            ["county fairgrounds", "county fair grounds"], identity, 0.5
        )
        assert pairs == []

    def test_split_word_included_at_fifth(self):
        pairs = find_duplicate_pairs(
            ["county fairgrounds", "county fair grounds"], identity, 0.2
        )
        assert len(pairs) == 1
        assert pairs[0].entity1 == "county fairgrounds"
        assert pairs[0].entity2 == "county fair grounds"
        assert pairs[0].similarity == pytest.approx(0.25)

    def test_threshold_is_inclusive(self):
        pairs = find_duplicate_pairs(["a b", "a c"], identity, 1 / 3)
        assert len(pairs) == 1

    def test_never_pairs_entity_with_itself(self):
        pairs = find_duplicate_pairs(["same", "other"], identity, 0.0)
        assert all(p.index1 != p.index2 for p in pairs)
        assert len(pairs) == 1

    def test_identical_entities_pair_once(self):
        pairs = find_duplicate_pairs(["harvest fair", "harvest fair"], identity, 0.9)
        assert [(p.index1, p.index2) for p in pairs] == [(0, 1)]
        assert pairs[0].similarity == 1.0

    def test_emitted_in_collection_order(self):
        entities = ["a b", "a b", "a b", "a b"]
        pairs = find_duplicate_pairs(entities, identity, 0.5)
        assert [(p.index1, p.index2) for p in pairs] == [
            (0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3),
        ]

    def test_threshold_zero_returns_all_pairs(self):
        entities = ["a", "b", "c", "d", "e"]
        pairs = find_duplicate_pairs(entities, identity, 0.0)
        assert len(pairs) == math.comb(5, 2)

    def test_empty_and_single_collections(self):
        assert find_duplicate_pairs([], identity, 0.0) == []
        assert find_duplicate_pairs(["lonely"], identity, 0.0) == []

    def test_blank_records_do_not_match(self):
        pairs = find_duplicate_pairs(["", ""], identity, 0.01)
        assert pairs == []

    def test_monotonic_in_threshold(self):
        entities = [
            "county fairgrounds springfield",
            "county fair grounds springfield",
            "expo hall springfield",
            "expo hall peoria",
            "bobs bbq",
        ]
        previous = None
        for threshold in (0.0, 0.1, 0.25, 0.5, 0.75, 1.0):
            found = {
                (p.index1, p.index2)
                for p in find_duplicate_pairs(entities, identity, threshold)
            }
            if previous is not None:
                assert found <= previous
            previous = found

    def test_deterministic(self):
        entities = ["spring craft fair", "craft fair spring", "summer fair", "spring fair"]
        first = rank_pairs(find_duplicate_pairs(entities, identity, 0.2))
        second = rank_pairs(find_duplicate_pairs(entities, identity, 0.2))
        assert [(p.index1, p.index2, p.similarity) for p in first] == [
            (p.index1, p.index2, p.similarity) for p in second
        ]

    def test_projection_is_used(self):
        records = [{"name": "Expo Hall"}, {"name": "Expo Hall"}]
        pairs = find_duplicate_pairs(records, lambda r: r["name"].lower(), 1.0)
        assert pairs[0].entity1 is records[0]
        assert pairs[0].entity2 is records[1]


class TestRankPairs:
    """Tests for rank_pairs."""

    def test_orders_by_similarity_descending(self):
        pairs = [
            DuplicatePair("a", "b", 0.5, 0, 1),
            DuplicatePair("a", "c", 0.9, 0, 2),
            DuplicatePair("b", "c", 0.7, 1, 2),
        ]
        assert [p.similarity for p in rank_pairs(pairs)] == [0.9, 0.7, 0.5]

    def test_ties_keep_collection_order(self):
        pairs = [
            DuplicatePair("b", "c", 0.8, 1, 2),
            DuplicatePair("a", "c", 0.8, 0, 2),
            DuplicatePair("a", "b", 0.8, 0, 1),
        ]
        assert [(p.index1, p.index2) for p in rank_pairs(pairs)] == [(0, 1), (0, 2), (1, 2)]

    def test_collection_positions_are_required(self):
        with pytest.raises(TypeError):
            DuplicatePair("a", "b", 0.5)



class TestValidateThreshold:
    @pytest.mark.parametrize("threshold", [0.0, 0.7, 1.0])
    def test_accepts_unit_interval(self, threshold):
        assert validate_threshold(threshold) == threshold

    @pytest.mark.parametrize("threshold", [-0.01, 1.01, float("nan")])
    def test_rejects_out_of_range(self, threshold):
        with pytest.raises(DuplicateValidationError):
            validate_threshold(threshold)
