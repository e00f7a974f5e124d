"""Tests for cosine similarity and chunk ranking."""

from __future__ import annotations

import pytest

from video_qa.errors import DimensionMismatchError
from video_qa.retrieval.search import cosine_similarity, find_relevant_chunks, rank_chunks


class TestCosineSimilarity:
    @pytest.mark.parametrize("v", [[1.0, 0.0], [3.0, 4.0], [0.2, -0.7, 1.5], [1e-3] * 8])
    def test_identical_vectors(self, v: list[float]) -> None:
        assert cosine_similarity(v, v) == pytest.approx(1.0)

    @pytest.mark.parametrize("v", [[1.0, 0.0], [3.0, 4.0], [0.2, -0.7, 1.5]])
    def test_opposite_vectors(self, v: list[float]) -> None:
        assert cosine_similarity(v, [-x for x in v]) == pytest.approx(-1.0)

    def test_orthogonal_vectors(self) -> None:
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0

    def test_zero_vector_gives_zero(self) -> None:
        assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
        assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0
        assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0

    def test_dimension_mismatch(self) -> None:
        with pytest.raises(DimensionMismatchError):
            cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])

    def test_dimension_mismatch_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            cosine_similarity([1.0], [1.0, 2.0])


class TestRanking:
    def test_query_scenario(self) -> None:
        chunks = ["chunk0", "chunk1", "chunk2"]
        embeddings = [[1.0, 0.0], [0.0, 1.0], [0.9, 0.1]]

        results = rank_chunks([1.0, 0.0], embeddings, chunks)

        assert [r.index for r in results] == [0, 2, 1]
        assert [r.text for r in results] == ["chunk0", "chunk2", "chunk1"]
        assert results[0].similarity == pytest.approx(1.0)
        assert results[1].similarity == pytest.approx(0.994, abs=1e-3)
        assert results[2].similarity == pytest.approx(0.0)

    def test_ties_keep_index_order(self) -> None:
        embeddings = [[0.0, 1.0], [1.0, 0.0], [2.0, 0.0], [1.0, 0.0]]
        results = rank_chunks([1.0, 0.0], embeddings, ["a", "b", "c", "d"])
        assert [r.index for r in results] == [1, 2, 3, 0]

    def test_invariant_under_positive_scaling(self) -> None:
        embeddings = [[1.0, 0.2], [0.3, 1.0], [0.8, 0.5]]
        chunks = ["a", "b", "c"]
        baseline = [r.index for r in rank_chunks([1.0, 0.4], embeddings, chunks)]

        scaled = [embeddings[0], [x * 25.0 for x in embeddings[1]], embeddings[2]]
        assert [r.index for r in rank_chunks([1.0, 0.4], scaled, chunks)] == baseline

    def test_length_mismatch_raises(self) -> None:
        with pytest.raises(ValueError, match="chunks"):
            rank_chunks([1.0], [[1.0], [0.5]], ["only one"])

    def test_candidate_dimension_mismatch_raises(self) -> None:
        with pytest.raises(DimensionMismatchError):
            rank_chunks([1.0, 0.0], [[1.0, 0.0], [1.0]], ["a", "b"])

    def test_empty_corpus(self) -> None:
        assert rank_chunks([1.0, 0.0], [], []) == []


class TestFindRelevantChunks:
    def test_top_k(self) -> None:
        embeddings = [[1.0, 0.0], [0.0, 1.0], [0.9, 0.1], [0.7, 0.7]]
        results = find_relevant_chunks([1.0, 0.0], embeddings, ["a", "b", "c", "d"], top_k=3)
        assert [r.index for r in results] == [0, 2, 3]

    def test_top_k_larger_than_corpus(self) -> None:
        results = find_relevant_chunks([1.0], [[1.0]], ["a"], top_k=3)
        assert len(results) == 1
