"""Tests for rag.ranker — exhaustive dot-product top-k."""

import pytest

from gguf_rag.errors import DimensionMismatchError
from gguf_rag.rag.ranker import dot_product, rank, top_k
from gguf_rag.rag.vector_store import EmbeddingStore


class TestTopK:
    def test_animal_scenario(self, animal_store):
        assert top_k(animal_store, [1.0, 0.0], 2) == ["cat", "fish"]

    def test_scores_are_raw_dot_products(self, animal_store):
        scored = rank(animal_store, [1.0, 0.0], 3)
        assert [s.text for s in scored] == ["cat", "fish", "dog"]
        assert [s.score for s in scored] == pytest.approx([1.0, 0.7, 0.0])
        assert [s.index for s in scored] == [0, 2, 1]

    def test_basis_query_ranks_its_vector_first(self, basis_store):
        result = top_k(basis_store, [0.0, 1.0, 0.0], 3)
        assert result[0] == "second"
        scored = rank(basis_store, [0.0, 1.0, 0.0], 3)
        assert scored[0].score > scored[1].score

    def test_k_zero(self, animal_store):
        assert top_k(animal_store, [1.0, 0.0], 0) == []

    def test_k_larger_than_store_returns_all(self, animal_store):
        assert top_k(animal_store, [0.0, 1.0], 10) == ["dog", "fish", "cat"]

    def test_empty_store(self):
        assert top_k(EmbeddingStore(), [1.0, 2.0], 3) == []
        assert top_k(EmbeddingStore(embedding_size=2), [1.0, 2.0], 3) == []

    def test_negative_k(self, animal_store):
        with pytest.raises(ValueError):
            top_k(animal_store, [1.0, 0.0], -1)

    def test_magnitude_affects_ranking(self):
        store = EmbeddingStore()
        store.add("aligned", [1.0, 0.0])
        store.add("long", [3.0, 3.0])
        # cosine would prefer "aligned"; raw dot product prefers "long"
        assert top_k(store, [1.0, 0.0], 1) == ["long"]

    def test_ties_keep_insertion_order(self):
        store = EmbeddingStore()
        for name in ["d", "b", "a", "c"]:
            store.add(name, [1.0, 1.0])
        store.add("top", [2.0, 2.0])
        assert top_k(store, [1.0, 1.0], 5) == ["top", "d", "b", "a", "c"]

    def test_ties_with_duplicates_kept(self):
        store = EmbeddingStore(dedupe=False)
        store.add("same", [1.0])
        store.add("same", [1.0])
        assert top_k(store, [1.0], 5) == ["same", "same"]


class TestDimensionCheck:
    def test_query_length_mismatch(self, animal_store):
        with pytest.raises(DimensionMismatchError):
            top_k(animal_store, [1.0, 0.0, 0.0], 2)

    def test_mismatch_does_not_scan(self, animal_store, monkeypatch):
        def fail():
            raise AssertionError("store was scanned")

        monkeypatch.setattr(animal_store, "matrix", fail)
        monkeypatch.setattr(animal_store, "texts", fail)
        with pytest.raises(DimensionMismatchError):
            top_k(animal_store, [1.0], 1)


class TestDotProduct:
    def test_value(self):
        assert dot_product([1.0, 2.0, 3.0], [4.0, 5.0, 6.0]) == pytest.approx(32.0)

    def test_length_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            dot_product([1.0], [1.0, 2.0])
