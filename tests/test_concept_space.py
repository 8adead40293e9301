"""
Tests for the concept space
"""
import numpy as np
import pytest

from lsi.concept_space import ConceptSpace
from lsi.decomposition import decompose, reconstruct
from lsi.exceptions import (DimensionMismatchError, DuplicateIdentifierError,
                            IdentifierMismatchError, InvalidRankError, InvalidValueError,
                            LSIError, NotFoundError)


@pytest.fixture
def triple(books):
    A, terms, docs = books
    U, s, V = decompose(A)
    return U, s, V, terms, docs


class TestBuild:
    def test_truncates_to_k(self, triple):
        U, s, V, terms, docs = triple
        space = ConceptSpace.build(U, s, V, 2, terms, docs)
        assert space.k == 2
        assert space.U.shape == (18, 2)
        assert space.V.shape == (17, 2)
        assert np.array_equal(space.s, s[:2])
        assert space.term_ids == tuple(terms)
        assert space.doc_ids == tuple(docs)

    def test_full_rank_reproduces_matrix(self, books):
        A, terms, docs = books
        U, s, V = decompose(A)
        space = ConceptSpace.build(U, s, V, len(s), terms, docs)
        assert np.allclose(reconstruct(space.U, space.s, space.V), A)

    def test_owns_its_arrays(self, triple):
        U, s, V, terms, docs = triple
        space = ConceptSpace.build(U, s, V, 2, terms, docs)
        U[:] = 0.0
        V[:] = 0.0
        assert np.any(space.U != 0)
        assert np.any(space.V != 0)

    def test_views_are_read_only(self, book_space):
        with pytest.raises(ValueError):
            book_space.U[0, 0] = 1.0
        with pytest.raises(ValueError):
            book_space.s[0] = 1.0

    @pytest.mark.parametrize("k", [0, -1, 16, 100])
    def test_invalid_rank(self, triple, k):
        U, s, V, terms, docs = triple
        with pytest.raises(InvalidRankError):
            ConceptSpace.build(U, s, V, k, terms, docs)

    def test_rank_with_zero_singular_value(self):
        U = np.eye(3)
        V = np.eye(3)
        s = np.array([2.0, 1.0, 0.0])
        ConceptSpace.build(U, s, V, 2, ["a", "b", "c"], ["x", "y", "z"])
        with pytest.raises(InvalidRankError):
            ConceptSpace.build(U, s, V, 3, ["a", "b", "c"], ["x", "y", "z"])

    def test_identifier_mismatch(self, triple):
        U, s, V, terms, docs = triple
        with pytest.raises(IdentifierMismatchError):
            ConceptSpace.build(U, s, V, 2, terms[:-1], docs)
        with pytest.raises(IdentifierMismatchError):
            ConceptSpace.build(U, s, V, 2, terms, docs + ["B18"])

    def test_duplicate_identifiers(self, triple):
        U, s, V, terms, docs = triple
        docs = list(docs)
        docs[1] = docs[0]
        with pytest.raises(DuplicateIdentifierError):
            ConceptSpace.build(U, s, V, 2, terms, docs)


class TestLookup:
    def test_vectors_match_rows(self, book_space):
        assert np.array_equal(book_space.term_vector("theori"),
                              book_space.U[book_space.term_position("theori")])
        assert np.array_equal(book_space.document_vector("B3"), book_space.V[2])

    def test_weighted_views(self, book_space):
        assert np.allclose(book_space.document_vector("B3", weighted=True),
                           book_space.V[2] * book_space.s)
        assert np.allclose(book_space.weighted_terms(), book_space.U * book_space.s)
        assert np.allclose(book_space.weighted_documents(), book_space.V * book_space.s)

    def test_returned_vectors_are_copies(self, book_space):
        vec = book_space.document_vector("B1")
        vec[:] = 42.0
        assert not np.any(book_space.V[0] == 42.0)

    def test_missing_identifiers(self, book_space):
        with pytest.raises(NotFoundError):
            book_space.term_vector("matrix")
        with pytest.raises(NotFoundError):
            book_space.document_vector("B99")
        assert not book_space.has_term("matrix")
        assert book_space.has_document("B17")

    def test_snapshot(self, book_space):
        snap = book_space.snapshot()
        assert snap['k'] == 2
        assert snap['doc_ids'] == list(book_space.doc_ids)
        snap['V'][:] = 0.0
        assert np.any(book_space.V != 0)


class TestAppend:
    def test_append_document(self, book_space):
        before = book_space.V.copy()
        book_space.append_document("B18", np.array([0.1, -0.2]))
        assert book_space.n_documents == 18
        assert book_space.doc_ids[-1] == "B18"
        assert np.array_equal(book_space.V[:17], before)
        assert np.array_equal(book_space.document_vector("B18"), [0.1, -0.2])

    def test_append_term(self, book_space):
        before = book_space.U.copy()
        book_space.append_term("perturb", [0.3, 0.4])
        assert book_space.term_ids[-1] == "perturb"
        assert np.array_equal(book_space.U[:18], before)
        assert book_space.term_position("perturb") == 18

    def test_duplicate_is_rejected_without_change(self, book_space):
        before = book_space.snapshot()
        with pytest.raises(DuplicateIdentifierError):
            book_space.append_document("B1", np.zeros(2))
        with pytest.raises(DuplicateIdentifierError):
            book_space.append_term("theori", np.zeros(2))
        assert np.array_equal(book_space.V, before['V'])
        assert np.array_equal(book_space.U, before['U'])
        assert book_space.doc_ids == tuple(before['doc_ids'])

    @pytest.mark.parametrize("vector", [np.zeros(3), np.zeros(1), np.zeros((1, 2))])
    def test_wrong_length_is_rejected_without_change(self, book_space, vector):
        with pytest.raises(DimensionMismatchError):
            book_space.append_document("B18", vector)
        assert not book_space.has_document("B18")
        assert book_space.V.shape == (17, 2)

    def test_non_finite_vector_rejected(self, book_space):
        with pytest.raises(InvalidValueError):
            book_space.append_term("nan", [np.nan, 0.0])
        with pytest.raises(LSIError):
            book_space.append_document("inf", [1.0, np.inf])
        assert not book_space.has_document("inf")
        assert not book_space.has_term("nan")
