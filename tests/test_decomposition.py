"""
Tests for the matrix decomposer
"""
import numpy as np
import pytest
from numpy.linalg import LinAlgError

import lsi.decomposition as decomposition
from lsi.decomposition import decompose, numerical_rank, reconstruct
from lsi.exceptions import DecompositionError, DimensionMismatchError
from lsi.metrics import orth_error, relative_error


def test_reconstruction_at_full_rank(random_counts):
    U, s, V = decompose(random_counts)
    assert np.allclose(reconstruct(U, s, V), random_counts)
    assert relative_error(random_counts, U, s, V) < 1e-12


def test_shapes_and_ordering(books):
    A, terms, docs = books
    U, s, V = decompose(A)
    r = len(s)
    assert U.shape == (len(terms), r)
    assert V.shape == (len(docs), r)
    assert np.all(s > 0)
    assert np.all(np.diff(s) <= 0)


def test_orthonormal_columns(books):
    A, _, _ = books
    U, s, V = decompose(A)
    assert orth_error(U) < 1e-10
    assert orth_error(V) < 1e-10
    for k in (1, 2, len(s)):
        assert np.allclose(U[:, :k].T @ U[:, :k], np.eye(k))
        assert np.allclose(V[:, :k].T @ V[:, :k], np.eye(k))


def test_rank_deficient_matrix_is_truncated():
    # third column is the sum of the first two
    A = np.array([[1., 0., 1.],
                  [0., 1., 1.],
                  [1., 1., 2.],
                  [2., 0., 2.]])
    U, s, V = decompose(A)
    assert len(s) == 2
    assert U.shape == (4, 2)
    assert V.shape == (3, 2)
    assert np.allclose(reconstruct(U, s, V), A)


def test_book_corpus_rank(books):
    A, _, _ = books
    _, s, _ = decompose(A)
    assert len(s) == np.linalg.matrix_rank(A)


def test_numerical_rank_tolerance():
    s = np.array([3.0, 1.0, 1e-3, 0.0])
    assert numerical_rank(s, (5, 4)) == 3
    assert numerical_rank(s, (5, 4), tol=0.01) == 2
    assert numerical_rank(np.array([]), (1, 1)) == 0


def test_zero_matrix_has_rank_zero():
    U, s, V = decompose(np.zeros((3, 2)))
    assert len(s) == 0
    assert U.shape == (3, 0)
    assert V.shape == (2, 0)


def test_single_entry_matrix():
    U, s, V = decompose([[4.0]])
    assert np.allclose(s, [4.0])
    assert np.allclose(abs(U[0, 0]), 1.0)
    assert np.allclose(abs(V[0, 0]), 1.0)


@pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
def test_non_finite_entries_rejected(bad):
    A = np.ones((3, 3))
    A[1, 2] = bad
    with pytest.raises(DecompositionError):
        decompose(A)


@pytest.mark.parametrize("shape", [(0, 3), (3, 0), (4,), (2, 2, 2)])
def test_bad_shapes_rejected(shape):
    with pytest.raises(DimensionMismatchError):
        decompose(np.ones(shape))


def test_non_convergence_is_surfaced(monkeypatch):
    def failing_svd(A, full_matrices=True):
        raise LinAlgError("SVD did not converge")

    monkeypatch.setattr(decomposition, "svd", failing_svd)
    with pytest.raises(DecompositionError) as excinfo:
        decompose(np.eye(3))
    assert isinstance(excinfo.value.__cause__, LinAlgError)
