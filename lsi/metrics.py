"""Metric functions for judging a concept space against its raw matrix."""

from __future__ import annotations

import numpy as np
from numpy.linalg import norm

from .concept_space import ConceptSpace
from .exceptions import DimensionMismatchError


def relative_error(A: np.ndarray,
                   U: np.ndarray,
                   s: np.ndarray,
                   V: np.ndarray) -> float:
    """Compute the relative Frobenius error of a truncated SVD approximation.

    Parameters
    ----------
    A : ndarray of shape (m, n)
        Reference matrix.
    U : ndarray of shape (m, k)
        Left singular vectors (term coordinates).
    s : ndarray of shape (k,)
        Singular values.
    V : ndarray of shape (n, k)
        Right singular vectors (document coordinates).

    Returns
    -------
    rel_err : float
        Relative Frobenius norm of the error ``||A - U diag(s) V^T||_F / ||A||_F``
        (the denominator is floored at 1).
    """
    approx = (U * s) @ V.T
    return float(norm(A - approx, 'fro') / max(1.0, norm(A, 'fro')))


def orth_error(X: np.ndarray) -> float:
    """Compute the orthogonality error ``||I - X^T X||_F``.

    Parameters
    ----------
    X : ndarray of shape (p, k)
        Matrix whose columns should be orthonormal, e.g. ``U_k`` or ``V_k``.

    Returns
    -------
    gamma : float
        Frobenius norm of the deviation of ``X`` from orthonormality.
    """
    k = X.shape[1]
    return float(norm(np.eye(k) - X.T @ X, 'fro'))


def fold_in_drift(space: ConceptSpace, A: np.ndarray) -> dict[str, float]:
    """Measure how far a folded-in space has drifted from an exact truncation.

    Right after :meth:`ConceptSpace.build` both orthogonality errors are at
    round-off level and ``rel_err`` equals the truncation error.  Folding in
    terms and documents raises all three.

    Parameters
    ----------
    space : ConceptSpace
        Space, possibly extended by fold-in.
    A : ndarray of shape (n_terms, n_documents)
        Accumulated raw matrix aligned with the space's identifier lists.

    Returns
    -------
    drift : dict
        ``rel_err`` (reconstruction error against ``A``), ``orth_U`` and
        ``orth_V`` (orthogonality errors of ``U_k`` and ``V_k``).
    """
    A = np.asarray(A, dtype=float)
    if A.shape != (space.n_terms, space.n_documents):
        raise DimensionMismatchError(
            "matrix of shape %s does not match a space with %i terms and %i documents"
            % (A.shape, space.n_terms, space.n_documents))
    return {
        'rel_err': relative_error(A, space.U, space.s, space.V),
        'orth_U': orth_error(space.U),
        'orth_V': orth_error(space.V),
    }
