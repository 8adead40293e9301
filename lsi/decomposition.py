"""Singular value decomposition of a term-document matrix.

This module wraps :func:`numpy.linalg.svd` with the contract used by the rest
of the package.  Given an ``m × n`` term-document frequency matrix ``A`` it
returns the thin decomposition

    A = U @ diag(s) @ V.T,

restricted to the numerical rank ``r`` of ``A``: ``U`` is ``m × r``, ``s`` has
length ``r`` (strictly positive, descending) and ``V`` is ``n × r``.  Note that
``V`` is returned untransposed, one row per document, which is the layout the
concept space stores.

Singular vectors are only defined up to sign.  A valid decomposition may flip
the sign of any pair ``(u_i, v_i)``; nothing downstream relies on a particular
sign.

Example
-------

```python
import numpy as np
from lsi.decomposition import decompose, reconstruct

A = np.array([[1., 0., 1.],
              [0., 1., 1.],
              [1., 1., 0.]])
U, s, V = decompose(A)
assert np.allclose(reconstruct(U, s, V), A)
```
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.linalg import LinAlgError, svd

from .exceptions import DecompositionError, DimensionMismatchError

logger = logging.getLogger(__name__)


def numerical_rank(s: np.ndarray,
                   shape: tuple[int, int],
                   tol: float | None = None) -> int:
    """Count the singular values above a tolerance.

    Parameters
    ----------
    s : ndarray of shape (p,)
        Singular values in descending order.
    shape : tuple of int
        Shape ``(m, n)`` of the decomposed matrix.
    tol : float, optional
        Threshold below which a singular value is treated as zero.  Defaults
        to ``s[0] * max(m, n) * eps``, the convention of
        :func:`numpy.linalg.matrix_rank`.

    Returns
    -------
    r : int
        Number of singular values strictly greater than ``tol``.
    """
    if s.size == 0:
        return 0
    if tol is None:
        tol = s[0] * max(shape) * np.finfo(s.dtype).eps
    return int(np.count_nonzero(s > tol))


def decompose(A: np.ndarray,
              tol: float | None = None) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Compute the rank-revealing thin SVD of a term-document matrix.

    Parameters
    ----------
    A : array_like of shape (m, n)
        Term-document frequency matrix (rows are terms, columns documents).
    tol : float, optional
        Rank tolerance passed to :func:`numerical_rank`.

    Returns
    -------
    U : ndarray of shape (m, r)
        Left singular vectors with orthonormal columns.
    s : ndarray of shape (r,)
        Strictly positive singular values in descending order.
    V : ndarray of shape (n, r)
        Right singular vectors with orthonormal columns.

    Raises
    ------
    DimensionMismatchError
        If ``A`` is not two-dimensional or has an empty axis.
    DecompositionError
        If ``A`` contains NaN or Inf entries, or the underlying LAPACK
        routine fails to converge.
    """
    A = np.asarray(A, dtype=float)
    if A.ndim != 2:
        raise DimensionMismatchError(
            "term-document matrix must be two-dimensional, got shape %s" % (A.shape,))
    m, n = A.shape
    if m < 1 or n < 1:
        raise DimensionMismatchError(
            "term-document matrix must have at least one term and one document, "
            "got shape %s" % (A.shape,))
    if not np.all(np.isfinite(A)):
        raise DecompositionError("term-document matrix contains NaN or Inf entries")

    logger.info("computing SVD of %s term-document matrix", A.shape)
    try:
        U, s, Vt = svd(A, full_matrices=False)
    except LinAlgError as err:
        raise DecompositionError("SVD of %s matrix did not converge: %s" % (A.shape, err)) from err

    # Drop the directions belonging to zero singular values
    r = numerical_rank(s, A.shape, tol)
    logger.debug("numerical rank %i of %i singular values", r, len(s))
    U = U[:, :r].copy()
    s = s[:r].copy()
    V = Vt[:r, :].T.copy()
    return U, s, V


def reconstruct(U: np.ndarray, s: np.ndarray, V: np.ndarray) -> np.ndarray:
    """Return ``U @ diag(s) @ V.T``."""
    return (U * s) @ V.T
