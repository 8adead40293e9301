"""Cosine scoring of concept-space coordinates."""

from __future__ import annotations

import numpy as np
from numpy.linalg import norm

from .concept_space import ConceptSpace
from .exceptions import DegenerateVectorError, DimensionMismatchError


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Absolute cosine similarity ``|a . b| / (||a|| ||b||)``.

    The absolute value makes the score insensitive to the sign ambiguity of
    singular vectors, so the result lies in ``[0, 1]``.

    Raises
    ------
    DimensionMismatchError
        If ``a`` and ``b`` are not vectors of the same length.
    DegenerateVectorError
        If either vector has zero norm.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.ndim != 1 or a.shape != b.shape:
        raise DimensionMismatchError(
            "cannot compare vectors of shapes %s and %s" % (a.shape, b.shape))
    if not np.any(a) or not np.any(b):
        raise DegenerateVectorError("cosine similarity is undefined for a zero vector")
    # Rescale before taking norms so tiny vectors do not underflow to zero
    a = a / np.max(np.abs(a))
    b = b / np.max(np.abs(b))
    return float(min(1.0, abs(a @ b) / (norm(a) * norm(b))))


def _rank_rows(query: np.ndarray,
               rows: np.ndarray,
               ids: tuple[str, ...],
               threshold: float,
               scale: np.ndarray | None = None) -> list[tuple[str, float]]:
    query = np.asarray(query, dtype=float)
    if query.ndim != 1 or query.shape[0] != rows.shape[1]:
        raise DimensionMismatchError(
            "query coordinate must have length %i, got shape %s" % (rows.shape[1], query.shape))
    if not np.any(query):
        raise DegenerateVectorError("cannot rank against a zero query vector")
    if scale is not None:
        query = query * scale

    hits = []
    for ident, row in zip(ids, rows):
        # Rows folded in from empty frequency vectors sit at the origin
        score = cosine_similarity(query, row) if np.any(row) else 0.0
        if score > threshold:
            hits.append((ident, score))
    # sorted() is stable, so ties keep insertion order
    return sorted(hits, key=lambda hit: -hit[1])


def rank_documents(query: np.ndarray,
                   space: ConceptSpace,
                   threshold: float = 0.0,
                   weighted: bool = False) -> list[tuple[str, float]]:
    """Rank the documents of a space against a query coordinate.

    Parameters
    ----------
    query : ndarray of shape (k,)
        Projected query, see :func:`lsi.projection.project_query`.
    space : ConceptSpace
        Space whose documents are scored.
    threshold : float
        Only documents scoring strictly above this value are returned.
    weighted : bool
        Compare positions scaled by the singular values instead of the raw
        rows of ``V_k``.

    Returns
    -------
    hits : list of (str, float)
        ``(doc_id, score)`` pairs in descending score order, ties in document
        insertion order.  Documents at the origin score 0.

    Raises
    ------
    DegenerateVectorError
        If ``query`` is the zero vector.
    """
    if weighted:
        return _rank_rows(query, space.weighted_documents(), space.doc_ids, threshold,
                          scale=space.s)
    return _rank_rows(query, space.V, space.doc_ids, threshold)


def rank_terms(query: np.ndarray,
               space: ConceptSpace,
               threshold: float = 0.0,
               weighted: bool = False) -> list[tuple[str, float]]:
    """Rank the terms of a space against a term coordinate (see :func:`rank_documents`)."""
    if weighted:
        return _rank_rows(query, space.weighted_terms(), space.term_ids, threshold,
                          scale=space.s)
    return _rank_rows(query, space.U, space.term_ids, threshold)
