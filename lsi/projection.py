"""Projection of raw frequency vectors into the concept space.

Since ``A = U_k diag(s_k) V_k^T`` (up to truncation), a column ``d`` of ``A``
satisfies ``d^T U_k diag(s_k)^{-1} = v``, its row of ``V_k``.  The same
relation places any new frequency vector in the space:

* a query or new document ``f`` over the terms:   ``f^T U_k diag(s_k)^{-1}``
* a new term ``g`` over the documents:             ``g V_k diag(s_k)^{-1}``

Vectors are always aligned with the *current* identifier lists of the space,
including terms and documents folded in earlier.
"""

from __future__ import annotations

import logging
from collections import abc
from typing import Mapping, Sequence, Union

import numpy as np

from .concept_space import ConceptSpace
from .exceptions import DimensionMismatchError, InvalidValueError, UnknownIdentifierError

logger = logging.getLogger(__name__)

UNKNOWN_POLICIES = ("ignore", "warn", "raise")

Weights = Union[Mapping[str, float], Sequence[float], np.ndarray]


def _check_vector(vec: np.ndarray, expected: int, what: str) -> np.ndarray:
    vec = np.asarray(vec, dtype=float)
    if vec.ndim != 1 or vec.shape[0] != expected:
        raise DimensionMismatchError(
            "%s vector must have length %i, got shape %s" % (what, expected, vec.shape))
    return vec


def _check_weight(ident, weight: float) -> float:
    weight = float(weight)
    if not np.isfinite(weight) or weight < 0:
        raise InvalidValueError("weight of %r must be a finite non-negative number, got %r"
                                % (ident, weight))
    return weight


def project_document(f: np.ndarray, space: ConceptSpace) -> np.ndarray:
    """Project a term-frequency vector (query or new document).

    Parameters
    ----------
    f : array_like of shape (m,)
        Frequencies over ``space.term_ids``.
    space : ConceptSpace
        Target space.

    Returns
    -------
    q_hat : ndarray of shape (k,)
        ``f^T U_k diag(s_k)^{-1}``.  An all-zero ``f`` maps to the origin.

    Raises
    ------
    DimensionMismatchError
        If ``len(f)`` differs from the current number of terms.
    """
    f = _check_vector(f, space.n_terms, "term-frequency")
    return (f @ space.U) / space.s


def project_term(g: np.ndarray, space: ConceptSpace) -> np.ndarray:
    """Project a document-frequency vector for a new term.

    Parameters
    ----------
    g : array_like of shape (n,)
        Frequencies of the term over ``space.doc_ids``.
    space : ConceptSpace
        Target space.

    Returns
    -------
    t_hat : ndarray of shape (k,)
        ``g V_k diag(s_k)^{-1}``.
    """
    g = _check_vector(g, space.n_documents, "document-frequency")
    return (g @ space.V) / space.s


def frequency_vector(weights: Mapping[str, float],
                     identifiers: Sequence[str],
                     on_unknown: str = "ignore") -> np.ndarray:
    """Build a dense frequency vector from a sparse ``{identifier: weight}`` map.

    Parameters
    ----------
    weights : mapping of str to float
        Non-negative weights; identifiers not listed get weight 0.
    identifiers : sequence of str
        Ordered identifiers defining the vector layout.
    on_unknown : {'ignore', 'warn', 'raise'}
        What to do with identifiers missing from ``identifiers``: drop them
        silently, drop them and log a warning, or raise
        :class:`~lsi.exceptions.UnknownIdentifierError`.

    Returns
    -------
    vec : ndarray of shape (len(identifiers),)

    Raises
    ------
    InvalidValueError
        If a weight is negative, NaN or Inf.
    UnknownIdentifierError
        If ``on_unknown="raise"`` and an identifier is not in ``identifiers``.
    """
    if on_unknown not in UNKNOWN_POLICIES:
        raise ValueError("on_unknown must be one of %s, got %r" % (UNKNOWN_POLICIES, on_unknown))
    position = {ident: i for i, ident in enumerate(identifiers)}
    vec = np.zeros(len(position))
    unknown = []
    for ident, weight in weights.items():
        weight = _check_weight(ident, weight)
        i = position.get(ident)
        if i is None:
            unknown.append(ident)
            continue
        vec[i] += weight

    if unknown:
        if on_unknown == "raise":
            raise UnknownIdentifierError("unknown identifiers: %s" % ", ".join(map(repr, unknown)))
        if on_unknown == "warn":
            logger.warning("dropping %i unknown identifiers: %s",
                           len(unknown), ", ".join(map(repr, unknown)))
    return vec


def aligned_vector(weights: Weights,
                   identifiers: Sequence[str],
                   on_unknown: str = "ignore") -> np.ndarray:
    """Frequency vector from either a mapping or an already aligned array.

    A mapping goes through :func:`frequency_vector`.  Anything else is taken
    as a dense vector whose entries follow ``identifiers`` one to one, e.g. a
    column of the raw term-document matrix.

    Raises
    ------
    DimensionMismatchError
        If a dense vector is not 1-D of length ``len(identifiers)``.
    InvalidValueError
        If a weight is negative, NaN or Inf.
    """
    if isinstance(weights, abc.Mapping):
        return frequency_vector(weights, identifiers, on_unknown=on_unknown)
    vec = _check_vector(weights, len(identifiers), "frequency").copy()
    if not np.all(np.isfinite(vec)) or np.any(vec < 0):
        raise InvalidValueError("frequency vector must be finite and non-negative")
    return vec


def project_query(weights: Weights,
                  space: ConceptSpace,
                  on_unknown: str = "ignore") -> np.ndarray:
    """Project a weighted term query, e.g. ``{'applic': 6, 'theori': 6}``."""
    f = aligned_vector(weights, space.term_ids, on_unknown=on_unknown)
    return project_document(f, space)
