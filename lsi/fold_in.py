"""Folding new documents and terms into an existing concept space.

Fold-in places a new document (or term) in the space with the projection of
:mod:`lsi.projection` and appends the result as a new row of ``V_k`` (or
``U_k``).  The singular values and all existing rows stay untouched, so the
operation is cheap but approximate: the columns of ``U_k`` and ``V_k`` lose
orthogonality and the space drifts away from the decomposition of the
accumulated matrix as more items are folded in.  Callers that need full
fidelity rebuild the space from a fresh decomposition, see
:meth:`lsi.index.LatentSemanticIndex.rebuild`.

A document that brings new vocabulary is folded in two phases: first the
document itself, using only the terms already known, then each new term,
whose frequency vector can now refer to the new document's column.  Folding
the terms first would leave them with no association at all.

Example
-------

```python
updater = FoldInUpdater(space)
updater.add_document("B18", {"system": 1, "nonlinear": 1, "equat": 1})
updater.add_document("B9bis", column)  # dense, aligned with space.term_ids
coord, new_terms = updater.add_document_with_terms("B21", {"equat": 1, "perturb": 2})
```
"""

from __future__ import annotations

import logging
import threading
from collections import abc
from typing import Iterable, Mapping, Union

import numpy as np

from .concept_space import ConceptSpace
from .exceptions import DimensionMismatchError, DuplicateIdentifierError
from .projection import (UNKNOWN_POLICIES, Weights, aligned_vector, frequency_vector,
                         project_document, project_term)

logger = logging.getLogger(__name__)

Counts = Weights
Batch = Union[Mapping[str, Counts], Iterable[tuple[str, Counts]]]


def _as_pairs(items: Batch) -> list[tuple[str, Counts]]:
    if isinstance(items, abc.Mapping):
        return list(items.items())
    return list(items)


def _check_new_ids(ids: list[str], existing, kind: str) -> None:
    """Reject identifiers already in the space or repeated within a batch."""
    seen = set()
    for ident in ids:
        if existing(ident) or ident in seen:
            raise DuplicateIdentifierError("%s %r already in the concept space" % (kind, ident))
        seen.add(ident)


class FoldInUpdater:
    """Single writer for a :class:`~lsi.concept_space.ConceptSpace`.

    Parameters
    ----------
    space : ConceptSpace
        Space to extend in place.
    matrix : ndarray of shape (n_terms, n_documents), optional
        Raw term-document matrix aligned with ``space``.  When given, every
        fold-in also grows this matrix (a column per document restricted to
        the known terms, a row per term over the known documents) so that the
        space can later be rebuilt from it.
    on_unknown : {'ignore', 'warn', 'raise'}
        Policy for identifiers in a frequency mapping that the space does not
        know: terms of a folded document, documents of a folded term.  The
        default drops them silently.

    Notes
    -----
    All mutations go through an internal lock, so several threads may share
    one updater.  Readers of the space must still not run concurrently with
    a fold-in.
    """

    def __init__(self,
                 space: ConceptSpace,
                 matrix: np.ndarray | None = None,
                 on_unknown: str = "ignore") -> None:
        if on_unknown not in UNKNOWN_POLICIES:
            raise ValueError("on_unknown must be one of %s, got %r" % (UNKNOWN_POLICIES, on_unknown))
        if matrix is not None:
            matrix = np.array(matrix, dtype=float)
            if matrix.shape != (space.n_terms, space.n_documents):
                raise DimensionMismatchError(
                    "matrix of shape %s does not match a space with %i terms and %i documents"
                    % (matrix.shape, space.n_terms, space.n_documents))
        self.space = space
        self.on_unknown = on_unknown
        self._matrix = matrix
        self._lock = threading.Lock()

        self.n_folded_documents = 0
        self.n_folded_terms = 0

    @property
    def matrix(self) -> np.ndarray | None:
        """Copy of the accumulated raw matrix, or ``None`` if not tracked."""
        return None if self._matrix is None else self._matrix.copy()

    # ------------------------------------------------------------------
    # Unlocked helpers; every public method holds the lock around them

    def _append_document(self, doc_id: str, f: np.ndarray) -> np.ndarray:
        coord = project_document(f, self.space)
        self.space.append_document(doc_id, coord)
        if self._matrix is not None:
            self._matrix = np.hstack((self._matrix, f[:, None]))
        self.n_folded_documents += 1
        logger.debug("folded in document %r at %s", doc_id, coord)
        return coord

    def _append_term(self, term_id: str, g: np.ndarray) -> np.ndarray:
        coord = project_term(g, self.space)
        self.space.append_term(term_id, coord)
        if self._matrix is not None:
            self._matrix = np.vstack((self._matrix, g[None, :]))
        self.n_folded_terms += 1
        logger.debug("folded in term %r at %s", term_id, coord)
        return coord

    # ------------------------------------------------------------------
    # Documents

    def add_document(self, doc_id: str, counts: Counts) -> np.ndarray:
        """Fold in one document given its term counts.

        Parameters
        ----------
        doc_id : str
            New document identifier.
        counts : mapping of str to float, or array_like of shape (n_terms,)
            Term frequencies of the document, either sparse by term or dense
            and aligned with ``space.term_ids``.  Terms outside the current
            vocabulary are handled according to ``on_unknown``; they never
            become new terms.

        Returns
        -------
        coord : ndarray of shape (k,)
            Coordinate appended to ``V_k``.
        """
        return self.add_documents([(doc_id, counts)])[0]

    def add_documents(self, documents: Batch) -> list[np.ndarray]:
        """Fold in several documents, appended in the order supplied.

        ``documents`` is a mapping ``{doc_id: counts}`` or an iterable of
        ``(doc_id, counts)`` pairs, where ``counts`` is a term mapping or a
        dense vector over the current terms.  Every identifier and every
        frequency vector is validated before the first document is appended.
        """
        pairs = _as_pairs(documents)
        with self._lock:
            _check_new_ids([doc_id for doc_id, _ in pairs], self.space.has_document, "document")
            vectors = [aligned_vector(counts, self.space.term_ids, self.on_unknown)
                       for _, counts in pairs]
            coords = [self._append_document(doc_id, f)
                      for (doc_id, _), f in zip(pairs, vectors)]
        if coords:
            logger.info("folded %i documents into the concept space (%i documents total)",
                        len(coords), self.space.n_documents)
        return coords

    # ------------------------------------------------------------------
    # Terms

    def add_term(self, term_id: str, counts: Counts) -> np.ndarray:
        """Fold in one term given its frequency in the known documents.

        ``counts`` is a mapping ``{doc_id: weight}`` or a dense vector aligned
        with ``space.doc_ids``.
        """
        return self.add_terms([(term_id, counts)])[0]

    def add_terms(self, terms: Batch) -> list[np.ndarray]:
        """Fold in several terms (see :meth:`add_documents`)."""
        pairs = _as_pairs(terms)
        with self._lock:
            _check_new_ids([term_id for term_id, _ in pairs], self.space.has_term, "term")
            vectors = [aligned_vector(counts, self.space.doc_ids, self.on_unknown)
                       for _, counts in pairs]
            coords = [self._append_term(term_id, g)
                      for (term_id, _), g in zip(pairs, vectors)]
        if coords:
            logger.info("folded %i terms into the concept space (%i terms total)",
                        len(coords), self.space.n_terms)
        return coords

    # ------------------------------------------------------------------
    # Documents introducing new vocabulary

    def add_document_with_terms(self,
                                doc_id: str,
                                counts: Mapping[str, float],
                                ) -> tuple[np.ndarray, dict[str, np.ndarray]]:
        """Fold in a document and then the new terms it introduces.

        Parameters
        ----------
        doc_id : str
            New document identifier.
        counts : mapping of str to float
            Term frequencies of the document, possibly naming unknown terms.

        Returns
        -------
        coord : ndarray of shape (k,)
            Coordinate of the document.
        new_terms : dict of str to ndarray
            Coordinates of the terms that were not in the vocabulary, in the
            order they appear in ``counts``.
        """
        if not isinstance(counts, abc.Mapping):
            raise TypeError("new vocabulary needs a term mapping, got %s" % type(counts).__name__)
        with self._lock:
            _check_new_ids([doc_id], self.space.has_document, "document")
            # Also validates every weight, so nothing is appended on bad input
            f = frequency_vector(counts, self.space.term_ids, on_unknown="ignore")
            new_vocab = [term for term in counts if not self.space.has_term(term)]

            # 1) the document, over the vocabulary it shares with the space
            coord = self._append_document(doc_id, f)

            # 2) its new terms, whose only non-zero entry is the new column
            new_terms = {}
            for term in new_vocab:
                g = np.zeros(self.space.n_documents)
                g[-1] = float(counts[term])
                new_terms[term] = self._append_term(term, g)

        logger.info("folded document %r with %i new terms", doc_id, len(new_terms))
        return coord, new_terms
