"""Latent semantic index: query, fold-in and rebuild over one concept space.

:class:`LatentSemanticIndex` ties the pieces of the package together.  It
decomposes a raw term-document matrix, keeps the resulting
:class:`~lsi.concept_space.ConceptSpace` together with a
:class:`~lsi.fold_in.FoldInUpdater` that tracks the accumulated raw matrix,
and answers weighted term queries with ranked document lists.

Fold-in keeps the singular values fixed, so the space slowly drifts from the
exact decomposition of the grown matrix; :meth:`LatentSemanticIndex.diagnostics`
reports that drift and :meth:`LatentSemanticIndex.rebuild` starts over from a
fresh decomposition.
"""

from __future__ import annotations

import logging
import threading
from typing import Mapping, Sequence

import numpy as np

from .concept_space import ConceptSpace
from .decomposition import decompose
from .fold_in import Batch, Counts, FoldInUpdater
from .metrics import fold_in_drift
from .projection import project_query
from .similarity import rank_documents, rank_terms
from .utils import LSIConfig, timer

logger = logging.getLogger(__name__)


class LatentSemanticIndex:
    """Queryable, incrementally extensible LSI model.

    Parameters
    ----------
    A : array_like of shape (m, n)
        Raw term-document frequency matrix.
    term_ids : sequence of str
        Term identifiers, one per row of ``A``.
    doc_ids : sequence of str
        Document identifiers, one per column of ``A``.
    k : int
        Rank of the concept space.
    config : LSIConfig, optional
        Query defaults, unknown-identifier policy and rank tolerance.  Its
        ``rank`` is ignored in favour of ``k``.

    Notes
    -----
    Fold-in and :meth:`rebuild` are serialised by a lock of the index, so a
    document folded in while another thread rebuilds lands either in the
    rebuilt matrix or in the new space, never in the discarded one.  Going
    around the index through ``self.updater`` skips that lock.
    """

    def __init__(self,
                 A: np.ndarray,
                 term_ids: Sequence[str],
                 doc_ids: Sequence[str],
                 k: int,
                 config: LSIConfig | None = None) -> None:
        self.config = config if config is not None else LSIConfig()
        self.n_rebuilds = 0
        self._lock = threading.RLock()
        self._fit(np.array(A, dtype=float), term_ids, doc_ids, k)

    @classmethod
    def from_config(cls,
                    A: np.ndarray,
                    term_ids: Sequence[str],
                    doc_ids: Sequence[str],
                    config: LSIConfig) -> "LatentSemanticIndex":
        """Build an index whose rank and defaults come from ``config``."""
        return cls(A, term_ids, doc_ids, config.rank, config=config)

    def _fit(self, A: np.ndarray, term_ids: Sequence[str], doc_ids: Sequence[str], k: int) -> None:
        with timer("decomposed %s matrix" % (A.shape,)):
            U, s, V = decompose(A, tol=self.config.rank_tol)
        self.space = ConceptSpace.build(U, s, V, k, term_ids, doc_ids)
        self.updater = FoldInUpdater(self.space, matrix=A, on_unknown=self.config.on_unknown)
        # Singular values discarded by the truncation
        self.discarded = s[k:].copy()
        logger.info("built rank-%i concept space over %i terms and %i documents "
                    "(numerical rank %i)", k, self.space.n_terms, self.space.n_documents, len(s))

    @property
    def k(self) -> int:
        return self.space.k

    @property
    def matrix(self) -> np.ndarray:
        """Accumulated raw term-document matrix, including folded-in rows and columns."""
        return self.updater.matrix

    # ------------------------------------------------------------------
    # Queries

    def query(self,
              weights: Mapping[str, float],
              threshold: float | None = None,
              weighted: bool | None = None) -> list[tuple[str, float]]:
        """Rank documents against a weighted term query.

        Parameters
        ----------
        weights : mapping of str to float
            Query term weights, e.g. ``{'applic': 6, 'theori': 6}``.
        threshold : float, optional
            Minimum score (exclusive); defaults to ``config.threshold``.
        weighted : bool, optional
            Compare singular-value-scaled positions; defaults to
            ``config.weighted``.

        Returns
        -------
        hits : list of (str, float)
            ``(doc_id, score)`` pairs, best first.
        """
        if threshold is None:
            threshold = self.config.threshold
        if weighted is None:
            weighted = self.config.weighted
        q_hat = project_query(weights, self.space, on_unknown=self.config.on_unknown)
        return rank_documents(q_hat, self.space, threshold, weighted=weighted)

    def similar_documents(self,
                          doc_id: str,
                          threshold: float | None = None) -> list[tuple[str, float]]:
        """Documents close to an indexed document, excluding the document itself."""
        if threshold is None:
            threshold = self.config.threshold
        hits = rank_documents(self.space.document_vector(doc_id), self.space, threshold,
                              weighted=self.config.weighted)
        return [hit for hit in hits if hit[0] != doc_id]

    def similar_terms(self,
                      term_id: str,
                      threshold: float | None = None) -> list[tuple[str, float]]:
        """Terms close to an indexed term, excluding the term itself."""
        if threshold is None:
            threshold = self.config.threshold
        hits = rank_terms(self.space.term_vector(term_id), self.space, threshold,
                          weighted=self.config.weighted)
        return [hit for hit in hits if hit[0] != term_id]

    # ------------------------------------------------------------------
    # Fold-in

    def add_document(self, doc_id: str, counts: Counts) -> np.ndarray:
        """Fold in one document given as a term mapping or a dense term vector."""
        with self._lock:
            return self.updater.add_document(doc_id, counts)

    def add_documents(self, documents: Batch) -> list[np.ndarray]:
        with self._lock:
            return self.updater.add_documents(documents)

    def add_term(self, term_id: str, counts: Counts) -> np.ndarray:
        """Fold in one term given as a document mapping or a dense document vector."""
        with self._lock:
            return self.updater.add_term(term_id, counts)

    def add_terms(self, terms: Batch) -> list[np.ndarray]:
        with self._lock:
            return self.updater.add_terms(terms)

    def add_document_with_terms(self,
                                doc_id: str,
                                counts: Mapping[str, float],
                                ) -> tuple[np.ndarray, dict[str, np.ndarray]]:
        with self._lock:
            return self.updater.add_document_with_terms(doc_id, counts)

    # ------------------------------------------------------------------
    # Maintenance

    def rebuild(self, k: int | None = None) -> ConceptSpace:
        """Replace the space by a fresh decomposition of the accumulated matrix.

        Parameters
        ----------
        k : int, optional
            New rank; defaults to the current one.  Changing the rank is only
            possible here, never through fold-in.

        Returns
        -------
        space : ConceptSpace
            The new space (also stored as ``self.space``).
        """
        with self._lock:
            if k is None:
                k = self.k
            old = self.space
            logger.info("rebuilding concept space after %i folded documents and %i folded terms",
                        self.updater.n_folded_documents, self.updater.n_folded_terms)
            self._fit(self.updater.matrix, old.term_ids, old.doc_ids, k)
            self.n_rebuilds += 1
            return self.space

    def diagnostics(self) -> dict[str, float | int]:
        """Summary of the index state and its fold-in drift."""
        with self._lock:
            diag = {
                'k': self.k,
                'n_terms': self.space.n_terms,
                'n_documents': self.space.n_documents,
                'folded_documents': self.updater.n_folded_documents,
                'folded_terms': self.updater.n_folded_terms,
                'rebuilds': self.n_rebuilds,
                'discarded_energy': float(np.sum(self.discarded ** 2)),
            }
            diag.update(fold_in_drift(self.space, self.updater.matrix))
        return diag
