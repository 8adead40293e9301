"""The rank-k concept space shared by terms, documents and queries.

A :class:`ConceptSpace` stores the truncated factors ``U_k``, ``s_k`` and
``V_k`` of a term-document matrix together with the ordered identifier lists
of its terms and documents.  Row ``i`` of ``U_k`` is the coordinate of
``term_ids[i]`` and row ``j`` of ``V_k`` the coordinate of ``doc_ids[j]``.

The space only grows: :meth:`ConceptSpace.append_document` and
:meth:`ConceptSpace.append_term` add one row at the end and never touch the
existing rows, the singular values or the rank.  Each append validates its
input before changing any state.

A concept space is not thread-safe.  Writers must be serialised by the
caller (see :class:`lsi.fold_in.FoldInUpdater`), and readers must not run
concurrently with an append.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .decomposition import decompose
from .exceptions import (DimensionMismatchError, DuplicateIdentifierError,
                         IdentifierMismatchError, InvalidRankError,
                         InvalidValueError, NotFoundError)


def _index_ids(ids: Sequence[str], kind: str) -> dict[str, int]:
    """Map identifiers to row positions, rejecting duplicates."""
    index: dict[str, int] = {}
    for pos, ident in enumerate(ids):
        if ident in index:
            raise DuplicateIdentifierError("duplicate %s identifier %r" % (kind, ident))
        index[ident] = pos
    return index


class ConceptSpace:
    """Reduced-rank LSI space.

    Use :meth:`build` (from an SVD triple) or :meth:`from_matrix` (from a raw
    term-document matrix) rather than calling the constructor directly.

    Parameters
    ----------
    U : ndarray of shape (m, k)
        Term coordinates.
    s : ndarray of shape (k,)
        Strictly positive singular values in descending order.
    V : ndarray of shape (n, k)
        Document coordinates.
    term_ids : sequence of str
        Term identifiers, one per row of ``U``.
    doc_ids : sequence of str
        Document identifiers, one per row of ``V``.
    """

    def __init__(self,
                 U: np.ndarray,
                 s: np.ndarray,
                 V: np.ndarray,
                 term_ids: Sequence[str],
                 doc_ids: Sequence[str]) -> None:
        self._U = U
        self._s = s
        self._V = V
        self._term_ids = list(term_ids)
        self._doc_ids = list(doc_ids)
        self._term_index = _index_ids(self._term_ids, "term")
        self._doc_index = _index_ids(self._doc_ids, "document")

    @classmethod
    def build(cls,
              U: np.ndarray,
              s: np.ndarray,
              V: np.ndarray,
              k: int,
              term_ids: Sequence[str],
              doc_ids: Sequence[str]) -> "ConceptSpace":
        """Truncate an SVD triple to rank ``k``.

        Parameters
        ----------
        U : ndarray of shape (m, r)
            Left singular vectors.
        s : ndarray of shape (r,)
            Singular values in descending order.
        V : ndarray of shape (n, r)
            Right singular vectors, one row per document.
        k : int
            Truncation rank, ``1 <= k <= min(len(s), U.shape[1], V.shape[1])``.
        term_ids, doc_ids : sequence of str
            Identifiers aligned with the rows of ``U`` and ``V``.

        Returns
        -------
        space : ConceptSpace
            A space owning copies of the first ``k`` singular triplets.

        Raises
        ------
        InvalidRankError
            If ``k`` is out of range or one of the first ``k`` singular values
            is not strictly positive.
        IdentifierMismatchError
            If an identifier list does not match the rows of its matrix.
        DuplicateIdentifierError
            If an identifier list repeats an identifier.
        """
        U = np.asarray(U, dtype=float)
        s = np.asarray(s, dtype=float)
        V = np.asarray(V, dtype=float)
        if U.ndim != 2 or V.ndim != 2 or s.ndim != 1:
            raise DimensionMismatchError(
                "expected U and V as matrices and s as a vector, got shapes %s, %s, %s"
                % (U.shape, s.shape, V.shape))

        k_max = min(len(s), U.shape[1], V.shape[1])
        if isinstance(k, bool) or int(k) != k or not 1 <= k <= k_max:
            raise InvalidRankError("rank k=%r outside the valid range 1..%i" % (k, k_max))
        k = int(k)
        if np.any(s[:k] <= 0):
            raise InvalidRankError(
                "rank k=%i includes a zero singular value; the matrix rank is %i"
                % (k, int(np.count_nonzero(s > 0))))

        if len(term_ids) != U.shape[0]:
            raise IdentifierMismatchError(
                "%i term identifiers for %i rows of U" % (len(term_ids), U.shape[0]))
        if len(doc_ids) != V.shape[0]:
            raise IdentifierMismatchError(
                "%i document identifiers for %i rows of V" % (len(doc_ids), V.shape[0]))

        return cls(U[:, :k].copy(), s[:k].copy(), V[:, :k].copy(), term_ids, doc_ids)

    @classmethod
    def from_matrix(cls,
                    A: np.ndarray,
                    k: int,
                    term_ids: Sequence[str],
                    doc_ids: Sequence[str],
                    tol: float | None = None) -> "ConceptSpace":
        """Decompose a term-document matrix and keep the leading ``k`` triplets."""
        U, s, V = decompose(A, tol=tol)
        return cls.build(U, s, V, k, term_ids, doc_ids)

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def k(self) -> int:
        return len(self._s)

    @property
    def U(self) -> np.ndarray:
        view = self._U.view()
        view.flags.writeable = False
        return view

    @property
    def s(self) -> np.ndarray:
        view = self._s.view()
        view.flags.writeable = False
        return view

    @property
    def V(self) -> np.ndarray:
        view = self._V.view()
        view.flags.writeable = False
        return view

    @property
    def term_ids(self) -> tuple[str, ...]:
        return tuple(self._term_ids)

    @property
    def doc_ids(self) -> tuple[str, ...]:
        return tuple(self._doc_ids)

    @property
    def n_terms(self) -> int:
        return len(self._term_ids)

    @property
    def n_documents(self) -> int:
        return len(self._doc_ids)

    def has_term(self, term_id: str) -> bool:
        return term_id in self._term_index

    def has_document(self, doc_id: str) -> bool:
        return doc_id in self._doc_index

    def term_position(self, term_id: str) -> int:
        """Row of ``U_k`` holding ``term_id``."""
        try:
            return self._term_index[term_id]
        except KeyError:
            raise NotFoundError("unknown term %r" % (term_id,)) from None

    def document_position(self, doc_id: str) -> int:
        """Row of ``V_k`` holding ``doc_id``."""
        try:
            return self._doc_index[doc_id]
        except KeyError:
            raise NotFoundError("unknown document %r" % (doc_id,)) from None

    def term_vector(self, term_id: str, weighted: bool = False) -> np.ndarray:
        """Concept coordinate of a term.

        With ``weighted=True`` the coordinate is scaled element-wise by the
        singular values, which is the position used for plotting.
        """
        vec = self._U[self.term_position(term_id)].copy()
        return vec * self._s if weighted else vec

    def document_vector(self, doc_id: str, weighted: bool = False) -> np.ndarray:
        """Concept coordinate of a document (see :meth:`term_vector`)."""
        vec = self._V[self.document_position(doc_id)].copy()
        return vec * self._s if weighted else vec

    def weighted_terms(self) -> np.ndarray:
        """All term coordinates scaled by the singular values, ``U_k diag(s_k)``."""
        return self._U * self._s

    def weighted_documents(self) -> np.ndarray:
        """All document coordinates scaled by the singular values, ``V_k diag(s_k)``."""
        return self._V * self._s

    def snapshot(self) -> dict[str, object]:
        """Copy of the full state for external persistence or display."""
        return {
            'U': self._U.copy(),
            's': self._s.copy(),
            'V': self._V.copy(),
            'k': self.k,
            'term_ids': list(self._term_ids),
            'doc_ids': list(self._doc_ids),
        }

    # ------------------------------------------------------------------
    # Append-only mutation

    def _check_row(self, vector: np.ndarray) -> np.ndarray:
        row = np.asarray(vector, dtype=float)
        if row.ndim != 1 or row.shape[0] != self.k:
            raise DimensionMismatchError(
                "expected a coordinate vector of length %i, got shape %s" % (self.k, row.shape))
        if not np.all(np.isfinite(row)):
            raise InvalidValueError("coordinate vector contains NaN or Inf entries")
        return row

    def append_document(self, doc_id: str, vector: np.ndarray) -> None:
        """Append a document coordinate as the last row of ``V_k``.

        Raises
        ------
        DuplicateIdentifierError
            If ``doc_id`` is already in the space.
        DimensionMismatchError
            If ``vector`` is not a length-``k`` vector.
        InvalidValueError
            If ``vector`` contains NaN or Inf.
        """
        if doc_id in self._doc_index:
            raise DuplicateIdentifierError("document %r already in the concept space" % (doc_id,))
        row = self._check_row(vector)

        self._V = np.vstack((self._V, row[None, :]))
        self._doc_index[doc_id] = len(self._doc_ids)
        self._doc_ids.append(doc_id)

    def append_term(self, term_id: str, vector: np.ndarray) -> None:
        """Append a term coordinate as the last row of ``U_k``."""
        if term_id in self._term_index:
            raise DuplicateIdentifierError("term %r already in the concept space" % (term_id,))
        row = self._check_row(vector)

        self._U = np.vstack((self._U, row[None, :]))
        self._term_index[term_id] = len(self._term_ids)
        self._term_ids.append(term_id)

    def __repr__(self) -> str:
        return "ConceptSpace(k=%i, n_terms=%i, n_documents=%i)" % (
            self.k, self.n_terms, self.n_documents)
