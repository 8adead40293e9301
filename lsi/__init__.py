"""Latent Semantic Indexing (LSI) engine.

This package represents terms and documents in a shared low-rank "concept"
space obtained from the singular value decomposition of a raw term-document
frequency matrix.  The main components include:

* :mod:`decomposition` – rank-revealing thin SVD of the term-document matrix;
* :mod:`concept_space` – the rank-k factors plus the ordered term and document
  identifiers, extended append-only;
* :mod:`projection` – mapping of query, document and term frequency vectors
  into the concept space;
* :mod:`similarity` – absolute cosine scoring and thresholded ranking;
* :mod:`fold_in` – incremental addition of documents and terms without
  recomputing the decomposition;
* :mod:`metrics` – reconstruction and orthogonality errors, fold-in drift;
* :mod:`index` – the :class:`LatentSemanticIndex` facade combining the above;
* :mod:`utils` – configuration loading and miscellaneous helpers.

Tokenisation, stemming and building the raw matrix are left to the caller.
"""

from .concept_space import ConceptSpace  # noqa: F401
from .decomposition import decompose  # noqa: F401
from .exceptions import (DecompositionError, DegenerateVectorError,  # noqa: F401
                         DimensionMismatchError, DuplicateIdentifierError,
                         IdentifierMismatchError, InvalidRankError, InvalidValueError,
                         LSIError, NotFoundError, UnknownIdentifierError)
from .fold_in import FoldInUpdater  # noqa: F401
from .index import LatentSemanticIndex  # noqa: F401
from .projection import project_document, project_query, project_term  # noqa: F401
from .similarity import cosine_similarity, rank_documents, rank_terms  # noqa: F401
from .utils import LSIConfig, load_config  # noqa: F401

__all__ = [
    "ConceptSpace",
    "FoldInUpdater",
    "LatentSemanticIndex",
    "LSIConfig",
    "load_config",
    "decompose",
    "project_document",
    "project_query",
    "project_term",
    "cosine_similarity",
    "rank_documents",
    "rank_terms",
    "LSIError",
    "DecompositionError",
    "InvalidRankError",
    "IdentifierMismatchError",
    "DimensionMismatchError",
    "DuplicateIdentifierError",
    "NotFoundError",
    "UnknownIdentifierError",
    "DegenerateVectorError",
    "InvalidValueError",
]
