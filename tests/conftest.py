"""
Shared fixtures: a small book-title corpus and a seeded random matrix.

The corpus is the classic set of 17 mathematics book titles B1..B17, already
tokenised, stop-worded and stemmed.  Only the 18 stems occurring in at least
two titles are kept.
"""
import numpy as np
import pytest

from lsi.concept_space import ConceptSpace
from lsi.utils import set_seed

TITLES = {
    "B1": "A Course on Integral Equations",
    "B2": "Attractors for Semigroups and Evolution Equations",
    "B3": "Automatic Differentiation of Algorithms: Theory, Implementation, and Application",
    "B4": "Geometrical Aspects of Partial Differential Equations",
    "B5": "Ideals, Varieties, and Algorithms: An Introduction to Computational "
          "Algebraic Geometry and Commutative Algebra",
    "B6": "Introduction to Hamiltonian Dynamical Systems and the N-Body Problem",
    "B7": "Knapsack Problems: Algorithms and Computer Implementations",
    "B8": "Methods of Solving Singular Systems of Ordinary Differential Equations",
    "B9": "Nonlinear Systems",
    "B10": "Ordinary Differential Equations",
    "B11": "Oscillation Theory for Neutral Differential Equations with Delay",
    "B12": "Oscillation Theory of Delay Differential Equations",
    "B13": "Pseudodifferential Operators and Nonlinear Partial Differential Equations",
    "B14": "Sinc Methods for Quadrature and Differential Equations",
    "B15": "Stability of Stochastic Differential Equations with Respect to Semi-Martingales",
    "B16": "The Boundary Integral Approach to Static and Dynamic Contact Problems",
    "B17": "The Double Mellin-Barnes Type Integrals and Their Applications to Convolution Theory",
}

# stem -> titles containing it
OCCURRENCES = {
    "algorithm": ["B3", "B5", "B7"],
    "applic": ["B3", "B17"],
    "comput": ["B5", "B7"],
    "delay": ["B11", "B12"],
    "differenti": ["B3", "B4", "B8", "B10", "B11", "B12", "B13", "B14", "B15"],
    "dynam": ["B6", "B16"],
    "equat": ["B1", "B2", "B4", "B8", "B10", "B11", "B12", "B13", "B14", "B15"],
    "implement": ["B3", "B7"],
    "integr": ["B1", "B16", "B17"],
    "introduct": ["B5", "B6"],
    "method": ["B8", "B14"],
    "nonlinear": ["B9", "B13"],
    "ordinari": ["B8", "B10"],
    "oscil": ["B11", "B12"],
    "partial": ["B4", "B13"],
    "problem": ["B6", "B7", "B16"],
    "system": ["B6", "B8", "B9"],
    "theori": ["B3", "B11", "B12", "B17"],
}

TERMS = list(OCCURRENCES)
DOCS = list(TITLES)


@pytest.fixture
def books():
    """Term-document matrix of the book corpus with its identifiers."""
    A = np.zeros((len(TERMS), len(DOCS)))
    for t, term in enumerate(TERMS):
        for doc in OCCURRENCES[term]:
            A[t, DOCS.index(doc)] = 1.0
    return A, list(TERMS), list(DOCS)


@pytest.fixture
def book_space(books):
    """Rank-2 concept space of the book corpus."""
    A, terms, docs = books
    return ConceptSpace.from_matrix(A, 2, terms, docs)


@pytest.fixture
def rng():
    return set_seed(1234)


@pytest.fixture
def random_counts(rng):
    """A dense 12 x 8 matrix of small integer counts."""
    A = rng.integers(0, 5, size=(12, 8)).astype(float)
    A += np.eye(12, 8)
    return A
