"""Error kinds raised by the LSI engine.

Every error derives from :class:`LSIError`.  Input-validation failures also
derive from the matching built-in (``ValueError`` or ``LookupError``) so that
callers catching the built-ins keep working.
"""

from __future__ import annotations


class LSIError(Exception):
    """Base class for all LSI engine errors."""


class DecompositionError(LSIError, RuntimeError):
    """The singular value decomposition could not be computed."""


class InvalidRankError(LSIError, ValueError):
    """The requested truncation rank is outside ``1 <= k <= rank(A)``."""


class IdentifierMismatchError(LSIError, ValueError):
    """An identifier list does not line up with the rows of its matrix."""


class DimensionMismatchError(LSIError, ValueError):
    """A vector or matrix has the wrong length or shape."""


class DuplicateIdentifierError(LSIError, ValueError):
    """An identifier is already present in the concept space."""


class NotFoundError(LSIError, LookupError):
    """An identifier is not present in the concept space."""


class UnknownIdentifierError(NotFoundError):
    """A frequency mapping names an identifier outside the vocabulary."""


class DegenerateVectorError(LSIError, ValueError):
    """A zero-norm vector was passed where a direction is required."""


class InvalidValueError(LSIError, ValueError):
    """A weight or coordinate is negative or not a finite number."""
