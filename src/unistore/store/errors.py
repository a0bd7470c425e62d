"""Exceptions raised by the store, its dispatcher and the immutable helpers.

Each error also derives from the builtin the caller would expect for the same
mistake (``TypeError`` for bad arguments, ``RuntimeError`` for bad timing), so
``except TypeError`` keeps working for code that doesn't know about unistore.
"""

from __future__ import annotations


class UnistoreError(Exception):
    """Base class for all unistore errors."""


class InvalidStateError(UnistoreError, TypeError):
    """The initial state given to a Store is not a mapping or None."""


class ListenerDefinitionError(UnistoreError, TypeError):
    """A listener was built without a callable callback."""


class ReentrancyError(UnistoreError, RuntimeError):
    """The listener set was changed while an action was being dispatched."""


class NotImmutableError(UnistoreError, TypeError):
    """A traversal was started on something that isn't an immutable collection."""


class TraversalError(UnistoreError, TypeError):
    """A path tried to continue through a value that can't be traversed."""


class ConversionError(UnistoreError, TypeError):
    """A plain value could not be converted to its immutable form."""
