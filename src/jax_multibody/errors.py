"""Exceptions raised by graph construction and the validated algorithms."""


class MultiBodyError(Exception):
    """Base class of every error raised by jax_multibody."""


class ConstructionError(MultiBodyError, ValueError):
    """Invalid graph construction or compilation.

    Raised for duplicate body/joint ids or names, links referencing unknown
    ids, and graphs that do not reduce to a tree from the chosen root.
    """


class PreconditionViolation(MultiBodyError, ValueError):
    """State that does not match the MultiBody it is used with.

    Only the validated (``s_``-prefixed) entry points raise it.
    """
