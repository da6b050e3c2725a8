"""Exceptions raised by the spline and mesh-bending model."""


class SplineMeshError(Exception):
    """Base class for all errors raised by splinemesh."""


class InvariantViolation(SplineMeshError, ValueError):
    """
    A structural invariant would be broken by the requested operation.

    Raised e.g. when a path would shrink below two nodes or when a mesh is
    bent before a source mesh and an interval were given.
    """
