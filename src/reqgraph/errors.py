"""Exceptions raised by the requirement graph."""

from reqgraph.models import Identity


class ReqGraphError(Exception):
    """Base class for every error reported to the presentation layer."""


class NotFoundError(ReqGraphError):
    """An identity has no registry entry."""

    def __init__(self, identity: Identity) -> None:
        super().__init__(f"Item {identity} not found")
        self.identity = identity


class SelfLinkError(ReqGraphError):
    """Parent and child of a link are the same item."""

    def __init__(self, identity: Identity) -> None:
        super().__init__(f"Item {identity} cannot be linked to itself")
        self.identity = identity


class DuplicateParentError(ReqGraphError):
    """The child of a new link already has a parent."""

    def __init__(self, child: Identity, parent: Identity | None = None) -> None:
        if parent is not None:
            message = f"Item {child} already has parent {parent}"
        else:
            message = f"Item {child} already has a parent"
        super().__init__(message)
        self.child = child
        self.parent = parent


class NotASolutionError(ReqGraphError):
    """A structural child operation was asked of a requirement."""

    def __init__(self, identity: Identity) -> None:
        super().__init__(f"Item {identity} is not a solution and cannot own children")
        self.identity = identity


class EngineStateError(ReqGraphError):
    """A command was issued while the engine is not ready."""


class PersistenceError(ReqGraphError):
    """A store call failed.

    Attributes:
        operation: Name of the store operation that failed
        cause: The underlying exception
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"Store operation '{operation}' failed: {cause}")
        self.operation = operation
        self.cause = cause


class StoreError(Exception):
    """Raised by store implementations when a durable operation fails."""
