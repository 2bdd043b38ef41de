"""Invariant checks run before a link is committed."""

import structlog

from reqgraph.errors import DuplicateParentError, PersistenceError, SelfLinkError, StoreError
from reqgraph.gateway import PersistenceGateway
from reqgraph.link_index import LinkIndex
from reqgraph.models import Identity

logger = structlog.get_logger()


class ConsistencyGuard:
    """Rejects self links and second parents.

    The index is consulted first; the store's durable ``parent`` attribute is
    checked as well so that an index that drifted from the store cannot let a
    second parent through.
    """

    def __init__(self, index: LinkIndex, gateway: PersistenceGateway) -> None:
        self.index = index
        self.gateway = gateway

    def validate(self, parent: Identity, child: Identity) -> None:
        """Raise if linking ``parent`` to ``child`` would break an invariant.

        Raises:
            SelfLinkError: parent and child are the same item
            DuplicateParentError: child already has a parent
            PersistenceError: the durable parent could not be read
        """
        if parent == child:
            raise SelfLinkError(child)

        existing = self.index.parent_link(child)
        if existing is not None:
            logger.debug("Child already has an indexed parent", child=str(child), parent=str(existing.parent))
            raise DuplicateParentError(child, existing.parent)

        try:
            durable_parent = self.gateway.get_attribute(child, "parent")
        except StoreError as e:
            raise PersistenceError("get_attribute", e) from e
        if durable_parent is not None:
            logger.warning("Store has a parent the index does not know", child=str(child), parent=str(durable_parent))
            raise DuplicateParentError(child, durable_parent)
