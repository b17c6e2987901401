"""Async tree node abstraction.

Defines the read-only interface the rendering stage uses to inspect a
built tree. Metadata access is async so nodes are free to resolve extra
details lazily.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class AsyncTreeNode(ABC):
    """Abstract base class for async tree nodes.

    This defines the minimal interface that any node in a listing tree
    must implement.
    """

    @abstractmethod
    async def identifier(self) -> str:
        """Get unique identifier for this node.

        Returns:
            Unique string identifier for the node
        """
        pass

    @abstractmethod
    async def metadata(self) -> Dict[str, Any]:
        """Get metadata for this node.

        Returns:
            Dictionary of metadata key-value pairs
        """
        pass

    @abstractmethod
    def children(self) -> Optional[List['AsyncTreeNode']]:
        """Get the child nodes collected by the walk.

        Returns:
            List of children, or None when the node was not expanded
        """
        pass

    def is_leaf(self) -> bool:
        """Check if this node has no children in the built tree.

        This is synchronous because it only looks at already-collected
        information.
        """
        return not self.children()

    # Optional methods with default implementations

    async def display_name(self) -> str:
        """Get display name for this node.

        Default implementation returns the identifier.
        """
        return await self.identifier()

    async def modified_time(self) -> Optional[float]:
        """Get modification time as Unix timestamp.

        Returns None if modification time is not applicable.
        """
        metadata = await self.metadata()
        return metadata.get('modified_time')
