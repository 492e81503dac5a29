"""
Scene graph holding the topology's nodes and links.

All structural invariants live here:
- links always reference existing nodes (node removal cascades)
- no self-links
- at most one link per unordered node pair at creation time
- ids are handed out once and never reused
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .network import (
    DeviceType, NetworkNode, NetworkLink,
    NODE_HALF_ICON, NODE_EDITABLE_FIELDS, LINK_EDITABLE_FIELDS,
)

logger = logging.getLogger(__name__)

_ID_SUFFIX = re.compile(r"-(\d+)$")


@dataclass
class SceneGraph:
    """
    Root model containing the topology graph.

    Nodes and links are kept in insertion order, which is also the
    order they are painted in.
    """
    nodes: dict[str, NetworkNode] = field(default_factory=dict)
    links: dict[str, NetworkLink] = field(default_factory=dict)

    # Monotonic id counter, seeded past any loaded id
    _next_id: int = field(default=1, repr=False)

    def _new_id(self, prefix: str) -> str:
        new_id = f"{prefix}-{self._next_id}"
        self._next_id += 1
        return new_id

    def _seed_ids(self, ids: Iterable[str]):
        """Advance the id counter past every numeric suffix in ids."""
        for item_id in ids:
            match = _ID_SUFFIX.search(item_id)
            if match:
                self._next_id = max(self._next_id, int(match.group(1)) + 1)

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def add_node(self, device_type: DeviceType, x: float, y: float) -> NetworkNode:
        """Create and add a new node with default name, ip and status."""
        node = NetworkNode(id=self._new_id("node"), type=device_type, x=x, y=y)
        self.nodes[node.id] = node
        logger.debug(f"Added node {node.id} ({device_type.value}) at ({x:.1f}, {y:.1f})")
        return node

    def get_node(self, node_id: str) -> Optional[NetworkNode]:
        """Get a node by ID."""
        return self.nodes.get(node_id)

    def update_node(self, node_id: str, **changes) -> Optional[NetworkNode]:
        """
        Merge field changes into a node.

        Returns the updated node, or None if the id no longer exists.

        Raises:
            ValueError: if a field name is not editable
        """
        unknown = set(changes) - NODE_EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update node fields: {sorted(unknown)}")

        node = self.nodes.get(node_id)
        if node is None:
            return None
        for name, value in changes.items():
            setattr(node, name, value)
        return node

    def move_node(self, node_id: str, x: float, y: float) -> Optional[NetworkNode]:
        """Set a node's world position."""
        return self.update_node(node_id, x=x, y=y)

    def remove_node(self, node_id: str) -> Optional[NetworkNode]:
        """Remove a node and all its connected links."""
        if node_id not in self.nodes:
            return None

        links_to_remove = [
            link_id for link_id, link in self.links.items()
            if link.touches(node_id)
        ]
        for link_id in links_to_remove:
            self.remove_link(link_id)

        logger.debug(f"Removed node {node_id} and {len(links_to_remove)} link(s)")
        return self.nodes.pop(node_id)

    def get_node_center(self, node_id: str) -> tuple[float, float]:
        """
        Get the anchor point used for link endpoints.

        Returns the origin for an unknown id instead of raising.
        """
        node = self.nodes.get(node_id)
        if node is None:
            return (0.0, 0.0)
        return (node.x + NODE_HALF_ICON, node.y + NODE_HALF_ICON)

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def find_link_between(self, a: str, b: str) -> Optional[NetworkLink]:
        """Find the link joining two nodes, in either direction."""
        for link in self.links.values():
            if link.connects(a, b):
                return link
        return None

    def add_link(self, source_id: str, target_id: str) -> Optional[NetworkLink]:
        """
        Create a link between two nodes.

        Returns None without changing anything for a self-link, a
        duplicate of an existing pair, or an unknown endpoint.
        """
        if source_id == target_id:
            logger.debug(f"Ignoring self-link on {source_id}")
            return None
        if source_id not in self.nodes or target_id not in self.nodes:
            logger.debug(f"Ignoring link to missing node ({source_id} -> {target_id})")
            return None
        if self.find_link_between(source_id, target_id) is not None:
            logger.debug(f"Ignoring duplicate link {source_id} <-> {target_id}")
            return None

        link = NetworkLink(id=self._new_id("link"), source=source_id, target=target_id)
        self.links[link.id] = link
        logger.debug(f"Added link {link.id} ({source_id} -> {target_id})")
        return link

    def get_link(self, link_id: str) -> Optional[NetworkLink]:
        """Get a link by ID."""
        return self.links.get(link_id)

    def update_link(self, link_id: str, **changes) -> Optional[NetworkLink]:
        """
        Merge field changes into a link.

        Raises:
            ValueError: if a field name is not editable
        """
        unknown = set(changes) - LINK_EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update link fields: {sorted(unknown)}")

        link = self.links.get(link_id)
        if link is None:
            return None
        for name, value in changes.items():
            setattr(link, name, value)
        return link

    def remove_link(self, link_id: str) -> Optional[NetworkLink]:
        """Remove a link by ID."""
        return self.links.pop(link_id, None)

    def links_for_node(self, node_id: str) -> list[NetworkLink]:
        """Get all links incident to a node."""
        return [link for link in self.links.values() if link.touches(node_id)]

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def clear(self):
        """Remove all nodes and links. Ids keep counting up."""
        self.nodes.clear()
        self.links.clear()

    def replace(self, nodes: Iterable[NetworkNode], links: Iterable[NetworkLink]):
        """
        Replace the whole graph, e.g. from a loaded snapshot.

        Links that would break an invariant (dangling endpoint,
        self-link, duplicate id) are dropped.
        """
        self.clear()
        for node in nodes:
            self.nodes[node.id] = node

        for link in links:
            if link.source not in self.nodes or link.target not in self.nodes:
                logger.warning(f"Dropping dangling link {link.id} ({link.source} -> {link.target})")
                continue
            if link.source == link.target:
                logger.warning(f"Dropping self-link {link.id}")
                continue
            if link.id in self.links:
                logger.warning(f"Dropping link with duplicate id {link.id}")
                continue
            self.links[link.id] = link

        self._seed_ids(list(self.nodes) + list(self.links))

    def node_dicts(self) -> list[dict]:
        return [node.to_dict() for node in self.nodes.values()]

    def link_dicts(self) -> list[dict]:
        return [link.to_dict() for link in self.links.values()]
