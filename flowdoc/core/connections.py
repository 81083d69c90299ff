"""
Connections between nodes of one flow.

The connection table (from / to / condition rows) is the authoritative record
of transitions. Edges are a rendering view computed from it, so the two can
never drift apart.
"""

from typing import Any, Dict, List, Optional

from flowdoc.core.records import new_id

ARROW_COLOR = "#667eea"


class Connection:
    """A transition row: from node, to node, and the condition for taking it."""
    def __init__(self, from_id: str = "", to_id: str = "", condition: str = "", connection_id: Optional[str] = None):
        self.id = connection_id or new_id()
        self.from_id = from_id
        self.to_id = to_id
        self.condition = condition

    @property
    def is_complete(self) -> bool:
        return bool(self.from_id and self.to_id)

    def references(self, node_id: str) -> bool:
        return self.from_id == node_id or self.to_id == node_id

    def __repr__(self):
        return f"<Connection {self.from_id or '?'} -> {self.to_id or '?'} condition='{self.condition}'>"


class Edge:
    """Represents a drawn connection between two nodes."""
    def __init__(self, source_id: str, target_id: str, label: Optional[str] = None, edge_id: Optional[str] = None):
        self.id = edge_id or f"e{source_id}-{target_id}"
        self.source_id = source_id
        self.target_id = target_id
        self.label = label  # Display text, the connection's condition
        self.style = edge_style()

    def __eq__(self, other):
        if not isinstance(other, Edge):
            return NotImplemented
        return (self.id, self.source_id, self.target_id, self.label) == (
            other.id, other.source_id, other.target_id, other.label
        )

    def __repr__(self):
        return f"<Edge {self.source_id} -> {self.target_id} label='{self.label}'>"


def edge_style() -> Dict[str, Any]:
    """Fixed arrow styling shared by every edge."""
    return {
        "markerEnd": {"type": "arrowclosed", "color": ARROW_COLOR},
        "style": {"stroke": ARROW_COLOR, "strokeWidth": 2},
    }


def edge_from_connection(connection: Connection) -> Edge:
    return Edge(connection.from_id, connection.to_id, label=connection.condition)


def edges_from_connections(connections: List[Connection]) -> List[Edge]:
    """Map every complete connection to an edge; rows missing an end are skipped."""
    return [edge_from_connection(c) for c in connections if c.is_complete]


def without_node(connections: List[Connection], node_id: str) -> List[Connection]:
    return [c for c in connections if not c.references(node_id)]
