"""Core data structures for FlowDoc projects."""

from .connections import Connection, Edge, edges_from_connections
from .ir import Flow, Node, NodeData, Project, seed_node
from .records import (
    ChecklistItem, Document, DocumentVersion, GlossaryTerm, Image, Improvement,
    Metric, Risk, Status, achievement_rate, checklist_completion,
)
from .serialization import JsonSerializer
from .style import derive_style
from .versioning import increment_version, next_document_version

__all__ = [
    "Connection",
    "Edge",
    "edges_from_connections",
    "Flow",
    "Node",
    "NodeData",
    "Project",
    "seed_node",
    "ChecklistItem",
    "Document",
    "DocumentVersion",
    "GlossaryTerm",
    "Image",
    "Improvement",
    "Metric",
    "Risk",
    "Status",
    "achievement_rate",
    "checklist_completion",
    "JsonSerializer",
    "derive_style",
    "increment_version",
    "next_document_version",
]
