"""
FlowDoc - A Python library for documenting processes as nested flowcharts.

Main APIs:
- Workspace: Application state for projects, flows, nodes and connections
- AuthService: Local account registry and session handling
- ProjectRepository: Persists projects to a key-value store

Backends:
- MermaidExporter: Mermaid.js diagram syntax
- GraphvizExporter: Graphviz DOT format
- SvgExporter: SVG format (requires Graphviz)
"""

from flowdoc.core.ir import Flow, Node, NodeData, Project
from flowdoc.core.connections import Connection, Edge
from flowdoc.core.serialization import JsonSerializer
from flowdoc.auth import AuthService
from flowdoc.engine import Workspace
from flowdoc.storage import FileStorage, MemoryStorage, ProjectRepository
from flowdoc.backend import MermaidExporter, GraphvizExporter, SvgExporter

__all__ = [
    # Core model
    "Project",
    "Flow",
    "Node",
    "NodeData",
    "Connection",
    "Edge",
    # Serialization
    "JsonSerializer",
    # Application state
    "AuthService",
    "Workspace",
    # Persistence
    "FileStorage",
    "MemoryStorage",
    "ProjectRepository",
    # Backends
    "MermaidExporter",
    "GraphvizExporter",
    "SvgExporter",
]
