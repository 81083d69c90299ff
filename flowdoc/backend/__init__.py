"""Backend exporters for flows."""

from flowdoc.backend.graphviz import GraphvizExporter
from flowdoc.backend.mermaid import MermaidExporter
from flowdoc.backend.svg import SvgExporter

__all__ = [
    "GraphvizExporter",
    "MermaidExporter",
    "SvgExporter",
]
