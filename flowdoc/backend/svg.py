"""SVG backend for flows using Graphviz.

Requirements:
    The Graphviz executables must be installed on your system:
    - macOS: brew install graphviz
    - Ubuntu/Debian: sudo apt-get install graphviz
    - Windows: Download from https://graphviz.org/download/
"""

from typing import Optional

import graphviz

from flowdoc.backend.graphviz import GraphvizExporter
from flowdoc.core.ir import Flow, Project

__all__ = ["SvgExporter"]


class SvgExporter:
    """Exports a Flow to SVG format using Graphviz."""

    @staticmethod
    def to_svg(flow: Flow, include_descriptions: bool = True, project: Optional[Project] = None) -> str:
        """
        Render a flow to an SVG string.

        Raises:
            RuntimeError: If the Graphviz executable is not available
        """
        digraph = GraphvizExporter.to_digraph(flow, include_descriptions=include_descriptions, project=project)
        try:
            svg_bytes = digraph.pipe(format='svg')
        except graphviz.ExecutableNotFound as e:
            raise RuntimeError(
                "Graphviz executable not found. "
                "Please install Graphviz: https://graphviz.org/download/"
            ) from e
        return svg_bytes.decode('utf-8')
