import re
from typing import Optional

import graphviz

from flowdoc.core.ir import Flow, Node, Project
from flowdoc.core.tree import resolve_sub_flow


class GraphvizExporter:
    """Exports a Flow to Graphviz/Dot format or renders it."""

    # Node shape to (graphviz shape, extra style)
    _SHAPES = {
        "default": ("box", "filled"),
        "rounded": ("box", "rounded,filled"),
        "diamond": ("diamond", "filled"),
        "circle": ("circle", "filled"),
        "parallelogram": ("parallelogram", "filled"),
    }

    @staticmethod
    def _html_label(label: str, description: Optional[str] = None) -> str:
        """Generate HTML-like label for a node, optionally including description."""
        label = GraphvizExporter._escape_html(label)
        if description:
            desc_html = GraphvizExporter._markdown_to_html(description)
            return (
                f'<<TABLE BORDER="0" CELLBORDER="0" CELLSPACING="4" CELLPADDING="8">'
                f'<TR><TD ALIGN="LEFT"><B>{label}</B></TD></TR>'
                f'<TR><TD ALIGN="LEFT" BALIGN="LEFT"><FONT POINT-SIZE="10">{desc_html}</FONT></TD></TR>'
                f'</TABLE>>'
            )
        return f'<<B>{label}</B>>'

    @staticmethod
    def _escape_html(text: str) -> str:
        """Escape HTML special characters for Graphviz."""
        return (
            text.replace('&', '&amp;')
            .replace('<', '&lt;')
            .replace('>', '&gt;')
            .replace('"', '&quot;')
        )

    # Inline emphasis in one pass: code, bold (** or __), italic (* or _)
    _INLINE = re.compile(r'`([^`]+)`|\*\*([^*]+)\*\*|__([^_]+)__|\*([^*]+)\*|_([^_]+)_')
    _HEADING = re.compile(r'#{1,6}\s+(.+)$')

    @staticmethod
    def _inline_html(line: str) -> str:
        def tag(match):
            code, bold, bold_alt, italic, italic_alt = match.groups()
            if bold or bold_alt:
                return f'<B>{bold or bold_alt}</B>'
            return f'<I>{code or italic or italic_alt}</I>'

        return GraphvizExporter._INLINE.sub(tag, line)

    @staticmethod
    def _markdown_to_html(text: str) -> str:
        """
        Render a node description as a Graphviz HTML-like label body.

        Headings become bold lines, emphasis maps to <B>/<I>, and lines are
        joined with <BR/>. Everything else is escaped.
        """
        lines = []
        for line in GraphvizExporter._escape_html(text).split('\n'):
            heading = GraphvizExporter._HEADING.match(line)
            if heading:
                lines.append(f'<B>{GraphvizExporter._inline_html(heading.group(1))}</B>')
            else:
                lines.append(GraphvizExporter._inline_html(line))
        return '<BR/>'.join(lines)

    @staticmethod
    def _node_attrs(node: Node, include_descriptions: bool) -> dict:
        shape, style = GraphvizExporter._SHAPES.get(node.data.shape, GraphvizExporter._SHAPES["default"])
        description = node.data.description if include_descriptions else None
        if description:
            label = GraphvizExporter._html_label(node.label, description)
        else:
            label = node.label
        return {
            "label": label,
            "shape": shape,
            "style": style,
            "fillcolor": node.data.color,
            "fontcolor": "white",
        }

    @staticmethod
    def to_digraph(
        flow: Flow,
        include_descriptions: bool = True,
        project: Optional[Project] = None,
    ) -> graphviz.Digraph:
        """
        Converts a Flow to a graphviz.Digraph object.

        Args:
            flow: The flow to convert
            include_descriptions: If True, include node descriptions in HTML labels
            project: Owning project; when given, nodes with a live sub-flow get a
                double border
        """
        dot = graphviz.Digraph(name=flow.name, comment=flow.name)
        dot.attr(rankdir='TB')

        for node in flow.nodes:
            attrs = GraphvizExporter._node_attrs(node, include_descriptions)
            if project is not None and resolve_sub_flow(project, node) is not None:
                attrs["peripheries"] = "2"
            dot.node(node.id, **attrs)

        for edge in flow.edges:
            dot.edge(edge.source_id, edge.target_id, label=edge.label or "", color=edge.style["style"]["stroke"])

        return dot

    @staticmethod
    def to_dot(flow: Flow, project: Optional[Project] = None) -> str:
        """Returns the DOT source string for the flow."""
        return GraphvizExporter.to_digraph(flow, project=project).source

    @staticmethod
    def render(flow: Flow, filename: str, format: str = 'png', view: bool = False, project: Optional[Project] = None):
        """Renders the flow to a file."""
        dot = GraphvizExporter.to_digraph(flow, project=project)
        return dot.render(filename, format=format, view=view)
