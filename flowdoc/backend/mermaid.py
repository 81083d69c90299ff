import re
from typing import Optional

from flowdoc.core.ir import Flow, Node, Project
from flowdoc.core.tree import resolve_sub_flow


class MermaidExporter:
    """Exports a Flow to Mermaid.js syntax."""

    # Mermaid shape syntax per node shape
    _SHAPES = {
        "default": ('["', '"]'),          # Rectangle
        "rounded": ('(["', '"])'),        # Stadium
        "diamond": ('{"', '"}'),          # Rhombus
        "circle": ('(("', '"))'),         # Circle
        "parallelogram": ('[/"', '"/]'),  # Parallelogram
    }

    @staticmethod
    def _sanitize(text: str) -> str:
        """Escape special characters for Mermaid syntax."""
        return text.replace('"', '#quot;').replace("(", "#40;").replace(")", "#41;")

    @staticmethod
    def _node_ref(node_id: str) -> str:
        """Mermaid-safe identifier for a node id."""
        return re.sub(r"[^A-Za-z0-9_]", "_", node_id)

    @staticmethod
    def _markdown_to_mermaid(text: str) -> str:
        """
        Convert markdown to Mermaid-compatible formatting.

        Mermaid labels only support line breaks and basic entities, so
        headers and emphasis markers are stripped.
        """
        text = re.sub(r'^#{1,6}\s+', '', text, flags=re.MULTILINE)
        text = text.replace('\n', '<br/>')
        text = re.sub(r'`([^`]+)`', r'"\1"', text)
        text = re.sub(r'\*\*([^*]+)\*\*', r'\1', text)
        text = re.sub(r'__([^_]+)__', r'\1', text)
        text = re.sub(r'\*([^*]+)\*', r'\1', text)
        text = re.sub(r'_([^_]+)_', r'\1', text)
        return text

    @staticmethod
    def _format_node(node: Node, label: str) -> str:
        left, right = MermaidExporter._SHAPES.get(node.data.shape, MermaidExporter._SHAPES["default"])
        return f'{MermaidExporter._node_ref(node.id)}{left}{label}{right}'

    @staticmethod
    def to_mermaid(
        flow: Flow,
        direction: str = "TD",
        include_descriptions: bool = True,
        project: Optional[Project] = None,
    ) -> str:
        """
        Convert a flow to Mermaid diagram syntax.

        Args:
            flow: The flow to convert
            direction: Graph direction (TD, LR, etc.)
            include_descriptions: If True, include node descriptions in labels
            project: Owning project; when given, nodes with a live sub-flow are
                styled with the ``subflow`` class
        """
        lines = [f"graph {direction}"]
        sub_flow_refs = []

        for node in flow.nodes:
            label = MermaidExporter._sanitize(node.label)
            if include_descriptions and node.data.description:
                desc = MermaidExporter._markdown_to_mermaid(node.data.description)
                desc = MermaidExporter._sanitize(desc)
                label = f"{label}<br/><i>{desc}</i>"
            lines.append("    " + MermaidExporter._format_node(node, label))
            lines.append(f"    style {MermaidExporter._node_ref(node.id)} fill:{node.data.color},color:#fff")
            if project is not None and resolve_sub_flow(project, node) is not None:
                sub_flow_refs.append(MermaidExporter._node_ref(node.id))

        for edge in flow.edges:
            source = MermaidExporter._node_ref(edge.source_id)
            target = MermaidExporter._node_ref(edge.target_id)
            if edge.label:
                clean_label = MermaidExporter._sanitize(edge.label)
                lines.append(f"    {source} -- {clean_label} --> {target}")
            else:
                lines.append(f"    {source} --> {target}")

        if sub_flow_refs:
            lines.append("    classDef subflow stroke-width:4px,stroke-dasharray:5 3")
            lines.append(f"    class {','.join(sub_flow_refs)} subflow")

        return "\n".join(lines)
