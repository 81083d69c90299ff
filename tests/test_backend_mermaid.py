"""Tests for the Mermaid backend exporter."""

import pytest

from flowdoc.backend.mermaid import MermaidExporter
from flowdoc.core.connections import Connection
from flowdoc.core.ir import Flow, Node, NodeData, Project


class TestMermaidExporter:
    """Tests for MermaidExporter functionality."""

    @pytest.fixture
    def simple_flow(self):
        """A flow with one node of each shape."""
        flow = Flow("Test", flow_id="main")
        flow.add_node(Node(node_id="A", data=NodeData(label="Start", shape="rounded")))
        flow.add_node(Node(node_id="B", data=NodeData(label="Proc")))
        flow.add_node(Node(node_id="C", data=NodeData(label="Decide", shape="diamond", color="#ff0000")))
        flow.add_node(Node(node_id="D", data=NodeData(label="Hub", shape="circle")))
        flow.add_node(Node(node_id="E", data=NodeData(label="Input", shape="parallelogram")))
        flow.connections = [
            Connection("A", "B"),
            Connection("B", "C"),
            Connection("C", "D", "Yes"),
            Connection("C", ""),
        ]
        return flow

    def test_output_starts_with_graph(self, simple_flow):
        assert MermaidExporter.to_mermaid(simple_flow).startswith("graph TD")

    def test_custom_direction(self, simple_flow):
        assert MermaidExporter.to_mermaid(simple_flow, direction="LR").startswith("graph LR")

    def test_node_shapes(self, simple_flow):
        output = MermaidExporter.to_mermaid(simple_flow)
        assert 'A(["Start"])' in output
        assert 'B["Proc"]' in output
        assert 'C{"Decide"}' in output
        assert 'D(("Hub"))' in output
        assert 'E[/"Input"/]' in output

    def test_node_colors(self, simple_flow):
        output = MermaidExporter.to_mermaid(simple_flow)
        assert "style C fill:#ff0000,color:#fff" in output
        assert "style B fill:#667eea,color:#fff" in output

    def test_edges_come_from_connections(self, simple_flow):
        output = MermaidExporter.to_mermaid(simple_flow)
        assert "A --> B" in output
        assert "C -- Yes --> D" in output
        assert output.count("-->") == 3

    def test_description_in_label(self):
        flow = Flow("Docs")
        flow.add_node(Node(node_id="A", data=NodeData(label="Pack", description="## Steps\n**Tape** the box")))
        output = MermaidExporter.to_mermaid(flow)
        assert 'A["Pack<br/><i>Steps<br/>Tape the box</i>"]' in output
        assert 'A["Pack"]' in MermaidExporter.to_mermaid(flow, include_descriptions=False)

    def test_special_characters(self):
        flow = Flow("Esc")
        flow.add_node(Node(node_id="node-1", data=NodeData(label='Say "hi" (now)')))
        output = MermaidExporter.to_mermaid(flow)
        assert 'node_1["Say #quot;hi#quot; #40;now#41;"]' in output

    def test_sub_flow_nodes_are_marked(self, simple_flow):
        detail = Flow("Detail", parent_id="main", flow_id="detail")
        simple_flow.get_node("B").data.sub_flow_id = "detail"
        simple_flow.get_node("C").data.sub_flow_id = "deleted"
        project = Project("P", flows=[simple_flow, detail])

        output = MermaidExporter.to_mermaid(simple_flow, project=project)
        assert "class B subflow" in output
        assert "classDef subflow" in output
        assert "subflow" not in MermaidExporter.to_mermaid(simple_flow)
