"""Tests for the Graphviz backend exporter."""

import graphviz
import pytest

from flowdoc.backend.graphviz import GraphvizExporter
from flowdoc.core.connections import Connection
from flowdoc.core.ir import Flow, Node, NodeData, Project


class TestGraphvizExporter:
    """Tests for GraphvizExporter functionality."""

    @pytest.fixture
    def simple_flow(self):
        flow = Flow("TestGraph", flow_id="main")
        flow.add_node(Node(node_id="s", data=NodeData(label="Start", shape="rounded")))
        flow.add_node(Node(node_id="p", data=NodeData(label="Proc")))
        flow.add_node(Node(node_id="d", data=NodeData(label="Decision", shape="diamond")))
        flow.add_node(Node(node_id="e", data=NodeData(label="End", shape="circle")))
        flow.connections = [
            Connection("s", "p", "Go"),
            Connection("p", "d"),
            Connection("d", "e", "Yes"),
        ]
        return flow

    def test_to_digraph_structure(self, simple_flow):
        dot = GraphvizExporter.to_digraph(simple_flow)

        assert isinstance(dot, graphviz.Digraph)
        assert dot.name == "TestGraph"

        source = dot.source
        assert "label=Start" in source
        assert "label=Proc" in source
        assert "label=Go" in source
        assert "s -> p" in source
        assert "d -> e" in source

    def test_shapes(self, simple_flow):
        source = GraphvizExporter.to_dot(simple_flow)
        assert "shape=box" in source
        assert "shape=diamond" in source
        assert "shape=circle" in source
        assert '"rounded,filled"' in source

    def test_colors(self, simple_flow):
        simple_flow.get_node("p").data.color = "#ff0000"
        source = GraphvizExporter.to_dot(simple_flow)
        assert 'fillcolor="#ff0000"' in source
        assert 'color="#667eea"' in source
        assert "fontcolor=white" in source

    def test_description_uses_html_label(self):
        flow = Flow("Docs")
        flow.add_node(Node(node_id="a", data=NodeData(label="Pack", description="**Tape** <box>")))
        source = GraphvizExporter.to_dot(flow)
        assert "<B>Pack</B>" in source
        assert "<B>Tape</B> &lt;box&gt;" in source

    def test_markdown_to_html(self):
        html = GraphvizExporter._markdown_to_html("# Title\nuse `tape` and *care*")
        assert html == "<B>Title</B><BR/>use <I>tape</I> and <I>care</I>"

    def test_sub_flow_nodes_get_double_border(self, simple_flow):
        simple_flow.get_node("p").data.sub_flow_id = "detail"
        project = Project("P", flows=[simple_flow, Flow("Detail", parent_id="main", flow_id="detail")])
        assert "peripheries=2" in GraphvizExporter.to_dot(simple_flow, project=project)
        assert "peripheries" not in GraphvizExporter.to_dot(simple_flow)


class TestMarkdownToHtml:
    def test_heading_with_emphasis(self):
        assert GraphvizExporter._markdown_to_html("## Step **one**") == "<B>Step <B>one</B></B>"

    def test_underscore_forms(self):
        assert GraphvizExporter._markdown_to_html("__bold__ and _it_") == "<B>bold</B> and <I>it</I>"

    def test_escapes_quotes(self):
        assert GraphvizExporter._markdown_to_html('say "hi"') == "say &quot;hi&quot;"
