"""Tests for the project/flow/node model."""

import pytest

from flowdoc.core.connections import Connection
from flowdoc.core.ir import Flow, Node, NodeData, Project, seed_node


class TestNode:
    def test_seed_node(self):
        node = seed_node()
        assert node.id.startswith("start-")
        assert node.label == "Start"
        assert node.position == {"x": 250, "y": 50}
        assert node.data.color == "#667eea"
        assert node.data.shape == "rounded"
        assert node.data.has_sub_flow is False
        assert node.data.sub_flow_id is None
        assert node.data.status == "draft"
        assert node.data.document.versions == []
        assert node.style["borderRadius"] == "20px"

    def test_restyle_follows_data(self):
        node = Node(data=NodeData(label="Check", shape="default", color="#111111"))
        node.data.shape = "diamond"
        node.data.color = "#222222"
        node.restyle()
        assert node.style["transform"] == "rotate(45deg)"
        assert node.style["background"] == "#222222"

    def test_records_are_not_shared(self):
        a, b = NodeData(), NodeData()
        a.metrics.append(object())
        assert b.metrics == []


class TestFlow:
    @pytest.fixture
    def flow(self):
        flow = Flow("Intake")
        flow.add_node(Node(node_id="a", data=NodeData(label="A")))
        flow.add_node(Node(node_id="b", data=NodeData(label="B")))
        flow.add_node(Node(node_id="c", data=NodeData(label="C")))
        flow.connections = [Connection("a", "b", "ok"), Connection("b", "c")]
        return flow

    def test_duplicate_node_id(self, flow):
        with pytest.raises(ValueError):
            flow.add_node(Node(node_id="a"))

    def test_edges_follow_connections(self, flow):
        assert [(e.source_id, e.target_id, e.label) for e in flow.edges] == [("a", "b", "ok"), ("b", "c", "")]
        flow.connections.append(Connection("c", "a", "retry"))
        assert len(flow.edges) == 3

    def test_remove_node_drops_connections(self, flow):
        removed = flow.remove_node("b")
        assert removed.id == "b"
        assert [n.id for n in flow.nodes] == ["a", "c"]
        assert flow.connections == []
        assert flow.edges == []

    def test_remove_missing_node(self, flow):
        assert flow.remove_node("zzz") is None
        assert len(flow.nodes) == 3

    def test_is_root(self):
        assert Flow("Main").is_root
        assert not Flow("Child", parent_id="x").is_root


class TestProject:
    def test_defaults(self):
        project = Project("Warehouse")
        assert project.version == "1.0.0"
        assert project.status_ids == ["draft", "review", "published"]
        assert project.created_at == project.updated_at
        assert project.flows == []
        assert project.root_flow is None

    def test_lookups(self):
        main = Flow("Main", flow_id="main")
        main.add_node(Node(node_id="n1"))
        child = Flow("Child", parent_id="main", flow_id="child")
        child.add_node(Node(node_id="n2"))
        project = Project("Warehouse", flows=[main, child])

        assert project.get_flow("child") is child
        assert project.get_flow(None) is None
        assert project.get_flow("nope") is None
        assert project.root_flow is main
        assert project.find_node("n2") is child.nodes[0]
        assert project.find_node("n3") is None
        assert project.get_status("review").name == "In review"
