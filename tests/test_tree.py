"""Tests for the flow tree algorithms."""

import pytest

from flowdoc.core import tree
from flowdoc.core.errors import CycleDetectedError
from flowdoc.core.ir import Flow, Node, NodeData, Project


@pytest.fixture
def chain():
    """root <- A <- B <- C, plus a sibling S under root."""
    root = tree.create_root_flow("Root")
    a = tree.create_child_flow(root.id, "A")
    b = tree.create_child_flow(a.id, "B")
    c = tree.create_child_flow(b.id, "C")
    s = tree.create_child_flow(root.id, "S")
    project = Project("P", flows=[root, a, b, c, s])
    return project, root, a, b, c, s


class TestCreate:
    def test_root_flow(self):
        flow = tree.create_root_flow("Main")
        assert flow.parent_id is None
        assert len(flow.nodes) == 1
        seed = flow.nodes[0]
        assert seed.data.has_sub_flow is False
        assert seed.label == "Start"

    def test_child_flow(self):
        flow = tree.create_child_flow("parent-1", "Detail", start_label="Begin")
        assert flow.parent_id == "parent-1"
        assert flow.nodes[0].label == "Begin"


class TestBuildPath:
    def test_full_path(self, chain):
        project, root, a, b, c, _ = chain
        assert tree.build_path(project, c) == [root, a, b, c]

    def test_root_only(self, chain):
        project, root, *_ = chain
        assert tree.build_path(project, root) == [root]

    def test_none(self, chain):
        assert tree.build_path(chain[0], None) == []

    def test_stops_at_unresolved_parent(self):
        orphan = Flow("Orphan", parent_id="gone")
        project = Project("P", flows=[orphan])
        assert tree.build_path(project, orphan) == [orphan]

    def test_terminates_on_corrupt_cycle(self):
        x = Flow("X", flow_id="x", parent_id="y")
        y = Flow("Y", flow_id="y", parent_id="x")
        project = Project("P", flows=[x, y])
        path = tree.build_path(project, x)
        assert path == [y, x]

    def test_find_root(self, chain):
        project, root, _, _, c, _ = chain
        assert tree.find_root(project, c) is root
        assert tree.find_root(project, None) is None


class TestDescendants:
    def test_collect(self, chain):
        project, root, a, b, c, s = chain
        assert tree.collect_descendants(project, a.id) == [a.id, b.id, c.id]
        assert set(tree.collect_descendants(project, root.id)) == {root.id, a.id, b.id, c.id, s.id}

    def test_remove_exactly_subtree(self, chain):
        project, root, a, b, c, s = chain
        removed = tree.remove_flows(project, a.id)
        assert set(removed) == {a.id, b.id, c.id}
        assert project.flows == [root, s]

    def test_remove_unknown(self, chain):
        project = chain[0]
        assert tree.remove_flows(project, "missing") == []
        assert len(project.flows) == 5

    def test_children_and_roots(self, chain):
        project, root, a, _, _, s = chain
        assert tree.children_of(project, root.id) == [a, s]
        assert tree.roots(project) == [root]


class TestCycles:
    def test_is_ancestor(self, chain):
        project, root, a, b, c, s = chain
        assert tree.is_ancestor(project, a.id, c.id)
        assert tree.is_ancestor(project, c.id, c.id)
        assert not tree.is_ancestor(project, s.id, c.id)

    def test_parent_in_own_subtree_rejected(self, chain):
        project, _, a, _, c, _ = chain
        with pytest.raises(CycleDetectedError) as exc:
            tree.check_parent(project, a.id, c.id)
        assert exc.value.error_code == "CYCLE_DETECTED"

    def test_self_parent_rejected(self, chain):
        project, _, a, *_ = chain
        with pytest.raises(CycleDetectedError):
            tree.check_parent(project, a.id, a.id)

    def test_valid_parent(self, chain):
        project, _, _, _, c, s = chain
        tree.check_parent(project, s.id, c.id)
        tree.check_parent(project, s.id, None)


class TestSubFlowResolution:
    def test_resolves_live_flow(self, chain):
        project, root, a, *_ = chain
        node = Node(data=NodeData(has_sub_flow=True, sub_flow_id=a.id))
        assert tree.resolve_sub_flow(project, node) is a

    def test_stale_reference_is_ignored(self, chain):
        project = chain[0]
        node = Node(data=NodeData(has_sub_flow=True, sub_flow_id="deleted"))
        assert tree.resolve_sub_flow(project, node) is None

    def test_unset_reference(self, chain):
        assert tree.resolve_sub_flow(chain[0], Node()) is None


def test_iter_tree_depths(chain):
    project, root, a, b, c, s = chain
    assert [(d, f.name) for d, f in tree.iter_tree(project)] == [
        (0, "Root"), (1, "A"), (2, "B"), (3, "C"), (1, "S"),
    ]
