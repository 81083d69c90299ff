"""
Tree algorithms over a project's flow forest.

Flows point at their parent through ``parent_id``. Every upward walk here is
bounded by the number of flows in the project, so a corrupted chain (a
dangling parent or a cycle written by an older version) ends the walk
instead of raising or looping forever.
"""

from typing import List, Optional, Set

from flowdoc.core.errors import CycleDetectedError
from flowdoc.core.ir import Flow, Node, Project, seed_node


def create_root_flow(name: str, start_label: str = "Start") -> Flow:
    """A parentless flow holding a single start node."""
    flow = Flow(name=name, parent_id=None)
    flow.add_node(seed_node(start_label))
    return flow


def create_child_flow(parent_id: str, name: str, start_label: str = "Start") -> Flow:
    flow = Flow(name=name, parent_id=parent_id)
    flow.add_node(seed_node(start_label))
    return flow


def roots(project: Project) -> List[Flow]:
    return [f for f in project.flows if f.is_root]


def children_of(project: Project, flow_id: str) -> List[Flow]:
    return [f for f in project.flows if f.parent_id == flow_id]


def build_path(project: Project, target: Optional[Flow]) -> List[Flow]:
    """
    Breadcrumb from the root down to ``target``.

    Stops at a flow without a parent or whose parent cannot be resolved.
    """
    if target is None:
        return []
    path: List[Flow] = []
    seen: Set[str] = set()
    current: Optional[Flow] = target
    while current is not None and current.id not in seen and len(path) <= len(project.flows):
        path.insert(0, current)
        seen.add(current.id)
        if current.parent_id is None:
            break
        current = project.get_flow(current.parent_id)
    return path


def collect_descendants(project: Project, flow_id: str) -> List[str]:
    """``flow_id`` followed by the ids of all flows transitively parented by it."""
    collected = [flow_id]
    seen = {flow_id}
    index = 0
    while index < len(collected):
        parent = collected[index]
        for flow in project.flows:
            if flow.parent_id == parent and flow.id not in seen:
                collected.append(flow.id)
                seen.add(flow.id)
        index += 1
    return collected


def is_ancestor(project: Project, ancestor_id: str, flow_id: Optional[str]) -> bool:
    """True if ``ancestor_id`` is ``flow_id`` itself or on its parent chain."""
    current = project.get_flow(flow_id)
    steps = 0
    while current is not None and steps <= len(project.flows):
        if current.id == ancestor_id:
            return True
        current = project.get_flow(current.parent_id)
        steps += 1
    return False


def check_parent(project: Project, flow_id: str, parent_id: Optional[str]) -> None:
    """Raise CycleDetectedError if ``flow_id`` may not be attached under ``parent_id``."""
    if parent_id is None:
        return
    if parent_id == flow_id or is_ancestor(project, flow_id, parent_id):
        raise CycleDetectedError(flow_id, parent_id)


def remove_flows(project: Project, flow_id: str) -> List[str]:
    """Remove a flow and all of its descendants in one pass; returns the removed ids."""
    doomed = collect_descendants(project, flow_id)
    doomed_set = set(doomed)
    before = len(project.flows)
    project.flows = [f for f in project.flows if f.id not in doomed_set]
    if len(project.flows) == before:
        return []
    return doomed


def resolve_sub_flow(project: Project, node: Node) -> Optional[Flow]:
    """The node's sub-flow, or None when unset or no longer present."""
    return project.get_flow(node.data.sub_flow_id)


def iter_tree(project: Project):
    """Yield ``(depth, flow)`` for every flow reachable from a root, depth first."""
    seen: Set[str] = set()

    def walk(flow: Flow, depth: int):
        if flow.id in seen:
            return
        seen.add(flow.id)
        yield depth, flow
        for child in children_of(project, flow.id):
            yield from walk(child, depth + 1)

    for root in roots(project):
        yield from walk(root, 0)


def find_root(project: Project, flow: Optional[Flow]) -> Optional[Flow]:
    """Top of ``flow``'s parent chain (the flow itself if it is a root)."""
    path = build_path(project, flow)
    return path[0] if path else None
