from typing import Dict, List, Optional, Any

from flowdoc.core.connections import Connection, Edge, edges_from_connections, without_node
from flowdoc.core.records import (
    ChecklistItem, Document, GlossaryTerm, Improvement, Metric, Risk, Status,
    default_statuses, new_id, utc_now,
)
from flowdoc.core.style import DEFAULT_COLOR, derive_style
from flowdoc.core.versioning import INITIAL_VERSION

SEED_POSITION = {"x": 250, "y": 50}


class NodeData:
    """Content carried by a node: presentation fields, document and records."""
    def __init__(
        self,
        label: str = "",
        description: str = "",
        color: str = DEFAULT_COLOR,
        shape: str = "default",
        has_sub_flow: bool = False,
        sub_flow_id: Optional[str] = None,
        status: str = "draft",
        document: Optional[Document] = None,
        metrics: Optional[List[Metric]] = None,
        improvements: Optional[List[Improvement]] = None,
        checklist: Optional[List[ChecklistItem]] = None,
        risks: Optional[List[Risk]] = None,
    ):
        self.label = label
        self.description = description
        self.color = color
        self.shape = shape
        self.has_sub_flow = has_sub_flow
        # Weak reference into the owning project's flow list
        self.sub_flow_id = sub_flow_id
        self.status = status
        self.document = document or Document()
        self.metrics = metrics or []
        self.improvements = improvements or []
        self.checklist = checklist or []
        self.risks = risks or []


class Node:
    """One process box in a flow."""
    def __init__(
        self,
        node_id: Optional[str] = None,
        data: Optional[NodeData] = None,
        position: Optional[Dict[str, float]] = None,
        node_type: str = "default",
        style: Optional[Dict[str, Any]] = None,
    ):
        self.id = node_id if node_id else new_id("node")
        self.type = node_type
        self.position = dict(position) if position else {"x": 0, "y": 0}
        self.data = data or NodeData()
        self.style = style if style is not None else derive_style(self.data.shape, self.data.color)

    @property
    def label(self) -> str:
        return self.data.label

    def restyle(self) -> None:
        self.style = derive_style(self.data.shape, self.data.color)

    def __repr__(self):
        return f"<{self.__class__.__name__} id={self.id} label='{self.label}'>"


def seed_node(label: str = "Start") -> Node:
    """The start node every new flow is created with."""
    data = NodeData(label=label, color=DEFAULT_COLOR, shape="rounded")
    return Node(node_id=new_id("start"), data=data, position=SEED_POSITION)


class Flow:
    """One flowchart of a project, optionally nested under a parent flow."""
    def __init__(
        self,
        name: str = "Flow",
        parent_id: Optional[str] = None,
        flow_id: Optional[str] = None,
        status: str = "draft",
        nodes: Optional[List[Node]] = None,
        connections: Optional[List[Connection]] = None,
    ):
        self.id = flow_id if flow_id else new_id("flow")
        self.name = name
        self.parent_id = parent_id
        self.status = status
        self.nodes: List[Node] = nodes or []
        self.connections: List[Connection] = connections or []

    @property
    def edges(self) -> List[Edge]:
        """Edges derived from the connection table on every read."""
        return edges_from_connections(self.connections)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def add_node(self, node: Node) -> Node:
        if self.get_node(node.id) is not None:
            raise ValueError(f"Node with id {node.id} already exists.")
        self.nodes.append(node)
        return node

    def get_node(self, node_id: str) -> Optional[Node]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def remove_node(self, node_id: str) -> Optional[Node]:
        """Drop a node together with every connection touching it."""
        node = self.get_node(node_id)
        if node is None:
            return None
        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.connections = without_node(self.connections, node_id)
        return node

    def get_connection(self, connection_id: str) -> Optional[Connection]:
        return next((c for c in self.connections if c.id == connection_id), None)

    def __repr__(self):
        return f"<Flow id={self.id} name='{self.name}' parent={self.parent_id}>"


class Project:
    """A project: its flow forest, status settings, documents and glossary."""
    def __init__(
        self,
        name: str,
        description: str = "",
        project_id: Optional[str] = None,
        created_at: Optional[str] = None,
        updated_at: Optional[str] = None,
        version: str = INITIAL_VERSION,
        statuses: Optional[List[Status]] = None,
        flows: Optional[List[Flow]] = None,
        documents: Optional[List[Document]] = None,
        glossary: Optional[List[GlossaryTerm]] = None,
    ):
        self.id = project_id or new_id("project")
        self.name = name
        self.description = description
        self.created_at = created_at or utc_now()
        self.updated_at = updated_at or self.created_at
        self.version = version
        self.statuses = statuses if statuses is not None else default_statuses()
        self.flows: List[Flow] = flows or []
        self.documents: List[Document] = documents or []
        self.glossary: List[GlossaryTerm] = glossary or []

    def get_flow(self, flow_id: Optional[str]) -> Optional[Flow]:
        if not flow_id:
            return None
        return next((f for f in self.flows if f.id == flow_id), None)

    @property
    def root_flow(self) -> Optional[Flow]:
        """First flow without a parent, if any."""
        return next((f for f in self.flows if f.is_root), None)

    @property
    def status_ids(self) -> List[str]:
        return [s.id for s in self.statuses]

    def get_status(self, status_id: str) -> Optional[Status]:
        return next((s for s in self.statuses if s.id == status_id), None)

    def get_document(self, doc_id: str) -> Optional[Document]:
        return next((d for d in self.documents if d.id == doc_id), None)

    def get_glossary_term(self, term_id: str) -> Optional[GlossaryTerm]:
        return next((t for t in self.glossary if t.id == term_id), None)

    def find_node(self, node_id: str) -> Optional[Node]:
        for flow in self.flows:
            node = flow.get_node(node_id)
            if node is not None:
                return node
        return None

    def __repr__(self):
        return f"<Project id={self.id} name='{self.name}' v{self.version}>"
