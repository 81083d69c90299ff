"""
Workspace: the application state and every editing operation.

A Workspace holds the loaded project collection together with the current
project, current flow, breadcrumb path and selected node. All mutations go
through ``update_project``, which stamps the project, bumps its version and
rewrites the whole collection through the repository.

Work that has to happen after an operation returns (creating the sub-flow of
a freshly added node and attaching its id back onto the node) is queued with
``defer`` and executed by ``run_deferred``.
"""

import random
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Tuple, Union

from flowdoc.config import Settings, get_settings
from flowdoc.core import tree
from flowdoc.core.connections import Connection, Edge
from flowdoc.core.errors import NotAuthenticatedError, NotFoundError, RootFlowDeletionError, ValidationError
from flowdoc.core.ir import Flow, Node, NodeData, Project
from flowdoc.core.markdown import add_image
from flowdoc.core.records import (
    ChecklistItem, Document, DocumentVersion, GlossaryTerm, Image, Improvement,
    Metric, Risk, Status, new_id, utc_now,
)
from flowdoc.core.style import DEFAULT_COLOR
from flowdoc.core.versioning import MINOR, PATCH, increment_version
from flowdoc.log import get_logger
from flowdoc.storage.backends import KeyValueStorage
from flowdoc.storage.repository import ProjectRepository

logger = get_logger(__name__)

ConnectionLike = Union[Connection, Dict[str, Any]]


class Workspace:
    """
    Editing session over the persisted project collection.

    The first project (and its first flow) is selected on load, as on startup
    of the editor.
    """

    def __init__(
        self,
        repository: ProjectRepository,
        settings: Optional[Settings] = None,
        user: Optional[Dict[str, Any]] = None,
    ):
        self.repository = repository
        self.settings = settings or get_settings()
        self.user = user
        self.projects: List[Project] = repository.load()
        self.current_project: Optional[Project] = None
        self.current_flow: Optional[Flow] = None
        self.flow_path: List[Flow] = []
        self.selected_node: Optional[Node] = None
        self._deferred: Deque[Callable[[], Any]] = deque()

        if self.projects:
            self.select_project(self.projects[0].id)

    @classmethod
    def open(cls, auth, storage: KeyValueStorage, settings: Optional[Settings] = None) -> "Workspace":
        """Open a workspace for the logged-in user of ``auth``."""
        if not auth.is_authenticated:
            raise NotAuthenticatedError()
        return cls(ProjectRepository(storage), settings=settings, user=auth.current_user)

    def close(self) -> None:
        """Drop all in-memory state, e.g. when the session ends."""
        self._deferred.clear()
        self.projects = []
        self.current_project = None
        self.current_flow = None
        self.flow_path = []
        self.selected_node = None
        self.user = None

    # Deferred work

    def defer(self, callback: Callable[[], Any]) -> None:
        self._deferred.append(callback)

    @property
    def pending(self) -> int:
        return len(self._deferred)

    def run_deferred(self) -> int:
        """Run queued callbacks in FIFO order, including any they enqueue. Returns how many ran."""
        count = 0
        while self._deferred:
            callback = self._deferred.popleft()
            callback()
            count += 1
        return count

    # Persistence

    def save(self) -> bool:
        return self.repository.save(self.projects)

    def update_project(self, project: Project, bump: Optional[str] = PATCH) -> bool:
        """Stamp ``project`` as modified, bump its version and persist everything."""
        project.updated_at = utc_now()
        if bump:
            project.version = increment_version(project.version, bump)
        saved = self.save()
        logger.debug("Updated project %s to v%s (saved=%s)", project.id, project.version, saved)
        return saved

    # Projects

    def get_project(self, project_id: str) -> Project:
        project = next((p for p in self.projects if p.id == project_id), None)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    def create_project(self, name: str, description: str = "") -> Project:
        if not name or not name.strip():
            raise ValidationError("name is required", field="name")
        project = Project(name=name.strip(), description=description or "")
        project.flows.append(tree.create_root_flow(self.settings.default_flow_name, self.settings.start_node_label))
        self.projects.append(project)
        self.select_project(project.id)
        self.save()
        logger.info("Created project %s (%s)", project.id, project.name)
        return project

    def select_project(self, project_id: str) -> Project:
        project = self.get_project(project_id)
        self.current_project = project
        self.selected_node = None
        first = project.flows[0] if project.flows else None
        self.current_flow = first
        self.flow_path = tree.build_path(project, first)
        return project

    def rename_project(self, name: str, description: Optional[str] = None) -> Optional[Project]:
        project = self.current_project
        if project is None:
            return None
        if not name or not name.strip():
            raise ValidationError("name is required", field="name")
        project.name = name.strip()
        if description is not None:
            project.description = description
        self.update_project(project)
        return project

    def delete_project(self, project_id: str) -> None:
        self.get_project(project_id)
        self.projects = [p for p in self.projects if p.id != project_id]
        if self.current_project is not None and self.current_project.id == project_id:
            if self.projects:
                self.select_project(self.projects[0].id)
            else:
                self.current_project = None
                self.current_flow = None
                self.flow_path = []
                self.selected_node = None
        self.save()
        logger.info("Deleted project %s", project_id)

    # Flow tree

    def _require_project(self) -> Project:
        if self.current_project is None:
            raise NotFoundError("Project", "<none selected>")
        return self.current_project

    def get_flow(self, flow_id: str) -> Flow:
        flow = self._require_project().get_flow(flow_id)
        if flow is None:
            raise NotFoundError("Flow", flow_id)
        return flow

    def _create_sub_flow(self, project: Project, parent_flow_id: str, name: str) -> Flow:
        if project.get_flow(parent_flow_id) is None:
            raise NotFoundError("Flow", parent_flow_id)
        flow = tree.create_child_flow(parent_flow_id, name, self.settings.start_node_label)
        tree.check_parent(project, flow.id, parent_flow_id)
        project.flows.append(flow)
        self.update_project(project, bump=MINOR)
        logger.info("Created sub-flow %s under %s", flow.id, parent_flow_id)
        return flow

    def create_sub_flow(self, parent_flow_id: str, name: str) -> Optional[str]:
        """Append a child flow under ``parent_flow_id``; None when no project is selected."""
        if self.current_project is None:
            return None
        return self._create_sub_flow(self.current_project, parent_flow_id, name).id

    def select_flow(self, flow_id: str) -> Flow:
        flow = self.get_flow(flow_id)
        self.current_flow = flow
        self.selected_node = None
        self.flow_path = tree.build_path(self.current_project, flow)
        return flow

    def build_path(self, flow: Optional[Flow] = None) -> List[Flow]:
        if self.current_project is None:
            return []
        return tree.build_path(self.current_project, flow or self.current_flow)

    def update_flow(self, flow_id: str, **updates: Any) -> Flow:
        """Replace fields of a flow: name, status, nodes or connections."""
        allowed = {"name", "status", "nodes", "connections"}
        unknown = set(updates) - allowed
        if unknown:
            raise ValidationError(f"Cannot update flow field(s): {', '.join(sorted(unknown))}")
        flow = self.get_flow(flow_id)
        if "status" in updates:
            self._check_status(updates["status"])
        if "nodes" in updates:
            updates["nodes"] = self._checked_nodes(updates["nodes"])
        if "connections" in updates:
            updates["connections"] = [self._as_connection(c) for c in updates["connections"]]
        for key, value in updates.items():
            setattr(flow, key, value)
        self.update_project(self.current_project)
        return flow

    @staticmethod
    def _checked_nodes(nodes: Iterable[Node]) -> List[Node]:
        checked: List[Node] = []
        seen = set()
        for node in nodes:
            if not isinstance(node, Node):
                raise ValidationError(f"Expected a Node, got {type(node).__name__}", field="nodes")
            if node.id in seen:
                raise ValidationError(f"Duplicate node id: {node.id}", field="nodes")
            seen.add(node.id)
            checked.append(node)
        return checked

    def rename_flow(self, flow_id: str, name: str) -> Flow:
        if not name or not name.strip():
            raise ValidationError("name is required", field="name")
        return self.update_flow(flow_id, name=name.strip())

    def set_flow_status(self, flow_id: str, status: str) -> Flow:
        return self.update_flow(flow_id, status=status)

    def move_flow(self, flow_id: str, new_parent_id: Optional[str]) -> Flow:
        """Re-parent a flow. Rejects parents inside the flow's own subtree."""
        project = self._require_project()
        flow = self.get_flow(flow_id)
        if new_parent_id is not None:
            self.get_flow(new_parent_id)
        elif flow.parent_id is None:
            return flow
        tree.check_parent(project, flow_id, new_parent_id)
        if flow.is_root and new_parent_id is not None and len(tree.roots(project)) == 1:
            raise ValidationError(f"Flow {flow_id} is the project's only root flow", field="parentId")
        flow.parent_id = new_parent_id
        self.update_project(project)
        self.flow_path = tree.build_path(project, self.current_flow)
        return flow

    def delete_flow(self, flow_id: str) -> List[str]:
        """
        Delete a flow and every flow beneath it. Returns the removed ids.

        If the active flow was removed, the first remaining root becomes active.
        """
        project = self.current_project
        if project is None:
            return []
        removed = self._remove_flow_tree(project, flow_id)
        self.update_project(project)
        return removed

    def _remove_flow_tree(self, project: Project, flow_id: str) -> List[str]:
        """Unlink a flow subtree without persisting; the caller saves once."""
        flow = self.get_flow(flow_id)
        if flow.is_root and len(tree.roots(project)) == 1:
            raise RootFlowDeletionError(flow_id)

        removed = tree.remove_flows(project, flow_id)
        logger.info("Deleted %d flow(s) starting at %s", len(removed), flow_id)

        if self.current_flow is not None and self.current_flow.id in removed:
            root = project.root_flow
            self.current_flow = root
            self.flow_path = [root] if root else []
            self.selected_node = None
        return removed

    def resolve_sub_flow(self, node: Node) -> Optional[Flow]:
        if self.current_project is None:
            return None
        return tree.resolve_sub_flow(self.current_project, node)

    # Nodes

    def _locate_node(self, node_id: str) -> Optional[Tuple[Project, Flow, Node]]:
        """Find a node in the current project; None when no project is selected."""
        project = self.current_project
        if project is None:
            return None
        flows = project.flows
        if self.current_flow is not None:
            flows = [self.current_flow] + [f for f in flows if f is not self.current_flow]
        for flow in flows:
            node = flow.get_node(node_id)
            if node is not None:
                return project, flow, node
        raise NotFoundError("Node", node_id)

    def get_node(self, node_id: str) -> Node:
        located = self._locate_node(node_id)
        if located is None:
            raise NotFoundError("Node", node_id)
        return located[2]

    def select_node(self, node_id: Optional[str]) -> Optional[Node]:
        self.selected_node = self.get_node(node_id) if node_id else None
        return self.selected_node

    def _check_status(self, status: str) -> None:
        project = self._require_project()
        if status not in project.status_ids:
            raise ValidationError(f"Unknown status: {status}", field="status")

    def _sub_flow_name(self, title: str) -> str:
        return f"{title} {self.settings.sub_flow_suffix}".strip()

    def _defer_sub_flow(self, project: Project, flow: Flow, node: Node) -> None:
        """Queue creation of the node's sub-flow; the id is attached when the queue runs."""
        name = self._sub_flow_name(node.data.label)

        def attach():
            if project.get_flow(flow.id) is None or flow.get_node(node.id) is None:
                return
            if not node.data.has_sub_flow:
                return
            if tree.resolve_sub_flow(project, node) is not None:
                return
            sub_flow = self._create_sub_flow(project, flow.id, name)
            node.data.sub_flow_id = sub_flow.id
            self.update_project(project, bump=None)

        self.defer(attach)

    def add_node(
        self,
        title: str = "",
        description: str = "",
        color: str = DEFAULT_COLOR,
        shape: str = "default",
        has_sub_flow: bool = False,
        position: Optional[Dict[str, float]] = None,
        flow_id: Optional[str] = None,
    ) -> Optional[Node]:
        """
        Add a process node to the current (or given) flow.

        With ``has_sub_flow`` the node's sub-flow is created by a deferred
        callback; until ``run_deferred`` runs, ``sub_flow_id`` stays None.
        """
        if self.current_project is None:
            return None
        flow = self.get_flow(flow_id) if flow_id else self.current_flow
        if flow is None:
            return None
        data = NodeData(
            label=title or self.settings.new_node_label,
            description=description or "",
            color=color or DEFAULT_COLOR,
            shape=shape or "default",
            has_sub_flow=has_sub_flow,
        )
        if position is None:
            position = {"x": random.random() * 400 + 100, "y": random.random() * 300 + 100}
        node = flow.add_node(Node(node_id=new_id("node"), data=data, position=position))
        self.update_project(self.current_project)
        if has_sub_flow:
            self._defer_sub_flow(self.current_project, flow, node)
        return node

    def update_node(
        self,
        node_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        color: Optional[str] = None,
        shape: Optional[str] = None,
        has_sub_flow: Optional[bool] = None,
        status: Optional[str] = None,
    ) -> Optional[Node]:
        """Merge the given fields into the node's data and recompute its style."""
        located = self._locate_node(node_id)
        if located is None:
            return None
        project, flow, node = located
        if status is not None:
            self._check_status(status)

        data = node.data
        if title is not None:
            data.label = title
        if description is not None:
            data.description = description
        if color is not None:
            data.color = color
        if shape is not None:
            data.shape = shape
        if status is not None:
            data.status = status
        wants_sub_flow = has_sub_flow and tree.resolve_sub_flow(project, node) is None
        if has_sub_flow is not None:
            data.has_sub_flow = has_sub_flow
        node.restyle()
        self.update_project(project)
        if wants_sub_flow:
            self._defer_sub_flow(project, flow, node)
        return node

    def set_node_status(self, node_id: str, status: str) -> Optional[Node]:
        return self.update_node(node_id, status=status)

    def delete_node(self, node_id: str) -> Optional[Node]:
        """Remove a node, its connections, and the sub-flow tree it points at."""
        located = self._locate_node(node_id)
        if located is None:
            return None
        project, flow, node = located
        sub_flow = tree.resolve_sub_flow(project, node)
        if sub_flow is not None:
            self._remove_flow_tree(project, sub_flow.id)
        flow.remove_node(node_id)
        self.update_project(project)
        if self.selected_node is not None and self.selected_node.id == node_id:
            self.selected_node = None
        return node

    # Node documents

    def save_node_document(
        self, node_id: str, title: str, content: str, images: Optional[List[Image]] = None
    ) -> Optional[DocumentVersion]:
        located = self._locate_node(node_id)
        if located is None:
            return None
        project, _, node = located
        entry = node.data.document.save(title, content, images)
        self.update_project(project)
        return entry

    def attach_node_image(self, node_id: str, data: str) -> Optional[str]:
        """Store image data on the node's document; returns the markdown referencing it."""
        located = self._locate_node(node_id)
        if located is None:
            return None
        project, _, node = located
        snippet = add_image(node.data.document, data)
        self.update_project(project)
        return snippet

    # Operational-excellence records

    def _append_record(self, node_id: str, attr: str, record):
        located = self._locate_node(node_id)
        if located is None:
            return None
        project, _, node = located
        getattr(node.data, attr).append(record)
        self.update_project(project)
        return record

    def _find_record(self, node: Node, attr: str, record_id: str, kind: str):
        record = next((r for r in getattr(node.data, attr) if r.id == record_id), None)
        if record is None:
            raise NotFoundError(kind, record_id)
        return record

    def _delete_record(self, node_id: str, attr: str, record_id: str, kind: str) -> bool:
        located = self._locate_node(node_id)
        if located is None:
            return False
        project, _, node = located
        self._find_record(node, attr, record_id, kind)
        setattr(node.data, attr, [r for r in getattr(node.data, attr) if r.id != record_id])
        self.update_project(project)
        return True

    def add_metric(
        self, node_id: str, name: str, target: Optional[float] = None,
        current: Optional[float] = None, unit: str = "",
    ) -> Optional[Metric]:
        return self._append_record(node_id, "metrics", Metric(name, target, current, unit))

    def add_improvement(
        self, node_id: str, title: str, description: str = "",
        priority: str = "medium", cycle: str = "plan",
    ) -> Optional[Improvement]:
        return self._append_record(node_id, "improvements", Improvement(title, description, priority, cycle))

    def add_checklist_item(self, node_id: str, title: str, description: str = "") -> Optional[ChecklistItem]:
        return self._append_record(node_id, "checklist", ChecklistItem(title, description))

    def add_risk(
        self, node_id: str, title: str, description: str = "",
        level: str = "medium", mitigation: str = "",
    ) -> Optional[Risk]:
        return self._append_record(node_id, "risks", Risk(title, description, level, mitigation))

    def toggle_checklist_item(self, node_id: str, item_id: str) -> Optional[bool]:
        located = self._locate_node(node_id)
        if located is None:
            return None
        project, _, node = located
        checked = self._find_record(node, "checklist", item_id, "ChecklistItem").toggle()
        self.update_project(project)
        return checked

    def update_improvement_status(self, node_id: str, improvement_id: str, status: str) -> Optional[Improvement]:
        located = self._locate_node(node_id)
        if located is None:
            return None
        project, _, node = located
        improvement = self._find_record(node, "improvements", improvement_id, "Improvement")
        improvement.set_status(status)
        self.update_project(project)
        return improvement

    def delete_metric(self, node_id: str, metric_id: str) -> bool:
        return self._delete_record(node_id, "metrics", metric_id, "Metric")

    def delete_improvement(self, node_id: str, improvement_id: str) -> bool:
        return self._delete_record(node_id, "improvements", improvement_id, "Improvement")

    def delete_checklist_item(self, node_id: str, item_id: str) -> bool:
        return self._delete_record(node_id, "checklist", item_id, "ChecklistItem")

    def delete_risk(self, node_id: str, risk_id: str) -> bool:
        return self._delete_record(node_id, "risks", risk_id, "Risk")

    # Connections

    def _target_flow(self, flow_id: Optional[str]) -> Optional[Flow]:
        if self.current_project is None:
            return None
        return self.get_flow(flow_id) if flow_id else self.current_flow

    def on_connect(self, source_id: str, target_id: str, flow_id: Optional[str] = None) -> Optional[Connection]:
        """Link two nodes of a flow with an unconditional connection and persist."""
        flow = self._target_flow(flow_id)
        if flow is None:
            return None
        for node_id in (source_id, target_id):
            if flow.get_node(node_id) is None:
                raise NotFoundError("Node", node_id)
        connection = Connection(source_id, target_id, "")
        flow.connections.append(connection)
        self.update_project(self.current_project)
        return connection

    @staticmethod
    def _as_connection(value: ConnectionLike) -> Connection:
        if isinstance(value, Connection):
            return value
        if not isinstance(value, dict):
            raise ValidationError(f"Expected a connection row, got {type(value).__name__}", field="connections")
        return Connection(
            from_id=value.get("from") or "",
            to_id=value.get("to") or "",
            condition=value.get("condition") or "",
            connection_id=value.get("id"),
        )

    def update_connections(self, connections: Iterable[ConnectionLike], flow_id: Optional[str] = None) -> List[Edge]:
        """Replace the connection table wholesale; returns the regenerated edges."""
        flow = self._target_flow(flow_id)
        if flow is None:
            return []
        flow.connections = [self._as_connection(c) for c in connections]
        self.update_project(self.current_project)
        return flow.edges

    def add_connection(
        self, from_id: str = "", to_id: str = "", condition: str = "", flow_id: Optional[str] = None
    ) -> Optional[Connection]:
        flow = self._target_flow(flow_id)
        if flow is None:
            return None
        connection = Connection(from_id, to_id, condition)
        self.update_connections(flow.connections + [connection], flow_id=flow.id)
        return connection

    def update_connection(self, connection_id: str, flow_id: Optional[str] = None, **fields: str) -> Optional[Connection]:
        """Edit one row of the connection table: ``from_id``, ``to_id`` or ``condition``."""
        flow = self._target_flow(flow_id)
        if flow is None:
            return None
        unknown = set(fields) - {"from_id", "to_id", "condition"}
        if unknown:
            raise ValidationError(f"Cannot update connection field(s): {', '.join(sorted(unknown))}")
        connection = flow.get_connection(connection_id)
        if connection is None:
            raise NotFoundError("Connection", connection_id)
        for key, value in fields.items():
            setattr(connection, key, value or "")
        self.update_connections(flow.connections, flow_id=flow.id)
        return connection

    def delete_connection(self, connection_id: str, flow_id: Optional[str] = None) -> bool:
        flow = self._target_flow(flow_id)
        if flow is None:
            return False
        if flow.get_connection(connection_id) is None:
            raise NotFoundError("Connection", connection_id)
        self.update_connections([c for c in flow.connections if c.id != connection_id], flow_id=flow.id)
        return True

    # Project settings

    def update_statuses(self, statuses: Iterable[Union[Status, Dict[str, str]]]) -> List[Status]:
        project = self._require_project()
        new_statuses = []
        for s in statuses:
            if isinstance(s, dict):
                s = Status(s.get("id") or new_id("status"), s.get("name", ""), s.get("color", "#3498db"))
            new_statuses.append(s)
        if not new_statuses:
            raise ValidationError("At least one status is required", field="statuses")
        project.statuses = new_statuses
        self.update_project(project)
        return project.statuses

    def add_status(self, name: str, color: str = "#3498db") -> Status:
        project = self._require_project()
        if not name or not name.strip():
            raise ValidationError("name is required", field="name")
        status = Status(new_id("status"), name.strip(), color)
        self.update_statuses(project.statuses + [status])
        return status

    def update_status(self, status_id: str, name: Optional[str] = None, color: Optional[str] = None) -> Status:
        project = self._require_project()
        status = project.get_status(status_id)
        if status is None:
            raise NotFoundError("Status", status_id)
        if name is not None:
            status.name = name
        if color is not None:
            status.color = color
        self.update_statuses(project.statuses)
        return status

    def remove_status(self, status_id: str) -> List[Status]:
        project = self._require_project()
        if project.get_status(status_id) is None:
            raise NotFoundError("Status", status_id)
        if len(project.statuses) <= 1:
            raise ValidationError("At least one status is required", field="statuses")
        return self.update_statuses([s for s in project.statuses if s.id != status_id])

    # Project documents

    def create_document(self, title: str) -> Document:
        project = self._require_project()
        if not title or not title.strip():
            raise ValidationError("title is required", field="title")
        document = Document(title=title.strip())
        project.documents.append(document)
        self.update_project(project)
        return document

    def get_document(self, doc_id: str) -> Document:
        document = self._require_project().get_document(doc_id)
        if document is None:
            raise NotFoundError("Document", doc_id)
        return document

    def save_document(self, doc_id: str, title: str, content: str, images: Optional[List[Image]] = None) -> DocumentVersion:
        document = self.get_document(doc_id)
        entry = document.save(title, content, images)
        self.update_project(self.current_project)
        return entry

    def delete_document(self, doc_id: str) -> None:
        project = self._require_project()
        self.get_document(doc_id)
        project.documents = [d for d in project.documents if d.id != doc_id]
        self.update_project(project)

    # Glossary

    def add_glossary_term(self, term: str, description: str) -> GlossaryTerm:
        project = self._require_project()
        entry = GlossaryTerm(term, description)
        project.glossary.append(entry)
        self.update_project(project)
        return entry

    def update_glossary_term(self, term_id: str, term: Optional[str] = None, description: Optional[str] = None) -> GlossaryTerm:
        project = self._require_project()
        entry = project.get_glossary_term(term_id)
        if entry is None:
            raise NotFoundError("GlossaryTerm", term_id)
        if term is not None:
            if not term.strip():
                raise ValidationError("term is required", field="term")
            entry.term = term
        if description is not None:
            if not description.strip():
                raise ValidationError("description is required", field="description")
            entry.description = description
        self.update_project(project)
        return entry

    def delete_glossary_term(self, term_id: str) -> None:
        project = self._require_project()
        if project.get_glossary_term(term_id) is None:
            raise NotFoundError("GlossaryTerm", term_id)
        project.glossary = [t for t in project.glossary if t.id != term_id]
        self.update_project(project)

    def search_glossary(self, query: str) -> List[GlossaryTerm]:
        if self.current_project is None:
            return []
        q = query.lower()
        return [t for t in self.current_project.glossary if q in t.term.lower() or q in t.description.lower()]
