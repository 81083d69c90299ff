"""
JSON serialization for projects and everything they own.

The serialized form uses camelCase keys and is the persisted layout of the
project collection. Each flow also carries an ``edges`` list rendered from
its connections for consumers that draw the chart; it is NOT read back during
deserialization since it is recomputed from the connection table.
"""

import json
from typing import Any, Dict, List

from flowdoc.core.connections import Connection, Edge
from flowdoc.core.ir import Flow, Node, NodeData, Project
from flowdoc.core.records import (
    ChecklistItem, Document, DocumentVersion, GlossaryTerm, Image, Improvement,
    Metric, Risk, Status,
)


class JsonSerializer:
    """Serializes and deserializes Project graphs to/from JSON-compatible dicts."""

    # Records

    @staticmethod
    def status_to_dict(status: Status) -> Dict[str, Any]:
        return {"id": status.id, "name": status.name, "color": status.color}

    @staticmethod
    def status_from_dict(data: Dict[str, Any]) -> Status:
        return Status(data["id"], data.get("name", data["id"]), data.get("color", "#95a5a6"))

    @staticmethod
    def document_to_dict(doc: Document) -> Dict[str, Any]:
        return {
            "id": doc.id,
            "title": doc.title,
            "content": doc.content,
            "images": [{"id": img.id, "data": img.data} for img in doc.images],
            "versions": [
                {"version": v.version, "title": v.title, "savedAt": v.saved_at, "changes": v.changes}
                for v in doc.versions
            ],
            "createdAt": doc.created_at,
            "updatedAt": doc.updated_at,
        }

    @staticmethod
    def document_from_dict(data: Dict[str, Any]) -> Document:
        return Document(
            doc_id=data.get("id"),
            title=data.get("title", ""),
            content=data.get("content", ""),
            images=[Image(img["id"], img.get("data", "")) for img in data.get("images") or []],
            versions=[
                DocumentVersion(v["version"], v.get("title", ""), v.get("savedAt", ""), v.get("changes", ""))
                for v in data.get("versions") or []
            ],
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )

    @staticmethod
    def metric_to_dict(m: Metric) -> Dict[str, Any]:
        return {
            "id": m.id, "name": m.name, "target": m.target, "current": m.current,
            "unit": m.unit, "createdAt": m.created_at,
        }

    @staticmethod
    def improvement_to_dict(i: Improvement) -> Dict[str, Any]:
        return {
            "id": i.id, "title": i.title, "description": i.description, "priority": i.priority,
            "cycle": i.cycle, "status": i.status, "createdAt": i.created_at,
        }

    @staticmethod
    def checklist_item_to_dict(c: ChecklistItem) -> Dict[str, Any]:
        return {
            "id": c.id, "title": c.title, "description": c.description,
            "checked": c.checked, "createdAt": c.created_at,
        }

    @staticmethod
    def risk_to_dict(r: Risk) -> Dict[str, Any]:
        return {
            "id": r.id, "title": r.title, "description": r.description, "level": r.level,
            "mitigation": r.mitigation, "createdAt": r.created_at,
        }

    @staticmethod
    def glossary_term_to_dict(t: GlossaryTerm) -> Dict[str, Any]:
        return {"id": t.id, "term": t.term, "description": t.description, "createdAt": t.created_at}

    # Graph

    @staticmethod
    def node_to_dict(node: Node) -> Dict[str, Any]:
        d = node.data
        return {
            "id": node.id,
            "type": node.type,
            "position": dict(node.position),
            "data": {
                "label": d.label,
                "description": d.description,
                "color": d.color,
                "shape": d.shape,
                "hasSubFlow": d.has_sub_flow,
                "subFlowId": d.sub_flow_id,
                "status": d.status,
                "document": JsonSerializer.document_to_dict(d.document),
                "metrics": [JsonSerializer.metric_to_dict(m) for m in d.metrics],
                "improvements": [JsonSerializer.improvement_to_dict(i) for i in d.improvements],
                "checklist": [JsonSerializer.checklist_item_to_dict(c) for c in d.checklist],
                "risks": [JsonSerializer.risk_to_dict(r) for r in d.risks],
            },
            "style": dict(node.style),
        }

    @staticmethod
    def node_from_dict(data: Dict[str, Any]) -> Node:
        raw = data.get("data") or {}
        node_data = NodeData(
            label=raw.get("label", ""),
            description=raw.get("description", ""),
            color=raw.get("color", "#667eea"),
            shape=raw.get("shape", "default"),
            has_sub_flow=bool(raw.get("hasSubFlow", False)),
            sub_flow_id=raw.get("subFlowId"),
            status=raw.get("status", "draft"),
            document=JsonSerializer.document_from_dict(raw["document"]) if raw.get("document") else None,
            metrics=[
                Metric(m.get("name", ""), m.get("target"), m.get("current"), m.get("unit", ""),
                       metric_id=m.get("id"), created_at=m.get("createdAt"))
                for m in raw.get("metrics") or []
            ],
            improvements=[
                Improvement(i.get("title", ""), i.get("description", ""), i.get("priority", "medium"),
                            i.get("cycle", "plan"), i.get("status", "planned"),
                            improvement_id=i.get("id"), created_at=i.get("createdAt"))
                for i in raw.get("improvements") or []
            ],
            checklist=[
                ChecklistItem(c.get("title", ""), c.get("description", ""), bool(c.get("checked", False)),
                              item_id=c.get("id"), created_at=c.get("createdAt"))
                for c in raw.get("checklist") or []
            ],
            risks=[
                Risk(r.get("title", ""), r.get("description", ""), r.get("level", "medium"),
                     r.get("mitigation", ""), risk_id=r.get("id"), created_at=r.get("createdAt"))
                for r in raw.get("risks") or []
            ],
        )
        return Node(
            node_id=data.get("id"),
            data=node_data,
            position=data.get("position"),
            node_type=data.get("type", "default"),
            style=data.get("style"),
        )

    @staticmethod
    def connection_to_dict(c: Connection) -> Dict[str, Any]:
        return {"id": c.id, "from": c.from_id, "to": c.to_id, "condition": c.condition}

    @staticmethod
    def connection_from_dict(data: Dict[str, Any]) -> Connection:
        return Connection(
            from_id=data.get("from") or "",
            to_id=data.get("to") or "",
            condition=data.get("condition") or "",
            connection_id=data.get("id"),
        )

    @staticmethod
    def edge_to_dict(edge: Edge) -> Dict[str, Any]:
        data = {"id": edge.id, "source": edge.source_id, "target": edge.target_id, "label": edge.label}
        data.update(edge.style)
        return data

    @staticmethod
    def flow_to_dict(flow: Flow) -> Dict[str, Any]:
        return {
            "id": flow.id,
            "name": flow.name,
            "parentId": flow.parent_id,
            "status": flow.status,
            "nodes": [JsonSerializer.node_to_dict(n) for n in flow.nodes],
            # Rendered view of the connection table, recomputed on load
            "edges": [JsonSerializer.edge_to_dict(e) for e in flow.edges],
            "connections": [JsonSerializer.connection_to_dict(c) for c in flow.connections],
        }

    @staticmethod
    def flow_from_dict(data: Dict[str, Any]) -> Flow:
        flow = Flow(
            name=data.get("name", "Flow"),
            parent_id=data.get("parentId"),
            flow_id=data.get("id"),
            status=data.get("status", "draft"),
        )
        for node_data in data.get("nodes") or []:
            flow.add_node(JsonSerializer.node_from_dict(node_data))
        flow.connections = [JsonSerializer.connection_from_dict(c) for c in data.get("connections") or []]
        return flow

    @staticmethod
    def to_dict(project: Project) -> Dict[str, Any]:
        return {
            "id": project.id,
            "name": project.name,
            "description": project.description,
            "createdAt": project.created_at,
            "updatedAt": project.updated_at,
            "version": project.version,
            "statuses": [JsonSerializer.status_to_dict(s) for s in project.statuses],
            "flows": [JsonSerializer.flow_to_dict(f) for f in project.flows],
            "documents": [JsonSerializer.document_to_dict(d) for d in project.documents],
            "glossary": [JsonSerializer.glossary_term_to_dict(t) for t in project.glossary],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Project:
        statuses = data.get("statuses")
        return Project(
            name=data.get("name", "Untitled"),
            description=data.get("description", ""),
            project_id=data.get("id"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            version=data.get("version", "1.0.0"),
            statuses=[JsonSerializer.status_from_dict(s) for s in statuses] if statuses else None,
            flows=[JsonSerializer.flow_from_dict(f) for f in data.get("flows") or []],
            documents=[JsonSerializer.document_from_dict(d) for d in data.get("documents") or []],
            glossary=[
                GlossaryTerm(t.get("term", ""), t.get("description", ""),
                             term_id=t.get("id"), created_at=t.get("createdAt"))
                for t in data.get("glossary") or []
            ],
        )

    @staticmethod
    def projects_to_list(projects: List[Project]) -> List[Dict[str, Any]]:
        return [JsonSerializer.to_dict(p) for p in projects]

    @staticmethod
    def projects_from_list(data: List[Dict[str, Any]]) -> List[Project]:
        return [JsonSerializer.from_dict(p) for p in data]

    @staticmethod
    def to_json(project: Project, indent: int = 2) -> str:
        return json.dumps(JsonSerializer.to_dict(project), indent=indent, ensure_ascii=False)

    @staticmethod
    def from_json(json_str: str) -> Project:
        data = json.loads(json_str)
        return JsonSerializer.from_dict(data)
