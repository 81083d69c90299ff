"""
Records attached to projects and nodes.

Documents carry markdown content, embedded images and an append-only
version log. Metrics, improvements, checklist items and risks are the
operational-excellence records kept per node.
"""

import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Union

from flowdoc.core.errors import ValidationError
from flowdoc.core.versioning import next_document_version

PRIORITIES = ("high", "medium", "low")
RISK_LEVELS = ("high", "medium", "low")
PDCA_CYCLES = ("plan", "do", "check", "act")
IMPROVEMENT_STATUSES = ("planned", "doing", "checking", "acting")


def new_id(prefix: Optional[str] = None) -> str:
    value = uuid.uuid4().hex[:12]
    return f"{prefix}-{value}" if prefix else value


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    return value


def _require_choice(value: str, choices: Iterable[str], field: str) -> str:
    if value not in choices:
        raise ValidationError(f"{field} must be one of {', '.join(choices)}: got {value!r}", field=field)
    return value


class Status:
    """A workflow status defined in project settings."""
    def __init__(self, status_id: str, name: str, color: str):
        self.id = status_id
        self.name = name
        self.color = color

    def __repr__(self):
        return f"<Status id={self.id} name='{self.name}'>"

    def __eq__(self, other):
        if not isinstance(other, Status):
            return NotImplemented
        return (self.id, self.name, self.color) == (other.id, other.name, other.color)


def default_statuses() -> List[Status]:
    return [
        Status("draft", "Draft", "#95a5a6"),
        Status("review", "In review", "#f39c12"),
        Status("published", "Published", "#27ae60"),
    ]


class Image:
    """An image embedded in a document, referenced from markdown by id."""
    def __init__(self, image_id: str, data: str):
        self.id = image_id
        self.data = data

    def __repr__(self):
        return f"<Image id={self.id}>"


class DocumentVersion:
    """One entry of a document's version log."""
    def __init__(self, version: str, title: str, saved_at: str, changes: str = ""):
        self.version = version
        self.title = title
        self.saved_at = saved_at
        self.changes = changes

    def __repr__(self):
        return f"<DocumentVersion {self.version} '{self.title}'>"


class Document:
    """Markdown document with images and a version history."""
    def __init__(
        self,
        doc_id: Optional[str] = None,
        title: str = "",
        content: str = "",
        images: Optional[List[Image]] = None,
        versions: Optional[List[DocumentVersion]] = None,
        created_at: Optional[str] = None,
        updated_at: Optional[str] = None,
    ):
        self.id = doc_id or new_id("doc")
        self.title = title
        self.content = content
        self.images = images or []
        self.versions = versions or []
        self.created_at = created_at or utc_now()
        self.updated_at = updated_at or self.created_at

    @property
    def version(self) -> Optional[str]:
        """Latest saved version, None if the document was never saved."""
        return self.versions[-1].version if self.versions else None

    def save(self, title: str, content: str, images: Optional[List[Image]] = None) -> DocumentVersion:
        """Replace the content and append exactly one entry to the version log."""
        entry = DocumentVersion(
            version=next_document_version(self.versions),
            title=title,
            saved_at=utc_now(),
            changes=f"Updated: {title}",
        )
        self.title = title
        self.content = content
        if images is not None:
            self.images = list(images)
        self.versions.append(entry)
        self.updated_at = entry.saved_at
        return entry

    def get_image(self, image_id: str) -> Optional[Image]:
        return next((img for img in self.images if img.id == image_id), None)

    def __repr__(self):
        return f"<Document id={self.id} title='{self.title}' version={self.version}>"


class Metric:
    """A KPI with a target and a current value."""
    def __init__(
        self,
        name: str,
        target: Optional[float] = None,
        current: Optional[float] = None,
        unit: str = "",
        metric_id: Optional[str] = None,
        created_at: Optional[str] = None,
    ):
        self.id = metric_id or new_id()
        self.name = _require(name, "name")
        self.target = target
        self.current = current
        self.unit = unit
        self.created_at = created_at or utc_now()

    def __repr__(self):
        return f"<Metric id={self.id} name='{self.name}' {self.current}/{self.target}{self.unit}>"


class Improvement:
    """An improvement action tagged with its PDCA phase."""
    def __init__(
        self,
        title: str,
        description: str = "",
        priority: str = "medium",
        cycle: str = "plan",
        status: str = "planned",
        improvement_id: Optional[str] = None,
        created_at: Optional[str] = None,
    ):
        self.id = improvement_id or new_id()
        self.title = _require(title, "title")
        self.description = description
        self.priority = _require_choice(priority, PRIORITIES, "priority")
        self.cycle = _require_choice(cycle, PDCA_CYCLES, "cycle")
        self.status = _require_choice(status, IMPROVEMENT_STATUSES, "status")
        self.created_at = created_at or utc_now()

    def set_status(self, status: str) -> None:
        self.status = _require_choice(status, IMPROVEMENT_STATUSES, "status")

    def __repr__(self):
        return f"<Improvement id={self.id} title='{self.title}' status={self.status}>"


class ChecklistItem:
    def __init__(
        self,
        title: str,
        description: str = "",
        checked: bool = False,
        item_id: Optional[str] = None,
        created_at: Optional[str] = None,
    ):
        self.id = item_id or new_id()
        self.title = _require(title, "title")
        self.description = description
        self.checked = checked
        self.created_at = created_at or utc_now()

    def toggle(self) -> bool:
        self.checked = not self.checked
        return self.checked

    def __repr__(self):
        mark = "x" if self.checked else " "
        return f"<ChecklistItem [{mark}] '{self.title}'>"


class Risk:
    def __init__(
        self,
        title: str,
        description: str = "",
        level: str = "medium",
        mitigation: str = "",
        risk_id: Optional[str] = None,
        created_at: Optional[str] = None,
    ):
        self.id = risk_id or new_id()
        self.title = _require(title, "title")
        self.description = description
        self.level = _require_choice(level, RISK_LEVELS, "level")
        self.mitigation = mitigation
        self.created_at = created_at or utc_now()

    def __repr__(self):
        return f"<Risk id={self.id} title='{self.title}' level={self.level}>"


class GlossaryTerm:
    """A project glossary entry."""
    def __init__(self, term: str, description: str, term_id: Optional[str] = None, created_at: Optional[str] = None):
        self.id = term_id or new_id("glossary")
        self.term = _require(term, "term")
        self.description = _require(description, "description")
        self.created_at = created_at or utc_now()

    def __repr__(self):
        return f"<GlossaryTerm '{self.term}'>"


def _as_number(value: Union[int, float, str, None]) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def achievement_rate(metric: Metric) -> float:
    """
    Percentage of the target reached, rounded to one decimal.

    Returns 0.0 when the target is missing or zero, or no current value is set.
    """
    target = _as_number(metric.target)
    current = _as_number(metric.current)
    if not target or current is None:
        return 0.0
    return round(current / target * 100, 1)


def checklist_completion(items: List[ChecklistItem]) -> float:
    """Percentage of checked items; 0.0 for an empty checklist."""
    if not items:
        return 0.0
    done = sum(1 for item in items if item.checked)
    return done / len(items) * 100
