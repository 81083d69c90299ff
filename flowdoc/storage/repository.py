"""
Persistence adapter.

Each repository owns one storage key and reads/writes its whole value as a
JSON document. Read failures (missing backend, corrupt JSON) are logged and
degrade to an empty result, and a project that no longer parses is skipped
without dropping the others. Write failures are logged and reported as
``False``. Nothing here raises to the caller.
"""

import json
from typing import Any, List, Optional

from flowdoc.core.errors import StorageUnavailableError
from flowdoc.core.ir import Project
from flowdoc.core.serialization import JsonSerializer
from flowdoc.log import get_logger
from flowdoc.storage.backends import KeyValueStorage

logger = get_logger(__name__)

PROJECTS_KEY = "flow_knowledge_manager_projects"
USERS_KEY = "users"
SESSION_KEY = "currentUser"


class JsonRepository:
    """A single JSON value stored under ``key``."""

    def __init__(self, storage: KeyValueStorage, key: str):
        self.storage = storage
        self.key = key

    def read(self, default: Any = None) -> Any:
        try:
            raw = self.storage.get_item(self.key)
        except StorageUnavailableError as e:
            logger.error("Failed to read %s: %s", self.key, e.message)
            return default
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error("Corrupt data under %s: %s", self.key, e)
            return default

    def write(self, value: Any) -> bool:
        try:
            raw = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error("Failed to serialize %s: %s", self.key, e)
            return False
        try:
            self.storage.set_item(self.key, raw)
        except StorageUnavailableError as e:
            logger.error("Failed to write %s: %s", self.key, e.message)
            return False
        return True

    def clear(self) -> bool:
        try:
            self.storage.remove_item(self.key)
        except StorageUnavailableError as e:
            logger.error("Failed to clear %s: %s", self.key, e.message)
            return False
        return True


class ProjectRepository(JsonRepository):
    """The project collection."""

    def __init__(self, storage: KeyValueStorage, key: str = PROJECTS_KEY):
        super().__init__(storage, key)

    def load(self) -> List[Project]:
        data = self.read(default=[])
        if not isinstance(data, list):
            logger.error("Expected a list of projects under %s, got %s", self.key, type(data).__name__)
            return []
        projects = []
        for index, raw in enumerate(data):
            try:
                projects.append(JsonSerializer.from_dict(raw))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                project_id = raw.get("id") if isinstance(raw, dict) else None
                logger.error("Skipping malformed project #%d (%s): %s", index, project_id, e)
        logger.debug("Loaded %d project(s)", len(projects))
        return projects

    def save(self, projects: List[Project]) -> bool:
        try:
            data = JsonSerializer.projects_to_list(projects)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error("Failed to serialize projects: %s", e)
            return False
        ok = self.write(data)
        if ok:
            logger.debug("Saved %d project(s)", len(projects))
        return ok

    def get(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.load() if p.id == project_id), None)
