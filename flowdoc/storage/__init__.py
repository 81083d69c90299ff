"""Key-value storage backends and the repositories built on them."""

from flowdoc.storage.backends import FileStorage, KeyValueStorage, MemoryStorage
from flowdoc.storage.repository import (
    PROJECTS_KEY, SESSION_KEY, USERS_KEY, JsonRepository, ProjectRepository,
)

__all__ = [
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "JsonRepository",
    "ProjectRepository",
    "PROJECTS_KEY",
    "SESSION_KEY",
    "USERS_KEY",
]
