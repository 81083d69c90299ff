import pytest

from flowdoc.auth.service import AuthService
from flowdoc.config import Settings
from flowdoc.engine.workspace import Workspace
from flowdoc.storage.backends import MemoryStorage
from flowdoc.storage.repository import ProjectRepository


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def auth(storage):
    return AuthService(storage)


@pytest.fixture
def workspace(storage, settings):
    """A workspace with one freshly created project selected."""
    ws = Workspace(ProjectRepository(storage), settings=settings)
    ws.create_project("Order handling", "How orders move from intake to delivery")
    return ws


@pytest.fixture
def project(workspace):
    return workspace.current_project


@pytest.fixture
def root(project):
    return project.flows[0]
