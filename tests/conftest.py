import pytest

from stepladder_db.memory import InMemoryAssignmentRepository
from stepladder_worksheets.manager import AssignmentManager
from stepladder_worksheets.models.template import WorksheetTemplate
from stepladder_worksheets.registry import TemplateStore


@pytest.fixture(scope="session")
def store():
    """Load the packaged catalog once for the entire test session."""
    s = TemplateStore()
    s.load()
    return s


@pytest.fixture
def repo():
    return InMemoryAssignmentRepository()


@pytest.fixture
def manager(store, repo):
    return AssignmentManager(store, repo)


@pytest.fixture
def db():
    """The in-memory repository ignores its session argument."""
    return None


@pytest.fixture
def make_template():
    """Build a template from a list of raw field dicts."""

    def _make(fields, **overrides):
        raw = {
            "id": "tmp",
            "title": "Temp",
            "modality": "CBT",
            "modules": [],
            "problem_domains": [],
            "fields": fields,
        }
        raw.update(overrides)
        return WorksheetTemplate.model_validate(raw)

    return _make
