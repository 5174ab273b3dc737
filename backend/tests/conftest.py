import os
import tempfile
import uuid
from pathlib import Path

import pytest

# Point the app at a throwaway database and upload folder before it is imported.
_TMP_ROOT = Path(tempfile.mkdtemp(prefix="volunteer_api_tests_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_ROOT / 'test.db'}"
os.environ["PROJECT_UPLOAD_DIR"] = str(_TMP_ROOT / "uploads")
os.environ["ALLOW_SQLITE"] = "true"

from sqlmodel import Session, select  # noqa: E402

from volunteer_api.database import engine, create_db_and_tables  # noqa: E402
from volunteer_api import models  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def reset_db():
    """Ensure the tables exist in the fresh SQLite database."""
    create_db_and_tables()
    yield


def _unique(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


@pytest.fixture
def make_org():
    def _make(name=None) -> int:
        with Session(engine) as s:
            org = models.Organization(name=name or _unique("org"))
            s.add(org)
            s.commit()
            s.refresh(org)
            return org.id
    return _make


@pytest.fixture
def make_user():
    def _make(username=None) -> int:
        with Session(engine) as s:
            user = models.User(username=username or _unique("user"), email="v@example.org",
                               first_name="Val", last_name="Unteer")
            s.add(user)
            s.commit()
            s.refresh(user)
            return user.id
    return _make


@pytest.fixture
def make_project(make_org):
    def _make(name=None, description=None, organization_id=None) -> int:
        org_id = organization_id or make_org()
        with Session(engine) as s:
            project = models.Project(name=name or _unique("project"),
                                     description=description, organization_id=org_id)
            s.add(project)
            s.commit()
            s.refresh(project)
            return project.id
    return _make


@pytest.fixture
def set_application_status():
    def _set(user_id: int, project_id: int, status: str) -> None:
        with Session(engine) as s:
            row = s.exec(select(models.UserProject).where(
                models.UserProject.user_id == user_id,
                models.UserProject.project_id == project_id)).one()
            row.status = status
            s.add(row)
            s.commit()
    return _set
