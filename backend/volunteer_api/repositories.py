"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (organizations,
users, projects, applications, bookmarks). Repositories return SQLModel
objects and perform commits/refreshes where appropriate.
"""

from typing import List, Optional
from sqlmodel import Session, select, col, or_
from . import models


class OrganizationRepository:
    """CRUD operations for `Organization` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, organization: models.Organization) -> models.Organization:
        self.session.add(organization)
        self.session.commit()
        self.session.refresh(organization)
        return organization

    def get(self, organization_id: int) -> Optional[models.Organization]:
        return self.session.get(models.Organization, organization_id)

    def get_by_name(self, name: str) -> Optional[models.Organization]:
        stmt = select(models.Organization).where(models.Organization.name == name)
        return self.session.exec(stmt).first()


class UserRepository:
    """Read access to `User` objects (plus `create` for seeding)."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_by_username(self, username: str) -> Optional[models.User]:
        """Return a `User` by username or `None` if not found."""
        stmt = select(models.User).where(models.User.username == username)
        return self.session.exec(stmt).first()

    def get(self, user_id: int) -> Optional[models.User]:
        """Get a `User` by primary key."""
        return self.session.get(models.User, user_id)


class ProjectRepository:
    """CRUD and lookup queries for `Project` records."""
    def __init__(self, session: Session):
        self.session = session

    def save(self, project: models.Project) -> models.Project:
        """Insert or update `project` and return the refreshed instance."""
        self.session.add(project)
        self.session.commit()
        self.session.refresh(project)
        return project

    def get(self, project_id: int) -> Optional[models.Project]:
        return self.session.get(models.Project, project_id)

    def list_all(self) -> List[models.Project]:
        stmt = select(models.Project).order_by(models.Project.id)
        return self.session.exec(stmt).all()

    def list_by_organization(self, organization_id: int) -> List[models.Project]:
        stmt = select(models.Project).where(models.Project.organization_id == organization_id).order_by(models.Project.id)
        return self.session.exec(stmt).all()

    def search(self, name: str, keyword: Optional[str] = None) -> List[models.Project]:
        """Return projects whose name contains `name` or whose description
        contains `keyword` (both case-insensitive)."""
        clauses = [col(models.Project.name).ilike(f"%{name}%")]
        if keyword:
            clauses.append(col(models.Project.description).ilike(f"%{keyword}%"))
        stmt = select(models.Project).where(or_(*clauses)).order_by(models.Project.id)
        return self.session.exec(stmt).all()

    def delete(self, project: models.Project) -> None:
        self.session.delete(project)
        self.session.commit()


class UserProjectRepository:
    """Queries over the user/project application relation."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, relation: models.UserProject) -> models.UserProject:
        self.session.add(relation)
        self.session.commit()
        self.session.refresh(relation)
        return relation

    def find_by_user_and_project(self, user_id: int, project_id: int) -> List[models.UserProject]:
        stmt = select(models.UserProject).where(
            models.UserProject.user_id == user_id,
            models.UserProject.project_id == project_id
        )
        return self.session.exec(stmt).all()

    def list_users_for_project(self, project_id: int) -> List[models.User]:
        """Return every user holding an application to `project_id`."""
        stmt = (
            select(models.User)
            .join(models.UserProject, models.UserProject.user_id == models.User.id)
            .where(models.UserProject.project_id == project_id)
            .order_by(models.User.id)
        )
        return self.session.exec(stmt).all()

    def list_projects_for_user(self, user_id: int, status: Optional[str] = None) -> List[models.Project]:
        """Return projects `user_id` applied to, optionally filtered by application status."""
        stmt = (
            select(models.Project)
            .join(models.UserProject, models.UserProject.project_id == models.Project.id)
            .where(models.UserProject.user_id == user_id)
        )
        if status is not None:
            stmt = stmt.where(models.UserProject.status == status)
        return self.session.exec(stmt.order_by(models.Project.id)).all()

    def delete_for_project(self, project_id: int) -> None:
        rows = self.session.exec(select(models.UserProject).where(models.UserProject.project_id == project_id)).all()
        for row in rows:
            self.session.delete(row)


class BookmarkRepository:
    """Persist and query the user/project bookmark relation."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, bookmark: models.Bookmark) -> models.Bookmark:
        self.session.add(bookmark)
        self.session.commit()
        self.session.refresh(bookmark)
        return bookmark

    def find_by_user_and_project(self, user_id: int, project_id: int) -> List[models.Bookmark]:
        """Return the bookmark rows for the pair (zero or one expected)."""
        stmt = select(models.Bookmark).where(
            models.Bookmark.user_id == user_id,
            models.Bookmark.project_id == project_id
        )
        return self.session.exec(stmt).all()

    def delete_for_project(self, project_id: int) -> None:
        rows = self.session.exec(select(models.Bookmark).where(models.Bookmark.project_id == project_id)).all()
        for row in rows:
            self.session.delete(row)
