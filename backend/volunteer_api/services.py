"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories and
the image store. Services are intentionally thin: they check that
referenced rows exist, enforce relation rules and persist aggregates via
repositories. Failures are raised as `errors.NotFoundError` or
`errors.UserProjectError`; controllers decide the HTTP status.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
from . import models, repositories
from .errors import NotFoundError, UserProjectError
from .image_store import ImageStore

logger = logging.getLogger("volunteer_api.services")


class ProjectService:
    """Project CRUD, lookups and the user/project relations."""
    def __init__(self, session: Session, image_store: Optional[ImageStore] = None):
        self.session = session
        self.image_store = image_store
        self.project_repo = repositories.ProjectRepository(session)
        self.org_repo = repositories.OrganizationRepository(session)
        self.user_repo = repositories.UserRepository(session)
        self.user_project_repo = repositories.UserProjectRepository(session)
        self.bookmark_repo = repositories.BookmarkRepository(session)

    def find_projects(self) -> List[models.Project]:
        return self.project_repo.list_all()

    def find_by_id(self, project_id: int) -> models.Project:
        """Return the project or raise `NotFoundError`."""
        project = self.project_repo.get(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    def get_projects_by_organization(self, organization_id: int) -> List[models.Project]:
        return self.project_repo.list_by_organization(organization_id)

    def find_by_keyword(self, name: str, keyword: Optional[str] = None) -> List[models.Project]:
        return self.project_repo.search(name, keyword)

    def find_by_user(self, user_id: int) -> List[models.Project]:
        """Projects the user holds an application to, in any status."""
        self._require_user(user_id)
        return self.user_project_repo.list_projects_for_user(user_id)

    def get_applied_projects(self, user_id: int) -> List[models.Project]:
        """Projects whose application by `user_id` is still in the applied state."""
        return self.user_project_repo.list_projects_for_user(user_id, status=models.APPLICATION_APPLIED)

    def create_project(self, data: dict) -> models.Project:
        """Create a project owned by an existing organization."""
        self._require_organization(data.get('organization_id'))
        project = models.Project(**data)
        created = self.project_repo.save(project)
        logger.info("created project id=%s organization_id=%s", created.id, created.organization_id)
        return created

    def update_project(self, project_id: int, data: dict) -> models.Project:
        """Replace every writable field of an existing project."""
        project = self.find_by_id(project_id)
        self._require_organization(data.get('organization_id'))
        for field, value in data.items():
            setattr(project, field, value)
        project.updated_at = datetime.now(timezone.utc)
        updated = self.project_repo.save(project)
        logger.info("updated project id=%s", updated.id)
        return updated

    def delete_project(self, project_id: int) -> bool:
        """Delete a project with its relations and image.

        Returns False when there was nothing to delete, so callers can treat
        repeated deletes as a no-op.
        """
        project = self.project_repo.get(project_id)
        if project is None:
            logger.info("delete skipped, project id=%s not found", project_id)
            return False
        self.user_project_repo.delete_for_project(project_id)
        self.bookmark_repo.delete_for_project(project_id)
        self.project_repo.delete(project)
        if self.image_store is not None:
            self.image_store.delete(project_id)
        logger.info("deleted project id=%s", project_id)
        return True

    def save_user_project(self, user_id: int, project_id: int) -> models.UserProject:
        """Record that `user_id` applied to `project_id`."""
        self._require_user(user_id)
        self._require_project(project_id)
        if self.user_project_repo.find_by_user_and_project(user_id, project_id):
            raise UserProjectError("The user already exists in that project")
        relation = models.UserProject(user_id=user_id, project_id=project_id, status=models.APPLICATION_APPLIED)
        try:
            created = self.user_project_repo.create(relation)
        except IntegrityError:
            self.session.rollback()
            raise UserProjectError("The user already exists in that project")
        logger.info("user id=%s applied to project id=%s", user_id, project_id)
        return created

    def save_user_project_bookmark(self, user_id: int, project_id: int) -> models.Bookmark:
        """Bookmark `project_id` for `user_id`; a pair can be bookmarked once."""
        self._require_user(user_id)
        self._require_project(project_id)
        if self.bookmark_repo.find_by_user_and_project(user_id, project_id):
            raise UserProjectError("The user already bookmarked this project")
        bookmark = models.Bookmark(user_id=user_id, project_id=project_id)
        try:
            created = self.bookmark_repo.create(bookmark)
        except IntegrityError:
            self.session.rollback()
            raise UserProjectError("The user already bookmarked this project")
        logger.info("user id=%s bookmarked project id=%s", user_id, project_id)
        return created

    def save_image(self, project_id: int, data: bytes, content_type: str) -> None:
        self.find_by_id(project_id)
        self.image_store.put(project_id, data, content_type)

    def get_image(self, project_id: int) -> bytes:
        data = self.image_store.get(project_id)
        if data is None:
            raise NotFoundError("Image not found")
        return data

    def _require_project(self, project_id: int) -> models.Project:
        project = self.project_repo.get(project_id)
        if project is None:
            raise NotFoundError("Invalid project id")
        return project

    def _require_user(self, user_id: int) -> models.User:
        user = self.user_repo.get(user_id)
        if user is None:
            raise NotFoundError("Invalid user id")
        return user

    def _require_organization(self, organization_id) -> models.Organization:
        organization = self.org_repo.get(organization_id) if organization_id is not None else None
        if organization is None:
            raise NotFoundError("Organization not found")
        return organization


class UserService:
    """Read-side queries about users in relation to projects."""
    def __init__(self, session: Session):
        self.session = session
        self.user_project_repo = repositories.UserProjectRepository(session)

    def get_applicants(self, project_id: int) -> List[models.User]:
        """Return users who applied to `project_id` (empty if none)."""
        return self.user_project_repo.list_users_for_project(project_id)
