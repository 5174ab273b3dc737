"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Projects belong to an organization; users are linked to projects through
two relation tables, `UserProject` (applications) and `Bookmark`.
"""

from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from datetime import datetime, timezone

APPLICATION_APPLIED = "A"
APPLICATION_ACCEPTED = "C"
APPLICATION_DECLINED = "D"

PROJECT_ACTIVE = "A"
PROJECT_CLOSED = "C"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Organization(SQLModel, table=True):
    """An organization that owns projects."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, nullable=False, unique=True)
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class User(SQLModel, table=True):
    """A registered volunteer.

    Users are owned by the identity service; this backend only reads them
    (the demo seeder is the one exception).
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, nullable=False, unique=True)
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class Project(SQLModel, table=True):
    """A volunteer opportunity published by an `Organization`.

    `status` is a single-letter code: `A` (active) or `C` (closed). The
    project image is not stored here; see `image_store`.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: Optional[str] = None
    organization_id: int = Field(foreign_key='organization.id', index=True)
    status: str = PROJECT_ACTIVE
    location: Optional[str] = None
    remote: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class UserProject(SQLModel, table=True):
    """A user's application to a project.

    `status` is `A` (applied) when created and may later move to `C`
    (accepted) or `D` (declined).
    """
    __table_args__ = (UniqueConstraint('user_id', 'project_id'),)
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key='user.id', index=True)
    project_id: int = Field(foreign_key='project.id', index=True)
    status: str = APPLICATION_APPLIED
    created_at: datetime = Field(default_factory=_utcnow)


class Bookmark(SQLModel, table=True):
    """A project saved for later by a user; at most one per pair."""
    __table_args__ = (UniqueConstraint('user_id', 'project_id'),)
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key='user.id', index=True)
    project_id: int = Field(foreign_key='project.id', index=True)
    created_at: datetime = Field(default_factory=_utcnow)
