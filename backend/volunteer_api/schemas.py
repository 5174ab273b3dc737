"""Pydantic request schemas used by the API.

Schemas keep API input shapes stable and reject invalid project payloads
before they reach controller handlers (FastAPI answers 422).
"""

from pydantic import BaseModel, Field
from typing import Optional


class ProjectIn(BaseModel):
    """Payload for creating a project."""
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=5000)
    organization_id: int
    status: str = Field(default="A", pattern="^[AC]$")
    location: Optional[str] = Field(default=None, max_length=200)
    remote: bool = False


class ProjectUpdate(ProjectIn):
    """Full replacement of a project; `id`, when sent, must match the path."""
    id: Optional[int] = None
