"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the volunteer projects backend.
Controllers are intentionally thin: they accept requests, delegate to
services, and map results or domain errors to HTTP responses.

Endpoints implemented (all under /api/projects):
- GET    /
- GET    /{id}
- GET    /organizations/{id}
- GET    /search
- GET    /users/{id}
- POST   /
- PUT    /{id}
- DELETE /{id}
- POST   /{id}/users/{userId}
- GET    /applicant/{id}
- GET    /applied/users/{id}
- POST   /{id}/image
- GET    /{id}/image
- POST   /bookmark/projects/{projectId}/users/{userId}
"""

from fastapi import FastAPI, APIRouter, Depends, UploadFile, File, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
from typing import Optional
import base64
import io
import json
import logging
import time
import uuid
from PIL import Image
from .database import create_db_and_tables, get_session
from . import services, models
from .errors import NotFoundError, UserProjectError
from .image_store import FileSystemImageStore, ImageStore, is_valid_image_type
from .schemas import ProjectIn, ProjectUpdate
from .config import settings

app = FastAPI(title="Volunteer Projects API")
logger = logging.getLogger("volunteer_api.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)
_image_store: ImageStore = FileSystemImageStore(settings.PROJECT_UPLOAD_DIR)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


def _request_log_line(request: Request, req_id: str, started: float, status_code: Optional[int] = None) -> str:
    """Build the JSON line logged once per /api request."""
    entry = {
        "request_id": req_id,
        "method": request.method,
        "path": request.url.path,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
        "client": request.client.host if request.client else "unknown",
    }
    if status_code is not None:
        entry["status_code"] = status_code
    return json.dumps(entry, ensure_ascii=True)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    logged = request.url.path.startswith("/api")
    try:
        response = await call_next(request)
    except Exception:
        if logged:
            logger.exception("request_failed %s", _request_log_line(request, req_id, started))
        raise
    response.headers["X-Request-ID"] = req_id
    if logged:
        logger.info("request_done %s", _request_log_line(request, req_id, started, response.status_code))
    return response


def get_image_store() -> ImageStore:
    """Return the active image store (swapped out in tests)."""
    return _image_store


def _project_summary(p: models.Project) -> dict:
    return {
        'id': p.id,
        'name': p.name,
        'description': p.description,
        'organization_id': p.organization_id,
        'status': p.status,
    }


def _project_record(p: models.Project) -> dict:
    out = _project_summary(p)
    out.update({
        'location': p.location,
        'remote': p.remote,
        'created_at': p.created_at.isoformat() if p.created_at else None,
        'updated_at': p.updated_at.isoformat() if p.updated_at else None,
    })
    return out


def _user_summary(u: models.User) -> dict:
    return {
        'id': u.id,
        'username': u.username,
        'email': u.email,
        'first_name': u.first_name,
        'last_name': u.last_name,
    }


def _check_image_upload(payload: bytes, content_type: Optional[str]) -> Optional[str]:
    """Return a reason string if the upload must be rejected, else None."""
    if not is_valid_image_type(content_type):
        return f"Invalid image File! Content Type :-{content_type}"
    if len(payload) > settings.MAX_UPLOAD_BYTES:
        return f"Invalid image File! Size exceeds {settings.MAX_UPLOAD_BYTES} bytes"
    try:
        Image.open(io.BytesIO(payload)).verify()
    except Exception:
        return f"Invalid image File! Content is not a readable image ({content_type})"
    return None


router = APIRouter(prefix="/api/projects", tags=["project"])


@router.get('', summary="Find all projects")
def get_projects(db: Session = Depends(get_session)):
    """Return a collection of project summaries."""
    return [_project_summary(p) for p in services.ProjectService(db).find_projects()]


@router.get('/search', summary="Find project by name or keyword")
def search_projects(name: str, keyword: Optional[str] = None, db: Session = Depends(get_session)):
    """Match `name` against project names and `keyword` against descriptions."""
    return [_project_summary(p) for p in services.ProjectService(db).find_by_keyword(name, keyword)]


@router.get('/organizations/{id}', summary="Find projects by organization ID")
def get_projects_by_organization(id: int, db: Session = Depends(get_session)):
    logger.debug("projects for organization id=%s", id)
    return [_project_record(p) for p in services.ProjectService(db).get_projects_by_organization(id)]


@router.get('/users/{id}', summary="Find projects by user", responses={404: {"description": "ID of user invalid"}})
def get_projects_by_user(id: int, db: Session = Depends(get_session)):
    """Return projects the user has applied to, whatever the application status."""
    try:
        projects = services.ProjectService(db).find_by_user(id)
    except Exception as e:
        logger.info("projects by user id=%s failed: %s", id, e)
        raise HTTPException(status_code=404, detail="ID of user invalid")
    return [_project_summary(p) for p in projects]


@router.get('/applicant/{id}', summary="Find applicants of a given project", responses={404: {"description": "Applicants not found"}})
def get_applicants(id: int, db: Session = Depends(get_session)):
    applicants = services.UserService(db).get_applicants(id)
    if not applicants:
        raise HTTPException(status_code=404, detail="Applicants not found")
    return [_user_summary(u) for u in applicants]


@router.get('/applied/users/{id}', summary="Find projects, with status applied, related to a given user")
def get_applied_projects(id: int, db: Session = Depends(get_session)):
    return [_project_summary(p) for p in services.ProjectService(db).get_applied_projects(id)]


@router.get('/{id}', summary="Find project by ID", responses={404: {"description": "Project not found"}})
def get_project(id: int, db: Session = Depends(get_session)):
    logger.debug("get project id=%s", id)
    try:
        project = services.ProjectService(db).find_by_id(id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return _project_record(project)


@router.post('', summary="Add a new project")
def create_project(payload: ProjectIn, db: Session = Depends(get_session)):
    """Create a project and return it under the `project` key."""
    try:
        created = services.ProjectService(db).create_project(payload.model_dump())
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return {'project': _project_record(created)}


@router.put('/{id}', summary="Update an existing project")
def update_project(id: int, payload: ProjectUpdate, db: Session = Depends(get_session)):
    """Replace the project identified by `id` and return it under the `project` key."""
    if payload.id is not None and payload.id != id:
        raise HTTPException(status_code=400, detail="Project id in body does not match path")
    data = payload.model_dump(exclude={'id'})
    try:
        updated = services.ProjectService(db).update_project(id, data)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return {'project': _project_record(updated)}


@router.delete('/{id}', status_code=204, summary="Deletes a project")
def delete_project(id: int, db: Session = Depends(get_session), store: ImageStore = Depends(get_image_store)):
    """Delete a project; deleting an unknown id is a no-op."""
    services.ProjectService(db, store).delete_project(id)
    return Response(status_code=204)


@router.post('/{id}/users/{userId}', status_code=201, summary="Create a relation between user and project",
             responses={404: {"description": "ID of project or user invalid"}})
def create_user_project(id: int, userId: int, request: Request, db: Session = Depends(get_session)):
    try:
        services.ProjectService(db).save_user_project(userId, id)
    except (NotFoundError, UserProjectError) as e:
        logger.info("application user id=%s project id=%s rejected: %s", userId, id, e)
        raise HTTPException(status_code=404, detail="ID of project or user invalid")
    return Response(status_code=201, headers={"Location": str(request.url)})


@router.post('/{id}/image', summary="Add new image file for project", response_class=PlainTextResponse)
def upload_image(id: int, file: UploadFile = File(...), db: Session = Depends(get_session),
                 store: ImageStore = Depends(get_image_store)):
    """Store the project's image; content problems are reported as plain text."""
    content_type = file.content_type
    payload = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    reason = _check_image_upload(payload, content_type)
    if reason:
        return reason
    try:
        services.ProjectService(db, store).save_image(id, payload, content_type)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except OSError as e:
        logger.exception("saving image for project id=%s failed", id)
        return f"Error saving image for Project {id} : {e}"
    return "Success"


@router.get('/{id}/image', summary="Retrieves project image", response_class=PlainTextResponse,
            responses={404: {"description": "Image not found"}})
def retrieve_image(id: int, db: Session = Depends(get_session), store: ImageStore = Depends(get_image_store)):
    """Return the stored image as base64 text."""
    try:
        data = services.ProjectService(db, store).get_image(id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except OSError:
        logger.exception("reading image for project id=%s failed", id)
        raise HTTPException(status_code=404, detail="Image not found")
    return base64.b64encode(data).decode("ascii")


@router.post('/bookmark/projects/{projectId}/users/{userId}', status_code=201,
             summary="Create a bookmark for a project",
             responses={404: {"description": "Invalid project or user"}, 400: {"description": "Bookmark already exists"}})
def create_user_project_bookmark(projectId: int, userId: int, request: Request, db: Session = Depends(get_session)):
    try:
        services.ProjectService(db).save_user_project_bookmark(userId, projectId)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except UserProjectError as e:
        raise HTTPException(status_code=400, detail=e.error_message)
    return Response(status_code=201, headers={"Location": str(request.url)})


app.include_router(router)


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
