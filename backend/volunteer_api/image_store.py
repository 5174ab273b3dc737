"""Storage for project illustration images.

Images live outside the relational model, one per project id. The
`ImageStore` protocol keeps the service independent of where bytes are
kept; `FileSystemImageStore` is the default, writing into
`settings.PROJECT_UPLOAD_DIR`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol

_LOGGER = logging.getLogger("volunteer_api.images")

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/gif")


def is_valid_image_type(content_type: Optional[str]) -> bool:
    """Return True if `content_type` is on the image allow-list."""
    if not content_type:
        return False
    return content_type.split(";")[0].strip().lower() in ALLOWED_IMAGE_TYPES


class ImageStore(Protocol):
    def put(self, project_id: int, data: bytes, content_type: str) -> None: ...

    def get(self, project_id: int) -> Optional[bytes]: ...

    def delete(self, project_id: int) -> None: ...


class FileSystemImageStore:
    """Keep each project's image at `<root>/<project_id>.jpg`.

    Re-uploading overwrites the previous file.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, project_id: int) -> Path:
        return self.root / f"{int(project_id)}.jpg"

    def put(self, project_id: int, data: bytes, content_type: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(project_id)
        with path.open("wb") as fh:
            fh.write(data)
        _LOGGER.info("stored image project_id=%s bytes=%d content_type=%s", project_id, len(data), content_type)

    def get(self, project_id: int) -> Optional[bytes]:
        path = self.path_for(project_id)
        if not path.is_file():
            return None
        with path.open("rb") as fh:
            return fh.read()

    def delete(self, project_id: int) -> None:
        path = self.path_for(project_id)
        if path.exists():
            path.unlink()
            _LOGGER.info("removed image project_id=%s", project_id)
