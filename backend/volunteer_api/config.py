"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent


class Settings:
    ENV: str
    DATABASE_URL: str
    PROJECT_UPLOAD_DIR: Path
    MAX_UPLOAD_BYTES: int
    ALLOW_DEV_CORS: bool
    ALLOW_SQLITE: bool
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'app.db'}")
        self.PROJECT_UPLOAD_DIR = Path(os.getenv("PROJECT_UPLOAD_DIR", str(BASE / "uploads" / "projects")))
        self.MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))  # 5 MB default
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.ALLOW_SQLITE = os.getenv("ALLOW_SQLITE", "false").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _validate(self):
        if self.MAX_UPLOAD_BYTES <= 0:
            raise RuntimeError("MAX_UPLOAD_BYTES must be a positive integer")
        if self.ENV != "dev" and not self.ALLOW_SQLITE and self.DATABASE_URL.startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must point at a server database in non-dev environments")


settings = Settings()
