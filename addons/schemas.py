"""
Pydantic models shared by the add-on demo scripts.

These describe connection settings and the records the scripts print, so the
formatting rules (sizes, dates, status icons) live next to the data.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class DbType(str, Enum):
    """Relational databases the SQL scripts can talk to."""
    MYSQL = "MySQL"
    POSTGRESQL = "PostgreSQL"


class S3Settings(BaseModel):
    """Resolved connection settings for an S3-compatible bucket."""

    endpoint: str = Field(..., description="S3 host, with or without scheme")
    access_key_id: str = Field(..., description="Access key ID")
    secret_access_key: str = Field(..., repr=False, description="Secret access key")
    bucket: str = Field(..., description="Bucket name")

    @property
    def endpoint_url(self) -> str:
        if "://" in self.endpoint:
            return self.endpoint
        return f"https://{self.endpoint}"


class BucketObject(BaseModel):
    """One object from a bucket listing."""

    key: str
    size: int = 0
    last_modified: Optional[datetime] = None

    @property
    def size_label(self) -> str:
        if self.size < 1024:
            return f"{self.size}B"
        return f"{self.size / 1024:.1f}KB"

    @property
    def date_label(self) -> str:
        if self.last_modified is None:
            return "Unknown"
        return self.last_modified.date().isoformat()


class DemoFile(BaseModel):
    """A file uploaded by the S3 demo run."""

    key: str
    content: str
    content_type: str = "text/plain"


class Todo(BaseModel):
    """A row of the todos table."""

    id: int
    task: str
    completed: bool = False
    created_at: Optional[datetime] = None

    @property
    def status_icon(self) -> str:
        return "✅" if self.completed else "⏳"

    @property
    def date_label(self) -> str:
        if self.created_at is None:
            return "Unknown"
        return self.created_at.date().isoformat()


class TodoStats(BaseModel):
    """Counts shown by `sql-todo stats`."""

    total: int = 0
    completed: int = 0
    pending: int = 0
