"""Session and group document entities."""

import uuid
from datetime import date, datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class DocumentType(str, Enum):
    """Kinds of attachment."""

    PDF = "pdf"
    LINK = "link"
    NOTE = "note"
    FILE = "file"


class DocumentValidationError(ValueError):
    """Raised when an attachment is rejected before any storage call."""


class Document(BaseModel):
    """A file, link or note attached to a session or a group."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_type: Literal["session", "group"]
    owner_id: str
    title: str = Field(min_length=1)
    document_type: DocumentType
    content: Optional[str] = None
    url: Optional[str] = None
    file_path: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    original_filename: Optional[str] = None
    session_date: Optional[date] = None
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class FileUpload(BaseModel):
    """An uploaded file prior to validation."""

    filename: str
    mime_type: str
    size: int = Field(ge=0)
    data: bytes = b""
