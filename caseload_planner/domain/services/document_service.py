"""Validation and storage of session and group documents."""

import logging
import uuid
from datetime import date
from typing import Literal, Optional
from urllib.parse import urlparse

from ..entities.document import Document, DocumentType, DocumentValidationError, FileUpload
from ..entities.schedule_session import ScheduleSession
from ..interfaces.document_repository import DocumentRepository, DocumentStorage
from .session_persistence import SessionPersistenceCoordinator

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

ALLOWED_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "image/png",
    "image/jpeg",
}


def validate_link(url: Optional[str]) -> str:
    """Return the URL if it is an absolute http(s) URL."""
    if not url or not url.strip():
        raise DocumentValidationError("url is required for links")
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https"):
        if parsed.scheme and parsed.netloc:
            raise DocumentValidationError("Only http(s) URLs are allowed")
        raise DocumentValidationError("Invalid URL")
    if not parsed.netloc:
        raise DocumentValidationError("Invalid URL")
    return url.strip()


def validate_file(upload: FileUpload, max_size: int = MAX_FILE_SIZE) -> FileUpload:
    if upload.mime_type not in ALLOWED_MIME_TYPES:
        raise DocumentValidationError("Invalid file type. Please select a PDF, DOC, DOCX, PNG or JPEG file.")
    if upload.size > max_size:
        raise DocumentValidationError(f"File size exceeds {max_size // (1024 * 1024)}MB limit")
    if upload.size == 0:
        raise DocumentValidationError("File is empty")
    return upload


class DocumentService:
    """Attach, list and remove documents on sessions and groups.

    Everything is validated before storage is touched; session attachments
    persist placeholder sessions first.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        storage: DocumentStorage,
        persistence: SessionPersistenceCoordinator,
        max_file_size: int = MAX_FILE_SIZE,
        signed_url_expiry: int = 3600,
    ):
        self.repository = repository
        self.storage = storage
        self.persistence = persistence
        self.max_file_size = max_file_size
        self.signed_url_expiry = signed_url_expiry

    async def attach_to_session(
        self,
        session: ScheduleSession,
        title: str,
        document_type: DocumentType,
        created_by: str,
        content: Optional[str] = None,
        url: Optional[str] = None,
        upload: Optional[FileUpload] = None,
        session_date: Optional[date] = None,
    ) -> Document:
        # Validate before persisting so a rejected document leaves no trace.
        self._validate(title, document_type, content, url, upload)
        persisted = await self.persistence.ensure_persisted(session)
        return await self._attach(
            "session", persisted.id, title, document_type, created_by, content, url, upload,
            session_date or persisted.session_date,
        )

    async def attach_to_group(
        self,
        group_id: str,
        title: str,
        document_type: DocumentType,
        created_by: str,
        content: Optional[str] = None,
        url: Optional[str] = None,
        upload: Optional[FileUpload] = None,
        session_date: Optional[date] = None,
    ) -> Document:
        self._validate(title, document_type, content, url, upload)
        return await self._attach("group", group_id, title, document_type, created_by, content, url, upload, session_date)

    async def list_documents(self, owner_type: Literal["session", "group"], owner_id: str) -> list[Document]:
        return await self.repository.list_documents(owner_type, owner_id)

    async def get_document(self, document_id: str) -> Document:
        return await self.repository.get_document(document_id)

    async def delete_document(self, document_id: str) -> bool:
        """Delete a document and its stored file; a missing document is nothing to do."""
        try:
            document = await self.repository.get_document(document_id)
        except ValueError as e:
            logger.info(f"Nothing to delete: {e}")
            return False

        if document.file_path:
            self.storage.delete(document.file_path)
        await self.repository.delete_document(document_id)
        return True

    async def download_url(self, document_id: str) -> str:
        document = await self.repository.get_document(document_id)
        if document.document_type == DocumentType.LINK and document.url:
            return document.url
        if not document.file_path:
            raise ValueError(f"Document with id {document_id} has no stored file")
        return self.storage.signed_download_url(document.file_path, self.signed_url_expiry)

    def _validate(
        self,
        title: str,
        document_type: DocumentType,
        content: Optional[str],
        url: Optional[str],
        upload: Optional[FileUpload],
    ) -> None:
        if not title or not title.strip():
            raise DocumentValidationError("Title is required")
        if document_type == DocumentType.NOTE and not (content and content.strip()):
            raise DocumentValidationError("content is required for notes")
        if document_type == DocumentType.LINK:
            validate_link(url)
        if document_type in (DocumentType.FILE, DocumentType.PDF):
            if upload is None:
                raise DocumentValidationError("A file is required")
            validate_file(upload, self.max_file_size)

    async def _attach(
        self,
        owner_type: Literal["session", "group"],
        owner_id: str,
        title: str,
        document_type: DocumentType,
        created_by: str,
        content: Optional[str],
        url: Optional[str],
        upload: Optional[FileUpload],
        session_date: Optional[date],
    ) -> Document:
        document = Document(
            owner_type=owner_type,
            owner_id=owner_id,
            title=title.strip(),
            document_type=document_type,
            content=content if document_type == DocumentType.NOTE else None,
            url=url.strip() if document_type == DocumentType.LINK and url else None,
            session_date=session_date,
            created_by=created_by,
        )

        if upload is not None and document_type in (DocumentType.FILE, DocumentType.PDF):
            path = f"{owner_type}s/{owner_id}/{uuid.uuid4()}-{upload.filename}"
            document.file_path = self.storage.upload(path, upload.data, upload.mime_type)
            document.mime_type = upload.mime_type
            document.file_size = upload.size
            document.original_filename = upload.filename

        saved = await self.repository.save_document(document)
        logger.info(f"Attached {document_type.value} document {saved.id} to {owner_type} {owner_id}")
        return saved
