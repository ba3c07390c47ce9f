"""Document repository and file storage interfaces."""

from typing import Protocol, runtime_checkable

from ..entities.document import Document


@runtime_checkable
class DocumentRepository(Protocol):
    """Protocol for document metadata storage."""

    async def save_document(self, document: Document) -> Document:
        """Store a document record."""
        ...

    async def list_documents(self, owner_type: str, owner_id: str) -> list[Document]:
        """List documents attached to a session or a group, newest first."""
        ...

    async def get_document(self, document_id: str) -> Document:
        """Retrieve a document by ID.

        Raises:
            ValueError: If the document is not found.
        """
        ...

    async def delete_document(self, document_id: str) -> None:
        """Delete a document record.

        Raises:
            ValueError: If the document is not found.
        """
        ...


@runtime_checkable
class DocumentStorage(Protocol):
    """Protocol for the blob store behind file documents."""

    def upload(self, path: str, data: bytes, mime_type: str) -> str:
        """Store file bytes and return the storage path."""
        ...

    def signed_download_url(self, path: str, expires_in: int) -> str:
        """Return a time-limited download URL for a stored file."""
        ...

    def delete(self, path: str) -> None:
        """Remove a stored file."""
        ...
