"""Local in-memory document repository and file storage."""

from typing import Dict

from ..domain.entities.document import Document
from ..domain.interfaces.document_repository import DocumentRepository, DocumentStorage


class LocalDocumentRepository(DocumentRepository):
    """Document records kept in a dictionary."""

    def __init__(self):
        self._documents: Dict[str, Document] = {}

    async def save_document(self, document: Document) -> Document:
        self._documents[document.id] = document
        return document

    async def list_documents(self, owner_type: str, owner_id: str) -> list[Document]:
        documents = [
            d for d in self._documents.values()
            if d.owner_type == owner_type and d.owner_id == owner_id
        ]
        return sorted(documents, key=lambda d: d.created_at, reverse=True)

    async def get_document(self, document_id: str) -> Document:
        if document_id not in self._documents:
            raise ValueError(f"Document with id {document_id} not found")
        return self._documents[document_id]

    async def delete_document(self, document_id: str) -> None:
        if document_id not in self._documents:
            raise ValueError(f"Document with id {document_id} not found")
        del self._documents[document_id]


class LocalDocumentStorage(DocumentStorage):
    """File bytes kept in memory; download URLs point back at the API."""

    def __init__(self, base_url: str = "http://localhost:8000/files"):
        self.base_url = base_url.rstrip("/")
        self._files: Dict[str, bytes] = {}

    def upload(self, path: str, data: bytes, mime_type: str) -> str:
        self._files[path] = data
        return path

    def signed_download_url(self, path: str, expires_in: int) -> str:
        if path not in self._files:
            raise ValueError(f"File {path} not found")
        return f"{self.base_url}/{path}?expires_in={expires_in}"

    def delete(self, path: str) -> None:
        self._files.pop(path, None)

    def read(self, path: str) -> bytes:
        if path not in self._files:
            raise ValueError(f"File {path} not found")
        return self._files[path]
