"""Server-side access to the single synced document."""

from dataclasses import dataclass
from typing import Protocol


class SyncDocumentRepository(Protocol):
    """Persistence interface for whole sync documents."""

    def get_document(self, document_id: str) -> dict[str, object] | None:
        """Return ``{history, targets}`` for a document id, if present."""

    def upsert_document(
        self,
        document_id: str,
        history: dict[str, object],
        targets: dict[str, object],
    ) -> None:
        """Insert or fully replace a document."""


@dataclass
class SyncDocumentService:
    """Reads and replaces the document under a fixed id."""

    repository: SyncDocumentRepository
    document_id: str

    def load(self) -> dict[str, object] | None:
        """Return the stored document."""
        return self.repository.get_document(self.document_id)

    def replace(
        self, history: dict[str, object], targets: dict[str, object]
    ) -> None:
        """Overwrite the stored document with a new one."""
        self.repository.upsert_document(self.document_id, history, targets)
