"""Supabase-backed repository for the synced document."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from nutrition_sync.services.documents import SyncDocumentRepository

TABLE_NAME = "app_data"


@dataclass
class SupabaseDocumentRepository(SyncDocumentRepository):
    """Supabase implementation storing one row per document id.

    Expected schema::

        create table app_data (
          id text primary key,
          history jsonb not null,
          targets jsonb not null,
          updated_at timestamptz default now()
        );
    """

    client: Client

    def get_document(self, document_id: str) -> dict[str, object] | None:
        """Return the document row, if present."""
        response = (
            self.client.table(TABLE_NAME)
            .select("history, targets")
            .eq("id", document_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return {"history": row["history"], "targets": row["targets"]}

    def upsert_document(
        self,
        document_id: str,
        history: dict[str, object],
        targets: dict[str, object],
    ) -> None:
        """Insert the row or replace both columns of the existing one."""
        response = (
            self.client.table(TABLE_NAME)
            .upsert(
                {
                    "id": document_id,
                    "history": history,
                    "targets": targets,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to upsert sync document in Supabase")
