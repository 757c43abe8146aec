"""Pydantic models for sync endpoint payloads."""

from pydantic import BaseModel


class SyncPayload(BaseModel):
    """Whole-document upload; both parts are opaque JSON objects."""

    history: dict[str, object] | None = None
    targets: dict[str, object] | None = None
