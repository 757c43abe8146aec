"""HTTP client for the single-document sync endpoint."""

import logging
from dataclasses import dataclass

import httpx

from nutrition_sync.domain.logs import AppState, History, Targets
from nutrition_sync.services.sync import RemoteStore

logger = logging.getLogger(__name__)


@dataclass
class HttpxRemoteStoreClient(RemoteStore):
    """HTTPX-backed client for ``GET``/``POST`` on ``/sync``."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 10.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 10.0) -> "HttpxRemoteStoreClient":
        """Create a remote store client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    @property
    def sync_url(self) -> str:
        return f"{self.base_url}/sync"

    async def fetch_remote(self) -> AppState | None:
        """Fetch the whole document; any failure reads as "no remote data"."""
        try:
            response = await self.http_client.get(self.sync_url, timeout=self.timeout)
        except httpx.HTTPError:
            logger.warning("Remote fetch failed", exc_info=True)
            return None
        if not response.is_success:
            logger.info("Remote fetch returned status %s", response.status_code)
            return None
        try:
            return AppState.from_document(response.json())
        except ValueError:
            logger.warning("Remote document is malformed; ignoring it")
            return None

    async def push_remote(self, history: History, targets: Targets) -> bool:
        """Replace the whole document; returns whether the server acknowledged."""
        payload = AppState(history=history, targets=targets).to_document()
        try:
            response = await self.http_client.post(
                self.sync_url, json=payload, timeout=self.timeout
            )
        except httpx.HTTPError:
            logger.warning("Remote push failed", exc_info=True)
            return False
        if not response.is_success:
            logger.warning("Remote push returned status %s", response.status_code)
            return False
        return True

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
