"""FastAPI application factory for the sync document server."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from nutrition_sync.api.sync_models import SyncPayload
from nutrition_sync.app_logging import configure_logging
from nutrition_sync.containers import ServerContainer


def create_app(container: ServerContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(RequestValidationError)
    async def invalid_request(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/sync")
    async def read_document(request: Request) -> dict[str, object]:
        """Return the whole synced document."""
        state_container: ServerContainer = request.app.state.container
        try:
            document = state_container.document_service.load()
        except Exception as exc:
            logger.exception("Failed to read sync document")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
            ) from exc
        if document is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No data")
        return document

    @app.post("/sync")
    async def replace_document(
        payload: SyncPayload, request: Request
    ) -> dict[str, bool]:
        """Replace the whole synced document."""
        if payload.history is None or payload.targets is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Both history and targets are required",
            )
        state_container: ServerContainer = request.app.state.container
        try:
            state_container.document_service.replace(payload.history, payload.targets)
        except Exception as exc:
            logger.exception("Failed to write sync document")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
            ) from exc
        logger.info("Stored sync document with %d days", len(payload.history))
        return {"success": True}

    return app
