from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .errors import ConflictRequiresConfirmation, CurationError, RemoteError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Map core errors onto HTTP responses in one place."""

    @app.exception_handler(CurationError)
    async def curation_error_handler(request: Request, exc: CurationError) -> JSONResponse:
        if isinstance(exc, RemoteError):
            logger.warning("Gateway error on %s: %s", request.url.path, exc)
        elif not isinstance(exc, ConflictRequiresConfirmation):
            logger.info("Rejected %s: %s", request.url.path, exc.message)
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())
