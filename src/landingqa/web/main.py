"""
FastAPI application exposing the comparison engine over HTTP.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, Optional
from uuid import uuid4

import structlog
import uvicorn
from fastapi import FastAPI, File, Form, Request, Response, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST

from landingqa import __version__
from landingqa.config import Config, settings
from landingqa.exceptions import FetchError, InputError, ParseError
from landingqa.observability import export_prometheus
from landingqa.pipeline import ComparisonPipeline
from landingqa.validation import validate_document_name, validate_url

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def saved_upload(upload: UploadFile, upload_dir: Path, suffix: str) -> AsyncGenerator[Path, None]:
    """Write an upload to a temporary file that is removed on every exit path."""
    upload_dir.mkdir(parents=True, exist_ok=True)
    with NamedTemporaryFile(dir=upload_dir, suffix=suffix, delete=False) as handle:
        path = Path(handle.name)
    try:
        path.write_bytes(await upload.read())
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug("Removed temporary upload", path=str(path))


def _error_response(status_code: int, error: str, details: Any = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "details": details})


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Build the application. Without ``config`` the global settings are used."""
    app_config: Config = config if config is not None else settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        app.state.start_time = time.time()
        logger.info("Starting LandingQA API", version=__version__)
        yield
        logger.info("Shutting down LandingQA API")

    app = FastAPI(title="LandingQA", version=__version__, lifespan=lifespan)
    app.state.config = app_config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.web.allowed_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )

    @app.middleware("http")
    async def bind_request_id(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(InputError)
    async def handle_input_error(request: Request, exc: InputError) -> JSONResponse:
        logger.info("Rejected request", path=request.url.path, error=str(exc))
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", str(exc))

    @app.exception_handler(ParseError)
    async def handle_parse_error(request: Request, exc: ParseError) -> JSONResponse:
        return _error_response(422, "Could not parse reference document", str(exc))

    @app.exception_handler(FetchError)
    async def handle_fetch_error(request: Request, exc: FetchError) -> JSONResponse:
        details = exc.to_dict()
        details["message"] = str(exc)
        return _error_response(status.HTTP_502_BAD_GATEWAY, "Could not fetch landing page", details)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error", path=request.url.path, error=str(exc), exc_info=exc)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", str(exc))

    @app.post("/qa")
    async def run_qa(
        file: Optional[UploadFile] = File(None),
        emailUrl: Optional[str] = Form(None),
    ) -> Dict[str, Any]:
        """Compare the uploaded reference document against the landing page at ``emailUrl``."""
        if file is None:
            raise InputError("A reference document is required")
        url = validate_url(emailUrl)
        filename = validate_document_name(
            file.filename,
            app_config.web.allowed_extensions,
            size=file.size,
            max_size_mb=app_config.web.max_upload_mb,
        )

        pipeline = ComparisonPipeline(app_config)
        async with saved_upload(file, app_config.web.upload_dir, Path(filename).suffix) as path:
            report = await pipeline.run(path, url, source_name=filename)
        return report.to_dict()

    @app.get("/health")
    async def health_check() -> Dict[str, Any]:
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "version": __version__,
            "components": {
                "grammar": "enabled" if app_config.grammar.enabled else "disabled",
                "responsive": "enabled" if app_config.responsive.enabled else "disabled",
            },
        }

    @app.get("/metrics")
    async def get_prometheus_metrics() -> Response:
        """Endpoint for Prometheus to scrape."""
        return Response(export_prometheus(), media_type=CONTENT_TYPE_LATEST)

    return app


def run_web_server(config: Optional[Config] = None, host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Serve the API with uvicorn until interrupted."""
    app_config: Config = config if config is not None else settings
    uvicorn.run(
        create_app(app_config),
        host=host or app_config.web.host,
        port=port or app_config.web.port,
        log_level=app_config.monitoring.log_level.lower(),
    )
