"""
FastAPI application factory.

Intended usage:
    uvicorn --factory userservice.adapters.http.app:create_app
or through the CLI:
    userservice serve
"""

import time
from typing import Optional
from uuid import uuid4

from fastapi import FastAPI, Request

from ... import __version__
from ...infrastructure.di.container import Container
from ...infrastructure.logging import logging_context
from .errors import register_error_handlers, unhandled_error_response
from .routes import health_router, router

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Args:
        container: Wired dependencies; built from configuration when omitted

    Returns:
        Configured FastAPI app
    """
    if container is None:
        container = Container.create()

    config = container.config
    app = FastAPI(
        title=config.app.name,
        version=__version__,
        openapi_url="/openapi.json" if config.http.docs_enabled else None,
        docs_url="/docs" if config.http.docs_enabled else None,
        redoc_url=None,
    )
    app.state.container = container

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        start_time = time.perf_counter()

        with logging_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        ):
            try:
                response = await call_next(request)
            except Exception as e:
                response = unhandled_error_response(container.logger, e)
            container.logger.info(
                "Request completed",
                extra={
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                }
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(router)

    return app
