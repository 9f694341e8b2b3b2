"""
Main HTTP server for the SNMP MIB Platform console.

Serves the dashboard pages and all /api route handlers.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from snmp_platform import __version__
from snmp_platform.core.config import get_config
from snmp_platform.core.errors import (
    AppError,
    ValidationError,
    api_response,
    describe_validation_errors,
    log_error,
)
from snmp_platform.core.logger import get_app_logger, setup_logging
from snmp_platform.inventory.demo import seed_demo_hosts

from . import deployment_api, hosts_api, logs_api, mibs_api, pages, snmp_api, system_api
from .deps import close_backend_client, get_host_manager
from .proxy_api import routers as proxy_routers

setup_logging(get_config().logging.level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()
    if config.seed_demo_hosts:
        seed_demo_hosts(get_host_manager())
    logger.info(f"Console started ({config.environment}), backend at {config.backend.url}")
    yield
    await close_backend_client()


# Create FastAPI app
app = FastAPI(
    title="SNMP MIB Platform API",
    description="Console API for device inventory, MIB management and monitoring deployment",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().server.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def record_api_calls(request: Request, call_next):
    """Record every /api call in the application log buffer."""
    started = time.perf_counter()
    response = await call_next(request)
    if request.url.path.startswith("/api/"):
        duration_ms = (time.perf_counter() - started) * 1000
        # Remote delivery of error entries is blocking
        await asyncio.get_running_loop().run_in_executor(
            None,
            get_app_logger().log_api_call,
            request.method,
            request.url.path,
            duration_ms,
            response.status_code,
        )
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log_error(exc, path=request.url.path)
    return JSONResponse(api_response.error(exc), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(f"Invalid request: {describe_validation_errors(exc.errors())}")
    log_error(error, path=request.url.path)
    return JSONResponse(api_response.error(error), status_code=400)


@app.exception_handler(PydanticValidationError)
async def model_validation_handler(request: Request, exc: PydanticValidationError) -> JSONResponse:
    error = ValidationError(f"Invalid {exc.title}: {describe_validation_errors(exc.errors())}")
    log_error(error, path=request.url.path)
    return JSONResponse(api_response.error(error), status_code=400)


# Include routers
for proxy_router in proxy_routers:
    app.include_router(proxy_router)
app.include_router(hosts_api.router)
app.include_router(snmp_api.router)
app.include_router(deployment_api.router)
app.include_router(mibs_api.router)
app.include_router(system_api.router)
app.include_router(logs_api.router)
app.include_router(pages.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


def main():
    """Main entry point for HTTP server."""
    config = get_config()
    host = config.server.host
    port = config.server.port

    logger.info("=" * 60)
    logger.info("SNMP MIB Platform - Console Server")
    logger.info("=" * 60)
    logger.info(f"Host: {host}")
    logger.info(f"Port: {port}")
    logger.info(f"Backend: {config.backend.url}")
    logger.info("=" * 60)
    logger.info(f"API Documentation: http://{host}:{port}/docs")
    logger.info("=" * 60)

    uvicorn.run(
        "snmp_platform.ui.http_server:app",
        host=host,
        port=port,
        reload=config.server.reload,
    )


if __name__ == "__main__":
    main()
