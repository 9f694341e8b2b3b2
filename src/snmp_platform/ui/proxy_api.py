"""
CRUD proxy endpoints.

``/api/devices``, ``/api/mibs``, ``/api/alerts`` and ``/api/alert-rules`` are
forwarded to the matching backend resource. The query string of a GET and the
body of a POST are passed through untouched.
"""

import logging
from typing import Dict

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from snmp_platform.backend.client import BackendClient
from snmp_platform.core.errors import BackendError

from .deps import forwarded_headers, get_backend_client

logger = logging.getLogger(__name__)

PROXIED_RESOURCES = ("devices", "mibs", "alerts", "alert-rules")


def passthrough_response(response: httpx.Response) -> Response:
    """Return the upstream body and status as they are."""
    try:
        return JSONResponse(response.json(), status_code=response.status_code)
    except ValueError:
        return Response(
            content=response.content,
            status_code=response.status_code,
            media_type=response.headers.get("content-type"),
        )


def proxy_response(response: httpx.Response) -> Response:
    """Upstream body on success, ``{"error": "Backend API error"}`` otherwise."""
    if not response.is_success:
        logger.warning(f"Backend returned {response.status_code} for {response.request.url}")
        return JSONResponse({"error": "Backend API error"}, status_code=response.status_code)
    return passthrough_response(response)


def internal_error(error: BackendError) -> JSONResponse:
    logger.error(f"Proxy request failed: {error.message}")
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def _item_endpoint(resource: str, request: Request) -> str:
    item_id = request.query_params.get("id")
    return f"{resource}/{item_id}" if item_id else resource


def create_crud_router(resource: str) -> APIRouter:
    """Router forwarding GET/POST/PUT/DELETE on ``/api/{resource}``."""
    router = APIRouter(prefix=f"/api/{resource}", tags=["proxy"])

    @router.get("")
    async def list_items(
        request: Request,
        backend: BackendClient = Depends(get_backend_client),
        headers: Dict[str, str] = Depends(forwarded_headers),
    ) -> Response:
        try:
            response = await backend.get(resource, params=request.url.query, headers=headers)
        except BackendError as e:
            return internal_error(e)
        return proxy_response(response)

    @router.post("")
    async def create_item(
        request: Request,
        backend: BackendClient = Depends(get_backend_client),
        headers: Dict[str, str] = Depends(forwarded_headers),
    ) -> Response:
        body = await request.body()
        try:
            response = await backend.post(resource, content=body, headers=headers)
        except BackendError as e:
            return internal_error(e)
        return proxy_response(response)

    @router.put("")
    async def update_item(
        request: Request,
        backend: BackendClient = Depends(get_backend_client),
        headers: Dict[str, str] = Depends(forwarded_headers),
    ) -> Response:
        body = await request.body()
        try:
            response = await backend.put(
                _item_endpoint(resource, request), content=body, headers=headers
            )
        except BackendError as e:
            return internal_error(e)
        return proxy_response(response)

    @router.delete("")
    async def delete_item(
        request: Request,
        backend: BackendClient = Depends(get_backend_client),
        headers: Dict[str, str] = Depends(forwarded_headers),
    ) -> Response:
        try:
            response = await backend.delete(_item_endpoint(resource, request), headers=headers)
        except BackendError as e:
            return internal_error(e)
        return proxy_response(response)

    return router


routers = [create_crud_router(resource) for resource in PROXIED_RESOURCES]
