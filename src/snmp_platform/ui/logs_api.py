"""
Client log collection endpoints.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from snmp_platform.core.errors import ValidationError
from snmp_platform.logs.store import LogFileStore

from .deps import get_log_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/logs", tags=["logs"])


@router.post("")
async def write_log(
    entry: Any = Body(None),
    store: LogFileStore = Depends(get_log_store),
):
    try:
        store.append(entry)
    except ValidationError as e:
        return JSONResponse({"error": e.message}, status_code=400)
    return {"success": True}


@router.get("")
async def read_logs(
    date: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to today"),
    level: Optional[int] = Query(None, ge=0, le=3, description="Minimum level"),
    limit: int = Query(100, ge=1, le=10000),
    store: LogFileStore = Depends(get_log_store),
) -> Dict[str, Any]:
    return {"success": True, "data": store.read(date, level, limit)}
