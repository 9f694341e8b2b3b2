"""
MIB archive upload endpoint.
"""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from snmp_platform.backend.client import BackendClient
from snmp_platform.core.config import AppConfig
from snmp_platform.mibs.archive import MibArchiveProcessor

from .deps import forwarded_headers, get_backend_client, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mibs", tags=["mibs"])


@router.post("/upload-zip")
async def upload_mib_archive(
    zipFile: Optional[UploadFile] = File(None),
    backend: BackendClient = Depends(get_backend_client),
    settings: AppConfig = Depends(get_settings),
    headers: Dict[str, str] = Depends(forwarded_headers),
):
    """
    Upload a zip of MIB files.

    Every .mib, .txt and .my file in the archive is validated and stored.
    """
    if zipFile is None or not zipFile.filename:
        return JSONResponse({"error": "No zip file provided"}, status_code=400)

    data = await zipFile.read()
    processor = MibArchiveProcessor(backend, settings.mib_temp_dir)
    result = await processor.process(zipFile.filename, data, headers)
    return result.to_api()
