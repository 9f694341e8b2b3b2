"""
SNMP helper endpoints.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter

from snmp_platform.core.errors import ValidationError, api_response
from snmp_platform.detection.brand import (
    SnmpSystemInfo,
    best_match,
    detect_server_brand,
    generate_server_monitoring_advice,
    get_recommended_server_config,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/snmp", tags=["snmp"])


@router.post("/detect-brand")
async def detect_brand(info: SnmpSystemInfo) -> Dict[str, Any]:
    """
    Detect the server brand from SNMP system values.

    Returns every matching brand, the best match, setup advice and the
    recommended template details.
    """
    if info.is_empty():
        raise ValidationError("At least one of sysDescr, sysObjectID, vendorOID or managementIP is required")

    results = detect_server_brand(info)
    primary = best_match(info)
    logger.info(f"Detected brand {primary.brand} ({primary.confidence}%)")

    return api_response.success(
        {
            "results": [r.to_api() for r in results],
            "primary": primary.to_api(),
            "advice": generate_server_monitoring_advice(results),
            "config": get_recommended_server_config(primary),
        }
    )
