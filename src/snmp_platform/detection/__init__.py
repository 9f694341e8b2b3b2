"""
SNMP server brand detection.

Matches sysDescr / sysObjectID strings against vendor rules and recommends a
monitoring template for the detected management interface.
"""

from .brand import (
    BrandDetector,
    ServerBrandInfo,
    SnmpSystemInfo,
    best_match,
    detect_server_brand,
    generate_server_monitoring_advice,
    get_recommended_server_config,
)

__all__ = [
    "BrandDetector",
    "ServerBrandInfo",
    "SnmpSystemInfo",
    "best_match",
    "detect_server_brand",
    "generate_server_monitoring_advice",
    "get_recommended_server_config",
]
