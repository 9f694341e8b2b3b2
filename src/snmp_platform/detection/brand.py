"""
Server brand detection from SNMP system information.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Pattern

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class SnmpSystemInfo(BaseModel):
    """SNMP identity values read from a device."""

    sys_descr: Optional[str] = None
    sys_object_id: Optional[str] = Field(None, alias="sysObjectID")
    vendor_oid: Optional[str] = Field(None, alias="vendorOID")
    management_ip: Optional[str] = Field(None, alias="managementIP")

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def is_empty(self) -> bool:
        return not any(
            (self.sys_descr, self.sys_object_id, self.vendor_oid, self.management_ip)
        )


class DetectionRule(BaseModel):
    """Patterns identifying one server brand."""

    brand: str
    sys_descr: List[str] = Field(default_factory=list, description="Case-insensitive regexes")
    sys_object_id: List[str] = Field(default_factory=list, description="OID prefixes")
    vendor_oid: List[str] = Field(default_factory=list, description="Enterprise OID prefixes")
    management_ip: List[str] = Field(default_factory=list, description="Regexes")
    management_interface: str
    template_id: str
    max_confidence: int = Field(..., ge=0, le=100)


class ServerBrandInfo(BaseModel):
    """Outcome of matching one rule."""

    brand: str
    model: Optional[str] = None
    management_interface: str
    recommended_template: str
    confidence: int
    detection_method: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


UNIVERSAL_TEMPLATE = "server-universal-snmp"

SERVER_DETECTION_RULES: List[DetectionRule] = [
    DetectionRule(
        brand="Dell",
        sys_descr=[r"Dell.*PowerEdge", r"Dell.*iDRAC", r"PowerEdge.*Dell"],
        sys_object_id=["1.3.6.1.4.1.674.10892.5", "1.3.6.1.4.1.674.10892.2"],
        vendor_oid=["1.3.6.1.4.1.674"],
        management_interface="iDRAC",
        template_id="server-dell-idrac",
        max_confidence=95,
    ),
    DetectionRule(
        brand="HP/HPE",
        sys_descr=[r"HP.*ProLiant", r"HPE.*ProLiant", r"Hewlett.*Packard.*ProLiant", r"iLO"],
        sys_object_id=["1.3.6.1.4.1.232.9.4.10", "1.3.6.1.4.1.232.9.4.11"],
        vendor_oid=["1.3.6.1.4.1.232"],
        management_interface="iLO",
        template_id="server-hp-ilo",
        max_confidence=95,
    ),
    DetectionRule(
        brand="Lenovo",
        sys_descr=[r"Lenovo.*ThinkSystem", r"Lenovo.*System.*x", r"ThinkServer", r"XCC", r"IMM2"],
        sys_object_id=["1.3.6.1.4.1.19046.11.1.1", "1.3.6.1.4.1.19046.11.1.2"],
        vendor_oid=["1.3.6.1.4.1.19046"],
        management_interface="XCC/IMM2",
        template_id="server-lenovo-xcc",
        max_confidence=95,
    ),
    DetectionRule(
        brand="Supermicro",
        sys_descr=[r"Supermicro", r"Super.*Micro", r"IPMI.*BMC"],
        sys_object_id=["1.3.6.1.4.1.10876.2.1", "1.3.6.1.4.1.10876.2.2"],
        vendor_oid=["1.3.6.1.4.1.10876"],
        management_interface="IPMI/BMC",
        template_id="server-supermicro-ipmi",
        max_confidence=90,
    ),
    DetectionRule(
        brand="Inspur",
        sys_descr=[r"Inspur", r"浪潮", r"EITC", r"NF\d+"],
        sys_object_id=["1.3.6.1.4.1.2011.2.235", "1.3.6.1.4.1.2011.2.236"],
        vendor_oid=["1.3.6.1.4.1.2011"],
        management_interface="BMC",
        template_id="server-inspur-bmc",
        max_confidence=90,
    ),
    DetectionRule(
        brand="IBM",
        sys_descr=[r"IBM.*System.*x", r"IBM.*BladeCenter", r"IBM.*xSeries", r"IMM"],
        sys_object_id=["1.3.6.1.4.1.2.3.51.3", "1.3.6.1.4.1.2.3.51.2"],
        vendor_oid=["1.3.6.1.4.1.2"],
        management_interface="IMM/BMC",
        # No IBM specific template exists
        template_id=UNIVERSAL_TEMPLATE,
        max_confidence=85,
    ),
    DetectionRule(
        brand="Generic",
        sys_descr=[r"Linux", r"Windows", r"Server", r"Computer"],
        management_interface="SNMP",
        template_id=UNIVERSAL_TEMPLATE,
        max_confidence=50,
    ),
]

# Points awarded per matching check
SYS_DESCR_SCORE = 30
SYS_OBJECT_ID_SCORE = 40
VENDOR_OID_SCORE = 25
MANAGEMENT_IP_SCORE = 15

SERVER_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "server-dell-idrac": {
        "description": "Dell PowerEdge server profile collecting detailed hardware data through iDRAC",
        "features": [
            "Full hardware health monitoring",
            "CPU, memory, temperature, fan and power supply status",
            "RAID array status",
            "Dell MIB support",
        ],
        "requirements": [
            "SNMP enabled on iDRAC",
            "Correct SNMP community",
            "Network connectivity to the management interface",
        ],
    },
    "server-hp-ilo": {
        "description": "HP ProLiant server profile collecting detailed hardware data through iLO",
        "features": [
            "HP Insight Manager compatible",
            "CPU, memory and temperature monitoring",
            "Fan and power supply status",
            "RAID array health",
        ],
        "requirements": [
            "SNMP enabled on iLO",
            "HP MIB files installed",
            "Correct SNMP community",
        ],
    },
    "server-lenovo-xcc": {
        "description": "Lenovo ThinkSystem server profile collecting hardware data through XCC/IMM2",
        "features": [
            "Lenovo XClarity compatible",
            "Temperature, fan and power monitoring",
            "System health status",
            "Voltage sensor monitoring",
        ],
        "requirements": [
            "SNMP enabled on XCC/IMM2",
            "Lenovo MIB support",
            "Management network reachable",
        ],
    },
    "server-supermicro-ipmi": {
        "description": "Supermicro server IPMI profile collecting basic hardware status",
        "features": [
            "IPMI sensor data",
            "Temperature and fan monitoring",
            "Power and voltage status",
            "Standard IPMI MIB support",
        ],
        "requirements": [
            "IPMI enabled",
            "SNMP agent configured",
            "BMC reachable on the network",
        ],
    },
    "server-inspur-bmc": {
        "description": "Inspur server BMC profile for domestic server hardware monitoring",
        "features": [
            "Inspur MIB support",
            "CPU and memory status",
            "Temperature, fan and power monitoring",
            "System health status",
        ],
        "requirements": [
            "SNMP enabled on the BMC",
            "Inspur MIB files",
            "Management network configured",
        ],
    },
    UNIVERSAL_TEMPLATE: {
        "description": "Universal server SNMP profile compatible with most server brands",
        "features": [
            "Standard HOST-RESOURCES-MIB",
            "Basic system information",
            "Multi-vendor compatibility",
            "Generic hardware status",
        ],
        "requirements": [
            "SNMP service enabled",
            "Standard MIB support",
            "Community string configured",
        ],
    },
}

CONFIGURATION_STEPS = [
    "1. Make sure the management interface (iDRAC/iLO/XCC/BMC) is enabled",
    "2. Configure the SNMP community string",
    "3. Verify management network connectivity",
    "4. Test the SNMP connection",
    "5. Deploy the recommended monitoring template",
    "6. Verify that monitoring data is collected",
]

TROUBLESHOOTING_TIPS = [
    "If the SNMP connection fails, check the firewall rules",
    "Check SNMP version compatibility (SNMPv2c is recommended)",
    "Verify the community string",
    "Check that the management interface IP address is reachable",
    "Confirm the MIB files are loaded",
    "If the vendor template does not work, try the universal template",
]


def _oid_has_prefix(oid: str, prefix: str) -> bool:
    """Prefix match on whole OID arcs, so 1.3.6.1.4.1.2 does not match .232."""
    oid = oid.strip().lstrip(".")
    return oid == prefix or oid.startswith(prefix + ".")


class BrandDetector:
    """
    Scores SNMP system information against an ordered rule table.

    Each of the four checks (sysDescr, sysObjectID, vendor OID, management IP)
    is evaluated only when both the input value and the rule's patterns are
    present, and counts at most once.
    """

    def __init__(self, rules: Optional[List[DetectionRule]] = None):
        self.rules = rules if rules is not None else SERVER_DETECTION_RULES
        self._compiled: Dict[str, Dict[str, List[Pattern]]] = {
            rule.brand: {
                "sys_descr": [re.compile(p, re.IGNORECASE) for p in rule.sys_descr],
                "management_ip": [re.compile(p, re.IGNORECASE) for p in rule.management_ip],
            }
            for rule in self.rules
        }

    def detect(self, info: SnmpSystemInfo) -> List[ServerBrandInfo]:
        """
        Match every rule and rank the hits.

        Returns:
            Results sorted by confidence, highest first; ties keep rule order
        """
        results: List[ServerBrandInfo] = []

        for rule in self.rules:
            compiled = self._compiled[rule.brand]
            score = 0
            matched = 0
            checks = 0

            if info.sys_descr and rule.sys_descr:
                checks += 1
                if any(p.search(info.sys_descr) for p in compiled["sys_descr"]):
                    matched += 1
                    score += SYS_DESCR_SCORE

            if info.sys_object_id and rule.sys_object_id:
                checks += 1
                if any(_oid_has_prefix(info.sys_object_id, oid) for oid in rule.sys_object_id):
                    matched += 1
                    score += SYS_OBJECT_ID_SCORE

            if info.vendor_oid and rule.vendor_oid:
                checks += 1
                if any(_oid_has_prefix(info.vendor_oid, oid) for oid in rule.vendor_oid):
                    matched += 1
                    score += VENDOR_OID_SCORE

            if info.management_ip and rule.management_ip:
                checks += 1
                if any(p.search(info.management_ip) for p in compiled["management_ip"]):
                    matched += 1
                    score += MANAGEMENT_IP_SCORE

            if matched > 0:
                results.append(
                    ServerBrandInfo(
                        brand=rule.brand,
                        management_interface=rule.management_interface,
                        recommended_template=rule.template_id,
                        confidence=min(score, rule.max_confidence),
                        detection_method=f"matched {matched}/{checks} detection rules",
                    )
                )

        # sorted() is stable, so equal scores stay in rule order
        results = sorted(results, key=lambda r: r.confidence, reverse=True)
        logger.debug(f"Brand detection: {[(r.brand, r.confidence) for r in results]}")
        return results

    def best_match(self, info: SnmpSystemInfo) -> ServerBrandInfo:
        """Highest ranked result, or the Generic default with confidence 0."""
        results = self.detect(info)
        if results:
            return results[0]
        return ServerBrandInfo(
            brand="Generic",
            management_interface="SNMP",
            recommended_template=UNIVERSAL_TEMPLATE,
            confidence=0,
            detection_method="no detection rules matched",
        )


_default_detector = BrandDetector()


def detect_server_brand(info: SnmpSystemInfo) -> List[ServerBrandInfo]:
    return _default_detector.detect(info)


def best_match(info: SnmpSystemInfo) -> ServerBrandInfo:
    return _default_detector.best_match(info)


def get_recommended_server_config(brand_info: ServerBrandInfo) -> Dict[str, Any]:
    """
    Monitoring template details for a detected brand.

    Unknown templates fall back to the universal SNMP template.
    """
    template_id = brand_info.recommended_template
    if template_id not in SERVER_TEMPLATES:
        template_id = UNIVERSAL_TEMPLATE
    return {"templateId": template_id, **SERVER_TEMPLATES[template_id]}


def generate_server_monitoring_advice(results: List[ServerBrandInfo]) -> Dict[str, Any]:
    """Primary recommendation, up to two alternatives, setup steps and tips."""
    primary = results[0] if results else None
    return {
        "primaryRecommendation": primary.to_api() if primary else None,
        "alternativeOptions": [r.to_api() for r in results[1:3]],
        "configurationSteps": list(CONFIGURATION_STEPS),
        "troubleshootingTips": list(TROUBLESHOOTING_TIPS),
    }
