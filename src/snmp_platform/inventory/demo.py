"""
Demo inventory used to populate the host registry at startup.
"""

import logging
from typing import Any, Dict, List

from .manager import HostManager

logger = logging.getLogger(__name__)


DEMO_HOSTS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "name": "web-server-01",
        "ip": "192.168.1.10",
        "hostname": "web01.example.com",
        "os": "Ubuntu",
        "osVersion": "22.04",
        "status": "online",
        "cpuCores": 8,
        "memory": 16384,
        "disk": 500,
        "location": "Datacenter A",
        "group": "web-servers",
        "tags": ["production", "web"],
        "metadata": {"openPorts": [22, 80, 443, 9100]},
    },
    {
        "id": "2",
        "name": "db-server-01",
        "ip": "192.168.1.20",
        "hostname": "db01.example.com",
        "os": "Ubuntu",
        "osVersion": "20.04",
        "status": "online",
        "cpuCores": 16,
        "memory": 32768,
        "disk": 2000,
        "location": "Datacenter A",
        "group": "database-servers",
        "tags": ["production", "database"],
        "metadata": {"openPorts": [22, 3306, 9104]},
    },
    {
        "id": "3",
        "name": "monitor-server-01",
        "ip": "192.168.1.30",
        "hostname": "monitor01.example.com",
        "os": "Ubuntu",
        "osVersion": "22.04",
        "status": "online",
        "cpuCores": 12,
        "memory": 24576,
        "disk": 1000,
        "location": "Datacenter B",
        "group": "monitoring-servers",
        "tags": ["production", "monitoring"],
        "metadata": {"openPorts": [22, 3000, 9090, 8428]},
    },
    {
        "id": "4",
        "name": "app-server-01",
        "ip": "192.168.1.40",
        "hostname": "app01.example.com",
        "os": "CentOS",
        "osVersion": "8",
        "status": "online",
        "cpuCores": 4,
        "memory": 8192,
        "disk": 200,
        "location": "Datacenter B",
        "group": "app-servers",
        "tags": ["production", "application"],
        "metadata": {"openPorts": [22, 8080, 9100]},
    },
    {
        "id": "5",
        "name": "cache-server-01",
        "ip": "192.168.1.50",
        "hostname": "cache01.example.com",
        "os": "Ubuntu",
        "osVersion": "22.04",
        "status": "online",
        "cpuCores": 8,
        "memory": 16384,
        "disk": 100,
        "location": "Datacenter A",
        "group": "cache-servers",
        "tags": ["production", "cache"],
        "metadata": {"openPorts": [22, 6379, 9121]},
    },
]


def seed_demo_hosts(manager: HostManager) -> int:
    """Add the demo hosts that are not registered yet. Returns how many were added."""
    added = 0
    for host_data in DEMO_HOSTS:
        if manager.get_host(host_data["id"]) is None:
            manager.add_discovered_host(host_data)
            added += 1
    logger.info(f"Seeded {added} demo host(s)")
    return added
