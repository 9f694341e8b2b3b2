"""
System health metrics for the machine running the console.

Host metrics come from psutil. psutil calls block (CPU sampling sleeps for a
short interval), so they run in the default executor.
"""

import asyncio
import logging
import os
import platform
import socket
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import psutil

from snmp_platform.backend.client import BackendClient

logger = logging.getLogger(__name__)

GB = 1024 ** 3

# Backend round trips slower than this mark the backend as degraded
SLOW_BACKEND_MS = 1000.0


def _gb(value: float) -> float:
    return round(value / GB, 2)


def collect_host_metrics(cpu_interval: float = 0.1) -> Dict[str, Any]:
    """Collect CPU, memory, disk and network counters. Blocking."""
    frequency = psutil.cpu_freq()
    memory = psutil.virtual_memory()
    disk = psutil.disk_usage(os.path.abspath(os.sep))
    net = psutil.net_io_counters()

    return {
        "cpu": {
            "usage": round(psutil.cpu_percent(interval=cpu_interval), 2),
            "cores": psutil.cpu_count(logical=True) or 0,
            "model": platform.processor() or "Unknown",
            "speed": round(frequency.current) if frequency else 0,
        },
        "memory": {
            "total": _gb(memory.total),
            "used": _gb(memory.total - memory.available),
            "free": _gb(memory.available),
            "percentage": round(memory.percent),
        },
        "disk": {
            "total": _gb(disk.total),
            "used": _gb(disk.used),
            "free": _gb(disk.free),
            "percentage": round(disk.percent),
        },
        "network": {
            "throughput": round((net.bytes_sent + net.bytes_recv) / (1024 ** 2), 2),
            "packets_lost": net.dropin + net.dropout,
        },
        "uptime": int((time.time() - psutil.boot_time()) * 1000),
        "load_average": [round(v, 2) for v in psutil.getloadavg()],
    }


class SystemHealthCollector:
    """
    Builds the system health report shown on the dashboard.

    Usage:
        collector = SystemHealthCollector(backend, log_dir="logs")
        report = await collector.collect()
    """

    def __init__(self, backend: Optional[BackendClient], log_dir: str = "logs"):
        self.backend = backend
        self.log_dir = Path(log_dir)

    async def collect(self) -> Dict[str, Any]:
        started = time.monotonic()
        loop = asyncio.get_running_loop()

        metrics = await loop.run_in_executor(None, collect_host_metrics)
        backend_state, latency = await self.check_backend()

        metrics["network"]["latency"] = latency
        metrics["services"] = {
            "backend": backend_state,
            "api": "healthy",
            "logs": self.check_logs(),
        }
        metrics.update(
            {
                "platform": platform.system().lower(),
                "arch": platform.machine(),
                "hostname": socket.gethostname(),
                "last_update": datetime.utcnow().isoformat(),
                "collection_time": round((time.monotonic() - started) * 1000),
            }
        )
        return metrics

    async def check_backend(self) -> Tuple[str, Optional[float]]:
        """Backend state and measured round trip in milliseconds."""
        if self.backend is None:
            return "down", None

        started = time.monotonic()
        healthy = await self.backend.health_check()
        latency = round((time.monotonic() - started) * 1000, 2)

        if not healthy:
            return "down", None
        if latency > SLOW_BACKEND_MS:
            logger.warning(f"Backend health check took {latency}ms")
            return "degraded", latency
        return "healthy", latency

    def check_logs(self) -> str:
        """Log storage is healthy when the log directory is writable."""
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Log directory {self.log_dir} unavailable: {e}")
            return "down"
        if not os.access(self.log_dir, os.W_OK):
            return "degraded"
        return "healthy"
