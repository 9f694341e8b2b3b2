"""
Log file store.

Client log entries are appended as JSON lines to one file per server date,
``{log_dir}/app-YYYY-MM-DD.log``.
"""

import json
import logging
import re
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from snmp_platform.core.errors import ValidationError
from snmp_platform.core.logger import LogLevel

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("level", "message", "timestamp")
PARTITION_PATTERN = re.compile(r"^app-(\d{4}-\d{2}-\d{2})\.log$")


def normalize_timestamp(value: Union[str, int, float]) -> str:
    """
    Convert an ISO-8601 string or epoch milliseconds to an ISO-8601 UTC string.

    Raises:
        ValidationError: If the value is not a timestamp
    """
    try:
        if isinstance(value, bool):
            raise ValueError(value)
        if isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        else:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
    except (ValueError, OverflowError, OSError) as e:
        raise ValidationError(f"Invalid timestamp: {value}", field="timestamp") from e
    return parsed.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _level_value(level: Any) -> Optional[int]:
    """Numeric level of a stored entry; names like "ERROR" are accepted too."""
    if isinstance(level, bool):
        return None
    if isinstance(level, (int, float)):
        return int(level)
    if isinstance(level, str):
        if level.strip().lstrip("-").isdigit():
            return int(level)
        try:
            return int(LogLevel[level.strip().upper()])
        except KeyError:
            return None
    return None


def parse_partition_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD", field="date") from e


class LogFileStore:
    """
    Append-only JSON-lines log files, one per day.

    Usage:
        store = LogFileStore("logs")
        store.append({"level": 3, "message": "boom", "timestamp": "2025-01-01T00:00:00Z"})
        store.read(level=2, limit=50)
    """

    def __init__(self, log_dir: Union[str, Path] = "logs"):
        self.log_dir = Path(log_dir)

    def partition_path(self, day: date) -> Path:
        return self.log_dir / f"app-{day.isoformat()}.log"

    def append(self, entry: Dict[str, Any], today: Optional[date] = None) -> Dict[str, Any]:
        """
        Validate and store one entry.

        Raises:
            ValidationError: If level, message or timestamp is missing
        """
        if not isinstance(entry, dict) or any(
            entry.get(field) in (None, "") for field in REQUIRED_FIELDS
        ):
            raise ValidationError("Invalid log entry format")

        now = datetime.utcnow()
        record = dict(entry)
        record["timestamp"] = normalize_timestamp(entry["timestamp"])
        record["server_timestamp"] = now.isoformat() + "Z"

        self.log_dir.mkdir(parents=True, exist_ok=True)
        path = self.partition_path(today or now.date())
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")

        return record

    def read(
        self,
        day: Optional[str] = None,
        level: Optional[int] = None,
        limit: int = 100,
    ) -> Dict[str, Any]:
        """
        Read entries for a date (default: today).

        Unparseable lines are skipped. With ``level`` only entries at or above
        it are kept. The last ``limit`` entries are returned.

        Raises:
            ValidationError: If ``day`` is not a YYYY-MM-DD date
        """
        target = parse_partition_date(day) if day else datetime.utcnow().date()
        path = self.partition_path(target)

        if not path.exists():
            return {
                "logs": [],
                "total": 0,
                "date": target.isoformat(),
                "message": "No logs found for this date",
            }

        logs: List[Dict[str, Any]] = []
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError:
                    logger.debug(f"Skipping unparseable line in {path.name}")
                    continue
                if not isinstance(record, dict):
                    continue
                if level is not None:
                    value = _level_value(record.get("level"))
                    if value is None or value < level:
                        continue
                logs.append(record)

        logs = logs[-limit:] if limit > 0 else []
        return {"logs": logs, "total": len(logs), "date": target.isoformat()}

    def list_partitions(self) -> List[date]:
        if not self.log_dir.is_dir():
            return []
        days = []
        for path in self.log_dir.iterdir():
            match = PARTITION_PATTERN.match(path.name)
            if match:
                try:
                    days.append(parse_partition_date(match.group(1)))
                except ValidationError:
                    continue
        return sorted(days)

    def prune(self, retention_days: int, today: Optional[date] = None) -> List[str]:
        """Delete partitions older than ``retention_days``. Returns the removed file names."""
        cutoff = (today or datetime.utcnow().date()) - timedelta(days=retention_days)
        removed = []
        for day in self.list_partitions():
            if day < cutoff:
                path = self.partition_path(day)
                path.unlink()
                removed.append(path.name)
        if removed:
            logger.info(f"Pruned {len(removed)} log partition(s) older than {cutoff}")
        return removed
