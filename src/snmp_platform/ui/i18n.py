"""
Translations for the dashboard pages.
"""

from typing import Dict, Optional

DEFAULT_LANGUAGE = "en"

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": {
        "app.title": "SNMP MIB Platform",
        "nav.dashboard": "Dashboard",
        "nav.devices": "Devices",
        "nav.mibs": "MIB Files",
        "nav.system_health": "System Health",
        "dashboard.title": "Dashboard",
        "dashboard.hosts": "Hosts",
        "dashboard.online_hosts": "Online hosts",
        "dashboard.monitored_hosts": "Monitored hosts",
        "dashboard.backend": "Backend",
        "devices.title": "Devices",
        "devices.name": "Name",
        "devices.ip": "IP Address",
        "devices.type": "Type",
        "devices.vendor": "Vendor",
        "devices.status": "Status",
        "devices.last_seen": "Last Seen",
        "devices.actions": "Actions",
        "devices.edit": "Edit",
        "devices.empty": "No devices found",
        "mibs.title": "MIB Files",
        "mibs.upload": "Upload MIB archive",
        "mibs.name": "Name",
        "mibs.filename": "File",
        "mibs.empty": "No MIB files uploaded",
        "health.title": "System Health",
        "health.cpu": "CPU",
        "health.memory": "Memory",
        "health.disk": "Disk",
        "health.uptime": "Uptime",
        "health.services": "Services",
        "status.healthy": "Healthy",
        "status.degraded": "Degraded",
        "status.down": "Down",
        "common.backend_unavailable": "Backend unavailable",
        "common.loading": "Loading...",
    },
    "zh": {
        "app.title": "SNMP MIB 平台",
        "nav.dashboard": "仪表板",
        "nav.devices": "设备",
        "nav.mibs": "MIB 文件",
        "nav.system_health": "系统健康",
        "dashboard.title": "仪表板",
        "dashboard.hosts": "主机",
        "dashboard.online_hosts": "在线主机",
        "dashboard.monitored_hosts": "已监控主机",
        "dashboard.backend": "后端",
        "devices.title": "设备",
        "devices.name": "名称",
        "devices.ip": "IP 地址",
        "devices.type": "类型",
        "devices.vendor": "厂商",
        "devices.status": "状态",
        "devices.last_seen": "最后在线",
        "devices.actions": "操作",
        "devices.edit": "编辑",
        "devices.empty": "未找到设备",
        "mibs.title": "MIB 文件",
        "mibs.upload": "上传 MIB 压缩包",
        "mibs.name": "名称",
        "mibs.filename": "文件",
        "mibs.empty": "尚未上传 MIB 文件",
        "health.title": "系统健康",
        "health.cpu": "CPU",
        "health.memory": "内存",
        "health.disk": "磁盘",
        "health.uptime": "运行时间",
        "health.services": "服务",
        "status.healthy": "正常",
        "status.degraded": "降级",
        "status.down": "不可用",
        "common.backend_unavailable": "后端不可用",
    },
}

SUPPORTED_LANGUAGES = tuple(TRANSLATIONS)


def resolve_language(lang: Optional[str]) -> str:
    if lang and lang.lower() in TRANSLATIONS:
        return lang.lower()
    return DEFAULT_LANGUAGE


def translate(key: str, lang: Optional[str] = None) -> str:
    """Look up ``key`` in ``lang``, then in English, then return the key itself."""
    language = resolve_language(lang)
    text = TRANSLATIONS[language].get(key)
    if text is None:
        text = TRANSLATIONS[DEFAULT_LANGUAGE].get(key, key)
    return text
