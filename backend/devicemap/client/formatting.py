from datetime import datetime, timezone
from typing import List, Optional, Union

from pydantic import BaseModel

from ..schemas.common import DeviceWithCity

STATUS_COLORS = {"online": "#34A853", "warning": "#FBBC04", "offline": "#EA4335"}
NEUTRAL_COLOR = "#5F6368"
STATUS_TEXT = {"online": "En línea", "warning": "Advertencia", "offline": "Fuera de línea"}
DEVICE_ICONS = {"router": "wifi", "sensor": "thermostat", "camera": "videocam"}
PREVIEW_SIZE = 3


def _parse(ts: Union[str, datetime]) -> datetime:
    if isinstance(ts, str):
        ts = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def format_time_difference(ts: Union[str, datetime], now: Optional[datetime] = None) -> str:
    """Short relative age: "justo ahora" under a minute, then 5m, 3h, 2d."""
    now = _parse(now) if now is not None else datetime.now(timezone.utc)
    minutes = int((now - _parse(ts)).total_seconds() // 60)
    if minutes < 1:
        return "justo ahora"
    if minutes < 60:
        return f"{minutes}m"
    if minutes < 1440:
        return f"{minutes // 60}h"
    return f"{minutes // 1440}d"


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, NEUTRAL_COLOR)


def status_text(status: str) -> str:
    return STATUS_TEXT.get(status, "Desconocido")


def device_icon(device_type: str, status: Optional[str] = None) -> str:
    if status == "offline":
        return "power_off"
    return DEVICE_ICONS.get(device_type, "devices")


class InfoCardSummary(BaseModel):
    """What the info card shows for one city, computed from already-filtered devices."""
    city_name: str
    total: int
    online: int
    warning: int
    offline: int
    preview: List[DeviceWithCity] = []
    has_more: bool = False

    @classmethod
    def build(cls, city_name: str, devices: List[DeviceWithCity], show_all: bool = False) -> "InfoCardSummary":
        return cls(
            city_name=city_name,
            total=len(devices),
            online=sum(1 for d in devices if d.status == "online"),
            warning=sum(1 for d in devices if d.status == "warning"),
            offline=sum(1 for d in devices if d.status == "offline"),
            preview=list(devices) if show_all else list(devices[:PREVIEW_SIZE]),
            has_more=len(devices) > PREVIEW_SIZE,
        )
