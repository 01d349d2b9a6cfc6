from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from ..schemas.common import City, CityWithStatus, Device, DeviceWithCity, format_timestamp

UNKNOWN_CITY = "Unknown City"


class StatusCounts(BaseModel):
    model_config = ConfigDict(frozen=True)

    online: int = 0
    warning: int = 0
    offline: int = 0
    total: int = 0


def count_statuses(devices: Iterable[Device], city_id: int) -> StatusCounts:
    """Count a city's devices per status with a full scan. No match yields zero counts."""
    online = warning = offline = total = 0
    for d in devices:
        if d.city_id != city_id:
            continue
        total += 1
        if d.status == "online":
            online += 1
        elif d.status == "warning":
            warning += 1
        elif d.status == "offline":
            offline += 1
    return StatusCounts(online=online, warning=warning, offline=offline, total=total)


def city_with_status(city: City, counts: StatusCounts) -> CityWithStatus:
    return CityWithStatus(
        id=city.id,
        name=city.name,
        state=city.state,
        latitude=city.latitude,
        longitude=city.longitude,
        device_count=counts.total,
        online_count=counts.online,
        warning_count=counts.warning,
        offline_count=counts.offline,
    )


def device_with_city(device: Device, city: Optional[City]) -> DeviceWithCity:
    return DeviceWithCity(
        id=device.id,
        name=device.name,
        device_id=device.device_id,
        type=device.type,
        status=device.status,
        city_id=device.city_id,
        city_name=city.name if city is not None else UNKNOWN_CITY,
        last_updated=format_timestamp(device.last_updated),
        metadata=device.metadata,
    )
