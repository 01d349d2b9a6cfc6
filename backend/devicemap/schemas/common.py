from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2026-01-01T12:00:00.000Z."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.astimezone(timezone.utc)
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DeviceType(str, Enum):
    router = "router"
    sensor = "sensor"
    camera = "camera"


class DeviceStatus(str, Enum):
    online = "online"
    warning = "warning"
    offline = "offline"


DEVICE_TYPES = [t.value for t in DeviceType]
DEVICE_STATUSES = [s.value for s in DeviceStatus]


class CamelModel(BaseModel):
    """Snake-case attributes in Python, camelCase keys on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserCreate(BaseModel):
    username: str
    password: str

class User(UserCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)


class CityCreate(CamelModel):
    name: str; state: str; latitude: str; longitude: str
    device_count: int = 0

class City(CityCreate):
    id: int

class CityWithStatus(CamelModel):
    id: int; name: str; state: str; latitude: str; longitude: str
    device_count: int
    online_count: int
    warning_count: int
    offline_count: int


class DeviceCreate(CamelModel):
    name: str
    device_id: str
    # plain strings: the store keeps whatever it is given, validation lives at the API boundary
    type: str
    status: str
    city_id: int
    last_updated: Optional[datetime] = None
    metadata: str

class Device(CamelModel):
    id: int; name: str; device_id: str; type: str; status: str; city_id: int
    last_updated: datetime
    metadata: str

    @field_serializer("last_updated", when_used="json")
    def _last_updated(self, ts: datetime) -> str:
        return format_timestamp(ts)

class DeviceWithCity(CamelModel):
    id: int; name: str; device_id: str; type: str; status: str; city_id: int
    city_name: str
    last_updated: str
    metadata: str
