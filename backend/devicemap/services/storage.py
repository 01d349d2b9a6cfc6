"""Record store for users, cities and devices.

Two interchangeable backends share one contract: ``MemStorage`` keeps id-keyed
dicts for the lifetime of the process, ``DatabaseStorage`` keeps the same
records in SQLAlchemy tables. Lookups that miss return ``None``; nothing here
raises for an unknown id.

City and device views are recomputed on every read. Device inserts do not
check that the referenced city exists, such devices surface with the
"Unknown City" label. Status updates store whatever string they are given;
the HTTP layer is responsible for rejecting values outside the enum.
"""
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import sessionmaker

from ..core.config import settings
from ..core.security import hash_password
from ..models.city import City as CityRow
from ..models.device import Device as DeviceRow
from ..models.user import User as UserRow
from ..schemas.common import (
    City,
    CityCreate,
    CityWithStatus,
    Device,
    DeviceCreate,
    DeviceWithCity,
    User,
    UserCreate,
)
from .aggregation import StatusCounts, city_with_status, count_statuses, device_with_city

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Storage(ABC):
    @abstractmethod
    def create_user(self, draft: UserCreate) -> User: ...

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def create_city(self, draft: CityCreate) -> City: ...

    @abstractmethod
    def get_city(self, city_id: int) -> Optional[CityWithStatus]: ...

    @abstractmethod
    def list_cities(self) -> List[CityWithStatus]: ...

    @abstractmethod
    def create_device(self, draft: DeviceCreate) -> Device: ...

    @abstractmethod
    def list_devices(self) -> List[DeviceWithCity]: ...

    @abstractmethod
    def list_devices_for_city(self, city_id: int) -> Optional[List[DeviceWithCity]]:
        """``[]`` for a known city without devices, ``None`` for an unknown city."""

    @abstractmethod
    def get_device(self, device_id: int) -> Optional[DeviceWithCity]: ...

    @abstractmethod
    def update_device_status(self, device_id: int, status: str) -> Optional[Device]: ...


class MemStorage(Storage):
    def __init__(self):
        self._users: Dict[int, User] = {}
        self._cities: Dict[int, City] = {}
        self._devices: Dict[int, Device] = {}
        self._next_user_id = 1
        self._next_city_id = 1
        self._next_device_id = 1

    # users
    def create_user(self, draft: UserCreate) -> User:
        user = User(id=self._next_user_id, username=draft.username, password=hash_password(draft.password))
        self._next_user_id += 1
        self._users[user.id] = user
        return user.model_copy()

    def get_user(self, user_id: int) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        for user in self._users.values():
            if user.username == username:
                return user.model_copy()
        return None

    # cities
    def create_city(self, draft: CityCreate) -> City:
        city = City(id=self._next_city_id, **draft.model_dump())
        self._next_city_id += 1
        self._cities[city.id] = city
        return city.model_copy()

    def _city_view(self, city: City) -> CityWithStatus:
        return city_with_status(city, count_statuses(self._devices.values(), city.id))

    def get_city(self, city_id: int) -> Optional[CityWithStatus]:
        city = self._cities.get(city_id)
        if city is None:
            return None
        return self._city_view(city)

    def list_cities(self) -> List[CityWithStatus]:
        return [self._city_view(c) for c in self._cities.values()]

    # devices
    def create_device(self, draft: DeviceCreate) -> Device:
        data = draft.model_dump()
        data["last_updated"] = data["last_updated"] or _utcnow()
        device = Device(id=self._next_device_id, **data)
        self._next_device_id += 1
        self._devices[device.id] = device
        return device.model_copy()

    def list_devices(self) -> List[DeviceWithCity]:
        return [device_with_city(d, self._cities.get(d.city_id)) for d in self._devices.values()]

    def list_devices_for_city(self, city_id: int) -> Optional[List[DeviceWithCity]]:
        city = self._cities.get(city_id)
        if city is None:
            return None
        return [device_with_city(d, city) for d in self._devices.values() if d.city_id == city_id]

    def get_device(self, device_id: int) -> Optional[DeviceWithCity]:
        device = self._devices.get(device_id)
        if device is None:
            return None
        return device_with_city(device, self._cities.get(device.city_id))

    def update_device_status(self, device_id: int, status: str) -> Optional[Device]:
        device = self._devices.get(device_id)
        if device is None:
            return None
        updated = device.model_copy(update={"status": status, "last_updated": _utcnow()})
        self._devices[device_id] = updated
        logger.info("Device %s status %s -> %s", device_id, device.status, status)
        return updated.model_copy()


class DatabaseStorage(Storage):
    """Same contract over SQLAlchemy; counts come from one grouped query instead of a scan."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @staticmethod
    def _city(row) -> City:
        return City.model_validate(row)

    @staticmethod
    def _device(row) -> Device:
        ts = row.last_updated
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return Device(id=row.id, name=row.name, device_id=row.device_id, type=row.type, status=row.status,
                      city_id=row.city_id, last_updated=ts, metadata=row.metadata_)

    @staticmethod
    def _status_counts(db, city_id: Optional[int] = None) -> Dict[int, StatusCounts]:
        q = db.query(DeviceRow.city_id, DeviceRow.status, func.count(DeviceRow.id))
        if city_id is not None:
            q = q.filter(DeviceRow.city_id == city_id)
        per_city: Dict[int, Dict[str, int]] = defaultdict(dict)
        for cid, status, n in q.group_by(DeviceRow.city_id, DeviceRow.status).all():
            per_city[cid][status] = n
        return {
            cid: StatusCounts(
                online=by_status.get("online", 0),
                warning=by_status.get("warning", 0),
                offline=by_status.get("offline", 0),
                total=sum(by_status.values()),
            )
            for cid, by_status in per_city.items()
        }

    def create_user(self, draft: UserCreate) -> User:
        db = self.session_factory()
        try:
            row = UserRow(username=draft.username, password=hash_password(draft.password))
            db.add(row); db.commit(); db.refresh(row)
            return User.model_validate(row)
        finally:
            db.close()

    def get_user(self, user_id: int) -> Optional[User]:
        db = self.session_factory()
        try:
            row = db.get(UserRow, user_id)
            return User.model_validate(row) if row else None
        finally:
            db.close()

    def get_user_by_username(self, username: str) -> Optional[User]:
        db = self.session_factory()
        try:
            row = db.query(UserRow).filter(UserRow.username == username).first()
            return User.model_validate(row) if row else None
        finally:
            db.close()

    def create_city(self, draft: CityCreate) -> City:
        db = self.session_factory()
        try:
            row = CityRow(**draft.model_dump())
            db.add(row); db.commit(); db.refresh(row)
            return self._city(row)
        finally:
            db.close()

    def get_city(self, city_id: int) -> Optional[CityWithStatus]:
        db = self.session_factory()
        try:
            row = db.get(CityRow, city_id)
            if row is None:
                return None
            counts = self._status_counts(db, city_id).get(city_id, StatusCounts())
            return city_with_status(self._city(row), counts)
        finally:
            db.close()

    def list_cities(self) -> List[CityWithStatus]:
        db = self.session_factory()
        try:
            counts = self._status_counts(db)
            rows = db.query(CityRow).order_by(CityRow.id).all()
            return [city_with_status(self._city(r), counts.get(r.id, StatusCounts())) for r in rows]
        finally:
            db.close()

    def create_device(self, draft: DeviceCreate) -> Device:
        db = self.session_factory()
        try:
            row = DeviceRow(
                name=draft.name,
                device_id=draft.device_id,
                type=draft.type,
                status=draft.status,
                city_id=draft.city_id,
                last_updated=draft.last_updated or _utcnow(),
                metadata_=draft.metadata,
            )
            db.add(row); db.commit(); db.refresh(row)
            return self._device(row)
        finally:
            db.close()

    def _cities_by_id(self, db) -> Dict[int, City]:
        return {r.id: self._city(r) for r in db.query(CityRow).all()}

    def list_devices(self) -> List[DeviceWithCity]:
        db = self.session_factory()
        try:
            cities = self._cities_by_id(db)
            rows = db.query(DeviceRow).order_by(DeviceRow.id).all()
            return [device_with_city(self._device(r), cities.get(r.city_id)) for r in rows]
        finally:
            db.close()

    def list_devices_for_city(self, city_id: int) -> Optional[List[DeviceWithCity]]:
        db = self.session_factory()
        try:
            row = db.get(CityRow, city_id)
            if row is None:
                return None
            city = self._city(row)
            rows = db.query(DeviceRow).filter(DeviceRow.city_id == city_id).order_by(DeviceRow.id).all()
            return [device_with_city(self._device(r), city) for r in rows]
        finally:
            db.close()

    def get_device(self, device_id: int) -> Optional[DeviceWithCity]:
        db = self.session_factory()
        try:
            row = db.get(DeviceRow, device_id)
            if row is None:
                return None
            city_row = db.get(CityRow, row.city_id)
            return device_with_city(self._device(row), self._city(city_row) if city_row else None)
        finally:
            db.close()

    def update_device_status(self, device_id: int, status: str) -> Optional[Device]:
        db = self.session_factory()
        try:
            row = db.get(DeviceRow, device_id)
            if row is None:
                return None
            previous = row.status
            row.status = status
            row.last_updated = _utcnow()
            db.commit(); db.refresh(row)
            logger.info("Device %s status %s -> %s", device_id, previous, status)
            return self._device(row)
        finally:
            db.close()


_storage: Optional[Storage] = None


def build_storage(backend: str) -> Storage:
    backend = backend.lower()
    if backend == "memory":
        return MemStorage()
    if backend == "database":
        from ..db.session import SessionLocal, init_db
        init_db()
        return DatabaseStorage(SessionLocal)
    raise ValueError(f"Unknown STORAGE_BACKEND {backend!r}; expected 'memory' or 'database'")


def get_storage() -> Storage:
    """Process-wide store, created on first use from settings. Also the FastAPI dependency."""
    global _storage
    if _storage is None:
        _storage = build_storage(settings.STORAGE_BACKEND)
        logger.info("Using %s storage backend", settings.STORAGE_BACKEND)
    return _storage
