"""Dashboard filter state: which cities, device types and statuses are visible.

Three independent membership maps back the filters. A device is visible only
when its city, its type and its status are all switched on; a city is visible
when its own membership is on. Filtered lists are recomputed on every call.

The city map starts empty, so nothing is shown until the first city list
arrives. ``populate_cities`` then switches every city on, exactly once.
"""
import logging
from typing import Dict, Iterable, List, Optional

from ..schemas.common import DEVICE_STATUSES, DEVICE_TYPES, CityWithStatus, DeviceWithCity

logger = logging.getLogger(__name__)

DEFAULT_DEVICE_TYPES = {t: True for t in DEVICE_TYPES}
DEFAULT_DEVICE_STATUS = {"online": True, "warning": True, "offline": False}


class FilterState:
    def __init__(self):
        self.cities: Dict[int, bool] = {}
        self.device_types: Dict[str, bool] = dict(DEFAULT_DEVICE_TYPES)
        self.device_status: Dict[str, bool] = dict(DEFAULT_DEVICE_STATUS)
        self._cities_populated = False

    def populate_cities(self, cities: Iterable[CityWithStatus]) -> bool:
        """Switch on every city the first time a list is available. Returns True if it did."""
        if self._cities_populated:
            return False
        self.cities = {c.id: True for c in cities}
        self._cities_populated = True
        return True

    @staticmethod
    def _toggle(memberships: Dict, key, checked: Optional[bool]) -> bool:
        value = (not memberships.get(key, False)) if checked is None else bool(checked)
        memberships[key] = value
        return value

    def toggle_city(self, city_id: int, checked: Optional[bool] = None) -> bool:
        return self._toggle(self.cities, city_id, checked)

    def toggle_device_type(self, device_type: str, checked: Optional[bool] = None) -> bool:
        if device_type not in DEVICE_TYPES:
            raise ValueError(f"Unknown device type {device_type!r}")
        return self._toggle(self.device_types, device_type, checked)

    def toggle_status(self, status: str, checked: Optional[bool] = None) -> bool:
        if status not in DEVICE_STATUSES:
            raise ValueError(f"Unknown device status {status!r}")
        return self._toggle(self.device_status, status, checked)

    def reset(self, cities: Iterable[CityWithStatus] = ()) -> None:
        self.cities = {c.id: True for c in cities}
        self.device_types = dict(DEFAULT_DEVICE_TYPES)
        self.device_status = dict(DEFAULT_DEVICE_STATUS)

    def apply(self) -> None:
        # filtering is already live; kept for the sidebar's "apply" button
        logger.info("Filters applied: %s", self.snapshot())

    def city_visible(self, city: CityWithStatus) -> bool:
        return self.cities.get(city.id, False)

    def device_visible(self, device: DeviceWithCity) -> bool:
        return (
            self.cities.get(device.city_id, False)
            and self.device_types.get(device.type, False)
            and self.device_status.get(device.status, False)
        )

    def filter_cities(self, cities: Iterable[CityWithStatus]) -> List[CityWithStatus]:
        return [c for c in cities if self.city_visible(c)]

    def filter_devices(self, devices: Iterable[DeviceWithCity]) -> List[DeviceWithCity]:
        return [d for d in devices if self.device_visible(d)]

    def snapshot(self) -> dict:
        return {
            "cities": dict(self.cities),
            "deviceTypes": dict(self.device_types),
            "deviceStatus": dict(self.device_status),
        }
