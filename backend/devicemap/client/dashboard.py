import logging
from typing import List, Optional

from ..schemas.common import CityWithStatus, DeviceWithCity
from .api import DeviceMapClient
from .filters import FilterState
from .formatting import InfoCardSummary

logger = logging.getLogger(__name__)


class Dashboard:
    """Map page state: fetched cities, the selected city's devices and the filters over both.

    Selecting another city simply overwrites the previous selection; the last
    response assigned wins.
    """

    def __init__(self, client: DeviceMapClient, filters: Optional[FilterState] = None):
        self.client = client
        self.filters = filters or FilterState()
        self.cities: List[CityWithStatus] = []
        self.selected_city: Optional[CityWithStatus] = None
        self.selected_devices: List[DeviceWithCity] = []

    def load_cities(self) -> List[CityWithStatus]:
        self.cities = self.client.list_cities()
        if self.filters.populate_cities(self.cities):
            logger.debug("City filter initialised with %d cities", len(self.cities))
        return self.cities

    def visible_cities(self) -> List[CityWithStatus]:
        return self.filters.filter_cities(self.cities)

    def select_city(self, city_id: int) -> List[DeviceWithCity]:
        city = next((c for c in self.cities if c.id == city_id), None)
        if city is None:
            city = self.client.get_city(city_id)
        devices = self.client.list_city_devices(city_id)
        self.selected_city = city
        self.selected_devices = devices
        return devices

    def close_info_card(self) -> None:
        self.selected_city = None
        self.selected_devices = []

    def visible_devices(self) -> List[DeviceWithCity]:
        return self.filters.filter_devices(self.selected_devices)

    def info_card(self, show_all: bool = False) -> Optional[InfoCardSummary]:
        if self.selected_city is None:
            return None
        return InfoCardSummary.build(self.selected_city.name, self.visible_devices(), show_all=show_all)

    def reset_filters(self) -> None:
        self.filters.reset(self.cities)
