import logging
from typing import List, Optional

import httpx

from ..core.config import settings
from ..schemas.common import CityWithStatus, Device, DeviceWithCity

logger = logging.getLogger(__name__)


class DashboardAPIError(Exception):
    """Raised for any failed call to the device map API. ``status_code`` is None for transport errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DeviceMapClient:
    """Thin synchronous client for the /api endpoints. One attempt per call, no retries."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        self._http = httpx.Client(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.CLIENT_TIMEOUT_SECONDS,
            transport=transport,
        )

    def close(self):
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method: str, path: str, **kwargs):
        try:
            r = self._http.request(method, path, **kwargs)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = e.response.text
            try:
                detail = e.response.json().get("detail", detail)
            except ValueError:
                pass
            logger.warning("%s %s failed with %s: %s", method, path, e.response.status_code, detail)
            raise DashboardAPIError(str(detail), status_code=e.response.status_code) from e
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise DashboardAPIError(f"Request to {path} failed: {e}") from e
        return r.json()

    def list_cities(self) -> List[CityWithStatus]:
        return [CityWithStatus.model_validate(c) for c in self._request("GET", "/api/cities")]

    def get_city(self, city_id: int) -> CityWithStatus:
        return CityWithStatus.model_validate(self._request("GET", f"/api/cities/{city_id}"))

    def list_devices(self) -> List[DeviceWithCity]:
        return [DeviceWithCity.model_validate(d) for d in self._request("GET", "/api/devices")]

    def list_city_devices(self, city_id: int) -> List[DeviceWithCity]:
        return [DeviceWithCity.model_validate(d) for d in self._request("GET", f"/api/cities/{city_id}/devices")]

    def get_device(self, device_id: int) -> DeviceWithCity:
        return DeviceWithCity.model_validate(self._request("GET", f"/api/devices/{device_id}"))

    def update_device_status(self, device_id: int, status: str) -> Device:
        return Device.model_validate(self._request("PATCH", f"/api/devices/{device_id}/status", json={"status": status}))
