import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..schemas.common import CityWithStatus, DeviceWithCity
from ..services.storage import Storage, get_storage
from .deps import parse_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cities", tags=["cities"])


@router.get("", response_model=List[CityWithStatus])
def list_cities(storage: Storage = Depends(get_storage)):
    try:
        return storage.list_cities()
    except Exception:
        logger.exception("Error fetching cities")
        raise HTTPException(status_code=500, detail="Failed to fetch cities")


@router.get("/{city_id}", response_model=CityWithStatus)
def get_city(city_id: str, storage: Storage = Depends(get_storage)):
    cid = parse_id(city_id, "city")
    try:
        city = storage.get_city(cid)
    except Exception:
        logger.exception("Error fetching city %s", cid)
        raise HTTPException(status_code=500, detail="Failed to fetch city")
    if city is None:
        raise HTTPException(status_code=404, detail="City not found")
    return city


@router.get("/{city_id}/devices", response_model=List[DeviceWithCity])
def city_devices(city_id: str, storage: Storage = Depends(get_storage)):
    cid = parse_id(city_id, "city")
    try:
        devices = storage.list_devices_for_city(cid)
    except Exception:
        logger.exception("Error fetching devices for city %s", cid)
        raise HTTPException(status_code=500, detail="Failed to fetch city devices")
    # None means the city itself is unknown; an empty list is a valid answer
    if devices is None:
        raise HTTPException(status_code=404, detail="City not found")
    return devices
