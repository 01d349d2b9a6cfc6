import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from ..schemas.common import DEVICE_STATUSES, Device, DeviceWithCity
from ..services.storage import Storage, get_storage
from .deps import parse_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/devices", tags=["devices"])


@router.get("", response_model=List[DeviceWithCity])
def list_devices(storage: Storage = Depends(get_storage)):
    try:
        return storage.list_devices()
    except Exception:
        logger.exception("Error fetching devices")
        raise HTTPException(status_code=500, detail="Failed to fetch devices")


@router.get("/{device_id}", response_model=DeviceWithCity)
def get_device(device_id: str, storage: Storage = Depends(get_storage)):
    did = parse_id(device_id, "device")
    try:
        device = storage.get_device(did)
    except Exception:
        logger.exception("Error fetching device %s", did)
        raise HTTPException(status_code=500, detail="Failed to fetch device")
    if device is None:
        raise HTTPException(status_code=404, detail="Device not found")
    return device


@router.patch("/{device_id}/status", response_model=Device)
async def update_status(device_id: str, request: Request, storage: Storage = Depends(get_storage)):
    did = parse_id(device_id, "device")
    # missing, malformed or non-object bodies are a 400 like an unknown status
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    status = payload.get("status") if isinstance(payload, dict) else None
    if not isinstance(status, str) or status not in DEVICE_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Must be one of: {', '.join(DEVICE_STATUSES)}",
        )
    try:
        device = storage.update_device_status(did, status)
    except Exception:
        logger.exception("Error updating status of device %s", did)
        raise HTTPException(status_code=500, detail="Failed to update device status")
    if device is None:
        raise HTTPException(status_code=404, detail="Device not found")
    return device
