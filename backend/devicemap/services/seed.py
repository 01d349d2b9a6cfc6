import json
import logging
import random
import unicodedata
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..schemas.common import CityCreate, DeviceCreate
from .storage import Storage

logger = logging.getLogger(__name__)

SEED_CITIES = [
    {"name": "Monterrey", "state": "Nuevo León", "latitude": "25.6866", "longitude": "-100.3161"},
    {"name": "Ciudad de México", "state": "CDMX", "latitude": "19.4326", "longitude": "-99.1332"},
    {"name": "Guadalajara", "state": "Jalisco", "latitude": "20.6597", "longitude": "-103.3496"},
    {"name": "Puebla", "state": "Puebla", "latitude": "19.0414", "longitude": "-98.2063"},
    {"name": "León", "state": "Guanajuato", "latitude": "21.1167", "longitude": "-101.6833"},
    {"name": "Torreón", "state": "Coahuila", "latitude": "25.5383", "longitude": "-103.4526"},
    {"name": "Ciudad Juárez", "state": "Chihuahua", "latitude": "31.6904", "longitude": "-106.4245"},
    {"name": "Tampico", "state": "Tamaulipas", "latitude": "22.2553", "longitude": "-97.8686"},
    {"name": "Nuevo Laredo", "state": "Tamaulipas", "latitude": "27.4769", "longitude": "-99.5424"},
    {"name": "Saltillo", "state": "Coahuila", "latitude": "25.4321", "longitude": "-101.0053"},
    {"name": "Ciudad Victoria", "state": "Tamaulipas", "latitude": "23.7369", "longitude": "-99.1411"},
    {"name": "Reynosa", "state": "Tamaulipas", "latitude": "26.0920", "longitude": "-98.2852"},
    {"name": "Durango", "state": "Durango", "latitude": "24.0277", "longitude": "-104.6532"},
]

DEVICE_CATALOG = {
    "router": {"prefix": "RT", "names": ["Router XR-2000", "Router CR-1500", "Router WR-3000"]},
    "sensor": {"prefix": "ST", "names": ["Sensor Temp. PT-100", "Sensor Hum. SH-200", "Sensor Pres. SP-500"]},
    "camera": {"prefix": "CM", "names": ["Cámara IP HD", "Cámara Domo 360", "Cámara Térmica"]},
}

# weighted towards online
STATUS_POOL = ["online", "online", "online", "warning", "offline"]


def city_code(name: str) -> str:
    """Three-letter ASCII code from the last word of a city name, e.g. "Ciudad Juárez" -> "JUA"."""
    word = name.split()[-1]
    ascii_word = unicodedata.normalize("NFKD", word).encode("ascii", "ignore").decode()
    return ascii_word[:3].upper()


def device_metadata(device_type: str, rng: random.Random) -> str:
    if device_type == "router":
        return json.dumps({"traffic": f"{rng.random() * 2:.1f} GB/h"})
    if device_type == "sensor":
        return json.dumps({"value": f"{rng.random() * 20 + 20:.1f}°C"}, ensure_ascii=False)
    return json.dumps({"state": "Grabando"})


def seed_demo_data(storage: Storage, rng: Optional[random.Random] = None, now: Optional[datetime] = None) -> int:
    """Create the demo cities with 3-5 random devices each. Returns the number of devices created.

    Does nothing when the store already holds cities, so a persistent backend is seeded once.
    """
    if storage.list_cities():
        logger.info("Store already has cities, skipping demo seed")
        return 0
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    created = 0
    for city_data in SEED_CITIES:
        city = storage.create_city(CityCreate(**city_data, device_count=0))
        city_prefix = city_code(city.name)
        for i in range(rng.randint(3, 5)):
            device_type = rng.choice(list(DEVICE_CATALOG))
            entry = DEVICE_CATALOG[device_type]
            storage.create_device(DeviceCreate(
                name=rng.choice(entry["names"]),
                device_id=f"{city_prefix}-{entry['prefix']}-{i + 1:03d}",
                type=device_type,
                status=rng.choice(STATUS_POOL),
                city_id=city.id,
                last_updated=now - timedelta(minutes=rng.randrange(60)),
                metadata=device_metadata(device_type, rng),
            ))
            created += 1
    logger.info("Seeded %d cities with %d devices", len(SEED_CITIES), created)
    return created
