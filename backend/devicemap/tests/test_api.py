import pytest
from datetime import datetime
from httpx import AsyncClient, ASGITransport

from devicemap.main import app
from devicemap.schemas.common import CityCreate, DeviceCreate
from devicemap.services.storage import MemStorage, get_storage


def _city(name="Monterrey"):
    return CityCreate(name=name, state="Nuevo León", latitude="25.6866", longitude="-100.3161")


def _device(city_id, code, status="online", type="router"):
    return DeviceCreate(name=f"Device {code}", device_id=code, type=type, status=status,
                        city_id=city_id, metadata='{"traffic": "1.0 GB/h"}')


@pytest.fixture
def storage():
    store = MemStorage()
    app.dependency_overrides[get_storage] = lambda: store
    yield store
    app.dependency_overrides.clear()


def _client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_cities_with_live_counts(storage):
    city = storage.create_city(_city())
    storage.create_device(_device(city.id, "MON-RT-001", "online"))
    storage.create_device(_device(city.id, "MON-ST-002", "warning", "sensor"))
    storage.create_device(_device(city.id, "MON-CM-003", "offline", "camera"))

    async with _client() as ac:
        r = await ac.get("/api/cities")
        assert r.status_code == 200
        body = r.json()
        assert len(body) == 1
        c = body[0]
        assert c["id"] == city.id and c["name"] == "Monterrey" and c["state"] == "Nuevo León"
        assert (c["deviceCount"], c["onlineCount"], c["warningCount"], c["offlineCount"]) == (3, 1, 1, 1)

        one = await ac.get(f"/api/cities/{city.id}")
        assert one.status_code == 200
        assert one.json() == c


@pytest.mark.asyncio
async def test_city_lookup_errors(storage):
    async with _client() as ac:
        assert (await ac.get("/api/cities/abc")).status_code == 400
        assert (await ac.get("/api/cities/42")).status_code == 404
        assert (await ac.get("/api/cities/abc/devices")).status_code == 400
        missing = await ac.get("/api/cities/42/devices")
        assert missing.status_code == 404
        assert missing.json()["detail"] == "City not found"


@pytest.mark.asyncio
async def test_empty_city_returns_empty_list(storage):
    city = storage.create_city(_city())
    assert city.id == 1
    async with _client() as ac:
        r = await ac.get("/api/cities/1/devices")
        assert r.status_code == 200
        assert r.json() == []


@pytest.mark.asyncio
async def test_device_with_city_shape(storage):
    city = storage.create_city(_city())
    dev = storage.create_device(_device(city.id, "MON-RT-001"))
    orphan = storage.create_device(_device(999, "XXX-RT-001"))

    async with _client() as ac:
        r = await ac.get("/api/devices")
        assert r.status_code == 200
        by_id = {d["id"]: d for d in r.json()}
        d = by_id[dev.id]
        assert set(d) == {"id", "name", "deviceId", "type", "status", "cityId",
                          "cityName", "lastUpdated", "metadata"}
        assert d["deviceId"] == "MON-RT-001"
        assert d["cityName"] == "Monterrey"
        assert d["lastUpdated"].endswith("Z")
        assert by_id[orphan.id]["cityName"] == "Unknown City"

        single = await ac.get(f"/api/devices/{dev.id}")
        assert single.status_code == 200
        assert single.json() == d

        city_devices = await ac.get(f"/api/cities/{city.id}/devices")
        assert [x["id"] for x in city_devices.json()] == [dev.id]

        assert (await ac.get("/api/devices/nope")).status_code == 400
        assert (await ac.get("/api/devices/999")).status_code == 404


@pytest.mark.asyncio
async def test_patch_device_status(storage):
    city = storage.create_city(_city())
    dev = storage.create_device(_device(city.id, "MON-RT-001", "online"))
    before = storage.get_device(dev.id).last_updated

    async with _client() as ac:
        r = await ac.patch(f"/api/devices/{dev.id}/status", json={"status": "offline"})
        assert r.status_code == 200
        body = r.json()
        assert body["id"] == dev.id and body["status"] == "offline"
        assert body["deviceId"] == "MON-RT-001"
        assert body["lastUpdated"].endswith("Z")
        assert body["lastUpdated"] == storage.get_device(dev.id).last_updated

        after = storage.get_device(dev.id).last_updated
        parse = lambda s: datetime.fromisoformat(s.replace("Z", "+00:00"))
        assert parse(after) >= parse(before)

        counts = (await ac.get(f"/api/cities/{city.id}")).json()
        assert counts["offlineCount"] == 1 and counts["onlineCount"] == 0


@pytest.mark.asyncio
async def test_patch_status_errors(storage):
    city = storage.create_city(_city())
    storage.create_device(_device(city.id, "MON-RT-001", "online"))

    async with _client() as ac:
        assert (await ac.patch("/api/devices/999/status", json={"status": "online"})).status_code == 404
        bogus = await ac.patch("/api/devices/1/status", json={"status": "bogus"})
        assert bogus.status_code == 400
        assert "online, warning, offline" in bogus.json()["detail"]
        assert (await ac.patch("/api/devices/1/status", json={})).status_code == 400
        for body in ({"status": 5}, {"status": ["online"]}, {"status": None}, [], "online"):
            r = await ac.patch("/api/devices/1/status", json=body)
            assert r.status_code == 400, body
        assert (await ac.patch("/api/devices/1/status")).status_code == 400
        assert (await ac.patch("/api/devices/1/status", content=b"{not json",
                               headers={"Content-Type": "application/json"})).status_code == 400
        assert (await ac.patch("/api/devices/x/status", json={"status": "online"})).status_code == 400

    assert storage.get_device(1).status == "online"


class _BrokenStorage(MemStorage):
    def list_cities(self):
        raise RuntimeError("boom")

    def list_devices(self):
        raise RuntimeError("boom")


@pytest.mark.asyncio
async def test_unexpected_errors_become_500():
    app.dependency_overrides[get_storage] = lambda: _BrokenStorage()
    try:
        async with _client() as ac:
            r = await ac.get("/api/cities")
            assert r.status_code == 500
            assert r.json()["detail"] == "Failed to fetch cities"
            assert (await ac.get("/api/devices")).status_code == 500
    finally:
        app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health():
    async with _client() as ac:
        r = await ac.get("/health")
        assert r.status_code == 200 and r.json() == {"ok": True}
