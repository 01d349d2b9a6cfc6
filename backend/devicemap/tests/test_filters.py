import pytest

from devicemap.client.filters import FilterState
from devicemap.schemas.common import CityWithStatus, DeviceWithCity


def _city(cid, name="Puebla"):
    return CityWithStatus(id=cid, name=name, state="Puebla", latitude="19.0414", longitude="-98.2063",
                          device_count=0, online_count=0, warning_count=0, offline_count=0)


def _device(did, city_id=1, type="router", status="online"):
    return DeviceWithCity(id=did, name="Router XR-2000", device_id=f"PUE-RT-{did:03d}", type=type,
                          status=status, city_id=city_id, city_name="Puebla",
                          last_updated="2026-01-01T00:00:00.000Z", metadata="{}")


def test_defaults_show_nothing_until_cities_load():
    f = FilterState()
    assert f.cities == {}
    assert f.device_types == {"router": True, "sensor": True, "camera": True}
    assert f.device_status == {"online": True, "warning": True, "offline": False}
    assert f.filter_cities([_city(1)]) == []
    assert f.filter_devices([_device(1)]) == []


def test_city_membership_is_backfilled_once():
    f = FilterState()
    assert f.populate_cities([_city(1), _city(2)]) is True
    assert f.cities == {1: True, 2: True}
    f.toggle_city(2)
    assert f.populate_cities([_city(1), _city(2), _city(3)]) is False
    assert f.cities == {1: True, 2: False}
    assert [c.id for c in f.filter_cities([_city(1), _city(2), _city(3)])] == [1]


def test_status_filter_example():
    f = FilterState()
    f.populate_cities([_city(1)])
    devices = [
        _device(1, status="online"),
        _device(2, status="online"),
        _device(3, status="warning"),
        _device(4, status="offline"),
    ]
    assert len(f.filter_devices(devices)) == 3


def test_device_needs_all_three_memberships():
    f = FilterState()
    f.populate_cities([_city(1), _city(2)])
    devices = [_device(1, city_id=1, type="camera"), _device(2, city_id=2, type="sensor")]
    f.toggle_device_type("camera", False)
    assert [d.id for d in f.filter_devices(devices)] == [2]
    f.toggle_city(2, False)
    assert f.filter_devices(devices) == []
    f.toggle_device_type("camera")
    assert [d.id for d in f.filter_devices(devices)] == [1]


def test_toggle_sets_or_flips():
    f = FilterState()
    assert f.toggle_status("offline") is True
    assert f.toggle_status("offline") is False
    assert f.toggle_status("online", True) is True
    with pytest.raises(ValueError):
        f.toggle_status("bogus")
    with pytest.raises(ValueError):
        f.toggle_device_type("drone")


def test_reset_restores_defaults():
    f = FilterState()
    f.populate_cities([_city(1)])
    f.toggle_city(1)
    f.toggle_device_type("router")
    f.toggle_status("offline")
    f.reset([_city(1), _city(5)])
    assert f.cities == {1: True, 5: True}
    assert f.device_types == {"router": True, "sensor": True, "camera": True}
    assert f.device_status == {"online": True, "warning": True, "offline": False}


def test_apply_changes_nothing(caplog):
    f = FilterState()
    f.populate_cities([_city(1)])
    before = f.snapshot()
    with caplog.at_level("INFO", logger="devicemap.client.filters"):
        f.apply()
    assert f.snapshot() == before
    assert "Filters applied" in caplog.text
