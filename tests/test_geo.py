import pytest

from app.services.geo import bounding_box, haversine_km


def test_haversine_zero_distance():
    assert haversine_km(25.2, 55.27, 25.2, 55.27) == 0.0


def test_haversine_known_city_pair():
    # Dubai -> Abu Dhabi city centres are roughly 123 km apart
    assert haversine_km(25.2048, 55.2708, 24.4539, 54.3773) == pytest.approx(123.0, abs=3.0)


def test_haversine_is_symmetric():
    a = haversine_km(51.5074, -0.1278, 48.8566, 2.3522)
    b = haversine_km(48.8566, 2.3522, 51.5074, -0.1278)
    assert a == pytest.approx(b)
    assert a == pytest.approx(344.0, abs=5.0)


def test_bounding_box_contains_points_on_the_radius():
    lat, lng, radius = 25.2048, 55.2708, 10.0
    box = bounding_box(lat, lng, radius)
    # one degree of latitude is ~111.19 km on the haversine sphere
    assert box.contains(lat + radius / 111.19, lng)
    assert box.contains(lat - radius / 111.19, lng)
    assert not box.contains(lat + 2 * radius / 111.19, lng)
    assert box.min_lng is not None and box.min_lng < lng < box.max_lng


def test_bounding_box_drops_longitude_near_antimeridian():
    box = bounding_box(0.0, 179.95, 20.0)
    assert box.min_lng is None and box.max_lng is None
    assert box.contains(0.0, -179.95)


def test_bounding_box_drops_longitude_at_poles():
    box = bounding_box(89.99, 10.0, 5.0)
    assert box.max_lat == 90.0
    assert box.min_lng is None
