"""지오펜스 계산 (Geofence math).

Great-circle distance between two WGS84 coordinates and the office
radius check used for clock-in/out. Pure functions, no I/O.
"""

import math

from app.models.organization import OfficeLocation

# 지구 반지름(미터) (Mean Earth radius in meters)
EARTH_RADIUS_M: float = 6_371_000.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """두 좌표 사이의 대원 거리(미터)를 계산합니다.

    Haversine great-circle distance in meters. The intermediate value is
    clamped to [0, 1] so rounding near the poles or antimeridian never
    produces a domain error.

    Args:
        lat1: 첫 번째 위도 (First latitude, degrees)
        lon1: 첫 번째 경도 (First longitude, degrees)
        lat2: 두 번째 위도 (Second latitude, degrees)
        lon2: 두 번째 경도 (Second longitude, degrees)

    Returns:
        float: 거리(미터), 항상 0 이상 (Distance in meters, never negative)
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(a))


def distance_to_office(office: OfficeLocation, latitude: float, longitude: float) -> float:
    """사무실 중심까지의 거리(미터) (Distance from the office center in meters)."""
    return haversine_distance(office.latitude, office.longitude, latitude, longitude)


def is_within_radius(office: OfficeLocation, latitude: float, longitude: float) -> bool:
    """좌표가 사무실 허용 반경 안에 있는지 확인합니다 (경계 포함).

    True when the distance to the office is at most ``office.radius``.
    """
    return distance_to_office(office, latitude, longitude) <= office.radius
