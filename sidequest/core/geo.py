"""경로 폴리라인과 위경도 계산을 위한 지리 유틸리티."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.0

_MIN_LAT = -90.0
_MAX_LAT = 90.0
_MIN_LNG = -180.0
_MAX_LNG = 180.0


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """위경도 좌표."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        lat = float(self.lat)
        lng = float(self.lng)
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise ValueError(f"좌표는 유한한 값이어야 합니다: lat={self.lat}, lng={self.lng}")
        if not (_MIN_LAT <= lat <= _MAX_LAT and _MIN_LNG <= lng <= _MAX_LNG):
            raise ValueError(f"좌표 범위를 벗어났습니다: lat={lat}, lng={lng}")
        object.__setattr__(self, "lat", lat)
        object.__setattr__(self, "lng", lng)

    def as_pair(self) -> tuple[float, float]:
        """(lat, lng) 튜플로 변환합니다."""
        return (self.lat, self.lng)


RoutePolyline = Sequence[GeoPoint]


def haversine_distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """두 좌표 사이의 대원 거리(km)를 반환합니다."""
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def nearest_polyline_index(point: GeoPoint, polyline: RoutePolyline) -> int:
    """점에서 가장 가까운 폴리라인 정점 인덱스를 반환합니다.

    순위 비교용이므로 위경도 차의 제곱합(평면 근사)을 사용합니다.
    동률이면 앞선 인덱스가 이기고, 빈 폴리라인이면 0을 반환합니다.
    """
    best_index = 0
    best_distance = math.inf
    for index, vertex in enumerate(polyline):
        distance = (vertex.lat - point.lat) ** 2 + (vertex.lng - point.lng) ** 2
        if distance < best_distance:
            best_distance = distance
            best_index = index
    return best_index


def polyline_segment_distance_km(polyline: RoutePolyline, from_index: int, to_index: int) -> float:
    """[from_index, to_index) 구간 간선 길이의 합(km)을 반환합니다."""
    start = max(0, int(from_index))
    end = min(int(to_index), len(polyline) - 1)
    distance = 0.0
    for index in range(start, end):
        distance += haversine_distance_km(polyline[index], polyline[index + 1])
    return distance


def polyline_length_km(polyline: RoutePolyline) -> float:
    """폴리라인 전체 길이(km)."""
    return polyline_segment_distance_km(polyline, 0, len(polyline) - 1)


@dataclass(frozen=True, slots=True)
class Route:
    """라우팅 서비스가 돌려준 경로. 생성 후 변경하지 않습니다."""

    polyline: tuple[GeoPoint, ...]
    distance_meters: float
    duration_seconds: float

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000

    @property
    def duration_minutes(self) -> float:
        return self.duration_seconds / 60

    def geometry_pairs(self) -> list[tuple[float, float]]:
        """[lat, lng] 쌍 목록으로 직렬화합니다."""
        return [point.as_pair() for point in self.polyline]

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[Sequence[float]],
        distance_meters: float | None = None,
        duration_seconds: float | None = None,
        average_speed_kmh: float = 80.0,
    ) -> Route:
        """[lat, lng] 쌍으로 경로를 만듭니다. 거리/시간이 없으면 폴리라인 길이로 추정합니다."""
        polyline = tuple(GeoPoint(float(pair[0]), float(pair[1])) for pair in pairs)
        if distance_meters is None:
            distance_meters = polyline_length_km(polyline) * 1000
        if duration_seconds is None:
            duration_seconds = (distance_meters / 1000) / average_speed_kmh * 3600
        return cls(polyline=polyline, distance_meters=float(distance_meters), duration_seconds=float(duration_seconds))


class RouteSample:
    """폴리라인을 일정 누적 거리 간격으로 줄인 지연 시퀀스.

    순회할 때마다 처음부터 다시 계산하므로 여러 번 순회해도 같은 결과를 냅니다.
    첫 점과 마지막 점은 항상 포함되며, 마지막 구간은 간격보다 짧을 수 있습니다.
    """

    __slots__ = ("_polyline", "_interval_km")

    def __init__(self, polyline: RoutePolyline, interval_km: float) -> None:
        self._polyline = polyline
        self._interval_km = float(interval_km)

    def __iter__(self) -> Iterator[GeoPoint]:
        if not self._polyline:
            return

        last_emitted = self._polyline[0]
        yield last_emitted

        accumulated = 0.0
        for previous, current in zip(self._polyline, self._polyline[1:]):
            accumulated += haversine_distance_km(previous, current)
            if accumulated >= self._interval_km:
                last_emitted = current
                yield current
                accumulated = 0.0

        final = self._polyline[-1]
        if final.as_pair() != last_emitted.as_pair():
            yield final


def sample_route_points(polyline: RoutePolyline, interval_km: float = 15.0) -> RouteSample:
    """폴리라인을 interval_km 간격으로 샘플링한 시퀀스를 반환합니다."""
    return RouteSample(polyline, interval_km)


@dataclass(frozen=True, slots=True)
class GeoRectangle:
    """위경도 사각형(경계 포함)."""

    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    def contains(self, point: GeoPoint) -> bool:
        """점이 사각형 내부(경계 포함)에 있는지 반환합니다."""
        return self.min_lat <= point.lat <= self.max_lat and self.min_lng <= point.lng <= self.max_lng

    @classmethod
    def from_points_with_margin_km(
        cls,
        points: Iterable[GeoPoint],
        margin_km: float,
    ) -> GeoRectangle | None:
        """점 집합의 외접 사각형을 margin_km / 111 도만큼 확장합니다."""
        items = list(points)
        if not items:
            return None

        margin_deg = max(0.0, float(margin_km)) / KM_PER_DEGREE
        return cls(
            min_lat=_clamp(min(p.lat for p in items) - margin_deg, _MIN_LAT, _MAX_LAT),
            min_lng=_clamp(min(p.lng for p in items) - margin_deg, _MIN_LNG, _MAX_LNG),
            max_lat=_clamp(max(p.lat for p in items) + margin_deg, _MIN_LAT, _MAX_LAT),
            max_lng=_clamp(max(p.lng for p in items) + margin_deg, _MIN_LNG, _MAX_LNG),
        )
