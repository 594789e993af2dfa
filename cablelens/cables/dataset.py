"""
In-memory submarine cable geometry
"""

from dataclasses import dataclass, field
from typing import Optional

from ..geodesy import haversine


Polyline = tuple[tuple[float, float], ...]  # (lon, lat) vertices


@dataclass(frozen=True)
class CableRoute:
    """One real-world cable and its route polylines"""
    id: str
    name: str
    lines: tuple[Polyline, ...]

    @classmethod
    def from_feature(cls, feature: dict) -> Optional['CableRoute']:
        """
        Build from a GeoJSON feature.

        LineString and MultiLineString geometries are accepted; features
        without at least one two-vertex line are rejected.
        """
        props = feature.get('properties') or {}
        geometry = feature.get('geometry') or {}
        coords = geometry.get('coordinates') or []

        if geometry.get('type') == 'LineString':
            raw_lines = [coords]
        elif geometry.get('type') == 'MultiLineString':
            raw_lines = coords
        else:
            return None

        lines = []
        for raw in raw_lines:
            line = tuple((float(pt[0]), float(pt[1])) for pt in raw if len(pt) >= 2)
            if len(line) >= 2:
                lines.append(line)

        if not lines:
            return None

        name = props.get('name') or 'Unknown Cable'
        cable_id = props.get('id') or props.get('cable_id') or name

        return cls(
            id=str(cable_id),
            name=name,
            lines=tuple(lines)
        )


@dataclass(frozen=True)
class LandingPoint:
    """Where a cable comes ashore"""
    id: str
    name: str
    lat: float
    lon: float
    city: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def from_feature(cls, feature: dict) -> Optional['LandingPoint']:
        props = feature.get('properties') or {}
        coords = (feature.get('geometry') or {}).get('coordinates') or []
        if len(coords) < 2:
            return None

        name = props.get('name') or ''
        # Names look like "Tuckerton, NJ, United States"
        parts = [p.strip() for p in name.split(',') if p.strip()]

        return cls(
            id=str(props.get('id') or name),
            name=name,
            lat=float(coords[1]),
            lon=float(coords[0]),
            city=parts[0] if parts else None,
            country=parts[-1] if len(parts) > 1 else None
        )


@dataclass(frozen=True)
class CableDataset:
    """Immutable snapshot of the cable map"""
    cables: tuple[CableRoute, ...] = ()
    landing_points: tuple[LandingPoint, ...] = ()
    fetched_at: Optional[float] = None
    _by_id: dict = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self):
        self._by_id.update({cable.id: cable for cable in self.cables})

    @classmethod
    def empty(cls) -> 'CableDataset':
        return cls()

    @classmethod
    def from_geojson(cls, cable_geo: dict, landing_geo: Optional[dict] = None,
                     fetched_at: Optional[float] = None) -> 'CableDataset':
        """Build a dataset from the cable-geo and landing-point-geo collections"""
        cables = [CableRoute.from_feature(f) for f in (cable_geo or {}).get('features') or []]
        points = [LandingPoint.from_feature(f) for f in (landing_geo or {}).get('features') or []]
        return cls(
            cables=tuple(c for c in cables if c),
            landing_points=tuple(p for p in points if p),
            fetched_at=fetched_at
        )

    def __len__(self) -> int:
        return len(self.cables)

    def __bool__(self) -> bool:
        return bool(self.cables)

    def get(self, cable_id: str) -> Optional[CableRoute]:
        """Cable by id, falling back to an exact name match"""
        cable = self._by_id.get(cable_id)
        if cable:
            return cable
        for cable in self.cables:
            if cable.name == cable_id:
                return cable
        return None

    def cables_in_region(self, min_lat: float, max_lat: float,
                         min_lon: float, max_lon: float) -> list[CableRoute]:
        """Cables with at least one vertex inside the box"""
        return [
            cable for cable in self.cables
            if any(
                min_lat <= lat <= max_lat and min_lon <= lon <= max_lon
                for line in cable.lines for lon, lat in line
            )
        ]

    def nearby_landing_points(self, lat: float, lon: float,
                              radius_km: float = 200) -> list[tuple[LandingPoint, float]]:
        """Landing points within radius, nearest first, with their distance"""
        found = []
        for point in self.landing_points:
            distance = haversine(lat, lon, point.lat, point.lon)
            if distance <= radius_km:
                found.append((point, distance))
        return sorted(found, key=lambda item: item[1])
