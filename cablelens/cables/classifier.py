"""
Land / submarine-cable classification of hop segments
"""

import logging
import math
from typing import Optional

from ..config import (
    CABLE_PROXIMITY_KM,
    LAND_DISTANCE_KM,
    FRAGMENTED_COUNTRY_KM,
    UNKNOWN_CONTINENT_SEA_KM,
    EURASIA_MIN_LAT,
    EURASIA_MIN_LON,
    LANDING_POINT_RADIUS_KM,
)
from ..geodesy import haversine, midpoint, polyline_proximity
from ..models import CableSegment, Hop, ROUTE_LAND, ROUTE_SEA
from .dataset import CableDataset, CableRoute
from .regions import ASIA, EUROPE, continent_of, is_fragmented, is_ocean_separated
from .store import CableStore


logger = logging.getLogger(__name__)


def _country(hop: Hop) -> Optional[str]:
    code = hop.country_code
    return code.upper() if code else None


def _text(value, default: str = 'N/A') -> str:
    if value is None or value == '':
        return default
    return str(value)


def _owners(value) -> str:
    """Owners come as a string or a list of names / {'name': ...} dicts"""
    if isinstance(value, list):
        names = [item.get('name') if isinstance(item, dict) else item for item in value]
        names = [str(n) for n in names if n]
        return ', '.join(names) if names else 'N/A'
    return _text(value)


class RouteClassifier:
    """
    Decide per adjacent hop pair whether traffic crosses land or sea.

    Pairs that plausibly cross open water are matched against the cable
    map: the cable whose route passes closest to either endpoint or the
    midpoint, within the proximity threshold, is the one used. Each
    cable is reported once per trace.
    """

    def __init__(
        self,
        store: Optional[CableStore] = None,
        threshold_km: float = CABLE_PROXIMITY_KM,
        land_km: float = LAND_DISTANCE_KM,
        fragmented_km: float = FRAGMENTED_COUNTRY_KM
    ):
        self.store = store
        self.threshold_km = threshold_km
        self.land_km = land_km
        self.fragmented_km = fragmented_km

    async def classify(self, hops: list[Hop]) -> list[CableSegment]:
        """
        Classify every segment and collect the cables used.

        Writes route_type and cable_used back onto the leading hop of
        each pair.

        Args:
            hops: Enriched hops in path order

        Returns:
            Unique cable segments, in order of first use
        """
        dataset = await self.store.get() if self.store else CableDataset.empty()
        if not dataset:
            logger.warning("No cable data available, classifying land/sea only")

        segments: list[CableSegment] = []
        seen: set[str] = set()

        for leading, trailing in zip(hops, hops[1:]):
            if not self._geolocated(leading) or not self._geolocated(trailing):
                continue

            distance = haversine(leading.lat, leading.lon, trailing.lat, trailing.lon)

            if not self.crosses_ocean(leading, trailing, distance):
                leading.route_type = ROUTE_LAND
                leading.cable_used = None
                continue

            leading.route_type = ROUTE_SEA
            cable, proximity = self.match_cable(dataset, leading, trailing)

            if cable is None:
                leading.cable_used = None
                logger.debug("Hop %d -> %d crosses water, no cable within %d km",
                             leading.hop, trailing.hop, self.threshold_km)
                continue

            leading.cable_used = cable.id
            logger.debug("Hop %d -> %d matched %s (%.0f km away)",
                         leading.hop, trailing.hop, cable.name, proximity)

            if cable.id in seen:
                continue
            seen.add(cable.id)

            details = await self.store.details(cable.id) if self.store else {}
            segments.append(self._segment(dataset, cable, leading, trailing, distance, details))

        return segments

    @staticmethod
    def _geolocated(hop: Hop) -> bool:
        return not hop.is_unresolved and not hop.is_private and hop.has_coordinates

    def crosses_ocean(self, hop1: Hop, hop2: Hop, distance: float) -> bool:
        """
        Land/sea pre-filter for a hop pair.

        Args:
            hop1, hop2: Geolocated hops
            distance: Great-circle distance between them in km

        Returns:
            True if the pair plausibly crosses open water
        """
        code1, code2 = _country(hop1), _country(hop2)

        if code1 and code1 == code2:
            return is_fragmented(code1) and distance > self.fragmented_km

        if distance < self.land_km:
            return False

        continent1, continent2 = continent_of(code1), continent_of(code2)

        if continent1 is None or continent2 is None:
            return code1 != code2 and distance > UNKNOWN_CONTINENT_SEA_KM

        if continent1 != continent2:
            return not self._eurasian_overland(hop1, hop2, continent1, continent2)

        return is_ocean_separated(code1, code2)

    @staticmethod
    def _eurasian_overland(hop1: Hop, hop2: Hop, continent1: str, continent2: str) -> bool:
        if {continent1, continent2} != {EUROPE, ASIA}:
            return False
        return all(
            hop.lat >= EURASIA_MIN_LAT and hop.lon >= EURASIA_MIN_LON
            for hop in (hop1, hop2)
        )

    def match_cable(self, dataset: CableDataset, hop1: Hop,
                    hop2: Hop) -> tuple[Optional[CableRoute], float]:
        """
        Nearest cable to a hop pair.

        Args:
            dataset: Cable snapshot
            hop1, hop2: Geolocated hops

        Returns:
            (cable, distance_km); cable is None when nothing is within
            the threshold
        """
        points = [
            (hop1.lat, hop1.lon),
            (hop2.lat, hop2.lon),
            midpoint(hop1.lat, hop1.lon, hop2.lat, hop2.lon),
        ]

        best_cable = None
        best_distance = math.inf

        for cable in dataset.cables:
            for line in cable.lines:
                distance = polyline_proximity(points, line)
                if distance < best_distance:
                    best_distance = distance
                    best_cable = cable

        if best_cable is not None and best_distance < self.threshold_km:
            return best_cable, best_distance
        return None, best_distance

    @staticmethod
    def _landing(dataset: CableDataset, hop: Hop) -> Optional[str]:
        """Nearest cable landing station to a hop, if one is close"""
        found = dataset.nearby_landing_points(hop.lat, hop.lon, LANDING_POINT_RADIUS_KM)
        return found[0][0].name if found else None

    @classmethod
    def _segment(cls, dataset: CableDataset, cable: CableRoute, hop1: Hop, hop2: Hop,
                 distance: float, details: dict) -> CableSegment:
        return CableSegment(
            id=cable.id,
            name=details.get('name') or cable.name,
            from_country=hop1.country,
            to_country=hop2.country,
            from_city=hop1.city or 'Unknown',
            to_city=hop2.city or 'Unknown',
            hop_range=f"{hop1.hop}-{hop2.hop}",
            distance=round(distance),
            length=_text(details.get('length')),
            rfs=_text(details.get('rfs_year') or details.get('rfs')),
            owners=_owners(details.get('owners')),
            url=details.get('url') or None,
            from_landing=cls._landing(dataset, hop1),
            to_landing=cls._landing(dataset, hop2)
        )
