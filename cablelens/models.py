"""
Data models for CableLens
"""

from dataclasses import dataclass, field
from typing import Optional
from datetime import datetime


ROUTE_LAND = 'land'
ROUTE_SEA = 'sea'


@dataclass
class GeoInfo:
    """Geographic information"""
    country: Optional[str] = None
    country_code: Optional[str] = None
    city: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    timezone: Optional[str] = None
    # Ownership as reported by the geolocation service, used when the
    # ASN lookup has nothing.
    asn: Optional[str] = None
    org: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None


@dataclass
class Hop:
    """
    One router on the path.

    Parsers fill the probe fields; the enrichment, classification and
    aggregation stages fill the rest in place.
    """
    hop: int
    ip: Optional[str] = None
    rtt: Optional[float] = None
    loss: float = 0.0
    timeout: bool = False
    is_private: bool = False

    lat: Optional[float] = None
    lon: Optional[float] = None
    city: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    asn: Optional[str] = None
    org: Optional[str] = None
    is_cdn: bool = False
    cdn_provider: Optional[str] = None
    route_type: str = ROUTE_LAND
    cable_used: Optional[str] = None
    distance_to_next: Optional[float] = None

    @property
    def is_unresolved(self) -> bool:
        """No address means the hop counts as a timeout whatever it claims"""
        return self.timeout or not self.ip

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None


@dataclass
class TracePath:
    """Ordered hops for one run, trailing unresolved hops removed"""
    hops: list[Hop] = field(default_factory=list)
    method: Optional[str] = None

    @classmethod
    def from_hops(cls, hops: list[Hop], method: Optional[str] = None) -> 'TracePath':
        ordered = sorted(hops, key=lambda h: h.hop)
        return cls(hops=trim_trailing_timeouts(ordered), method=method)

    def __len__(self) -> int:
        return len(self.hops)


def trim_trailing_timeouts(hops: list[Hop]) -> list[Hop]:
    """Drop the run of address-less hops at the tail, timeout flag or not"""
    end = len(hops)
    while end > 0 and not hops[end - 1].ip:
        end -= 1
    return hops[:end]


@dataclass
class CableSegment:
    """A submarine cable used somewhere along the path"""
    id: str
    name: str
    from_country: Optional[str] = None
    to_country: Optional[str] = None
    from_city: Optional[str] = None
    to_city: Optional[str] = None
    hop_range: str = ''
    distance: int = 0
    length: str = 'N/A'
    rfs: str = 'N/A'
    owners: str = 'N/A'
    url: Optional[str] = None
    from_landing: Optional[str] = None
    to_landing: Optional[str] = None


@dataclass
class DistanceSummary:
    """Path distance split by route type, in km"""
    total: int = 0
    land: int = 0
    sea: int = 0


@dataclass
class CdnInfo:
    """CDN detection verdict"""
    detected: bool = False
    provider: Optional[str] = None
    hop: Optional[int] = None


@dataclass
class TraceResult:
    """Complete trace result"""
    target: str
    target_ip: str
    method: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
    hops: list[Hop] = field(default_factory=list)
    cables: list[CableSegment] = field(default_factory=list)
    distances: DistanceSummary = field(default_factory=DistanceSummary)
    total_time: float = 0.0
    cdn: CdnInfo = field(default_factory=CdnInfo)

    @property
    def total_hops(self) -> int:
        return len(self.hops)


@dataclass
class ASNInfo:
    """ASN information"""
    asn: str  # e.g., "AS15169"
    org: Optional[str] = None
    prefix: Optional[str] = None
    country: Optional[str] = None
    is_cdn: bool = False
    cdn_provider: Optional[str] = None
