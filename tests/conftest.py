"""
Pytest configuration and fixtures for CableLens tests.

Provides captured tool output samples, a hop factory, and in-memory
fakes for the lookup services and cable store.
"""
import pytest

from cablelens.cables import CableDataset
from cablelens.models import ASNInfo, GeoInfo, Hop


TRACERT_OUTPUT = """
Tracing route to example.com [93.184.216.34]
over a maximum of 20 hops:

  1     1 ms     2 ms     3 ms  10.0.0.1
  2    <1 ms    <1 ms    <1 ms  192.168.1.254
  3    12 ms     *       14 ms  72.14.215.85
  4     *        *        *     Request timed out.
  5    80 ms    81 ms    79 ms  93.184.216.34

Trace complete.
"""

MTR_OUTPUT = """Start: 2024-05-01T10:00:00+0000
HOST: probe-box                   Loss%   Snt   Last   Avg  Best  Wrst StDev
  1.|-- 192.168.1.1                0.0%     3    1.2   1.3   1.1   1.5   0.2
  2.|-- ???                       100.0     3    0.0   0.0   0.0   0.0   0.0
  3.|-- 72.14.215.85              33.3%     3   10.1  10.4  10.1  10.7   0.3
  4.|-- core1.example.net          0.0%     3   20.0  20.0  20.0  20.0   0.0
  5.|`- 93.184.216.34              0.0%     3   88.5  88.2  88.0  88.5   0.2
"""

TRACEROUTE_OUTPUT = """traceroute to 93.184.216.34 (93.184.216.34), 20 hops max, 60 byte packets
 1  192.168.1.1  1.234 ms  1.100 ms  1.050 ms
 2  * * *
 3  72.14.215.85  5.100 ms *  5.300 ms
 4  209.85.248.1  9.000 ms
    209.85.248.2  11.000 ms  10.000 ms
 5  93.184.216.34  88.000 ms  88.500 ms  87.500 ms
"""

TCPTRACEROUTE_OUTPUT = """Selected device eth0, address 192.168.1.5, port 40123 for outgoing packets
Tracing the path to 93.184.216.34 on TCP port 443 (https), 20 hops max
 1  192.168.1.1  0.512 ms  0.401 ms  0.388 ms
 2  * * *
 3  72.14.215.85  5.000 ms  7.000 ms
 4  93.184.216.34 [open]  88.100 ms  87.900 ms  88.000 ms
"""


@pytest.fixture
def make_hop():
    """Factory for enriched, geolocated hops"""
    def _make(number, ip=None, lat=None, lon=None, country_code=None,
              rtt=10.0, city=None, country=None, **kwargs):
        timeout = ip is None
        return Hop(
            hop=number,
            ip=ip,
            rtt=None if timeout else rtt,
            loss=100.0 if timeout else 0.0,
            timeout=timeout,
            lat=lat,
            lon=lon,
            city=city or (f"City{number}" if lat is not None else None),
            country=country or country_code,
            country_code=country_code,
            **kwargs
        )
    return _make


def cable_feature(cable_id, name, coordinates, multi=False):
    """GeoJSON feature for a cable route"""
    return {
        "type": "Feature",
        "properties": {"id": cable_id, "name": name},
        "geometry": {
            "type": "MultiLineString" if multi else "LineString",
            "coordinates": [coordinates] if multi else coordinates,
        },
    }


@pytest.fixture
def atlantic_dataset():
    """A transatlantic cable plus a decoy in the Indian Ocean"""
    return CableDataset.from_geojson({
        "type": "FeatureCollection",
        "features": [
            cable_feature("indian-decoy", "Indian Decoy", [[100.0, -10.0], [110.0, -5.0]]),
            cable_feature("atlantic-1", "Atlantic One",
                          [[-74.0, 40.2], [-40.0, 50.0], [-0.5, 51.2]], multi=True),
        ],
    })


class FakeStore:
    """Stands in for CableStore"""

    def __init__(self, dataset, details=None):
        self.dataset = dataset
        self.detail_map = details or {}
        self.detail_calls = []

    async def get(self):
        return self.dataset

    async def details(self, cable_id):
        self.detail_calls.append(cable_id)
        return self.detail_map.get(cable_id, {})

    async def close(self):
        pass


class FakeGeoLookup:
    """Answers from a dict, raises for addresses listed in fail"""

    def __init__(self, answers=None, fail=False):
        self.answers = answers or {}
        self.fail = fail
        self.calls = []

    async def lookup_many(self, ips):
        self.calls.append(list(ips))
        if self.fail:
            raise RuntimeError("geo service down")
        return {ip: self.answers.get(ip) for ip in ips}

    async def close(self):
        pass


class FakeASNLookup:
    def __init__(self, answers=None, fail=False):
        self.answers = answers or {}
        self.fail = fail
        self.calls = []

    async def lookup_many(self, ips):
        self.calls.append(list(ips))
        if self.fail:
            raise RuntimeError("dns down")
        return {ip: self.answers.get(ip) for ip in ips}

    def close(self):
        pass


@pytest.fixture
def fake_store():
    return FakeStore


@pytest.fixture
def geo_answers():
    return {
        "8.8.8.8": GeoInfo(country="United States", country_code="US", city="New York",
                           lat=40.71, lon=-74.0),
        "81.2.69.142": GeoInfo(country="United Kingdom", country_code="GB", city="London",
                               lat=51.5, lon=-0.12),
    }


@pytest.fixture
def asn_answers():
    return {
        "8.8.8.8": ASNInfo(asn="AS15169", org="GOOGLE, US", country="US",
                           is_cdn=True, cdn_provider="Google Cloud"),
        "81.2.69.142": ASNInfo(asn="AS20712", org="Andrews & Arnold Ltd", country="GB"),
    }


@pytest.fixture
def fake_geo():
    return FakeGeoLookup


@pytest.fixture
def fake_asn():
    return FakeASNLookup
