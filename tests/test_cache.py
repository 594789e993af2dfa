"""
Unit tests for the enrichment cache.
"""
import json
from unittest.mock import patch

from cablelens.cache import Cache
from cablelens.models import ASNInfo, GeoInfo


GEO = GeoInfo(country="United Kingdom", country_code="GB", city="London",
              lat=51.5, lon=-0.12, timezone="Europe/London", asn="AS20712",
              org="Andrews & Arnold")
ASN = ASNInfo(asn="AS13335", org="CLOUDFLARENET", prefix="104.16.0.0/13",
              country="US", is_cdn=True, cdn_provider="Cloudflare")


def test_round_trip_through_file(tmp_path):
    path = tmp_path / "cache.json"

    with Cache(path=path) as cache:
        cache.set("81.2.69.142", geo=GEO)
        cache.set("104.16.1.1", asn=ASN)

    reloaded = Cache(path=path)

    assert reloaded.get_geo("81.2.69.142") == GEO
    assert reloaded.get_asn("104.16.1.1") == ASN
    assert reloaded.get_asn("81.2.69.142") is None
    assert len(reloaded) == 2


def test_geo_and_asn_share_an_entry(tmp_path):
    cache = Cache(path=tmp_path / "cache.json")
    cache.set("1.1.1.1", geo=GEO)
    cache.set("1.1.1.1", asn=ASN)

    assert cache.get_geo("1.1.1.1").city == "London"
    assert cache.get_asn("1.1.1.1").cdn_provider == "Cloudflare"
    assert len(cache) == 1


def test_expired_entries(tmp_path):
    cache = Cache(path=tmp_path / "cache.json", ttl=0)
    cache.set("1.1.1.1", geo=GEO)

    assert cache.get("1.1.1.1") is None
    assert not cache.has("1.1.1.1")
    assert len(cache) == 0


def test_expired_entries_dropped_on_load(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(json.dumps({
        "1.1.1.1": {"asn_ts": 0, "asn": "AS13335"},
    }), encoding='utf-8')

    assert Cache(path=path).get_asn("1.1.1.1") is None


def test_memory_only_cache_never_writes(tmp_path):
    path = tmp_path / "cache.json"
    cache = Cache(path=path, persist=False)
    cache.set("1.1.1.1", asn=ASN)
    cache.save()

    assert cache.get_asn("1.1.1.1") == ASN
    assert not path.exists()


def test_unreadable_file_starts_empty(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding='utf-8')

    assert len(Cache(path=path)) == 0


def test_get_returns_copy(tmp_path):
    cache = Cache(path=tmp_path / "cache.json")
    cache.set("1.1.1.1", asn=ASN)
    cache.get("1.1.1.1")["asn"] = "AS1"

    assert cache.get_asn("1.1.1.1").asn == "AS13335"


def test_clear(tmp_path):
    path = tmp_path / "cache.json"
    cache = Cache(path=path)
    cache.set("1.1.1.1", asn=ASN)
    cache.clear()

    assert len(cache) == 0
    assert json.loads(path.read_text(encoding='utf-8')) == {}


def test_sections_expire_independently(tmp_path):
    cache = Cache(path=tmp_path / "cache.json", ttl=100)

    with patch('cablelens.cache.time.time', return_value=1000):
        cache.set("8.8.8.8", asn=ASN)
    with patch('cablelens.cache.time.time', return_value=1099):
        cache.set("8.8.8.8", geo=GEO)

    with patch('cablelens.cache.time.time', return_value=1150):
        assert cache.get_asn("8.8.8.8") is None
        assert cache.get_geo("8.8.8.8") == GEO
        assert cache.has("8.8.8.8")

    with patch('cablelens.cache.time.time', return_value=1200):
        assert cache.get_geo("8.8.8.8") is None
        assert not cache.has("8.8.8.8")
