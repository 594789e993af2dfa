"""
Simple JSON file cache for enrichment data
"""

import json
import logging
import threading
import time
from pathlib import Path
from typing import Optional

from .config import ENRICHMENT_CACHE_PATH, ENRICHMENT_CACHE_TTL
from .models import ASNInfo, GeoInfo


logger = logging.getLogger(__name__)

# Each section expires on its own timestamp
SECTIONS = ('geo', 'asn')


class Cache:
    """
    Simple JSON file cache.

    Stores per-IP geo and ASN data in ~/.cablelens/cache.json. Geo and
    ASN sections carry separate timestamps and expire independently.
    Reads and writes hold a lock so concurrent traces touching the same
    address are safe. Pass persist=False for a memory-only
    cache.
    """

    DEFAULT_PATH = ENRICHMENT_CACHE_PATH
    DEFAULT_TTL = ENRICHMENT_CACHE_TTL

    def __init__(self, path: Optional[Path] = None, ttl: Optional[int] = None,
                 persist: bool = True):
        self.path = Path(path) if path else self.DEFAULT_PATH
        self.ttl = self.DEFAULT_TTL if ttl is None else ttl
        self.persist = persist
        self._data: dict[str, dict] = {}
        self._dirty = False
        self._lock = threading.RLock()
        if persist:
            self._load()

    def _load(self):
        """Load cache from file"""
        if not self.path.exists():
            return
        try:
            content = self.path.read_text(encoding='utf-8')
            self._data = json.loads(content)
            self._cleanup_expired()
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable cache %s: %s", self.path, e)
            self._data = {}

    def _save(self):
        """Save cache to file"""
        if not self._dirty or not self.persist:
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            content = json.dumps(self._data, indent=2, ensure_ascii=False)
            self.path.write_text(content, encoding='utf-8')
            self._dirty = False
        except OSError as e:
            # Cache is not critical
            logger.warning("Could not write cache %s: %s", self.path, e)

    def _cleanup_expired(self):
        """Remove expired entries"""
        expired = [ip for ip, entry in self._data.items() if not self._is_valid(entry)]

        for ip in expired:
            del self._data[ip]

        if expired:
            self._dirty = True

    def _is_fresh(self, entry: dict, section: str) -> bool:
        """Check one section ('geo' or 'asn') against its own timestamp"""
        ts = entry.get(f'{section}_ts', 0)
        return time.time() - ts < self.ttl

    def _is_valid(self, entry: dict) -> bool:
        """Check if any section of the entry is still valid"""
        return any(self._is_fresh(entry, section) for section in SECTIONS)

    def _section(self, ip: str, section: str, marker: str) -> Optional[dict]:
        with self._lock:
            entry = self._data.get(ip)
            if entry and marker in entry and self._is_fresh(entry, section):
                return dict(entry)
            return None

    def get(self, ip: str) -> Optional[dict]:
        """
        Get cached data for IP.

        Args:
            ip: IP address

        Returns:
            Copy of the cached entry, None if missing or expired
        """
        with self._lock:
            entry = self._data.get(ip)
            if entry and self._is_valid(entry):
                return dict(entry)
            return None

    def get_asn(self, ip: str) -> Optional[ASNInfo]:
        """Get cached ASN info"""
        entry = self._section(ip, 'asn', 'asn')
        if entry:
            return ASNInfo(
                asn=entry.get('asn'),
                org=entry.get('org'),
                prefix=entry.get('prefix'),
                country=entry.get('asn_country'),
                is_cdn=entry.get('is_cdn', False),
                cdn_provider=entry.get('cdn_provider')
            )
        return None

    def get_geo(self, ip: str) -> Optional[GeoInfo]:
        """Get cached geo info"""
        entry = self._section(ip, 'geo', 'geo_country')
        if entry:
            return GeoInfo(
                country=entry.get('geo_country'),
                country_code=entry.get('geo_country_code'),
                city=entry.get('geo_city'),
                lat=entry.get('geo_lat'),
                lon=entry.get('geo_lon'),
                timezone=entry.get('geo_timezone'),
                asn=entry.get('geo_asn'),
                org=entry.get('geo_org')
            )
        return None

    def set(self, ip: str,
            asn: Optional[ASNInfo] = None,
            geo: Optional[GeoInfo] = None):
        """
        Set cache data for IP.

        Args:
            ip: IP address
            asn: ASN info
            geo: Geo info
        """
        with self._lock:
            entry = self._data.get(ip, {})
            now = time.time()

            if asn:
                entry['asn_ts'] = now
                entry['asn'] = asn.asn
                entry['org'] = asn.org
                entry['prefix'] = asn.prefix
                entry['asn_country'] = asn.country
                entry['is_cdn'] = asn.is_cdn
                entry['cdn_provider'] = asn.cdn_provider

            if geo:
                entry['geo_ts'] = now
                entry['geo_country'] = geo.country
                entry['geo_country_code'] = geo.country_code
                entry['geo_city'] = geo.city
                entry['geo_lat'] = geo.lat
                entry['geo_lon'] = geo.lon
                entry['geo_timezone'] = geo.timezone
                entry['geo_asn'] = geo.asn
                entry['geo_org'] = geo.org

            self._data[ip] = entry
            self._dirty = True

    def has(self, ip: str) -> bool:
        """Check if IP is in cache and valid"""
        return self.get(ip) is not None

    def save(self):
        """Manually trigger save"""
        with self._lock:
            self._save()

    def clear(self):
        """Clear all cache entries"""
        with self._lock:
            self._data = {}
            self._dirty = True
            self._save()

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for entry in self._data.values() if self._is_valid(entry))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.save()
        return False
