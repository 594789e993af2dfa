"""
Geographic IP lookup via ip-api.com
"""

import asyncio
import logging
import re
from typing import Optional
import httpx

from ..config import GEO_TIMEOUT
from ..models import GeoInfo


logger = logging.getLogger(__name__)

AS_FIELD = re.compile(r'AS(\d+)')


def geo_from_api(data: dict) -> Optional[GeoInfo]:
    """Build GeoInfo from an ip-api.com record, None unless status is success"""
    if data.get('status') != 'success':
        return None

    asn = None
    match = AS_FIELD.search(data.get('as') or '')
    if match:
        asn = f"AS{match.group(1)}"

    return GeoInfo(
        country=data.get('country'),
        country_code=data.get('countryCode'),
        city=data.get('city') or None,
        lat=data.get('lat'),
        lon=data.get('lon'),
        timezone=data.get('timezone'),
        asn=asn,
        org=data.get('org') or None
    )


class GeoLookup:
    """
    Geographic IP lookup via ip-api.com.

    Free tier: 45 requests/minute (sufficient for traceroute).
    No API key required.
    """

    API_URL = "http://ip-api.com/json/{ip}"
    BATCH_URL = "http://ip-api.com/batch"
    FIELDS = "status,country,countryCode,city,lat,lon,timezone,as,org,query"

    def __init__(self, timeout: float = GEO_TIMEOUT,
                 client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def lookup(self, ip: str) -> Optional[GeoInfo]:
        """
        Lookup geo info for single IP.

        Args:
            ip: IP address

        Returns:
            GeoInfo or None when the address is unknown
        """
        if not ip:
            return None

        try:
            client = await self._get_client()
            response = await client.get(
                self.API_URL.format(ip=ip), params={'fields': self.FIELDS}
            )

            if response.status_code != 200:
                logger.debug("Geo lookup for %s returned HTTP %s", ip, response.status_code)
                return None

            return geo_from_api(response.json())

        except (httpx.HTTPError, ValueError) as e:
            logger.debug("Geo lookup for %s failed: %s", ip, e)
            return None

    async def lookup_many(self, ips: list[str]) -> dict[str, Optional[GeoInfo]]:
        """
        Lookup geo info for multiple IPs using batch API.

        Args:
            ips: List of IP addresses

        Returns:
            Dict mapping IP -> GeoInfo (or None)
        """
        unique_ips = list(dict.fromkeys(ip for ip in ips if ip))

        if not unique_ips:
            return {}

        # Batch API supports up to 100 IPs
        results = {}
        for i in range(0, len(unique_ips), 100):
            chunk = unique_ips[i:i + 100]
            results.update(await self._batch_lookup(chunk))

            # Rate limiting pause between chunks
            if i + 100 < len(unique_ips):
                await asyncio.sleep(1)

        return results

    async def _batch_lookup(self, ips: list[str]) -> dict[str, Optional[GeoInfo]]:
        """Batch lookup for up to 100 IPs"""
        try:
            client = await self._get_client()
            query = [{"query": ip, "fields": self.FIELDS} for ip in ips]

            response = await client.post(self.BATCH_URL, json=query)

            if response.status_code != 200:
                return await self._individual_lookups(ips)

            results: dict[str, Optional[GeoInfo]] = {ip: None for ip in ips}
            for item in response.json():
                ip = item.get('query')
                if ip in results:
                    results[ip] = geo_from_api(item)

            return results

        except (httpx.HTTPError, ValueError) as e:
            logger.debug("Batch geo lookup failed, falling back to single lookups: %s", e)
            return await self._individual_lookups(ips)

    async def _individual_lookups(self, ips: list[str]) -> dict[str, Optional[GeoInfo]]:
        """Fallback to individual lookups"""
        tasks = [self.lookup(ip) for ip in ips]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        return {
            ip: (result if isinstance(result, GeoInfo) else None)
            for ip, result in zip(ips, results)
        }

    async def close(self):
        """Close HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
