"""
Hop enrichment: geolocation and network ownership for every hop
"""

import asyncio
import logging
from typing import Optional

from ..cache import Cache
from ..models import ASNInfo, GeoInfo, Hop, ROUTE_LAND
from .asn_lookup import ASNLookup, make_asn_info
from .geo_lookup import GeoLookup
from .ip_classifier import IPClassifier


logger = logging.getLogger(__name__)

UNKNOWN = 'Unknown'
PRIVATE_NETWORK = 'Private Network'


def _apply_sentinel(hop: Hop, private: bool):
    hop.lat = None
    hop.lon = None
    hop.is_cdn = False
    hop.cdn_provider = None
    hop.route_type = ROUTE_LAND
    hop.cable_used = None
    if private:
        hop.is_private = True
        hop.city = PRIVATE_NETWORK
        hop.country = 'Private'
        hop.country_code = None
        hop.asn = 'Private'
        hop.org = PRIVATE_NETWORK
    else:
        hop.city = UNKNOWN
        hop.country = UNKNOWN
        hop.country_code = None
        hop.asn = UNKNOWN
        hop.org = UNKNOWN


class HopEnricher:
    """
    Attach geo and ASN data to parsed hops.

    Timeout, address-less and private hops get fixed placeholder values
    and no coordinates. Public addresses go through the cache first and
    then the lookup services; a failed lookup only affects its own hop.
    """

    def __init__(
        self,
        cache: Optional[Cache] = None,
        geo_lookup: Optional[GeoLookup] = None,
        asn_lookup: Optional[ASNLookup] = None
    ):
        self.cache = cache if cache is not None else Cache(persist=False)
        self.geo_lookup = geo_lookup or GeoLookup()
        self.asn_lookup = asn_lookup or ASNLookup()

    async def enrich(self, hops: list[Hop]) -> list[Hop]:
        """
        Enrich hops in place.

        Args:
            hops: Trimmed, ordered hops

        Returns:
            The same list, original order preserved
        """
        public_ips = []
        for hop in hops:
            if hop.is_unresolved:
                _apply_sentinel(hop, private=False)
            elif hop.is_private or IPClassifier.is_private(hop.ip):
                _apply_sentinel(hop, private=True)
            elif not IPClassifier.should_enrich(hop.ip):
                # Multicast, reserved and the like: nothing to look up
                _apply_sentinel(hop, private=False)
            else:
                public_ips.append(hop.ip)

        geo_results, asn_results = await self._lookup(list(dict.fromkeys(public_ips)))

        for hop in hops:
            if hop.ip in geo_results and not hop.is_unresolved:
                self._apply(hop, geo_results.get(hop.ip), asn_results.get(hop.ip))

        return hops

    async def _lookup(self, ips: list[str]) -> tuple[dict[str, Optional[GeoInfo]],
                                                      dict[str, Optional[ASNInfo]]]:
        geo_results: dict[str, Optional[GeoInfo]] = {}
        asn_results: dict[str, Optional[ASNInfo]] = {}

        for ip in ips:
            geo_results[ip] = self.cache.get_geo(ip)
            asn_results[ip] = self.cache.get_asn(ip)

        need_geo = [ip for ip in ips if geo_results[ip] is None]
        need_asn = [ip for ip in ips if asn_results[ip] is None]

        fresh_geo, fresh_asn = await asyncio.gather(
            self.geo_lookup.lookup_many(need_geo) if need_geo else _empty(),
            self.asn_lookup.lookup_many(need_asn) if need_asn else _empty(),
            return_exceptions=True
        )

        if isinstance(fresh_geo, Exception):
            logger.warning("Geolocation lookup failed: %s", fresh_geo)
            fresh_geo = {}
        if isinstance(fresh_asn, Exception):
            logger.warning("ASN lookup failed: %s", fresh_asn)
            fresh_asn = {}

        for ip, geo in fresh_geo.items():
            if geo:
                geo_results[ip] = geo
                self.cache.set(ip, geo=geo)

        for ip, asn in fresh_asn.items():
            if asn:
                asn_results[ip] = asn
                self.cache.set(ip, asn=asn)

        return geo_results, asn_results

    def _apply(self, hop: Hop, geo: Optional[GeoInfo], asn: Optional[ASNInfo]):
        hop.route_type = ROUTE_LAND
        hop.cable_used = None

        # Fallback: ownership reported by the geolocation service
        if asn is None and geo and geo.asn:
            asn = make_asn_info(geo.asn, org=geo.org, country=geo.country_code)

        if geo:
            hop.lat = geo.lat
            hop.lon = geo.lon
            hop.city = geo.city or UNKNOWN
            hop.country = geo.country or UNKNOWN
            hop.country_code = geo.country_code
        else:
            logger.info("No geolocation for hop %d (%s)", hop.hop, hop.ip)
            hop.lat = None
            hop.lon = None
            hop.city = UNKNOWN
            hop.country = UNKNOWN
            # Fallback: country from ASN registry data
            hop.country_code = asn.country if asn else None

        if asn:
            hop.asn = asn.asn
            hop.org = asn.org or UNKNOWN
            hop.is_cdn = asn.is_cdn
            hop.cdn_provider = asn.cdn_provider
        else:
            logger.info("No ASN data for hop %d (%s)", hop.hop, hop.ip)
            hop.asn = UNKNOWN
            hop.org = UNKNOWN
            hop.is_cdn = False
            hop.cdn_provider = None

    async def close(self):
        """Release lookup resources"""
        await self.geo_lookup.close()
        self.asn_lookup.close()


async def _empty() -> dict:
    return {}
