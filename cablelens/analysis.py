"""
Path-level figures: distances, total latency, CDN presence
"""

import logging

from .geodesy import haversine
from .models import CdnInfo, DistanceSummary, Hop, ROUTE_SEA


logger = logging.getLogger(__name__)


# Lower-case organization substring -> provider name
CDN_BRANDS = {
    'cloudflare': 'Cloudflare',
    'akamai': 'Akamai',
    'fastly': 'Fastly',
    'cloudfront': 'Amazon CloudFront',
    'edgecast': 'Edgecast',
    'limelight': 'Limelight',
    'incapsula': 'Imperva',
    'stackpath': 'StackPath',
    'bunnycdn': 'BunnyCDN',
}


def calculate_distances(hops: list[Hop]) -> DistanceSummary:
    """
    Sum segment distances by route type.

    Uses the route type already written by the classifier on the leading
    hop of each pair. Each leading hop gets its rounded segment distance;
    the last hop gets 0.

    Args:
        hops: Classified hops

    Returns:
        DistanceSummary in km
    """
    total = land = sea = 0.0

    for leading, trailing in zip(hops, hops[1:]):
        if not leading.has_coordinates or not trailing.has_coordinates:
            leading.distance_to_next = None
            continue

        distance = haversine(leading.lat, leading.lon, trailing.lat, trailing.lon)

        if leading.route_type == ROUTE_SEA:
            sea += distance
        else:
            land += distance

        total += distance
        leading.distance_to_next = round(distance)

    if hops:
        hops[-1].distance_to_next = 0

    return DistanceSummary(total=round(total), land=round(land), sea=round(sea))


def calculate_total_time(hops: list[Hop]) -> float:
    """
    Round-trip latency of the path.

    The RTT of the deepest hop that answered already covers the whole
    round trip, so it is reported as is.

    Returns:
        RTT in ms rounded to 3 places, 0 if no hop has RTT data
    """
    for hop in reversed(hops):
        if not hop.timeout and hop.rtt is not None and hop.rtt > 0:
            logger.debug("Total RTT %.3f ms from hop %d", hop.rtt, hop.hop)
            return round(hop.rtt, 3)

    logger.warning("No valid RTT data found")
    return 0.0


def detect_cdn(hops: list[Hop]) -> CdnInfo:
    """
    Find the first CDN-owned hop.

    An explicit CDN flag from the ASN data wins over organization
    name matching anywhere on the path.
    """
    for hop in hops:
        if hop.is_cdn and hop.cdn_provider:
            return CdnInfo(detected=True, provider=hop.cdn_provider, hop=hop.hop)

    for hop in hops:
        if hop.is_unresolved or hop.is_private or not hop.org:
            continue
        org = hop.org.lower()
        for brand, provider in CDN_BRANDS.items():
            if brand in org:
                return CdnInfo(detected=True, provider=provider, hop=hop.hop)

    return CdnInfo()
