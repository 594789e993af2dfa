"""
ASN lookup via Team Cymru DNS service
"""

import asyncio
import logging
from typing import Optional
from concurrent.futures import ThreadPoolExecutor
import dns.resolver
import dns.exception

from ..config import ASN_TIMEOUT
from ..models import ASNInfo
from .ip_classifier import IPClassifier


logger = logging.getLogger(__name__)


# Networks whose presence on a path means a CDN edge
CDN_ASNS = {
    'AS13335': 'Cloudflare',
    'AS16509': 'Amazon AWS',
    'AS15169': 'Google Cloud',
    'AS8075': 'Microsoft Azure',
    'AS20940': 'Akamai',
    'AS16625': 'Akamai',
    'AS14618': 'Amazon CloudFront',
    'AS32934': 'Facebook',
    'AS54113': 'Fastly',
    'AS45102': 'Alibaba Cloud',
}


def make_asn_info(asn: str, org: Optional[str] = None,
                  prefix: Optional[str] = None, country: Optional[str] = None) -> ASNInfo:
    """Build an ASNInfo with the CDN flag derived from the ASN"""
    provider = CDN_ASNS.get(asn)
    return ASNInfo(
        asn=asn,
        org=org,
        prefix=prefix,
        country=country,
        is_cdn=provider is not None,
        cdn_provider=provider
    )


PRIVATE_ASN = ASNInfo(asn='Private', org='Private Network', country='Local')


class ASNLookup:
    """
    ASN lookup via Team Cymru DNS service.

    Uses DNS TXT queries to:
    1. Get ASN from IP: <reversed-ip>.origin.asn.cymru.com
    2. Get org name: AS<asn>.asn.cymru.com

    Free, no API key required, reliable.
    """

    ORIGIN_SUFFIX = "origin.asn.cymru.com"
    ASN_SUFFIX = "asn.cymru.com"

    def __init__(self, timeout: float = ASN_TIMEOUT, max_workers: int = 10):
        self.timeout = timeout
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers)
        self._resolver = dns.resolver.Resolver()
        self._resolver.timeout = timeout
        self._resolver.lifetime = timeout

    def _reverse_ip(self, ip: str) -> str:
        """Reverse IP octets for DNS query"""
        parts = ip.split('.')
        return '.'.join(reversed(parts))

    def _query_txt(self, domain: str) -> Optional[str]:
        """Query TXT record"""
        try:
            answers = self._resolver.resolve(domain, 'TXT')
            for rdata in answers:
                return str(rdata).strip('"')
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer,
                dns.resolver.NoNameservers, dns.exception.Timeout):
            return None
        except dns.exception.DNSException as e:
            logger.debug("TXT query for %s failed: %s", domain, e)
            return None
        return None

    def _parse_origin_response(self, txt: Optional[str]) -> Optional[tuple[str, str, str]]:
        """
        Parse origin.asn.cymru.com response.
        Format: "ASN | Prefix | CC | Registry | Date"
        """
        if not txt:
            return None

        parts = [p.strip() for p in txt.split('|')]
        if len(parts) >= 3:
            # Multi-origin prefixes list several ASNs, keep the first
            asn = parts[0].split()[0] if parts[0] else ''
            if not asn:
                return None
            return asn, parts[1], parts[2]
        return None

    def _parse_asn_response(self, txt: Optional[str]) -> Optional[str]:
        """
        Parse AS<num>.asn.cymru.com response.
        Format: "ASN | CC | Registry | Date | Description"
        """
        if not txt:
            return None

        parts = [p.strip() for p in txt.split('|')]
        if len(parts) >= 5:
            return parts[4]
        return None

    def _lookup_sync(self, ip: str) -> Optional[ASNInfo]:
        """Synchronous ASN lookup"""
        reversed_ip = self._reverse_ip(ip)
        origin_txt = self._query_txt(f"{reversed_ip}.{self.ORIGIN_SUFFIX}")
        parsed = self._parse_origin_response(origin_txt)

        if not parsed:
            return None

        asn_num, prefix, country = parsed

        asn_txt = self._query_txt(f"AS{asn_num}.{self.ASN_SUFFIX}")
        org = self._parse_asn_response(asn_txt)

        return make_asn_info(f"AS{asn_num}", org=org, prefix=prefix, country=country)

    async def lookup(self, ip: str) -> Optional[ASNInfo]:
        """
        Async ASN lookup for single IP.

        Private addresses answer immediately without a query.

        Args:
            ip: IP address

        Returns:
            ASNInfo or None
        """
        if not ip:
            return None

        if IPClassifier.is_private(ip):
            return PRIVATE_ASN

        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(self._executor, self._lookup_sync, ip),
                timeout=self.timeout * 2  # Allow for two queries
            )
        except asyncio.TimeoutError:
            logger.debug("ASN lookup for %s timed out", ip)
            return None

    async def lookup_many(self, ips: list[str]) -> dict[str, Optional[ASNInfo]]:
        """
        Async ASN lookup for multiple IPs in parallel.

        Args:
            ips: List of IP addresses

        Returns:
            Dict mapping IP -> ASNInfo (or None)
        """
        unique_ips = list(dict.fromkeys(ip for ip in ips if ip))

        if not unique_ips:
            return {}

        tasks = [self.lookup(ip) for ip in unique_ips]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        resolved = {}
        for ip, result in zip(unique_ips, results):
            if isinstance(result, Exception):
                logger.warning("ASN lookup failed for %s: %s", ip, result)
            resolved[ip] = result if isinstance(result, ASNInfo) else None
        return resolved

    def close(self):
        """Shutdown thread pool"""
        self._executor.shutdown(wait=False)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
