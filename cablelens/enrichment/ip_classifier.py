"""
Address scope checks shared by the parsers and the enricher
"""

import ipaddress
from enum import Enum
from typing import Optional


class IPType(Enum):
    """Where an address lives"""
    PRIVATE = "private"
    CGNAT = "cgnat"
    LOOPBACK = "loopback"
    LINKLOCAL = "linklocal"
    MULTICAST = "multicast"
    RESERVED = "reserved"
    PUBLIC = "public"
    UNKNOWN = "unknown"


CGNAT_NETWORK = ipaddress.IPv4Network('100.64.0.0/10')

# First matching rule wins. CGNAT must precede is_private.
_RULES = (
    (IPType.LOOPBACK, lambda addr: addr.is_loopback),
    (IPType.LINKLOCAL, lambda addr: addr.is_link_local),
    (IPType.MULTICAST, lambda addr: addr.is_multicast),
    (IPType.CGNAT, lambda addr: addr in CGNAT_NETWORK),
    (IPType.PRIVATE, lambda addr: addr.is_private),
    (IPType.RESERVED, lambda addr: addr.is_reserved),
    (IPType.PUBLIC, lambda addr: addr.is_global),
)

# Hops in these ranges get the "Private Network" placeholder
LOCAL_TYPES = frozenset({IPType.PRIVATE, IPType.CGNAT, IPType.LOOPBACK, IPType.LINKLOCAL})


def _parse(ip: Optional[str]) -> Optional[ipaddress.IPv4Address]:
    if not ip:
        return None
    try:
        return ipaddress.IPv4Address(ip)
    except (ipaddress.AddressValueError, ValueError):
        return None


class IPClassifier:
    """
    Classify hop addresses.

    Parsers use is_valid() to accept dotted quads and is_private() to
    flag local hops; the enricher uses should_enrich() to decide which
    addresses go to the lookup services.
    """

    @classmethod
    def classify(cls, ip: Optional[str]) -> IPType:
        """
        Classify an IPv4 address.

        Args:
            ip: Dotted quad, anything else is UNKNOWN

        Returns:
            IPType enum value
        """
        addr = _parse(ip)
        if addr is None:
            return IPType.UNKNOWN

        for ip_type, matches in _RULES:
            if matches(addr):
                return ip_type
        return IPType.UNKNOWN

    @classmethod
    def is_valid(cls, ip: Optional[str]) -> bool:
        """Check for a well-formed dotted quad"""
        return _parse(ip) is not None

    @classmethod
    def is_private(cls, ip: Optional[str]) -> bool:
        """Private, CGNAT, loopback or link-local"""
        return cls.classify(ip) in LOCAL_TYPES

    @classmethod
    def should_enrich(cls, ip: Optional[str]) -> bool:
        """Only globally routable addresses are worth a lookup"""
        return cls.classify(ip) == IPType.PUBLIC
