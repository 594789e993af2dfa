"""
Enrichment modules for CableLens
"""

from .ip_classifier import IPClassifier, IPType
from .asn_lookup import ASNLookup, CDN_ASNS
from .geo_lookup import GeoLookup
from .enricher import HopEnricher

__all__ = ['IPClassifier', 'IPType', 'ASNLookup', 'CDN_ASNS', 'GeoLookup', 'HopEnricher']
