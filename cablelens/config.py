"""
Tunable constants for CableLens
"""

from pathlib import Path


DATA_DIR = Path.home() / '.cablelens'

# Probing
MAX_HOPS = 20
EXPECTED_PROBES = 3
MAX_OUTPUT_BYTES = 1024 * 1024
WINDOWS_MAX_OUTPUT_BYTES = 10 * 1024 * 1024

MTR_TIMEOUT = 45  # seconds
TRACEROUTE_TIMEOUT = 60
TCPTRACEROUTE_TIMEOUT = 60
TRACERT_TIMEOUT = 120
TCP_PROBE_PORT = 443

# Enrichment
ENRICHMENT_CACHE_PATH = DATA_DIR / 'cache.json'
ENRICHMENT_CACHE_TTL = 24 * 3600
GEO_TIMEOUT = 5.0
ASN_TIMEOUT = 3.0
DNS_TIMEOUT = 5.0

# Route classification
EARTH_RADIUS_KM = 6371.0
LAND_DISTANCE_KM = 500  # shorter segments are always overland
FRAGMENTED_COUNTRY_KM = 1000
CABLE_PROXIMITY_KM = 500
UNKNOWN_CONTINENT_SEA_KM = 800
LANDING_POINT_RADIUS_KM = 200  # landing station shown for a cable endpoint

# Europe <-> Asia pairs with both ends inside this band are treated as
# an overland Eurasian route.
EURASIA_MIN_LAT = 40.0
EURASIA_MIN_LON = 0.0

# Cable dataset
CABLE_API_BASE = "https://www.submarinecablemap.com/api/v3"
CABLE_GEO_URL = f"{CABLE_API_BASE}/cable/cable-geo.json"
LANDING_POINT_GEO_URL = f"{CABLE_API_BASE}/landing-point/landing-point-geo.json"
CABLE_DETAIL_URL = CABLE_API_BASE + "/cable/{cable_id}.json"
CABLE_HTTP_TIMEOUT = 20.0
CABLE_CACHE_PATH = DATA_DIR / 'cables.json'
CABLE_CACHE_TTL = 24 * 3600
