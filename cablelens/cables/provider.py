"""
Submarine cable map download with a JSON file cache
"""

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Optional
import httpx

from ..config import (
    CABLE_GEO_URL,
    LANDING_POINT_GEO_URL,
    CABLE_DETAIL_URL,
    CABLE_HTTP_TIMEOUT,
    CABLE_CACHE_PATH,
    CABLE_CACHE_TTL,
)
from .dataset import CableDataset


logger = logging.getLogger(__name__)


class CableProvider:
    """
    Fetches cable geometry from submarinecablemap.com.

    The raw GeoJSON is kept in ~/.cablelens/cables.json and reused while
    it is younger than the TTL. Passing force=True skips the file.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        cache_path: Optional[Path] = CABLE_CACHE_PATH,
        ttl: int = CABLE_CACHE_TTL,
        timeout: float = CABLE_HTTP_TIMEOUT
    ):
        self.cache_path = Path(cache_path) if cache_path else None
        self.ttl = ttl
        self.timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout, headers={'Accept': 'application/json'}
            )
        return self._client

    async def fetch(self, force: bool = False) -> CableDataset:
        """
        Load the dataset from the file cache or the network.

        Args:
            force: Ignore the file cache

        Returns:
            CableDataset

        Raises:
            httpx.HTTPError: cable geometry could not be downloaded
        """
        if not force:
            cached = self._read_cache()
            if cached is not None:
                return cached

        client = await self._get_client()
        cable_resp, landing_resp = await asyncio.gather(
            client.get(CABLE_GEO_URL),
            client.get(LANDING_POINT_GEO_URL),
            return_exceptions=True
        )

        if isinstance(cable_resp, Exception):
            raise cable_resp
        cable_resp.raise_for_status()
        cable_geo = cable_resp.json()

        landing_geo = None
        if isinstance(landing_resp, Exception):
            logger.warning("Landing points unavailable: %s", landing_resp)
        elif landing_resp.status_code == 200:
            landing_geo = landing_resp.json()
        else:
            logger.warning("Landing points unavailable: HTTP %s", landing_resp.status_code)

        fetched_at = time.time()
        dataset = CableDataset.from_geojson(cable_geo, landing_geo, fetched_at=fetched_at)
        logger.info("Loaded %d submarine cables, %d landing points",
                    len(dataset.cables), len(dataset.landing_points))

        self._write_cache(cable_geo, landing_geo, fetched_at)
        return dataset

    async def fetch_details(self, cable_id: str) -> dict:
        """
        Metadata for one cable (length, rfs, owners, url).

        Returns an empty dict when the lookup fails.
        """
        try:
            client = await self._get_client()
            response = await client.get(CABLE_DETAIL_URL.format(cable_id=cable_id))
            if response.status_code != 200:
                logger.debug("No metadata for cable %s: HTTP %s", cable_id, response.status_code)
                return {}
            data = response.json()
            return data if isinstance(data, dict) else {}
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("Metadata lookup for cable %s failed: %s", cable_id, e)
            return {}

    def _read_cache(self) -> Optional[CableDataset]:
        if not self.cache_path or not self.cache_path.exists():
            return None
        try:
            data = json.loads(self.cache_path.read_text(encoding='utf-8'))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable cable cache %s: %s", self.cache_path, e)
            return None

        ts = data.get('_ts', 0)
        if time.time() - ts >= self.ttl:
            return None

        dataset = CableDataset.from_geojson(
            data.get('cables'), data.get('landing_points'), fetched_at=ts
        )
        if not dataset:
            return None
        logger.info("Using cached submarine cable data (%d cables)", len(dataset))
        return dataset

    def _write_cache(self, cable_geo: dict, landing_geo: Optional[dict], ts: float):
        if not self.cache_path:
            return
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            content = json.dumps({'_ts': ts, 'cables': cable_geo, 'landing_points': landing_geo})
            self.cache_path.write_text(content, encoding='utf-8')
        except OSError as e:
            logger.warning("Could not write cable cache %s: %s", self.cache_path, e)

    async def close(self):
        """Close HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None
