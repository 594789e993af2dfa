"""
Shared, lazily loaded cable dataset
"""

import asyncio
import logging
from typing import Optional

from .dataset import CableDataset
from .provider import CableProvider


logger = logging.getLogger(__name__)


class CableStore:
    """
    Holds the current cable dataset for every trace in the process.

    The first caller starts the load; callers arriving while it runs
    await the same task instead of fetching again. Once loaded, the
    dataset is replaced only by refresh(), which swaps in the new
    snapshot in one assignment and keeps the old one if the download
    fails.
    """

    def __init__(self, provider: Optional[CableProvider] = None):
        self.provider = provider or CableProvider()
        self._dataset: Optional[CableDataset] = None
        self._inflight: Optional[asyncio.Task] = None
        self._details: dict[str, dict] = {}

    @property
    def loaded(self) -> bool:
        return self._dataset is not None

    async def get(self) -> CableDataset:
        """
        Current dataset, loading it on first use.

        Returns an empty dataset when nothing could be loaded; the next
        call tries again.
        """
        if self._dataset is not None:
            return self._dataset
        return await self._load(force=False)

    async def refresh(self) -> CableDataset:
        """Download a fresh dataset and swap it in"""
        return await self._load(force=True)

    async def _load(self, force: bool) -> CableDataset:
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._fetch(force))
        # A cancelled caller must not cancel the shared load
        return await asyncio.shield(self._inflight)

    async def _fetch(self, force: bool) -> CableDataset:
        try:
            dataset = await self.provider.fetch(force=force)
        except Exception as e:
            logger.warning("Submarine cable data unavailable: %s", e)
            return self._dataset or CableDataset.empty()
        finally:
            self._inflight = None

        if not dataset:
            logger.warning("Submarine cable dataset is empty, cable detection disabled")
            return self._dataset or dataset

        self._dataset = dataset
        self._details = {}
        return dataset

    async def details(self, cable_id: str) -> dict:
        """Per-cable metadata, fetched once per dataset"""
        if cable_id not in self._details:
            self._details[cable_id] = await self.provider.fetch_details(cable_id)
        return self._details[cable_id]

    async def close(self):
        await self.provider.close()
