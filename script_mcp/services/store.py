"""In-memory store of script resources.

Locking Strategy:
- `_meta_lock`: Protects the _resources and _locks dict structure
- Per-resource locks: Serialize reconciliation of one resource so a single
  worker handles it at a time; different resources proceed concurrently
"""

import asyncio
import logging
from typing import Any

from script_mcp.models import ScriptBundle, ScriptResource

logger = logging.getLogger(__name__)


class ResourceStore:
    """Holds script resources by name."""

    def __init__(self) -> None:
        self._resources: dict[str, ScriptResource] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._meta_lock = asyncio.Lock()

    async def lock(self, name: str) -> asyncio.Lock:
        """Get or create the lock for a resource."""
        async with self._meta_lock:
            if name not in self._locks:
                self._locks[name] = asyncio.Lock()
            return self._locks[name]

    async def put(
        self,
        name: str,
        credentials: dict[str, Any],
        bundle: ScriptBundle,
    ) -> ScriptResource:
        """Create a resource or replace the scripts of an existing one.

        Replacing keeps the previous observation so the next pass compares
        against what was last seen on the host.
        """
        resource_lock = await self.lock(name)
        async with resource_lock:
            existing = self._resources.get(name)
            if existing is None:
                resource = ScriptResource(name=name, credentials=credentials, bundle=bundle)
                logger.info("Registered script resource %s", name)
            else:
                existing.credentials = credentials
                existing.bundle = bundle
                resource = existing
                logger.info("Updated script resource %s", name)

            async with self._meta_lock:
                self._resources[name] = resource
            return resource

    def get(self, name: str) -> ScriptResource | None:
        """Get a resource by name."""
        return self._resources.get(name)

    async def remove(self, name: str) -> None:
        """Forget a resource. Safe to call for unknown names."""
        async with self._meta_lock:
            if self._resources.pop(name, None) is not None:
                logger.info("Removed script resource %s (store_size=%d)", name, len(self._resources))
            self._locks.pop(name, None)

    def mark_deleting(self, name: str) -> ScriptResource | None:
        """Flag a resource for deletion on the next pass."""
        resource = self._resources.get(name)
        if resource is not None and not resource.deleting:
            resource.deleting = True
            logger.info("Deletion requested for script resource %s", name)
        return resource

    def names(self) -> list[str]:
        """Return names of all resources."""
        return sorted(self._resources)

    @property
    def size(self) -> int:
        """Return the number of resources."""
        return len(self._resources)
