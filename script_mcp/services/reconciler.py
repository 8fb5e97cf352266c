"""Reconciliation passes over stored script resources.

One pass for one resource:

1. Decode credentials and open a connection (bounded retry)
2. Deletion requested: run cleanup once, then forget the resource
3. Otherwise observe with the status check, then create or update as the
   observation demands, in the same pass
4. Close the connection

Errors never escape a pass. They are logged and recorded on the resource,
and the poll loop (or the next tool call) is the retry mechanism.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from script_mcp.config import Settings
from script_mcp.errors import (
    InvalidConfigurationError,
    ScriptExitError,
    ScriptMCPError,
)
from script_mcp.models import (
    Action,
    ConnectionCredentials,
    Readiness,
    ScriptResource,
)
from script_mcp.protocols import Connector
from script_mcp.services.connection import connect
from script_mcp.services.controller import ScriptController, next_action
from script_mcp.services.store import ResourceStore

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass."""

    name: str
    action: Action
    readiness: Readiness
    deleted: bool = False
    deleting: bool = False
    error: ScriptMCPError | None = None

    @property
    def requeue(self) -> bool:
        """Whether another pass is expected to make progress."""
        if self.deleted:
            return False
        if self.deleting:
            # The next pass completes the deletion
            return True
        if self.error is not None:
            return self.error.transient
        return self.readiness is not Readiness.READY


class Reconciler:
    """Drives script resources toward their desired state."""

    def __init__(
        self,
        store: ResourceStore,
        settings: Settings | None = None,
        connector: Connector = connect,
    ) -> None:
        self.store = store
        self.settings = settings or Settings()
        self._connector = connector
        self._poll_task: asyncio.Task[Any] | None = None

    async def _open_session(self, resource: ScriptResource) -> Any:
        credentials = ConnectionCredentials.from_payload(resource.credentials)
        return await self._connector(
            credentials,
            max_attempts=self.settings.connect_attempts,
            retry_delay=self.settings.connect_retry_delay,
            connect_timeout=self.settings.connect_timeout or None,
        )

    async def reconcile(self, name: str) -> ReconcileResult:
        """Run one reconciliation pass for a resource.

        Raises:
            KeyError: If the resource does not exist
        """
        resource_lock = await self.store.lock(name)
        async with resource_lock:
            resource = self.store.get(name)
            if resource is None:
                raise KeyError(name)

            logger.info("[%s] Reconciling (deleting=%s)", name, resource.deleting)
            resource.touch()

            if resource.deleting and (resource.cleanup_attempted or not resource.bundle.cleanup):
                # Cleanup already ran once for this request, or there is none
                resource.cleanup_attempted = True
                await self.store.remove(name)
                return self._finish(resource, Action.DELETE, deleted=True)

            try:
                session = await self._open_session(resource)
            except ScriptMCPError as e:
                if resource.deleting and isinstance(e, InvalidConfigurationError):
                    resource.cleanup_attempted = True
                return self._fail(resource, Action.NONE, e)

            try:
                if resource.deleting:
                    return await self._delete(resource, session)
                return await self._sync(resource, session)
            finally:
                await session.close()

    async def _sync(self, resource: ScriptResource, session: Any) -> ReconcileResult:
        controller = self._controller(session)
        observation = resource.observation

        try:
            external = await controller.observe(resource.bundle, observation)
        except ScriptMCPError as e:
            return self._fail(resource, Action.NONE, e)

        if external.resource_up_to_date:
            logger.debug("[%s] Resource is up to date", resource.name)
            return self._finish(resource, Action.NONE)

        action = next_action(resource.bundle, observation)
        try:
            if action is Action.CREATE:
                logger.info("[%s] Resource absent, running init script", resource.name)
                await controller.create(resource.bundle, observation)
            elif action is Action.UPDATE:
                logger.info(
                    "[%s] Resource not up to date (exit=%s), running update script",
                    resource.name,
                    external.exit_code,
                )
                await controller.update(resource.bundle, observation)
        except ScriptMCPError as e:
            return self._fail(resource, action, e)

        return self._finish(resource, action)

    async def _delete(self, resource: ScriptResource, session: Any) -> ReconcileResult:
        controller = self._controller(session)
        resource.cleanup_attempted = True
        try:
            await controller.delete(resource.bundle, resource.observation)
        except ScriptMCPError as e:
            return self._fail(resource, Action.DELETE, e)

        await self.store.remove(resource.name)
        return self._finish(resource, Action.DELETE, deleted=True)

    def _controller(self, session: Any) -> ScriptController:
        return ScriptController(
            session,
            tmp_dir=self.settings.tmp_dir,
            timeout=self.settings.script_timeout,
        )

    def _finish(
        self,
        resource: ScriptResource,
        action: Action,
        deleted: bool = False,
    ) -> ReconcileResult:
        resource.last_action = action
        resource.last_error = None
        readiness = resource.observation.readiness
        logger.info(
            "[%s] Reconcile complete (action=%s, readiness=%s%s)",
            resource.name,
            action.value,
            readiness.value,
            ", deleted" if deleted else "",
        )
        return ReconcileResult(
            resource.name,
            action,
            readiness,
            deleted=deleted,
            deleting=resource.deleting,
        )

    def _fail(
        self,
        resource: ScriptResource,
        action: Action,
        error: ScriptMCPError,
    ) -> ReconcileResult:
        observation = resource.observation
        if isinstance(error, InvalidConfigurationError):
            observation.readiness = Readiness.FATAL
        elif isinstance(error, ScriptExitError) and error.fatal:
            observation.readiness = Readiness.FATAL
        elif action is Action.NONE and not resource.deleting:
            # Observation could not complete
            observation.readiness = Readiness.UNKNOWN
        observation.message = str(error)

        resource.last_action = action
        resource.last_error = f"{error.category}: {error}"
        log = logger.warning if error.transient else logger.error
        log(
            "[%s] Reconcile failed (action=%s, readiness=%s): %s",
            resource.name,
            action.value,
            observation.readiness.value,
            resource.last_error,
        )
        return ReconcileResult(
            resource.name,
            action,
            observation.readiness,
            deleting=resource.deleting,
            error=error,
        )

    async def reconcile_all(self) -> list[ReconcileResult]:
        """Reconcile every stored resource, one task per resource."""
        names = self.store.names()
        if not names:
            return []

        results = await asyncio.gather(
            *(self.reconcile(name) for name in names),
            return_exceptions=True,
        )
        completed: list[ReconcileResult] = []
        for name, result in zip(names, results, strict=True):
            if isinstance(result, KeyError):
                # Removed while the pass was queued
                continue
            if isinstance(result, BaseException):
                logger.error("[%s] Unexpected reconcile error: %s", name, result)
                continue
            completed.append(result)

        pending = [r.name for r in completed if r.requeue]
        if pending:
            logger.info("Resources pending another pass: %s", ", ".join(pending))
        return completed

    def start_polling(self, interval: float | None = None) -> None:
        """Start the periodic reconcile loop.

        Args:
            interval: Seconds between passes; defaults to settings. 0 disables.
        """
        interval = self.settings.poll_interval if interval is None else interval
        if interval <= 0:
            logger.info("Periodic reconciliation disabled")
            return
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.create_task(self._poll_loop(interval))
            logger.info("Started periodic reconciliation (interval=%ss)", interval)

    async def _poll_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.reconcile_all()

    async def stop(self) -> None:
        """Stop the periodic reconcile loop."""
        if self._poll_task and not self._poll_task.done():
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
            logger.debug("Poll task cancelled")
        self._poll_task = None
