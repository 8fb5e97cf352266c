"""Reconciliation state machine for script resources.

The status-check script's exit status drives the classification:

    0      -> READY              nothing to do
    1      -> FATAL              unrecoverable, surface as terminal error
    100    -> ABSENT             run init
    other  -> NEEDS_REMEDIATION  run update
    none   -> UNKNOWN            transport or staging problem, report error

ScriptController runs the individual lifecycle phases against one session
and records their outcome in the resource observation. It never decides
when to run; that is the reconciler's job.
"""

import logging

from script_mcp.errors import ScriptExitError
from script_mcp.models import (
    Action,
    ExecutionResult,
    ExternalObservation,
    Readiness,
    ResourceObservation,
    ScriptBundle,
)
from script_mcp.protocols import RemoteSession
from script_mcp.services.runner import execute_script

logger = logging.getLogger(__name__)

EXIT_READY = 0
EXIT_FATAL = 1
EXIT_ABSENT = 100


def classify_exit_status(exit_status: int | None) -> Readiness:
    """Map a status-check exit status to a readiness classification."""
    if exit_status is None:
        return Readiness.UNKNOWN
    if exit_status == EXIT_READY:
        return Readiness.READY
    if exit_status == EXIT_FATAL:
        return Readiness.FATAL
    if exit_status == EXIT_ABSENT:
        return Readiness.ABSENT
    return Readiness.NEEDS_REMEDIATION


def next_action(
    bundle: ScriptBundle,
    observation: ResourceObservation,
    deleting: bool = False,
) -> Action:
    """Choose the next lifecycle step from the latest observation.

    Args:
        bundle: Scripts of the resource
        observation: Most recent observation
        deleting: Whether deletion was requested

    Returns:
        Action to take
    """
    if deleting:
        return Action.DELETE

    readiness = observation.readiness
    if readiness is Readiness.ABSENT:
        return Action.CREATE
    if readiness is Readiness.NEEDS_REMEDIATION:
        return Action.UPDATE if bundle.update else Action.NONE
    if readiness is Readiness.FATAL:
        return Action.FAIL
    return Action.NONE


class ScriptController:
    """Runs lifecycle scripts for a resource over one session."""

    def __init__(
        self,
        session: RemoteSession,
        tmp_dir: str = "/tmp",
        timeout: float | None = None,
    ) -> None:
        """Initialize controller.

        Args:
            session: Remote session, open for the whole reconciliation pass
            tmp_dir: Remote directory for staged scripts
            timeout: Per-script timeout in seconds, or None
        """
        self.session = session
        self.tmp_dir = tmp_dir
        self.timeout = timeout

    async def _execute(self, bundle: ScriptBundle, script: str) -> ExecutionResult:
        return await execute_script(
            self.session,
            script,
            bundle.variables,
            bundle.sudo_enabled,
            tmp_dir=self.tmp_dir,
            timeout=self.timeout,
        )

    async def observe(
        self,
        bundle: ScriptBundle,
        observation: ResourceObservation,
    ) -> ExternalObservation:
        """Run the status check and classify the resource.

        Without a status-check script the resource counts as READY once
        created and ABSENT before that.

        Raises:
            ScriptExitError: If the status check exited with status 1
            ScriptMCPError: If the status check could not be run
        """
        if not bundle.status_check:
            readiness = Readiness.READY if observation.created else Readiness.ABSENT
            observation.readiness = readiness
            logger.debug("No status check script, readiness=%s", readiness.value)
            return ExternalObservation(
                resource_exists=observation.created,
                resource_up_to_date=observation.created,
                readiness=readiness,
            )

        result = await self._execute(bundle, bundle.status_check)
        readiness = classify_exit_status(result.exit_status)
        observation.record(result, readiness)

        if result.error is not None:
            logger.warning("Status check could not run: %s", result.error)
            raise result.error

        logger.info(
            "Status check exited with %d, readiness=%s",
            result.exit_status,
            readiness.value,
        )

        if readiness is Readiness.FATAL:
            assert result.exit_status is not None
            raise ScriptExitError(
                result.exit_status,
                stdout=result.stdout,
                stderr=result.stderr,
                phase="statusCheck",
                fatal=True,
            )

        if readiness is not Readiness.ABSENT:
            observation.created = True

        return ExternalObservation(
            resource_exists=readiness is not Readiness.ABSENT,
            resource_up_to_date=readiness is Readiness.READY,
            readiness=readiness,
            exit_code=result.exit_status,
        )

    async def _run_phase(
        self,
        phase: str,
        script: str,
        bundle: ScriptBundle,
        observation: ResourceObservation,
    ) -> ExecutionResult | None:
        """Run one mutating phase; any failure is fatal."""
        if not script:
            logger.debug("No %s script, skipping", phase)
            return None

        result = await self._execute(bundle, script)
        if result.succeeded:
            observation.record(result)
            return result

        observation.record(result, Readiness.FATAL)
        logger.error("%s script failed: %s", phase, result.error or result.exit_status)
        if result.error is not None:
            raise result.error
        assert result.exit_status is not None
        raise ScriptExitError(
            result.exit_status,
            stdout=result.stdout,
            stderr=result.stderr,
            phase=phase,
            fatal=True,
        )

    async def create(self, bundle: ScriptBundle, observation: ResourceObservation) -> None:
        """Run the init script.

        Success marks the resource created; readiness is left for the next
        status check to confirm.

        Raises:
            ScriptExitError: If init exited nonzero (readiness FATAL)
            ScriptMCPError: If init could not be run (readiness FATAL)
        """
        await self._run_phase("init", bundle.init, bundle, observation)
        observation.created = True

    async def update(self, bundle: ScriptBundle, observation: ResourceObservation) -> None:
        """Run the update script.

        Raises:
            ScriptExitError: If update exited nonzero (readiness FATAL)
            ScriptMCPError: If update could not be run (readiness FATAL)
        """
        await self._run_phase("update", bundle.update, bundle, observation)

    async def delete(self, bundle: ScriptBundle, observation: ResourceObservation) -> None:
        """Run the cleanup script, if any.

        A failed cleanup does not block deletion, so its exit error is
        raised as transient.

        Raises:
            ScriptExitError: If cleanup exited nonzero
            ScriptMCPError: If cleanup could not be run
        """
        if not bundle.cleanup:
            logger.debug("No cleanup script, nothing to run")
            return

        result = await self._execute(bundle, bundle.cleanup)
        observation.record(result)
        if not result.succeeded:
            logger.warning("cleanup script failed: %s", result.error or result.exit_status)
        result.check(phase="cleanup", fatal=False)
        observation.created = False
