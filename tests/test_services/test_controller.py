"""Tests for the reconciliation state machine."""

from typing import Any, Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from script_mcp.errors import ExecutionFailure, ScriptExitError, TransferFailure
from script_mcp.models import (
    Action,
    ExecutionResult,
    Readiness,
    ResourceObservation,
    ScriptBundle,
    Variable,
)
from script_mcp.services.controller import (
    ScriptController,
    classify_exit_status,
    next_action,
)

BUNDLE = ScriptBundle(
    init="init-script",
    status_check="status-script",
    update="update-script",
    cleanup="cleanup-script",
    variables=[Variable("X", "1")],
    sudo_enabled=True,
)


@pytest.fixture
def mock_execute() -> Generator[AsyncMock, None, None]:
    """Patch execute_script as used by the controller."""
    with patch("script_mcp.services.controller.execute_script", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
def controller() -> ScriptController:
    return ScriptController(MagicMock(), tmp_dir="/var/tmp", timeout=10)


def scripts_run(mock_execute: AsyncMock) -> list[str]:
    return [c.args[1] for c in mock_execute.call_args_list]


@pytest.mark.parametrize(
    ("exit_status", "expected"),
    [
        (0, Readiness.READY),
        (1, Readiness.FATAL),
        (100, Readiness.ABSENT),
        (2, Readiness.NEEDS_REMEDIATION),
        (99, Readiness.NEEDS_REMEDIATION),
        (101, Readiness.NEEDS_REMEDIATION),
        (255, Readiness.NEEDS_REMEDIATION),
        (-9, Readiness.NEEDS_REMEDIATION),
        (None, Readiness.UNKNOWN),
    ],
)
def test_classify_exit_status(exit_status: int | None, expected: Readiness) -> None:
    """Exit status maps to readiness."""
    assert classify_exit_status(exit_status) is expected


@pytest.mark.parametrize(
    ("readiness", "bundle", "expected"),
    [
        (Readiness.ABSENT, BUNDLE, Action.CREATE),
        (Readiness.NEEDS_REMEDIATION, BUNDLE, Action.UPDATE),
        (Readiness.NEEDS_REMEDIATION, ScriptBundle(status_check="s"), Action.NONE),
        (Readiness.READY, BUNDLE, Action.NONE),
        (Readiness.FATAL, BUNDLE, Action.FAIL),
        (Readiness.UNKNOWN, BUNDLE, Action.NONE),
    ],
)
def test_next_action(readiness: Readiness, bundle: ScriptBundle, expected: Action) -> None:
    """Readiness maps to the next lifecycle step."""
    assert next_action(bundle, ResourceObservation(readiness=readiness)) is expected


def test_next_action_deleting_wins() -> None:
    """Deletion overrides any readiness."""
    observation = ResourceObservation(readiness=Readiness.ABSENT)
    assert next_action(BUNDLE, observation, deleting=True) is Action.DELETE


class TestObserve:
    """Test ScriptController.observe."""

    @pytest.mark.asyncio
    async def test_ready(self, controller: ScriptController, mock_execute: AsyncMock) -> None:
        mock_execute.return_value = ExecutionResult(stdout="ok", stderr="", exit_status=0)
        observation = ResourceObservation()

        result = await controller.observe(BUNDLE, observation)

        assert result.resource_exists
        assert result.resource_up_to_date
        assert result.readiness is Readiness.READY
        assert observation.stdout == "ok"
        assert observation.exit_code == 0
        assert observation.created
        mock_execute.assert_awaited_once_with(
            controller.session,
            "status-script",
            BUNDLE.variables,
            True,
            tmp_dir="/var/tmp",
            timeout=10,
        )

    @pytest.mark.asyncio
    async def test_absent(self, controller: ScriptController, mock_execute: AsyncMock) -> None:
        mock_execute.return_value = ExecutionResult(stdout="File does not exist", exit_status=100)
        observation = ResourceObservation()

        result = await controller.observe(BUNDLE, observation)

        assert not result.resource_exists
        assert result.readiness is Readiness.ABSENT
        assert observation.readiness is Readiness.ABSENT
        assert not observation.created

    @pytest.mark.asyncio
    async def test_needs_remediation(
        self, controller: ScriptController, mock_execute: AsyncMock
    ) -> None:
        mock_execute.return_value = ExecutionResult(exit_status=42)
        observation = ResourceObservation()

        result = await controller.observe(BUNDLE, observation)

        assert result.resource_exists
        assert not result.resource_up_to_date
        assert result.exit_code == 42
        assert observation.readiness is Readiness.NEEDS_REMEDIATION

    @pytest.mark.asyncio
    async def test_fatal_raises(self, controller: ScriptController, mock_execute: AsyncMock) -> None:
        mock_execute.return_value = ExecutionResult(stderr="corrupt", exit_status=1)
        observation = ResourceObservation()

        with pytest.raises(ScriptExitError) as exc_info:
            await controller.observe(BUNDLE, observation)

        assert exc_info.value.fatal
        assert exc_info.value.exit_status == 1
        assert observation.readiness is Readiness.FATAL
        assert observation.stderr == "corrupt"
        assert scripts_run(mock_execute) == ["status-script"]

    @pytest.mark.asyncio
    async def test_execution_failure_is_unknown(
        self, controller: ScriptController, mock_execute: AsyncMock
    ) -> None:
        failure = ExecutionFailure("Failed to create session")
        mock_execute.return_value = ExecutionResult(error=failure)
        observation = ResourceObservation(readiness=Readiness.READY)

        with pytest.raises(ExecutionFailure):
            await controller.observe(BUNDLE, observation)

        assert observation.readiness is Readiness.UNKNOWN
        assert observation.exit_code is None

    @pytest.mark.asyncio
    async def test_no_status_check_before_creation(
        self, controller: ScriptController, mock_execute: AsyncMock
    ) -> None:
        bundle = ScriptBundle(init="init-script")
        observation = ResourceObservation()

        result = await controller.observe(bundle, observation)

        assert not result.resource_exists
        assert observation.readiness is Readiness.ABSENT
        mock_execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_status_check_after_creation(
        self, controller: ScriptController, mock_execute: AsyncMock
    ) -> None:
        bundle = ScriptBundle(init="init-script")
        observation = ResourceObservation(created=True)

        result = await controller.observe(bundle, observation)

        assert result.resource_exists
        assert result.resource_up_to_date
        assert observation.readiness is Readiness.READY
        mock_execute.assert_not_called()


class TestLifecycle:
    """Test create, update and delete."""

    @pytest.mark.asyncio
    async def test_create_success(self, controller: ScriptController, mock_execute: AsyncMock) -> None:
        mock_execute.return_value = ExecutionResult(stdout="created", exit_status=0)
        observation = ResourceObservation(readiness=Readiness.ABSENT)

        await controller.create(BUNDLE, observation)

        assert observation.created
        assert observation.stdout == "created"
        # No optimistic readiness change
        assert observation.readiness is Readiness.ABSENT
        assert scripts_run(mock_execute) == ["init-script"]

    @pytest.mark.asyncio
    async def test_create_failure_is_fatal(
        self, controller: ScriptController, mock_execute: AsyncMock
    ) -> None:
        mock_execute.return_value = ExecutionResult(stderr="apt failed", exit_status=2)
        observation = ResourceObservation(readiness=Readiness.ABSENT)

        with pytest.raises(ScriptExitError) as exc_info:
            await controller.create(BUNDLE, observation)

        assert exc_info.value.phase == "init"
        assert exc_info.value.fatal
        assert observation.readiness is Readiness.FATAL
        assert not observation.created

    @pytest.mark.asyncio
    async def test_create_transfer_failure_is_fatal(
        self, controller: ScriptController, mock_execute: AsyncMock
    ) -> None:
        failure = TransferFailure("/tmp/x", OSError("read-only"))
        mock_execute.return_value = ExecutionResult(error=failure)
        observation = ResourceObservation(readiness=Readiness.ABSENT)

        with pytest.raises(TransferFailure):
            await controller.create(BUNDLE, observation)

        assert observation.readiness is Readiness.FATAL

    @pytest.mark.asyncio
    async def test_create_without_init(
        self, controller: ScriptController, mock_execute: AsyncMock
    ) -> None:
        observation = ResourceObservation()

        await controller.create(ScriptBundle(), observation)

        assert observation.created
        mock_execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_success_keeps_readiness(
        self, controller: ScriptController, mock_execute: AsyncMock
    ) -> None:
        mock_execute.return_value = ExecutionResult(stdout="patched", exit_status=0)
        observation = ResourceObservation(readiness=Readiness.NEEDS_REMEDIATION, exit_code=7)

        await controller.update(BUNDLE, observation)

        assert observation.readiness is Readiness.NEEDS_REMEDIATION
        assert observation.stdout == "patched"
        assert scripts_run(mock_execute) == ["update-script"]

    @pytest.mark.asyncio
    async def test_update_failure_is_fatal(
        self, controller: ScriptController, mock_execute: AsyncMock
    ) -> None:
        mock_execute.return_value = ExecutionResult(exit_status=5)
        observation = ResourceObservation(readiness=Readiness.NEEDS_REMEDIATION)

        with pytest.raises(ScriptExitError):
            await controller.update(BUNDLE, observation)

        assert observation.readiness is Readiness.FATAL

    @pytest.mark.asyncio
    async def test_delete_runs_cleanup(
        self, controller: ScriptController, mock_execute: AsyncMock
    ) -> None:
        mock_execute.return_value = ExecutionResult(exit_status=0)
        observation = ResourceObservation(created=True)

        await controller.delete(BUNDLE, observation)

        assert scripts_run(mock_execute) == ["cleanup-script"]
        assert not observation.created

    @pytest.mark.asyncio
    async def test_delete_failure_raises(
        self, controller: ScriptController, mock_execute: AsyncMock
    ) -> None:
        mock_execute.return_value = ExecutionResult(stderr="busy", exit_status=1)

        with pytest.raises(ScriptExitError) as exc_info:
            await controller.delete(BUNDLE, ResourceObservation())

        assert exc_info.value.phase == "cleanup"
        assert not exc_info.value.fatal
        assert exc_info.value.transient

    @pytest.mark.asyncio
    async def test_delete_without_cleanup_issues_nothing(self, mock_execute: AsyncMock) -> None:
        session: Any = MagicMock()
        controller = ScriptController(session)

        await controller.delete(ScriptBundle(status_check="s"), ResourceObservation())

        mock_execute.assert_not_called()
        assert session.mock_calls == []
