"""Command executor contract.

The executor runs a named remote operation and answers with a
``CommandResult``. Network and timeout faults raised by an executor are
treated exactly like ``success: false``.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from pydantic import BaseModel, Field

from gearlink.errors import BackendUnavailable, RemoteFailure

logger = logging.getLogger(__name__)


class CommandResult(BaseModel):
    success: bool
    data: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None

    @classmethod
    def ok(cls, **data: Any) -> CommandResult:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> CommandResult:
        return cls(success=False, error=error)


class CommandExecutor(Protocol):
    async def execute(self, name: str, args: dict[str, Any]) -> CommandResult: ...


def require_executor(executor: CommandExecutor | None) -> CommandExecutor:
    if executor is None:
        raise BackendUnavailable()
    return executor


async def run_command(
    executor: CommandExecutor | None, name: str, args: dict[str, Any]
) -> dict[str, Any]:
    """Execute ``name`` and return its data, raising ``RemoteFailure`` on any failure."""
    backend = require_executor(executor)
    logger.debug("Executing %s %s", name, args)
    try:
        result = await backend.execute(name, args)
    except (ConnectionError, TimeoutError, OSError) as exc:
        raise RemoteFailure(name, str(exc) or type(exc).__name__) from exc

    if not result.success:
        raise RemoteFailure(name, result.error or f"Command {name} failed")
    return result.data
