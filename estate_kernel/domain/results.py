"""
Command results (``estate_kernel.domain.results``).

Every command on the settlement service returns a ``CommandResult``: either
a success carrying the updated estate view and the events the command
produced, or a failure carrying a ``CommandError``. Domain errors never
cross the service boundary as exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from estate_kernel.domain.events import DomainEvent
from estate_kernel.exceptions import EstateKernelError


class CommandStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class CommandError:
    """Typed failure: kind, machine code, message and structured context."""

    kind: str
    code: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: EstateKernelError) -> CommandError:
        return cls(
            kind=exc.kind,
            code=exc.code,
            message=str(exc),
            context=exc.context(),
        )


@dataclass(frozen=True)
class CommandResult:
    """Discriminated success/failure of one command."""

    status: CommandStatus
    command: str
    view: Any = None
    events: tuple[DomainEvent, ...] = ()
    error: CommandError | None = None
    version: int | None = None

    @property
    def ok(self) -> bool:
        return self.status == CommandStatus.SUCCEEDED

    @classmethod
    def success(
        cls,
        command: str,
        view: Any,
        events: tuple[DomainEvent, ...],
        version: int,
    ) -> CommandResult:
        return cls(
            status=CommandStatus.SUCCEEDED,
            command=command,
            view=view,
            events=events,
            version=version,
        )

    @classmethod
    def failure(cls, command: str, error: CommandError) -> CommandResult:
        return cls(status=CommandStatus.FAILED, command=command, error=error)
