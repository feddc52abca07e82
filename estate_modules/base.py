"""
Shared ledger machinery (``estate_modules.base``).

Every settlement sub-ledger keeps its entities as frozen dataclasses in an
insertion-ordered dict and replaces an entity wholesale on each change.
That makes a ledger's state cheap to capture before a command and to
restore if the command fails part-way.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Generic, TypeVar
from uuid import UUID

from estate_kernel.domain.workflow import Workflow
from estate_kernel.exceptions import InvalidTransitionError, NotFoundError

T = TypeVar("T")
S = TypeVar("S", bound=Enum)


class EntityLedger(Generic[T]):
    """Insertion-ordered store of frozen entities keyed by id."""

    not_found_error: type[NotFoundError] = NotFoundError

    def __init__(self, entities: dict[UUID, T] | None = None):
        self._entities: dict[UUID, T] = dict(entities or {})

    def get(self, entity_id: UUID) -> T:
        try:
            return self._entities[entity_id]
        except KeyError:
            raise self.not_found_error(str(entity_id)) from None

    def find(self, entity_id: UUID) -> T | None:
        return self._entities.get(entity_id)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._entities.values()))

    def __len__(self) -> int:
        return len(self._entities)

    def _put(self, entity_id: UUID, entity: T) -> T:
        self._entities[entity_id] = entity
        return entity

    def snapshot(self) -> dict[UUID, T]:
        return dict(self._entities)

    def restore(self, state: dict[UUID, T]) -> None:
        self._entities = dict(state)


def advance(
    workflow: Workflow,
    status_type: type[S],
    current: S,
    action: str,
    entity_id: UUID,
    error: type[InvalidTransitionError],
) -> S:
    """Status reached by ``action`` from ``current``, or raise ``error``."""
    transition = workflow.find_transition(current.value, action)
    if transition is None:
        raise error(str(entity_id), current.value, action)
    return status_type(transition.to_state)
