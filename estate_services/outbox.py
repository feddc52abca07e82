"""
estate_services.outbox -- Event sinks and the transactional outbox relay.

Responsibility:
    ``EventSink`` is the narrow interface to whatever consumes domain
    events (notifications, projections).  ``OutboxPublisher`` relays rows
    written to ``estate_outbox_events`` by the SQLAlchemy repository to a
    sink and marks them published.

Architecture position:
    Services -- the only module that reads outbox rows back.

Invariants enforced:
    - Rows are relayed in (estate_id, sequence) order.
    - A row is marked published in the same transaction that reads it; if
      the sink raises, the transaction rolls back and the row stays
      unpublished for the next run.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from estate_kernel.db.engine import session_scope
from estate_kernel.domain.clock import Clock, SystemClock
from estate_kernel.domain.events import DomainEvent, EventKind
from estate_kernel.logging_config import get_logger
from estate_kernel.models.estate_record import OutboxEventModel

logger = get_logger("services.outbox")


@runtime_checkable
class EventSink(Protocol):
    def publish(self, events: Sequence[DomainEvent]) -> None:
        ...


class InMemoryEventSink:
    """Collects published events in order; used by tests and local runs."""

    def __init__(self) -> None:
        self.published: list[DomainEvent] = []

    def publish(self, events: Sequence[DomainEvent]) -> None:
        self.published.extend(events)

    def kinds(self) -> list[EventKind]:
        return [e.kind for e in self.published]

    def clear(self) -> None:
        self.published.clear()


def to_outbox_row(event: DomainEvent) -> OutboxEventModel:
    return OutboxEventModel(
        event_id=event.event_id,
        estate_id=event.estate_id,
        sequence=event.sequence,
        kind=event.kind.value,
        occurred_at=event.occurred_at,
        actor_id=event.actor_id,
        payload=event.payload,
        published=False,
    )


def from_outbox_row(row: OutboxEventModel) -> DomainEvent:
    return DomainEvent(
        kind=EventKind(row.kind),
        estate_id=row.estate_id,
        sequence=row.sequence,
        occurred_at=row.occurred_at,
        actor_id=row.actor_id,
        payload=dict(row.payload),
        event_id=row.event_id,
    )


class OutboxPublisher:
    """Relays unpublished outbox rows to an ``EventSink``."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        sink: EventSink,
        clock: Clock | None = None,
    ):
        self._session_factory = session_factory
        self._sink = sink
        self._clock = clock or SystemClock()

    def publish_pending(self, limit: int = 100) -> int:
        """Publish up to ``limit`` rows; returns the number relayed."""
        with session_scope(self._session_factory) as session:
            rows = session.scalars(
                select(OutboxEventModel)
                .where(OutboxEventModel.published.is_(False))
                .order_by(OutboxEventModel.estate_id, OutboxEventModel.sequence)
                .limit(limit)
            ).all()
            if not rows:
                return 0
            self._sink.publish([from_outbox_row(r) for r in rows])
            now = self._clock.now()
            for row in rows:
                row.published = True
                row.published_at = now
            logger.info("outbox_events_published", extra={"count": len(rows)})
            return len(rows)
