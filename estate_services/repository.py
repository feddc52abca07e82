"""
estate_services.repository -- Estate persistence with optimistic concurrency.

Responsibility:
    Loads an ``EstateAggregate`` together with its stored version and
    saves it back with an explicit compare-and-swap on that version.
    Domain events produced by the command are written alongside the
    snapshot.

Architecture position:
    Services -- the persistence boundary.  Both implementations share
    ``estate_services.serialization`` so the in-memory store round-trips
    snapshots exactly as the database does.

Invariants enforced:
    - ``save`` succeeds only if the stored version still equals
      ``expected_version``; otherwise ``ConcurrentModificationError`` and
      nothing is written.
    - Snapshot and outbox rows are written in one transaction
      (``session_scope``).
    - The stored version always equals ``aggregate.version`` after a save.

Failure modes:
    - ``EstateNotFoundError`` on load of an unknown id.
    - ``ConcurrentModificationError`` on a lost compare-and-swap.
    - Database errors propagate after rollback.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session, sessionmaker

from estate_config.schema import SettlementPolicy
from estate_kernel.db.engine import session_scope
from estate_kernel.domain.clock import Clock
from estate_kernel.domain.events import DomainEvent
from estate_kernel.exceptions import ConcurrentModificationError, EstateNotFoundError
from estate_kernel.logging_config import get_logger
from estate_kernel.models.estate_record import EstateRecordModel, OutboxEventModel
from estate_modules.estate.aggregate import EstateAggregate
from estate_services.outbox import to_outbox_row
from estate_services.serialization import dump_aggregate, load_aggregate

logger = get_logger("services.repository")


class EstateRepository(Protocol):
    def load(self, estate_id: UUID) -> tuple[EstateAggregate, int]:
        ...

    def add(self, aggregate: EstateAggregate, events: Sequence[DomainEvent]) -> None:
        ...

    def save(
        self,
        aggregate: EstateAggregate,
        expected_version: int,
        events: Sequence[DomainEvent],
    ) -> None:
        ...


def _actor_of(events: Sequence[DomainEvent]) -> UUID | None:
    return events[-1].actor_id if events else None


class InMemoryEstateRepository:
    """Dict-backed repository; snapshots are stored as JSON-compatible dicts."""

    def __init__(self, policy: SettlementPolicy, clock: Clock):
        self._policy = policy
        self._clock = clock
        self._records: dict[UUID, tuple[dict[str, Any], int]] = {}
        self.outbox: list[DomainEvent] = []
        self._lock = threading.Lock()

    def load(self, estate_id: UUID) -> tuple[EstateAggregate, int]:
        with self._lock:
            record = self._records.get(estate_id)
        if record is None:
            raise EstateNotFoundError(str(estate_id))
        snapshot, version = record
        aggregate = load_aggregate(snapshot, version=version, policy=self._policy, clock=self._clock)
        return aggregate, version

    def add(self, aggregate: EstateAggregate, events: Sequence[DomainEvent]) -> None:
        with self._lock:
            if aggregate.id in self._records:
                raise ConcurrentModificationError(
                    str(aggregate.id), 0, self._records[aggregate.id][1]
                )
            self._records[aggregate.id] = (dump_aggregate(aggregate), aggregate.version)
            self.outbox.extend(events)

    def save(
        self,
        aggregate: EstateAggregate,
        expected_version: int,
        events: Sequence[DomainEvent],
    ) -> None:
        with self._lock:
            current = self._records.get(aggregate.id)
            actual = current[1] if current is not None else None
            if actual != expected_version:
                raise ConcurrentModificationError(str(aggregate.id), expected_version, actual)
            self._records[aggregate.id] = (dump_aggregate(aggregate), aggregate.version)
            self.outbox.extend(events)

    def version_of(self, estate_id: UUID) -> int | None:
        record = self._records.get(estate_id)
        return record[1] if record is not None else None


class SqlAlchemyEstateRepository:
    """Snapshot-per-row repository over any SQLAlchemy database."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        policy: SettlementPolicy,
        clock: Clock,
    ):
        self._session_factory = session_factory
        self._policy = policy
        self._clock = clock

    def load(self, estate_id: UUID) -> tuple[EstateAggregate, int]:
        with session_scope(self._session_factory) as session:
            record = session.get(EstateRecordModel, estate_id)
            if record is None:
                raise EstateNotFoundError(str(estate_id))
            snapshot, version = record.snapshot, record.version
        aggregate = load_aggregate(snapshot, version=version, policy=self._policy, clock=self._clock)
        return aggregate, version

    def add(self, aggregate: EstateAggregate, events: Sequence[DomainEvent]) -> None:
        with session_scope(self._session_factory) as session:
            session.add(EstateRecordModel(
                id=aggregate.id,
                version=aggregate.version,
                status=aggregate.status.value,
                currency=aggregate.currency.code,
                snapshot=dump_aggregate(aggregate),
                created_by_id=aggregate.estate.created_by,
            ))
            session.add_all(to_outbox_row(e) for e in events)
        logger.info("estate_record_inserted", extra={
            "estate_id": str(aggregate.id),
            "version": aggregate.version,
            "events": len(events),
        })

    def save(
        self,
        aggregate: EstateAggregate,
        expected_version: int,
        events: Sequence[DomainEvent],
    ) -> None:
        with session_scope(self._session_factory) as session:
            result = session.execute(
                update(EstateRecordModel)
                .where(
                    EstateRecordModel.id == aggregate.id,
                    EstateRecordModel.version == expected_version,
                )
                .values(
                    version=aggregate.version,
                    status=aggregate.status.value,
                    snapshot=dump_aggregate(aggregate),
                    updated_by_id=_actor_of(events),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                actual = session.scalar(
                    select(EstateRecordModel.version).where(EstateRecordModel.id == aggregate.id)
                )
                logger.warning("estate_version_conflict", extra={
                    "estate_id": str(aggregate.id),
                    "expected_version": expected_version,
                    "actual_version": actual,
                })
                raise ConcurrentModificationError(str(aggregate.id), expected_version, actual)
            session.add_all(to_outbox_row(e) for e in events)
        logger.info("estate_record_saved", extra={
            "estate_id": str(aggregate.id),
            "version": aggregate.version,
            "events": len(events),
        })

    def outbox_rows(self, estate_id: UUID) -> list[OutboxEventModel]:
        with session_scope(self._session_factory) as session:
            rows = session.scalars(
                select(OutboxEventModel)
                .where(OutboxEventModel.estate_id == estate_id)
                .order_by(OutboxEventModel.sequence)
            ).all()
            session.expunge_all()
            return list(rows)
