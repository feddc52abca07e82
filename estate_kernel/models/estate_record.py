"""
Module: estate_kernel.models.estate_record
Responsibility: ORM persistence for the estate aggregate snapshot and its
    event outbox.
Architecture position: Kernel > Models.  Imports db/base.py only.

Invariants enforced:
    - One EstateRecordModel row per estate; ``version`` is the optimistic
      concurrency token.  Writers update with
      ``WHERE id = :id AND version = :expected`` and treat zero affected rows
      as a concurrent modification.
    - Outbox rows are unique per (estate_id, sequence); the sequence is the
      per-estate delivery order.
    - Outbox rows are written in the same transaction as the snapshot.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from estate_kernel.db.base import Base, TrackedBase, UUIDString


class EstateRecordModel(TrackedBase):
    """Full aggregate snapshot keyed by estate id."""

    __tablename__ = "estate_records"

    __table_args__ = (
        Index("idx_estate_record_status", "status"),
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False)

    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    # Serialized aggregate (see estate_services.serialization)
    snapshot: Mapped[dict] = mapped_column(JSON, nullable=False)

    def __repr__(self) -> str:
        return f"<EstateRecord {self.id} v{self.version} {self.status}>"


class OutboxEventModel(Base):
    """Domain event awaiting (or past) delivery to the event sink."""

    __tablename__ = "estate_outbox_events"

    __table_args__ = (
        UniqueConstraint("estate_id", "sequence", name="uq_outbox_estate_sequence"),
        Index("idx_outbox_unpublished", "published", "estate_id", "sequence"),
    )

    event_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False, unique=True)

    estate_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    kind: Mapped[str] = mapped_column(String(60), nullable=False)

    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    actor_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    payload: Mapped[dict] = mapped_column(JSON, nullable=False)

    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<OutboxEvent {self.kind} {self.estate_id}#{self.sequence}>"
