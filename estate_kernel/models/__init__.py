"""ORM records for estate persistence."""

from estate_kernel.models.estate_record import EstateRecordModel, OutboxEventModel

__all__ = ["EstateRecordModel", "OutboxEventModel"]
