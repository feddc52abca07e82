"""
Estate Services.

The command surface of the settlement engine:
- commands: typed command dataclasses
- settlement_service: load / execute / compare-and-swap save
- repository: in-memory and SQLAlchemy estate repositories
- serialization: aggregate snapshot <-> JSON document
- outbox: event sinks and the outbox relay
"""

from estate_services.commands import CreateEstate, EstateCommand
from estate_services.outbox import EventSink, InMemoryEventSink, OutboxPublisher
from estate_services.repository import (
    EstateRepository,
    InMemoryEstateRepository,
    SqlAlchemyEstateRepository,
)
from estate_services.settlement_service import EstateSettlementService

__all__ = [
    "CreateEstate",
    "EstateCommand",
    "EventSink",
    "InMemoryEventSink",
    "OutboxPublisher",
    "EstateRepository",
    "InMemoryEstateRepository",
    "SqlAlchemyEstateRepository",
    "EstateSettlementService",
]
