"""
Estate Aggregate (``estate_modules.estate``).

The consistency boundary for one estate: lifecycle, cash pool, and the
settlement ledgers, with net value and distribution readiness queries.
"""

from estate_modules.estate.models import (
    Estate,
    EstateStatus,
    EstateSummary,
    ReadinessBlocker,
    ReadinessBlockerDetail,
    ReadinessReport,
)
from estate_modules.estate.workflows import ESTATE_WORKFLOW
from estate_modules.estate.aggregate import EstateAggregate

__all__ = [
    "Estate",
    "EstateStatus",
    "EstateSummary",
    "ReadinessBlocker",
    "ReadinessBlockerDetail",
    "ReadinessReport",
    "ESTATE_WORKFLOW",
    "EstateAggregate",
]
