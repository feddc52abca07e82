"""
Estate lifecycle: DRAFT -> ACTIVE <-> FROZEN -> CLOSED.

Covers the freeze barrier on mutating commands, the unfreeze reason
length rule, closure readiness and the terminal CLOSED state.
"""

from datetime import date

import pytest

from estate_kernel.domain.events import EventKind
from estate_kernel.domain.values import Currency
from estate_kernel.exceptions import (
    EstateClosedError,
    EstateFrozenError,
    EstateNotReadyError,
    InvalidEstateTransitionError,
    UnfreezeReasonTooShortError,
    ValidationError,
)
from estate_modules.debts import DebtType
from estate_modules.estate import EstateAggregate, EstateStatus
from tests.conftest import ADMINISTRATOR_ID, DATE_OF_DEATH

RESOLUTION = "injunction discharged by consent"


class TestCreateAndActivate:

    def test_new_estate_is_draft_at_version_one(self, flat_policy, clock):
        estate = EstateAggregate.create(
            deceased_name="Wanjiru Kamau",
            date_of_death=DATE_OF_DEATH,
            currency=Currency("KES"),
            created_by=ADMINISTRATOR_ID,
            policy=flat_policy,
            clock=clock,
        )
        assert estate.status == EstateStatus.DRAFT
        assert estate.version == 1
        assert estate.cash_on_hand.is_zero
        assert estate.estate.valuation_date == DATE_OF_DEATH
        events = estate.pull_pending_events()
        assert [e.kind for e in events] == [EventKind.ESTATE_CREATED]
        assert events[0].sequence == 1

    def test_future_date_of_death_rejected(self, make_estate):
        with pytest.raises(ValidationError) as exc_info:
            make_estate(date_of_death=date(2030, 1, 1))
        assert exc_info.value.field == "date_of_death"

    def test_valuation_before_death_rejected(self, make_estate):
        with pytest.raises(ValidationError):
            make_estate(valuation_date=date(2024, 1, 1))

    def test_blank_name_rejected(self, make_estate):
        with pytest.raises(ValidationError):
            make_estate(deceased_name="  ")

    def test_activate(self, make_estate):
        estate = make_estate()
        assert estate.status == EstateStatus.ACTIVE
        assert estate.version == 2

    def test_activate_twice_rejected(self, estate):
        with pytest.raises(InvalidEstateTransitionError):
            estate.activate(ADMINISTRATOR_ID)

    def test_draft_estate_accepts_inventory(self, make_estate, kes):
        estate = make_estate(activate=False)
        estate.record_cash_receipt(kes(100), "bank balance", ADMINISTRATOR_ID)
        assert estate.cash_on_hand == kes(100)


class TestFreeze:
    """A frozen estate refuses every mutating command except unfreeze."""

    def test_freeze_blocks_add_debt(self, estate, kes):
        estate.freeze("court injunction", ADMINISTRATOR_ID)
        version = estate.version
        with pytest.raises(EstateFrozenError) as exc_info:
            estate.add_debt(
                debt_type=DebtType.PERSONAL_LOAN,
                creditor_name="Equity Bank",
                amount=kes(100),
                incurred_date=date(2023, 1, 1),
                added_by=ADMINISTRATOR_ID,
            )
        assert exc_info.value.operation == "add_debt"
        assert exc_info.value.freeze_reason == "court injunction"
        assert len(estate.debts) == 0
        assert estate.version == version

    def test_freeze_emits_event(self, estate):
        estate.freeze("court injunction", ADMINISTRATOR_ID)
        events = estate.pull_pending_events()
        assert events[-1].kind == EventKind.ESTATE_FROZEN
        assert events[-1].payload["reason"] == "court injunction"

    def test_freeze_requires_reason(self, estate):
        with pytest.raises(ValidationError):
            estate.freeze("", ADMINISTRATOR_ID)
        assert estate.status == EstateStatus.ACTIVE

    def test_freeze_while_frozen_rejected(self, estate):
        estate.freeze("court injunction", ADMINISTRATOR_ID)
        with pytest.raises(EstateFrozenError):
            estate.freeze("second order", ADMINISTRATOR_ID)

    def test_draft_estate_can_be_frozen(self, make_estate):
        estate = make_estate(activate=False)
        estate.freeze("caveat lodged", ADMINISTRATOR_ID)
        assert estate.status == EstateStatus.FROZEN

    def test_frozen_estate_is_not_ready(self, estate):
        estate.freeze("court injunction", ADMINISTRATOR_ID)
        report = estate.check_distribution_readiness()
        assert "estate_frozen" in report.blocker_names

    def test_freeze_logged(self, estate, captured_logs):
        estate.freeze("court injunction", ADMINISTRATOR_ID)
        assert any(r["message"] == "estate_frozen" for r in captured_logs())


class TestUnfreeze:

    def setup_method(self):
        self.reference = "HCC-E123/2024"

    def test_short_reason_rejected(self, estate):
        estate.freeze("court injunction", ADMINISTRATOR_ID)
        with pytest.raises(UnfreezeReasonTooShortError) as exc_info:
            estate.unfreeze("resolved", self.reference, ADMINISTRATOR_ID)
        assert exc_info.value.length == 8
        assert exc_info.value.minimum == 15
        assert estate.status == EstateStatus.FROZEN

    def test_whitespace_does_not_count(self, estate):
        estate.freeze("court injunction", ADMINISTRATOR_ID)
        with pytest.raises(UnfreezeReasonTooShortError):
            estate.unfreeze("   resolved       ", self.reference, ADMINISTRATOR_ID)

    def test_valid_reason_returns_to_active(self, estate):
        estate.freeze("court injunction", ADMINISTRATOR_ID)
        estate.unfreeze(RESOLUTION, self.reference, ADMINISTRATOR_ID)
        assert estate.status == EstateStatus.ACTIVE
        assert estate.estate.freeze_reason is None
        kinds = [e.kind for e in estate.pull_pending_events()]
        assert kinds[-1] == EventKind.ESTATE_UNFROZEN

    def test_resolution_reference_required(self, estate):
        estate.freeze("court injunction", ADMINISTRATOR_ID)
        with pytest.raises(ValidationError):
            estate.unfreeze(RESOLUTION, "", ADMINISTRATOR_ID)

    def test_unfreeze_active_estate_rejected(self, estate):
        with pytest.raises(InvalidEstateTransitionError):
            estate.unfreeze(RESOLUTION, self.reference, ADMINISTRATOR_ID)

    def test_commands_allowed_after_unfreeze(self, estate, kes):
        estate.freeze("court injunction", ADMINISTRATOR_ID)
        estate.unfreeze(RESOLUTION, self.reference, ADMINISTRATOR_ID)
        estate.record_cash_receipt(kes(10), "bank balance", ADMINISTRATOR_ID)
        assert estate.cash_on_hand == kes(10)


class TestClose:

    def _clear_tax(self, estate):
        estate.upload_clearance_certificate("TCC-778", ADMINISTRATOR_ID)

    def test_fresh_estate_not_ready(self, estate):
        with pytest.raises(EstateNotReadyError) as exc_info:
            estate.close("distribution complete", ADMINISTRATOR_ID)
        assert exc_info.value.blockers == ["tax_not_cleared"]
        assert estate.status == EstateStatus.ACTIVE

    def test_close_when_ready(self, estate):
        self._clear_tax(estate)
        estate.close("distribution complete", ADMINISTRATOR_ID)
        assert estate.status == EstateStatus.CLOSED
        assert estate.estate.closure_notes == "distribution complete"

    def test_draft_cannot_close(self, make_estate):
        estate = make_estate(activate=False)
        estate.upload_clearance_certificate("TCC-778", ADMINISTRATOR_ID)
        with pytest.raises(InvalidEstateTransitionError):
            estate.close("done", ADMINISTRATOR_ID)

    def test_closed_is_terminal(self, estate, kes):
        self._clear_tax(estate)
        estate.close("distribution complete", ADMINISTRATOR_ID)
        with pytest.raises(EstateClosedError):
            estate.record_cash_receipt(kes(1), "late refund", ADMINISTRATOR_ID)
        with pytest.raises(EstateClosedError):
            estate.freeze("too late", ADMINISTRATOR_ID)
        with pytest.raises(EstateClosedError):
            estate.unfreeze(RESOLUTION, "REF", ADMINISTRATOR_ID)
