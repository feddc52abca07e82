"""
Net value, liquidation to cash, gift hotchpot, dependant claims and the
distribution-readiness report, exercised through the aggregate.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from estate_kernel.domain.events import EventKind
from estate_kernel.domain.values import Money, SharePercentage
from estate_kernel.exceptions import (
    ActiveLiquidationExistsError,
    CoOwnershipExceededError,
    EstateNotReadyError,
    InsufficientDistributablePoolError,
    InsufficientFundsError,
    InvalidAssetTransitionError,
)
from estate_modules.assets import AssetType, LandDetails, VehicleDetails
from estate_modules.claims import ClaimStatus, SettlementMethod
from estate_modules.debts import DebtType
from estate_modules.estate import ReadinessBlocker
from estate_modules.liquidation import LiquidationStatus, LiquidationType
from tests.conftest import ADMINISTRATOR_ID, SON_ID, WIDOW_ID

RESOLUTION = "caveat withdrawn by consent"


def add_land(estate, value, name="Kajiado plot"):
    return estate.add_asset(
        name=name,
        asset_type=AssetType.LAND,
        details=LandDetails(title_number=f"KJD/{name}", county="Kajiado", acreage=Decimal("2")),
        value=Money.of(value, "KES"),
        added_by=ADMINISTRATOR_ID,
    )


def verified_land(estate, value, name="Kajiado plot"):
    asset = add_land(estate, value, name)
    estate.submit_asset_for_verification(asset.id, ADMINISTRATOR_ID)
    return estate.verify_asset(asset.id, "title search clean", ADMINISTRATOR_ID)


class TestNetValue:

    def test_unverified_assets_do_not_count(self, estate, kes):
        add_land(estate, 1000)
        assert estate.compute_net_value().is_zero

    def test_verified_and_pending_assets_count(self, estate, kes):
        verified_land(estate, 1000)
        pending = add_land(estate, 500, name="Ngong plot")
        estate.submit_asset_for_verification(pending.id, ADMINISTRATOR_ID)
        assert estate.compute_net_value() == kes(1500)

    def test_net_value_combines_every_source(self, make_estate, kes):
        estate = make_estate()
        verified_land(estate, 10000)
        estate.record_cash_receipt(kes(2000), "bank balance", ADMINISTRATOR_ID)
        estate.record_gift(
            recipient_id=SON_ID,
            original_value=kes(1500),
            gift_date=date(2020, 1, 1),
            recorded_by=ADMINISTRATOR_ID,
        )
        estate.add_debt(
            debt_type=DebtType.PERSONAL_LOAN,
            creditor_name="Equity Bank",
            amount=kes(3000),
            incurred_date=date(2023, 1, 1),
            added_by=ADMINISTRATOR_ID,
        )
        estate.record_tax_assessment(
            reference="KRA-1",
            assessment_date=date(2024, 5, 1),
            assessed_by=ADMINISTRATOR_ID,
            income_tax=kes(500),
        )
        # 10000 + 2000 + 1500 - 3000 - 500
        assert estate.compute_net_value() == kes(10000)

    def test_co_owned_asset_counts_at_full_value(self, estate, kes):
        asset = verified_land(estate, 1000)
        estate.add_co_owner(asset.id, WIDOW_ID, SharePercentage.of(50), ADMINISTRATOR_ID)
        assert estate.compute_net_value() == kes(1000)

    def test_co_owner_shares_capped(self, estate):
        asset = verified_land(estate, 1000)
        estate.add_co_owner(asset.id, WIDOW_ID, SharePercentage.of(60), ADMINISTRATOR_ID)
        estate.add_co_owner(asset.id, SON_ID, SharePercentage.of(40), ADMINISTRATOR_ID)
        with pytest.raises(CoOwnershipExceededError):
            estate.add_co_owner(asset.id, uuid4(), SharePercentage.of(10), ADMINISTRATOR_ID)

    def test_summary_projection(self, estate, kes):
        verified_land(estate, 1000)
        summary = estate.summary()
        assert summary.net_value == kes(1000)
        assert summary.asset_count == 1
        assert summary.is_solvent
        assert summary.version == estate.version
        assert summary.policy == estate.policy.label


class TestInsolvency:

    def test_negative_net_value_emits_event_once(self, estate, kes):
        for creditor in ("Equity Bank", "KCB"):
            estate.add_debt(
                debt_type=DebtType.PERSONAL_LOAN,
                creditor_name=creditor,
                amount=kes(100),
                incurred_date=date(2023, 1, 1),
                added_by=ADMINISTRATOR_ID,
            )
        kinds = [e.kind for e in estate.pull_pending_events()]
        assert kinds.count(EventKind.ESTATE_INSOLVENCY_DETECTED) == 1
        assert estate.estate.insolvency_flagged
        assert not estate.is_solvent()

    def test_flag_clears_when_solvent_again(self, estate, kes):
        estate.add_debt(
            debt_type=DebtType.PERSONAL_LOAN,
            creditor_name="Equity Bank",
            amount=kes(100),
            incurred_date=date(2023, 1, 1),
            added_by=ADMINISTRATOR_ID,
        )
        estate.record_cash_receipt(kes(500), "bank balance", ADMINISTRATOR_ID)
        assert not estate.estate.insolvency_flagged
        assert estate.is_solvent()


class TestLiquidationToCash:

    def _sell(self, estate, asset_id, price, proceeds):
        liq = estate.initiate_liquidation(
            asset_id=asset_id,
            liquidation_type=LiquidationType.PUBLIC_AUCTION,
            reason="raise cash for creditors",
            initiated_by=ADMINISTRATOR_ID,
        )
        estate.submit_liquidation(liq.id, ADMINISTRATOR_ID)
        estate.approve_liquidation(liq.id, "approved", ADMINISTRATOR_ID, "HCC 4/2024")
        estate.record_liquidation_sale(liq.id, price, "BUYER-1", date(2024, 7, 1), ADMINISTRATOR_ID)
        return estate.receive_liquidation_proceeds(liq.id, proceeds, ADMINISTRATOR_ID)

    def test_proceeds_replace_asset_value(self, estate, kes):
        asset = estate.add_asset(
            name="Probox",
            asset_type=AssetType.VEHICLE,
            details=VehicleDetails(registration_number="KDA 123A", make="Toyota", model="Probox"),
            value=kes(800),
            added_by=ADMINISTRATOR_ID,
        )
        estate.submit_asset_for_verification(asset.id, ADMINISTRATOR_ID)
        assert estate.compute_net_value() == kes(800)

        liq = self._sell(estate, asset.id, kes(900), kes(850))

        assert liq.status == LiquidationStatus.PROCEEDS_RECEIVED
        assert estate.cash_on_hand == kes(850)
        assert estate.compute_net_value() == kes(850)

    def test_liquidated_asset_cannot_be_relisted(self, estate, kes):
        asset = verified_land(estate, 1000)
        self._sell(estate, asset.id, kes(1000), kes(1000))
        with pytest.raises(ActiveLiquidationExistsError):
            estate.initiate_liquidation(
                asset_id=asset.id,
                liquidation_type=LiquidationType.PRIVATE_TREATY,
                reason="again",
                initiated_by=ADMINISTRATOR_ID,
            )

    def test_rejected_asset_cannot_be_liquidated(self, estate):
        asset = add_land(estate, 1000)
        estate.submit_asset_for_verification(asset.id, ADMINISTRATOR_ID)
        estate.reject_asset(asset.id, "forged title", ADMINISTRATOR_ID)
        with pytest.raises(InvalidAssetTransitionError):
            estate.initiate_liquidation(
                asset_id=asset.id,
                liquidation_type=LiquidationType.PUBLIC_AUCTION,
                reason="sell",
                initiated_by=ADMINISTRATOR_ID,
            )

    def test_proceeds_fund_the_waterfall(self, estate, kes):
        asset = verified_land(estate, 5000)
        funeral = estate.add_debt(
            debt_type=DebtType.FUNERAL_EXPENSE,
            creditor_name="Lee Funeral Home",
            amount=kes(1200),
            incurred_date=date(2024, 3, 20),
            added_by=ADMINISTRATOR_ID,
        )
        self._sell(estate, asset.id, kes(5000), kes(5000))
        estate.execute_waterfall(ADMINISTRATOR_ID)
        assert estate.debts.get(funeral.id).outstanding.is_zero
        assert estate.cash_on_hand == kes(3800)


class TestGiftsInValuation:

    def test_hotchpot_uses_policy_adjuster(self, make_estate, policy, kes):
        estate = make_estate(policy=policy)
        gift = estate.record_gift(
            recipient_id=SON_ID,
            original_value=kes(1000),
            gift_date=date(2023, 3, 15),
            recorded_by=ADMINISTRATOR_ID,
        )
        assert gift.hotchpot_value == kes("1060.00")
        assert gift.adjuster_version == "kenya-cbk-avg-2020"
        assert estate.compute_net_value() == kes("1060.00")

    def test_hotchpot_event_records_adjuster(self, make_estate, policy, kes):
        estate = make_estate(policy=policy)
        estate.record_gift(
            recipient_id=SON_ID,
            original_value=kes(1000),
            gift_date=date(2023, 3, 15),
            recorded_by=ADMINISTRATOR_ID,
        )
        applied = [e for e in estate.pull_pending_events() if e.kind == EventKind.GIFT_HOTCHPOT_APPLIED]
        assert applied[0].payload["adjuster_version"] == "kenya-cbk-avg-2020"

    def test_contested_gift_blocks_readiness(self, estate, kes):
        gift = estate.record_gift(
            recipient_id=SON_ID,
            original_value=kes(1000),
            gift_date=date(2023, 3, 15),
            recorded_by=ADMINISTRATOR_ID,
        )
        estate.contest_gift(gift.id, "recipient denies receipt", ADMINISTRATOR_ID)
        assert estate.check_distribution_readiness().has(ReadinessBlocker.CONTESTED_GIFT)

    def test_reclaimed_gift_counts_at_original_value(self, make_estate, policy, kes):
        estate = make_estate(policy=policy)
        gift = estate.record_gift(
            recipient_id=SON_ID,
            original_value=kes(1000),
            gift_date=date(2023, 3, 15),
            recorded_by=ADMINISTRATOR_ID,
        )
        note = estate.reclaim_gift(gift.id, "court ordered return", ADMINISTRATOR_ID)
        assert note.amount == kes(1000)
        assert estate.compute_net_value() == kes(1000)


class TestDependantClaims:

    def _verified_claim(self, estate):
        claim = estate.file_claim(
            dependant_id=WIDOW_ID,
            relationship="spouse",
            basis="maintained by the deceased",
            filed_by=ADMINISTRATOR_ID,
        )
        estate.add_claim_evidence(claim.id, "DOC-1", "marriage certificate", ADMINISTRATOR_ID)
        estate.verify_claim(claim.id, "certificate checked", ADMINISTRATOR_ID)
        return claim.id

    def test_settlement_reduces_pool(self, estate, kes):
        verified_land(estate, 1000)
        claim_id = self._verified_claim(estate)
        claim = estate.settle_claim(claim_id, kes(400), SettlementMethod.LUMP_SUM, ADMINISTRATOR_ID)
        assert claim.status == ClaimStatus.SETTLED
        assert estate.compute_distributable_pool() == kes(600)
        assert estate.compute_net_value() == kes(1000)

    def test_allocation_beyond_pool_rejected(self, estate, kes):
        verified_land(estate, 1000)
        claim_id = self._verified_claim(estate)
        estate.pull_pending_events()
        with pytest.raises(InsufficientDistributablePoolError):
            estate.settle_claim(claim_id, kes(1001), SettlementMethod.LUMP_SUM, ADMINISTRATOR_ID)
        assert estate.pending_events == ()

    def test_pending_claim_blocks_readiness(self, estate):
        claim = estate.file_claim(
            dependant_id=SON_ID,
            relationship="child",
            basis="minor at date of death",
            filed_by=ADMINISTRATOR_ID,
        )
        report = estate.check_distribution_readiness()
        assert report.has(ReadinessBlocker.PENDING_CLAIM)
        detail = [b for b in report.blockers if b.blocker == ReadinessBlocker.PENDING_CLAIM][0]
        assert detail.entity_ids == (claim.id,)


class TestReadiness:

    def test_all_blockers_reported(self, estate, kes):
        asset = verified_land(estate, 1000)
        estate.dispute_asset(asset.id, "boundary dispute", ADMINISTRATOR_ID)
        estate.file_claim(
            dependant_id=SON_ID,
            relationship="child",
            basis="minor",
            filed_by=ADMINISTRATOR_ID,
        )
        estate.freeze("caveat lodged", ADMINISTRATOR_ID)
        names = estate.check_distribution_readiness().blocker_names
        assert names == ["estate_frozen", "disputed_asset", "tax_not_cleared", "pending_claim"]

    def test_tax_clearance_completes_readiness(self, estate, kes):
        estate.record_tax_assessment(
            reference="KRA-1",
            assessment_date=date(2024, 5, 1),
            assessed_by=ADMINISTRATOR_ID,
            stamp_duty=kes(200),
        )
        estate.record_cash_receipt(kes(1000), "bank balance", ADMINISTRATOR_ID)
        estate.record_tax_payment(
            amount=kes(200),
            payment_date=date(2024, 5, 10),
            reference="KRA-PAY-1",
            paid_by=ADMINISTRATOR_ID,
        )
        estate.pull_pending_events()
        estate.upload_clearance_certificate("TCC-1", ADMINISTRATOR_ID)
        kinds = [e.kind for e in estate.pull_pending_events()]
        assert kinds == [EventKind.TAX_CLEARANCE_CERTIFICATE_UPLOADED, EventKind.TAX_CLEARED]
        assert estate.check_distribution_readiness().ready
        assert estate.cash_on_hand == kes(800)

    def test_unverified_asset_blocks_readiness(self, estate, kes):
        asset = add_land(estate, 1000)
        estate.upload_clearance_certificate("TCC-1", ADMINISTRATOR_ID)
        report = estate.check_distribution_readiness()
        assert not report.ready
        detail = [b for b in report.blockers if b.blocker == ReadinessBlocker.UNVERIFIED_ASSET][0]
        assert detail.entity_ids == (asset.id,)
        with pytest.raises(EstateNotReadyError) as exc_info:
            estate.close("distribution complete", ADMINISTRATOR_ID)
        assert exc_info.value.blockers == ["unverified_asset"]

    def test_submitted_asset_no_longer_blocks(self, estate):
        asset = add_land(estate, 1000)
        estate.upload_clearance_certificate("TCC-1", ADMINISTRATOR_ID)
        estate.submit_asset_for_verification(asset.id, ADMINISTRATOR_ID)
        assert estate.check_distribution_readiness().ready

    def test_sold_unverified_asset_no_longer_blocks(self, estate, kes):
        asset = add_land(estate, 1000)
        estate.upload_clearance_certificate("TCC-1", ADMINISTRATOR_ID)
        liq = estate.initiate_liquidation(
            asset_id=asset.id,
            liquidation_type=LiquidationType.PUBLIC_AUCTION,
            reason="raise cash for creditors",
            initiated_by=ADMINISTRATOR_ID,
        )
        estate.submit_liquidation(liq.id, ADMINISTRATOR_ID)
        estate.approve_liquidation(liq.id, "approved", ADMINISTRATOR_ID, "HCC 4/2024")
        estate.record_liquidation_sale(liq.id, kes(1000), "BUYER-1", date(2024, 7, 1), ADMINISTRATOR_ID)
        assert estate.check_distribution_readiness().blocker_names == ["unverified_asset"]

        estate.receive_liquidation_proceeds(liq.id, kes(1000), ADMINISTRATOR_ID)
        assert estate.check_distribution_readiness().ready

    def test_rejected_asset_blocks_readiness(self, estate):
        asset = add_land(estate, 1000)
        estate.submit_asset_for_verification(asset.id, ADMINISTRATOR_ID)
        estate.reject_asset(asset.id, "title belongs to a third party", ADMINISTRATOR_ID)
        estate.upload_clearance_certificate("TCC-1", ADMINISTRATOR_ID)
        report = estate.check_distribution_readiness()
        assert report.blocker_names == ["rejected_asset"]
        assert report.blockers[0].entity_ids == (asset.id,)


class TestReadinessMonotonicity:
    """Resolving one blocker never introduces another or revokes readiness."""

    EVERY_BLOCKER = [
        "estate_frozen",
        "disputed_asset",
        "unverified_asset",
        "disputed_debt",
        "contested_gift",
        "tax_not_cleared",
        "pending_claim",
    ]

    def _block_everything(self, estate, kes):
        estate.record_cash_receipt(kes(5000), "bank balance", ADMINISTRATOR_ID)
        disputed = verified_land(estate, 1000)
        estate.dispute_asset(disputed.id, "boundary dispute", ADMINISTRATOR_ID)
        unverified = add_land(estate, 800, name="Ngong plot")
        debt = estate.add_debt(
            debt_type=DebtType.PERSONAL_LOAN,
            creditor_name="Equity Bank",
            amount=kes(500),
            incurred_date=date(2023, 1, 1),
            added_by=ADMINISTRATOR_ID,
        )
        estate.dispute_debt(debt.id, "signature contested", ADMINISTRATOR_ID)
        gift = estate.record_gift(
            recipient_id=SON_ID,
            original_value=kes(1000),
            gift_date=date(2023, 3, 15),
            recorded_by=ADMINISTRATOR_ID,
        )
        estate.contest_gift(gift.id, "recipient denies receipt", ADMINISTRATOR_ID)
        claim = estate.file_claim(
            dependant_id=WIDOW_ID,
            relationship="spouse",
            basis="maintenance",
            filed_by=ADMINISTRATOR_ID,
        )
        estate.freeze("caveat lodged", ADMINISTRATOR_ID)

        return {
            "disputed_asset": lambda: estate.verify_asset(disputed.id, "survey agreed", ADMINISTRATOR_ID),
            "unverified_asset": lambda: estate.submit_asset_for_verification(unverified.id, ADMINISTRATOR_ID),
            "disputed_debt": lambda: estate.resolve_debt_dispute(debt.id, "creditor produced loan file", ADMINISTRATOR_ID),
            "contested_gift": lambda: estate.resolve_gift_dispute(gift.id, "receipt acknowledged", ADMINISTRATOR_ID),
            "tax_not_cleared": lambda: estate.upload_clearance_certificate("TCC-1", ADMINISTRATOR_ID),
            "pending_claim": lambda: estate.reject_claim(claim.id, "provided for during lifetime", ADMINISTRATOR_ID),
        }

    @pytest.mark.parametrize("reverse", [False, True], ids=["forward", "reverse"])
    def test_blockers_only_shrink(self, estate, kes, reverse):
        resolutions = self._block_everything(estate, kes)
        report = estate.check_distribution_readiness()
        assert report.blocker_names == self.EVERY_BLOCKER

        steps = [("estate_frozen", lambda: estate.unfreeze(RESOLUTION, "HC-SUCC-12-2024", ADMINISTRATOR_ID))]
        steps += sorted(resolutions.items(), reverse=reverse)

        remaining = set(report.blocker_names)
        for blocker, resolve in steps:
            resolve()
            report = estate.check_distribution_readiness()
            now = set(report.blocker_names)
            assert now == remaining - {blocker}
            remaining = now

        assert report.ready
        assert not remaining


class TestTaxPaymentsDrawCash:
    """Paying assessed tax moves value from the cash pool to the tax record."""

    def _assess(self, estate, kes, amount):
        estate.record_tax_assessment(
            reference="KRA-7",
            assessment_date=date(2024, 5, 1),
            assessed_by=ADMINISTRATOR_ID,
            income_tax=kes(amount),
        )

    def _pay(self, estate, kes, amount):
        return estate.record_tax_payment(
            amount=kes(amount),
            payment_date=date(2024, 5, 10),
            reference="KRA-PAY-7",
            paid_by=ADMINISTRATOR_ID,
        )

    def test_payment_leaves_net_value_unchanged(self, estate, kes):
        estate.record_cash_receipt(kes(5000), "bank balance", ADMINISTRATOR_ID)
        self._assess(estate, kes, 1000)
        net_before = estate.compute_net_value()
        pool_before = estate.compute_distributable_pool()

        self._pay(estate, kes, 1000)

        assert net_before == kes(4000)
        assert estate.compute_net_value() == net_before
        assert estate.compute_distributable_pool() == pool_before
        assert estate.cash_on_hand == kes(4000)

    def test_payment_needs_cash(self, estate, kes):
        estate.record_cash_receipt(kes(300), "bank balance", ADMINISTRATOR_ID)
        self._assess(estate, kes, 1000)
        estate.pull_pending_events()
        version = estate.version
        with pytest.raises(InsufficientFundsError) as exc_info:
            self._pay(estate, kes, 1000)
        assert exc_info.value.available == "300"
        assert estate.tax.record.total_paid.is_zero
        assert estate.cash_on_hand == kes(300)
        assert estate.version == version
        assert estate.pending_events == ()


class TestRollback:
    """A failed command leaves no trace."""

    def test_failed_command_restores_state(self, estate, kes):
        asset = verified_land(estate, 1000)
        estate.add_co_owner(asset.id, WIDOW_ID, SharePercentage.of(90), ADMINISTRATOR_ID)
        estate.pull_pending_events()
        version = estate.version
        with pytest.raises(CoOwnershipExceededError):
            estate.add_co_owner(asset.id, SON_ID, SharePercentage.of(20), ADMINISTRATOR_ID)
        assert estate.version == version
        assert estate.pending_events == ()
        assert estate.assets.get(asset.id).co_owned_share == Decimal("90")

    def test_rollback_logged(self, estate, kes, captured_logs):
        with pytest.raises(InsufficientDistributablePoolError):
            claim = estate.file_claim(
                dependant_id=WIDOW_ID,
                relationship="spouse",
                basis="maintained",
                filed_by=ADMINISTRATOR_ID,
            )
            estate.add_claim_evidence(claim.id, "DOC-1", "certificate", ADMINISTRATOR_ID)
            estate.verify_claim(claim.id, "ok", ADMINISTRATOR_ID)
            estate.settle_claim(claim.id, kes(1), SettlementMethod.LUMP_SUM, ADMINISTRATOR_ID)
        rolled_back = [r for r in captured_logs() if r["message"] == "estate_command_rolled_back"]
        assert rolled_back[-1]["operation"] == "settle_claim"
