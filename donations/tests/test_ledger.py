from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone

from donations.domain.exceptions import (
    AccountNotFound,
    AmountOutOfRange,
    DuplicateOrder,
    InvalidRewardKind,
    PaymentGatewayError,
    PaymentNotCompleted,
    StoreFailure,
)
from donations.models import Donation
from donations.services import build_pipeline
from donations.tests.fakes import FakeGateway, make_account, make_config


class ConfirmDonationTest(TestCase):
    """
    Tests for DonationLedger.confirm.

    Each test runs inside a transaction that is rolled back automatically.
    """

    def setUp(self):
        self.account = make_account()
        self.gateway = FakeGateway()
        self.ledger = self.ledger_with(self.gateway)

    def ledger_with(self, gateway):
        return build_pipeline(make_config(), gateway).ledger

    def test_confirm_records_pending_donation(self):
        reward = self.ledger.confirm(123456, "coins", 10, "O1")

        self.assertEqual(reward.as_dict(), {"coins": 50, "money": 0})
        donation = Donation.objects.get(order_id="O1")
        self.assertEqual(donation.account_id, 123456)
        self.assertEqual(donation.kind, "coins")
        self.assertEqual(donation.amount, Decimal("10.00"))
        self.assertEqual(donation.coins_reward, 50)
        self.assertEqual(donation.money_reward, 0)
        self.assertFalse(donation.processed)
        self.assertIsNone(donation.processed_at)
        self.assertEqual(self.gateway.captured, ["O1"])

    def test_confirm_does_not_touch_balances(self):
        self.ledger.confirm(123456, "money", 2, "O1")

        self.account.refresh_from_db()
        self.assertEqual((self.account.coins, self.account.money), (0, 0))

    def test_duplicate_order_is_rejected(self):
        """Confirming the same order twice must leave exactly one Donation."""
        self.ledger.confirm(123456, "coins", 10, "O1")

        with self.assertRaises(DuplicateOrder):
            self.ledger.confirm(123456, "coins", 10, "O1")

        self.assertEqual(Donation.objects.filter(order_id="O1").count(), 1)
        self.assertEqual(self.gateway.captured, ["O1"])

    def test_unique_constraint_catches_racing_confirmation(self):
        """A concurrent confirm that commits between the check and the insert still yields DuplicateOrder."""
        account = self.account

        def racing_insert(order_id):
            Donation.objects.create(
                order_id=order_id, account=account, kind="coins",
                amount=Decimal("10"), coins_reward=50,
            )

        ledger = self.ledger_with(FakeGateway(on_capture=racing_insert))

        with self.assertRaises(DuplicateOrder):
            ledger.confirm(123456, "coins", 10, "O1")

    def test_account_not_found(self):
        with self.assertRaises(AccountNotFound):
            self.ledger.confirm(999999, "coins", 10, "O1")

        self.assertEqual(Donation.objects.count(), 0)
        self.assertEqual(self.ledger.list_pending(50), [])
        self.assertEqual(self.gateway.captured, [])

    def test_payment_not_completed(self):
        ledger = self.ledger_with(FakeGateway(status="PAYER_ACTION_REQUIRED"))

        with self.assertRaises(PaymentNotCompleted) as ctx:
            ledger.confirm(123456, "coins", 10, "O1")

        self.assertEqual(ctx.exception.status, "PAYER_ACTION_REQUIRED")
        self.assertEqual(Donation.objects.count(), 0)

    def test_gateway_error_writes_nothing_and_can_be_retried(self):
        failing = self.ledger_with(FakeGateway(error=PaymentGatewayError("timeout")))

        with self.assertRaises(PaymentGatewayError):
            failing.confirm(123456, "coins", 10, "O1")
        self.assertEqual(Donation.objects.count(), 0)

        self.ledger.confirm(123456, "coins", 10, "O1")
        self.assertEqual(Donation.objects.count(), 1)

    def test_amount_bounds(self):
        for amount in ("0.99", "1000.01"):
            with self.subTest(amount=amount), self.assertRaises(AmountOutOfRange):
                self.ledger.confirm(123456, "coins", Decimal(amount), f"O-{amount}")

        reward = self.ledger.confirm(123456, "coins", 1000, "O-max")
        self.assertEqual(reward.coins, 5000)
        self.assertEqual(self.gateway.captured, ["O-max"])

    def test_invalid_kind_is_rejected_before_capture(self):
        with self.assertRaises(InvalidRewardKind):
            self.ledger.confirm(123456, "gems", 10, "O1")
        self.assertEqual(self.gateway.captured, [])

    def test_exactly_one_reward_is_nonzero(self):
        self.ledger.confirm(123456, "money", Decimal("1.5"), "O1")

        donation = Donation.objects.get(order_id="O1")
        self.assertEqual(donation.coins_reward, 0)
        self.assertEqual(donation.money_reward, 1500000)

    def test_reward_follows_the_paid_order_not_the_request(self):
        """An order paid for 1 must not be confirmed as a donation of 1000."""
        ledger = self.ledger_with(FakeGateway(custom_id="123456:coins:1.00"))

        with self.assertLogs("donations.application.ledger", level="WARNING") as logs:
            reward = ledger.confirm(123456, "coins", 1000, "O1")

        self.assertTrue(any("correlation mismatch" in line for line in logs.output))
        self.assertEqual(reward.as_dict(), {"coins": 5, "money": 0})
        donation = Donation.objects.get(order_id="O1")
        self.assertEqual(donation.coins_reward, 5)
        self.assertEqual(donation.amount, Decimal("1.00"))

    def test_order_kind_and_account_are_recorded(self):
        make_account(aid=654321, username="player_two")
        ledger = self.ledger_with(FakeGateway(custom_id="654321:money:2.00"))

        reward = ledger.confirm(123456, "coins", 10, "O1")

        self.assertEqual(reward.as_dict(), {"coins": 0, "money": 2000000})
        donation = Donation.objects.get(order_id="O1")
        self.assertEqual(donation.account_id, 654321)
        self.assertEqual(donation.kind, "money")

    def test_matching_correlation_records_request_values(self):
        ledger = self.ledger_with(FakeGateway(custom_id="123456:coins:10.00"))

        reward = ledger.confirm(123456, "coins", 10, "O1")

        self.assertEqual(reward.coins, 50)

    def test_order_for_missing_account_is_flagged_for_audit(self):
        ledger = self.ledger_with(FakeGateway(custom_id="654321:coins:10.00"))

        with self.assertLogs("donations.application.ledger", level="CRITICAL"):
            with self.assertRaises(AccountNotFound):
                ledger.confirm(123456, "coins", 10, "O1")

        self.assertEqual(Donation.objects.count(), 0)

    def test_store_failure_after_capture_is_flagged_for_audit(self):
        with patch.object(Donation.objects, "create", side_effect=DatabaseError("connection lost")):
            with self.assertLogs("donations.application.ledger", level="CRITICAL") as logs:
                with self.assertRaises(StoreFailure):
                    self.ledger.confirm(123456, "coins", 10, "O1")

        self.assertIn("O1", logs.output[0])
        self.assertEqual(Donation.objects.count(), 0)


class ListPendingTest(TestCase):

    def setUp(self):
        self.account = make_account()

    def donation(self, order_id, created_at, processed=False):
        donation = Donation.objects.create(
            order_id=order_id, account=self.account, kind="coins",
            amount=Decimal("1"), coins_reward=5, processed=processed,
        )
        Donation.objects.filter(pk=donation.pk).update(created_at=created_at)
        return donation

    def test_oldest_first(self):
        now = timezone.now()
        third = self.donation("O3", now)
        first = self.donation("O1", now - timedelta(minutes=2))
        second = self.donation("O2", now - timedelta(minutes=1))

        ledger = build_pipeline(make_config(), FakeGateway()).ledger
        pending = ledger.list_pending(50)

        self.assertEqual([d.id for d in pending], [first.id, second.id, third.id])

    def test_processed_donations_are_excluded(self):
        now = timezone.now()
        self.donation("O1", now, processed=True)
        pending = self.donation("O2", now)

        ledger = build_pipeline(make_config(), FakeGateway()).ledger
        self.assertEqual([d.id for d in ledger.list_pending(50)], [pending.id])

    def test_limit(self):
        now = timezone.now()
        for i in range(5):
            self.donation(f"O{i}", now + timedelta(seconds=i))

        ledger = build_pipeline(make_config(), FakeGateway()).ledger
        self.assertEqual([d.order_id for d in ledger.list_pending(2)], ["O0", "O1"])
