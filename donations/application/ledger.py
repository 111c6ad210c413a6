"""
Application Use Case — Payment Confirmation (Reconciliation Ledger)

Turns a captured payment into exactly one durable Donation row that the game
server will later pick up from the pending queue.

Core guarantees provided:

- Atomicity: duplicate check, account check, capture and insert run inside a
  single transaction.atomic() block. Any failure rolls the block back and no
  Donation is written.
- Idempotency: enforced by the UNIQUE constraint on order_id. The explicit
  existence check gives replays a clean DuplicateOrder; the constraint covers
  two confirmations racing past that check.
- Verification: when the captured order carries correlation data (custom_id),
  the account, kind and amount recorded are the order's, not the caller's.
- FIFO delivery: pending donations are read oldest first.

Known gap:

The capture is an external, non-transactional call made before the commit.
If the store fails after the gateway captured the payment, the money is taken
but no Donation exists. That case is logged at CRITICAL with the order id
and must be reconciled by hand against the gateway's transaction log.
"""

import logging
from decimal import Decimal

from django.db import DatabaseError, IntegrityError, transaction

from donations.application.intents import correlation_id, parse_correlation_id
from donations.domain.exceptions import (
    AccountNotFound,
    DuplicateOrder,
    InvalidDonationRequest,
    PaymentNotCompleted,
    StoreFailure,
)
from donations.domain.rewards import check_request
from donations.models import Donation

logger = logging.getLogger(__name__)


class DonationLedger:
    def __init__(self, config, policy, directory, gateway):
        self.config = config
        self.policy = policy
        self.directory = directory
        self.gateway = gateway

    def confirm(self, account_id, kind, amount, external_order_id):
        """
        Captures the order and records the reward owed for it.

        Returns the Reward written to the ledger, computed from the captured
        order's correlation data when the gateway reports it. Raises DuplicateOrder,
        AccountNotFound, PaymentNotCompleted, PaymentGatewayError, the
        validation errors of the reward policy, or StoreFailure.
        """
        amount = Decimal(str(amount))
        check_request(kind, amount, self.config.min_amount, self.config.max_amount)
        # Pure, so computed up front: a policy failure must never follow a capture.
        reward = self.policy.compute(kind, amount)

        captured = False
        try:
            with transaction.atomic():
                if Donation.objects.filter(order_id=external_order_id).exists():
                    logger.warning("Duplicate order: order=%s account=%s", external_order_id, account_id)
                    raise DuplicateOrder(external_order_id)

                if not self.directory.exists(account_id):
                    raise AccountNotFound(account_id)

                capture = self.gateway.capture_order(external_order_id)
                if not capture.completed:
                    logger.error("Payment not completed: order=%s status=%s", external_order_id, capture.status)
                    raise PaymentNotCompleted(external_order_id, capture.status)
                captured = True

                # The order's own correlation data is authoritative for what was paid.
                order = parse_correlation_id(capture.custom_id)
                if order is None:
                    if capture.custom_id:
                        logger.error(
                            "Unreadable capture correlation: order=%s gateway=%s",
                            external_order_id, capture.custom_id,
                        )
                elif order != (account_id, kind, amount):
                    logger.warning(
                        "Capture correlation mismatch, recording order values: order=%s "
                        "request=%s gateway=%s",
                        external_order_id, correlation_id(account_id, kind, amount), capture.custom_id,
                    )
                    account_id, kind, amount = order
                    reward = self._reward_for_order(external_order_id, account_id, kind, amount)

                try:
                    Donation.objects.create(
                        order_id=external_order_id,
                        account_id=account_id,
                        kind=kind,
                        amount=amount,
                        coins_reward=reward.coins,
                        money_reward=reward.money,
                        processed=False,
                    )
                except IntegrityError:
                    logger.warning("Duplicate order on insert: order=%s", external_order_id)
                    raise DuplicateOrder(external_order_id)
        except DatabaseError as exc:
            if captured:
                logger.critical(
                    "Payment captured but not recorded, manual audit required: "
                    "order=%s account=%s kind=%s amount=%s error=%s",
                    external_order_id, account_id, kind, amount, exc,
                )
            else:
                logger.exception("Confirmation aborted by store: order=%s", external_order_id)
            raise StoreFailure(str(exc)) from exc

        logger.info(
            "Payment confirmed: order=%s account=%s kind=%s amount=%s reward=%s",
            external_order_id, account_id, kind, amount, reward.as_dict(),
        )
        return reward

    def _reward_for_order(self, order_id, account_id, kind, amount):
        try:
            if not self.directory.exists(account_id):
                raise AccountNotFound(account_id)
            return self.policy.compute(kind, amount)
        except InvalidDonationRequest as exc:
            logger.critical(
                "Payment captured but not recorded, manual audit required: "
                "order=%s account=%s kind=%s amount=%s error=%s",
                order_id, account_id, kind, amount, exc,
            )
            raise

    def list_pending(self, limit):
        """Unprocessed donations, oldest first. Does not claim anything."""
        return list(
            Donation.objects
            .filter(processed=False)
            .order_by("created_at", "id")[:limit]
        )
