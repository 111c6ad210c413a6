"""
Application Use Case — Pending Donation Queue (Consumer Acknowledgment)

The game server polls this queue and acknowledges each donation after it
applied the reward in-game. Polling is not a lease: the same donation can be
returned by several polls until it is settled, so exactly-once crediting is
the job of claim_and_settle, not of peek.

Core guarantees provided:

- Atomicity: claim, balance credit and processed flag run in one
  transaction.atomic() block.
- Row-level locking: select_for_update() serializes concurrent settlements
  of the same donation on backends that support it.
- Compare-and-set: the processed flag is flipped with a conditional UPDATE
  (WHERE processed = FALSE), so only one caller can ever claim a row even
  where row locks are unavailable.
- Race-condition safety: balances are incremented with F() expressions.
"""

import hmac
import logging

from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from donations.domain.exceptions import DonationNotFound, StoreFailure, Unauthorized
from donations.models import Account, Donation

logger = logging.getLogger(__name__)

MAX_BATCH = 50


class ConsumerGate:
    """Shared bearer token check for the game server."""

    def __init__(self, config):
        self.token = config.consumer_token

    def authenticate(self, presented):
        if not self.token or not presented:
            raise Unauthorized()
        if not hmac.compare_digest(str(presented).encode(), self.token.encode()):
            raise Unauthorized()


class DonationQueue:
    def __init__(self, config, ledger):
        self.limit = min(config.pending_limit, MAX_BATCH)
        self.ledger = ledger

    def peek(self, limit=None):
        limit = self.limit if limit is None else max(0, min(limit, self.limit))
        donations = self.ledger.list_pending(limit)
        logger.info("Pending donations requested: %s found", len(donations))
        return donations

    def claim_and_settle(self, donation_id):
        """
        Credits the account of an unprocessed donation and marks it processed.

        Raises DonationNotFound when the donation does not exist or was
        already settled; a repeated call never credits twice.
        """
        try:
            with transaction.atomic():
                donation = (
                    Donation.objects
                    .select_for_update()
                    .filter(id=donation_id, processed=False)
                    .first()
                )
                if donation is None:
                    raise DonationNotFound(donation_id)

                claimed = (
                    Donation.objects
                    .filter(id=donation.id, processed=False)
                    .update(processed=True, processed_at=timezone.now())
                )
                if claimed != 1:
                    raise DonationNotFound(donation_id)

                Account.objects.filter(aid=donation.account_id).update(
                    coins=F("coins") + donation.coins_reward,
                    money=F("money") + donation.money_reward,
                )
        except DatabaseError as exc:
            logger.exception("Settlement aborted by store: donation=%s", donation_id)
            raise StoreFailure(str(exc)) from exc

        logger.info(
            "Processed by consumer: donation=%s account=%s coins=%s money=%s",
            donation.id, donation.account_id, donation.coins_reward, donation.money_reward,
        )
        return donation
