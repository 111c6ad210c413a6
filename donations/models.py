"""
Persistence Models — Donation Domain (Django ORM)

This module defines the persistence layer for the donation pipeline: player
accounts that receive in-game currency, and the donation ledger that bridges
the payment gateway and the polling game server.

Key architectural decisions:

- Account rows are provisioned by the game server. The pipeline reads them
  and only ever increments their balances during settlement.
- Donation is the ledger and the work queue at the same time: rows with
  processed=False are pending work, ordered by created_at.
- Idempotency is enforced at the database level via a UNIQUE constraint
  on order_id, the provider-issued order identifier.
- A CHECK constraint keeps coins_reward and money_reward from both being
  nonzero on the same row.
- Donations are never deleted; processed_at records settlement for audits.
"""

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q

from donations.domain.rewards import COINS, MONEY, Reward

AID_MIN = 100000
AID_MAX = 999999


class Account(models.Model):
    """
    A player account holding two in-game balances.

    The table is shared with the game server, hence the legacy table and
    column names.
    """

    aid = models.PositiveIntegerField(
        primary_key=True,
        db_column="AID",
        validators=[MinValueValidator(AID_MIN), MaxValueValidator(AID_MAX)],
    )
    username = models.CharField(max_length=64)
    coins = models.BigIntegerField(default=0)
    money = models.BigIntegerField(default=0)

    class Meta:
        db_table = "users"

    def __str__(self):
        return f"Account {self.aid} ({self.username}) - Coins: {self.coins} Money: {self.money}"


class Donation(models.Model):
    """
    One captured payment and the reward owed for it.

    Key architectural decisions:
    - order_id is UNIQUE at the database level so concurrent confirmations
      of the same order cannot both insert.
    - account uses PROTECT: ledger rows are an audit trail and must never
      disappear with an account.
    - processed is indexed because the pending queue filters on it.
    """

    KIND_CHOICES = [
        (COINS, "Coins"),
        (MONEY, "Money"),
    ]

    order_id = models.CharField(max_length=64, unique=True)

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        db_column="aid",
        related_name="donations",
    )

    kind = models.CharField(max_length=8, choices=KIND_CHOICES, db_column="type")
    amount = models.DecimalField(max_digits=10, decimal_places=2, db_column="amount_gel")
    coins_reward = models.BigIntegerField(default=0)
    money_reward = models.BigIntegerField(default=0)

    processed = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "donations"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(coins_reward=0) | Q(money_reward=0),
                name="donation_single_reward_kind",
            ),
        ]

    @property
    def reward(self):
        return Reward(coins=self.coins_reward, money=self.money_reward)

    def __str__(self):
        state = "processed" if self.processed else "pending"
        return f"Donation {self.id} - order {self.order_id} ({state})"
