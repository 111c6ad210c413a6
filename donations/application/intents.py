"""
Application Use Case — Order Intent

Opens a payment order for a player donation and reports the reward the
player can expect once the payment is captured.

Nothing is persisted here. The account id, reward kind and amount travel on
the provider order as opaque correlation data (custom_id), so an abandoned
order leaves no local trace and a captured one can be checked against the
provider's record later.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from donations.domain.rewards import Reward, check_request
from donations.infrastructure.gateway import OrderRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderIntent:
    external_order_id: str
    expected_reward: Reward
    display_name: str
    description: str


def correlation_id(account_id, kind, amount):
    amount = Decimal(str(amount)).quantize(Decimal("0.01"))
    return f"{account_id}:{kind}:{amount}"


def parse_correlation_id(value):
    """Inverse of correlation_id. Returns (account_id, kind, amount) or None if malformed."""
    try:
        account_id, kind, amount = value.split(":")
        return int(account_id), kind, Decimal(amount)
    except (AttributeError, ValueError, ArithmeticError):
        return None


class OrderIntentBuilder:
    def __init__(self, config, policy, directory, gateway):
        self.config = config
        self.policy = policy
        self.directory = directory
        self.gateway = gateway

    def create_intent(self, account_id, kind, amount):
        """
        Validates the request and creates a provider order for it.

        Raises InvalidRewardKind, AmountOutOfRange or AccountNotFound before
        the gateway is contacted; PaymentGatewayError if order creation fails.
        """
        amount = Decimal(str(amount))
        check_request(kind, amount, self.config.min_amount, self.config.max_amount)

        account = self.directory.get(account_id)
        reward = self.policy.compute(kind, amount)

        order_id = self.gateway.create_order(OrderRequest(
            amount=amount,
            description=f"{reward.describe()} for AID {account.aid}",
            custom_id=correlation_id(account.aid, kind, amount),
        ))

        logger.info(
            "Order created: order=%s account=%s username=%s kind=%s amount=%s reward=%s",
            order_id, account.aid, account.username, kind, amount, reward.as_dict(),
        )

        return OrderIntent(
            external_order_id=order_id,
            expected_reward=reward,
            display_name=account.username,
            description=reward.describe(),
        )
