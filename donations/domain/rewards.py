"""
Reward Policy — base-unit amount to in-game currency.

Rewards are whole units, always rounded down. Rates are held as Decimal so
that flooring never picks up binary floating-point noise.
"""

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal

from donations.domain.exceptions import AmountOutOfRange, InvalidRewardKind

COINS = "coins"
MONEY = "money"
REWARD_KINDS = (COINS, MONEY)
AMOUNT_DECIMAL_PLACES = 2


@dataclass(frozen=True)
class Reward:
    coins: int = 0
    money: int = 0

    def as_dict(self):
        return {"coins": self.coins, "money": self.money}

    def describe(self):
        if self.coins:
            return f"{self.coins} Coins"
        return f"{self.money:,} Game Money"


class RewardPolicy:
    def __init__(self, coin_rate, money_rate):
        self.coin_rate = Decimal(str(coin_rate))
        self.money_rate = Decimal(str(money_rate))

    def compute(self, kind, amount):
        """Maps a monetary amount and a reward kind to a Reward.

        Raises InvalidRewardKind for unknown kinds and AmountOutOfRange when
        the amount is too small to yield a single whole unit.
        """
        amount = Decimal(str(amount))

        if kind == COINS:
            reward = Reward(coins=_floor(amount * self.coin_rate))
        elif kind == MONEY:
            reward = Reward(money=_floor(amount * self.money_rate))
        else:
            raise InvalidRewardKind(kind)

        if reward.coins == 0 and reward.money == 0:
            raise AmountOutOfRange(
                amount, message=f"Amount {amount} is too small to yield a whole {kind} unit"
            )

        return reward


def check_request(kind, amount, minimum, maximum):
    """Validates a reward kind and an amount against inclusive bounds."""
    if kind not in REWARD_KINDS:
        raise InvalidRewardKind(kind)
    if not minimum <= amount <= maximum:
        raise AmountOutOfRange(amount, minimum, maximum)
    if amount.as_tuple().exponent < -AMOUNT_DECIMAL_PLACES:
        raise AmountOutOfRange(
            amount, message=f"Amount {amount} has more than {AMOUNT_DECIMAL_PLACES} decimal places"
        )


def _floor(value):
    return int(value.to_integral_value(rounding=ROUND_FLOOR))
