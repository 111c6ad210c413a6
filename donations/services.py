"""Builds pipeline components from a PipelineConfig."""

from donations.application.directory import AccountDirectory
from donations.application.intents import OrderIntentBuilder
from donations.application.ledger import DonationLedger
from donations.application.queue import DonationQueue
from donations.conf import PipelineConfig
from donations.domain.rewards import RewardPolicy
from donations.infrastructure.paypal import PayPalGateway


def get_config():
    return PipelineConfig.from_settings()


def get_gateway(config):
    return PayPalGateway(config.paypal)


class Pipeline:
    def __init__(self, config, gateway):
        self.config = config
        self.policy = RewardPolicy(config.coin_rate, config.money_rate)
        self.directory = AccountDirectory()
        self.intents = OrderIntentBuilder(config, self.policy, self.directory, gateway)
        self.ledger = DonationLedger(config, self.policy, self.directory, gateway)
        self.queue = DonationQueue(config, self.ledger)


def build_pipeline(config=None, gateway=None):
    config = config or get_config()
    return Pipeline(config, gateway or get_gateway(config))
