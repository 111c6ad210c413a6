"""
Pipeline configuration.

Django settings are read once into immutable dataclasses which are handed to
each component at construction. Nothing in the application layer reads
django.conf.settings directly.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.conf import settings

PAYPAL_API_BASES = {
    "sandbox": "https://api-m.sandbox.paypal.com",
    "production": "https://api-m.paypal.com",
}


@dataclass(frozen=True)
class PayPalConfig:
    client_id: str
    client_secret: str
    mode: str = "sandbox"
    currency: str = "USD"
    exchange_rate: Decimal = Decimal("1")
    brand_name: str = "PROJECT GENESIS"
    timeout: float = 10.0

    @property
    def api_base(self):
        return PAYPAL_API_BASES.get(self.mode, PAYPAL_API_BASES["sandbox"])


@dataclass(frozen=True)
class PipelineConfig:
    coin_rate: Decimal
    money_rate: Decimal
    consumer_token: str
    min_amount: Decimal = Decimal("1")
    max_amount: Decimal = Decimal("1000")
    pending_limit: int = 50
    paypal: Optional[PayPalConfig] = None

    @classmethod
    def from_settings(cls):
        return cls(
            coin_rate=Decimal(str(settings.COIN_RATE)),
            money_rate=Decimal(str(settings.MONEY_RATE)),
            consumer_token=settings.MTA_TOKEN,
            min_amount=Decimal(str(settings.DONATION_MIN_AMOUNT)),
            max_amount=Decimal(str(settings.DONATION_MAX_AMOUNT)),
            pending_limit=settings.DONATION_PENDING_LIMIT,
            paypal=PayPalConfig(
                client_id=settings.PAYPAL_CLIENT_ID,
                client_secret=settings.PAYPAL_CLIENT_SECRET,
                mode=settings.PAYPAL_MODE,
                currency=settings.PAYPAL_CURRENCY,
                exchange_rate=Decimal(str(settings.PAYPAL_EXCHANGE_RATE)),
                brand_name=settings.PAYPAL_BRAND_NAME,
                timeout=settings.PAYPAL_TIMEOUT,
            ),
        )
