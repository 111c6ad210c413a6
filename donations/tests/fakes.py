from decimal import Decimal

from donations.conf import PayPalConfig, PipelineConfig
from donations.infrastructure.gateway import COMPLETED, CaptureResult, PaymentGateway
from donations.models import Account


def make_config(**overrides):
    values = {
        "coin_rate": Decimal("5"),
        "money_rate": Decimal("1000000"),
        "consumer_token": "secret-token",
        "paypal": PayPalConfig(client_id="id", client_secret="secret"),
    }
    values.update(overrides)
    return PipelineConfig(**values)


def make_account(aid=123456, username="player_one", coins=0, money=0):
    return Account.objects.create(aid=aid, username=username, coins=coins, money=money)


class FakeGateway(PaymentGateway):
    """In-process gateway recording every call it receives."""

    def __init__(self, status=COMPLETED, error=None, custom_id=None, on_capture=None):
        self.status = status
        self.error = error
        self.custom_id = custom_id
        self.on_capture = on_capture
        self.created = []
        self.captured = []
        self.orders = {}

    def create_order(self, order):
        if self.error:
            raise self.error
        self.created.append(order)
        order_id = f"ORDER-{len(self.created)}"
        self.orders[order_id] = order.custom_id
        return order_id

    def capture_order(self, order_id):
        self.captured.append(order_id)
        if self.error:
            raise self.error
        if self.on_capture:
            self.on_capture(order_id)
        return CaptureResult(status=self.status, custom_id=self.custom_id or self.orders.get(order_id))
