"""
Payment Gateway port.

The pipeline only needs two things from a payment provider: open an order for
a given amount, and capture it once the payer approved. Everything else about
the provider is a black box.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class OrderRequest:
    amount: Decimal
    description: str
    custom_id: str


@dataclass(frozen=True)
class CaptureResult:
    status: str
    amount: Optional[Decimal] = None
    custom_id: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.status == COMPLETED


class PaymentGateway:
    """Interface implemented by payment provider adapters."""

    def create_order(self, order: OrderRequest) -> str:
        """Creates a provider order and returns its identifier."""
        raise NotImplementedError

    def capture_order(self, order_id: str) -> CaptureResult:
        """Captures an approved order. Raises PaymentGatewayError on transport or provider failure."""
        raise NotImplementedError
