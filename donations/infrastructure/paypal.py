"""
PayPal Orders v2 adapter.

Talks to the PayPal REST API with requests. Every call is bounded by the
configured timeout; transport errors and provider error responses surface as
PaymentGatewayError. Calls carry a PayPal-Request-Id so retried POSTs are
deduplicated on PayPal's side.
"""

import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from donations.domain.exceptions import PaymentGatewayError
from donations.infrastructure.gateway import CaptureResult, PaymentGateway

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class PayPalGateway(PaymentGateway):
    def __init__(self, config, session=None):
        self.config = config
        self.session = session or self._build_session()

    @staticmethod
    def _build_session():
        session = requests.Session()
        # Read timeouts are not retried; a capture waits at most one PAYPAL_TIMEOUT for a reply.
        retries = Retry(
            total=3,
            read=0,
            backoff_factor=1,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=["POST"],
        )
        session.mount("https://", HTTPAdapter(max_retries=retries))
        return session

    def _access_token(self):
        response = self._send(
            "post",
            "/v1/oauth2/token",
            data={"grant_type": "client_credentials"},
            auth=(self.config.client_id, self.config.client_secret),
            headers={"Accept": "application/json"},
        )
        if response.status_code != 200:
            logger.error("PayPal token request failed: status=%s", response.status_code)
            raise PaymentGatewayError("PayPal authentication failed")
        return self._json(response)["access_token"]

    def _send(self, method, path, **kwargs):
        url = f"{self.config.api_base}{path}"
        try:
            return self.session.request(method, url, timeout=self.config.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("PayPal request failed: %s %s: %s", method.upper(), path, exc)
            raise PaymentGatewayError(f"PayPal request failed: {exc}") from exc

    @staticmethod
    def _json(response):
        try:
            return response.json()
        except ValueError as exc:
            raise PaymentGatewayError("Invalid JSON response from PayPal") from exc

    def _headers(self, request_id):
        return {
            "Authorization": f"Bearer {self._access_token()}",
            "Content-Type": "application/json",
            "PayPal-Request-Id": request_id,
        }

    def create_order(self, order):
        value = (order.amount * self.config.exchange_rate).quantize(CENT, rounding=ROUND_HALF_UP)
        payload = {
            "intent": "CAPTURE",
            "purchase_units": [{
                "amount": {"currency_code": self.config.currency, "value": str(value)},
                "description": order.description,
                "custom_id": order.custom_id,
            }],
            "application_context": {
                "brand_name": self.config.brand_name,
                "user_action": "PAY_NOW",
            },
        }

        response = self._send(
            "post",
            "/v2/checkout/orders",
            json=payload,
            headers={**self._headers(str(uuid.uuid4())), "Prefer": "return=representation"},
        )
        data = self._json(response)
        if response.status_code not in (200, 201) or "id" not in data:
            logger.error("PayPal create order failed: status=%s body=%s", response.status_code, data)
            raise PaymentGatewayError(data.get("message", "PayPal order creation failed"))

        return data["id"]

    def capture_order(self, order_id):
        response = self._send(
            "post",
            f"/v2/checkout/orders/{order_id}/capture",
            headers=self._headers(f"capture-{order_id}"),
        )
        data = self._json(response)

        # PayPal answers 422 for orders that cannot be captured.
        if response.status_code == 422:
            issue = (data.get("details") or [{}])[0].get("issue", "UNPROCESSABLE_ENTITY")
            return CaptureResult(status=issue)

        if response.status_code not in (200, 201):
            logger.error("PayPal capture failed: order=%s status=%s body=%s",
                         order_id, response.status_code, data)
            raise PaymentGatewayError(data.get("message", "PayPal capture failed"))

        return _parse_capture(data)


def _parse_capture(data):
    amount = None
    custom_id = None
    units = data.get("purchase_units") or []
    if units:
        captures = (units[0].get("payments") or {}).get("captures") or []
        if captures:
            amount = Decimal(captures[0]["amount"]["value"])
            custom_id = captures[0].get("custom_id")
        custom_id = custom_id or units[0].get("custom_id")
    return CaptureResult(status=data.get("status", "UNKNOWN"), amount=amount, custom_id=custom_id)
