"""
API Layer — Donation Endpoints (Django REST Framework)

This module exposes the HTTP interface of the donation pipeline: the player
facing order/confirm flow and the game server's poll/acknowledge flow.

Design intent:

Views are thin controllers. Their responsibilities are limited to:

- Basic input presence checks and type coercion
- Delegation to the application layer
- Translation of domain exceptions into HTTP responses

Architectural decisions:

- No business rules are implemented here.
- All transactional guarantees (atomicity, idempotency, exactly-once
  settlement) live in the application layer.
- Game server endpoints are gated by ConsumerTokenAuthentication, which
  rejects the request with 401 before the view body runs.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from donations.authentication import ConsumerTokenAuthentication
from donations.domain.exceptions import (
    AccountNotFound,
    DonationNotFound,
    DuplicateOrder,
    InvalidDonationRequest,
    PaymentGatewayError,
    PaymentNotCompleted,
    StoreFailure,
)
from donations.models import AID_MAX, AID_MIN
from donations.serializers import AccountSerializer, PendingDonationSerializer
from donations.services import build_pipeline

logger = logging.getLogger(__name__)


def _error(message, http_status, code):
    return Response({"success": False, "error": message, "code": code}, status=http_status)


def _domain_error(exc, http_status):
    return _error(str(exc), http_status, exc.code)


def _field(data, name, *aliases):
    """Reads a request field; aliases are the legacy web client's names (aid, type, orderId)."""
    for key in (name, *aliases):
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


def _parse_aid(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_amount(value):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


class PipelineView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get_pipeline(self):
        return build_pipeline()


class HealthView(PipelineView):
    """GET /api/health"""

    def get(self, request):
        config = self.get_pipeline().config
        return Response({
            "status": "ok",
            "timestamp": timezone.now().isoformat(),
            "rates": {
                "coin": f"1 = {config.coin_rate} Coin",
                "money": f"1 = {config.money_rate:,} Money",
            },
        })


class CheckAccountView(PipelineView):
    """POST /api/check-aid"""

    def post(self, request):
        aid = _parse_aid(_field(request.data, "accountId", "aid"))
        if aid is None:
            return _error("Invalid AID format", status.HTTP_400_BAD_REQUEST, "invalid_request")
        if not AID_MIN <= aid <= AID_MAX:
            return _error(
                f"AID must be between {AID_MIN}-{AID_MAX}", status.HTTP_400_BAD_REQUEST, "invalid_request"
            )

        try:
            account = self.get_pipeline().directory.get(aid)
        except AccountNotFound as exc:
            return _domain_error(exc, status.HTTP_404_NOT_FOUND)

        return Response({"success": True, **AccountSerializer(account).data})


class CreateOrderView(PipelineView):
    """
    POST /api/create-order

    Opens a provider order. Nothing is stored until the payment is confirmed.
    """

    def post(self, request):
        aid = _field(request.data, "accountId", "aid")
        kind = _field(request.data, "kind", "type")
        amount = _field(request.data, "amount")

        if None in (aid, kind, amount):
            return _error(
                "Missing required fields: accountId, kind, amount", status.HTTP_400_BAD_REQUEST,
                "invalid_request",
            )

        aid = _parse_aid(aid)
        amount = _parse_amount(amount)
        if aid is None or amount is None:
            return _error("accountId must be an integer and amount a number.", status.HTTP_400_BAD_REQUEST,
                          "invalid_request")

        try:
            intent = self.get_pipeline().intents.create_intent(aid, kind, amount)
        except AccountNotFound as exc:
            return _domain_error(exc, status.HTTP_404_NOT_FOUND)
        except InvalidDonationRequest as exc:
            return _domain_error(exc, status.HTTP_400_BAD_REQUEST)
        except PaymentGatewayError as exc:
            logger.error("Create order failed: account=%s error=%s", aid, exc)
            return _error("Failed to create order", status.HTTP_502_BAD_GATEWAY, exc.code)

        return Response({
            "success": True,
            "externalOrderId": intent.external_order_id,
            "expectedReward": intent.expected_reward.as_dict(),
            "displayName": intent.display_name,
            "description": intent.description,
        })


class ConfirmPaymentView(PipelineView):
    """
    POST /api/confirm-payment

    Captures the order and records the donation. Retrying after a payment or
    gateway error is safe; retrying after success yields 409.
    """

    def post(self, request):
        aid = _field(request.data, "accountId", "aid")
        kind = _field(request.data, "kind", "type")
        amount = _field(request.data, "amount")
        order_id = _field(request.data, "externalOrderId", "orderId")

        if None in (aid, kind, amount, order_id):
            return _error("Missing required fields", status.HTTP_400_BAD_REQUEST, "invalid_request")

        aid = _parse_aid(aid)
        amount = _parse_amount(amount)
        if aid is None or amount is None:
            return _error("accountId must be an integer and amount a number.", status.HTTP_400_BAD_REQUEST,
                          "invalid_request")

        try:
            reward = self.get_pipeline().ledger.confirm(aid, kind, amount, str(order_id))
        except DuplicateOrder as exc:
            return _domain_error(exc, status.HTTP_409_CONFLICT)
        except AccountNotFound as exc:
            return _domain_error(exc, status.HTTP_404_NOT_FOUND)
        except InvalidDonationRequest as exc:
            return _domain_error(exc, status.HTTP_400_BAD_REQUEST)
        except PaymentNotCompleted as exc:
            return _error("Payment not completed", status.HTTP_402_PAYMENT_REQUIRED, exc.code)
        except PaymentGatewayError as exc:
            return _error("Payment gateway error, please try again.", status.HTTP_502_BAD_GATEWAY, exc.code)
        except StoreFailure as exc:
            return _error("Failed to process donation", status.HTTP_500_INTERNAL_SERVER_ERROR, exc.code)

        return Response({
            "success": True,
            "message": "Donation processed successfully",
            "reward": reward.as_dict(),
            "description": f"You will receive {reward.describe()}",
        })


class PendingDonationsView(PipelineView):
    """POST /api/mta/pending"""

    authentication_classes = [ConsumerTokenAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request):
        donations = self.get_pipeline().queue.peek()
        data = PendingDonationSerializer(donations, many=True).data
        return Response({"success": True, "donations": data, "count": len(data)})


class MarkDoneView(PipelineView):
    """POST /api/mta/mark-done"""

    authentication_classes = [ConsumerTokenAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request):
        donation_id = request.data.get("donationId")
        if not donation_id:
            return _error("Missing donationId", status.HTTP_400_BAD_REQUEST, "invalid_request")

        try:
            donation_id = int(donation_id)
        except (TypeError, ValueError):
            return _error("donationId must be an integer.", status.HTTP_400_BAD_REQUEST, "invalid_request")

        try:
            self.get_pipeline().queue.claim_and_settle(donation_id)
        except DonationNotFound as exc:
            return _error("Donation not found", status.HTTP_404_NOT_FOUND, exc.code)
        except StoreFailure as exc:
            return _error("Database error", status.HTTP_500_INTERNAL_SERVER_ERROR, exc.code)

        return Response({"success": True})
