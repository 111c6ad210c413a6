from django.urls import path

from .views import (
    CheckAccountView,
    ConfirmPaymentView,
    CreateOrderView,
    HealthView,
    MarkDoneView,
    PendingDonationsView,
)

urlpatterns = [
    path("health", HealthView.as_view(), name="health"),
    path("check-aid", CheckAccountView.as_view(), name="check-aid"),
    path("create-order", CreateOrderView.as_view(), name="create-order"),
    path("confirm-payment", ConfirmPaymentView.as_view(), name="confirm-payment"),
    path("mta/pending", PendingDonationsView.as_view(), name="mta-pending"),
    path("mta/mark-done", MarkDoneView.as_view(), name="mta-mark-done"),
]
