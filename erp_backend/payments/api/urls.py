# payments/api/urls.py

from django.urls import path

from payments.api.views import (
    PaymentAllocationCreateView,
    PaymentAllocationDeleteView,
    PaymentDetailView,
    PaymentListCreateView,
    UnallocatedPaymentsView,
)

urlpatterns = [
    path("", PaymentListCreateView.as_view(), name="payments"),
    path("unallocated/", UnallocatedPaymentsView.as_view(), name="payments-unallocated"),
    path(
        "allocations/<uuid:allocation_id>/",
        PaymentAllocationDeleteView.as_view(),
        name="payment-allocation-delete",
    ),
    path("<uuid:payment_id>/", PaymentDetailView.as_view(), name="payment-detail"),
    path(
        "<uuid:payment_id>/allocations/",
        PaymentAllocationCreateView.as_view(),
        name="payment-allocations",
    ),
]
