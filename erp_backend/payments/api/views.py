# payments/api/views.py

"""
PAYMENTS API

    GET  /api/payments/                      list (?payment_type=&customer=&supplier=)
    POST /api/payments/                      create (optionally allocated to invoice_id)
    GET  /api/payments/<uuid>/               detail with allocations
    POST /api/payments/<uuid>/allocations/   link to an invoice
    DELETE /api/payments/allocations/<uuid>/ unlink
    GET  /api/payments/unallocated/          payments with a remainder
"""

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import ENGINE_ERRORS, error_response
from payments.api.serializers import (
    AllocationCreateSerializer,
    PaymentAllocationSerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
    UnallocatedQuerySerializer,
)
from payments.models import Payment
from payments.services.reconciler import (
    create_payment,
    create_payment_and_allocate,
    link_existing_payment,
    unallocated_payments,
    unlink_allocation,
)


class PaymentListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PaymentSerializer
    filterset_fields = ["payment_type", "customer", "supplier", "method", "payment_date"]

    def get_queryset(self):
        return Payment.objects.select_related("customer", "supplier").prefetch_related(
            "allocations__sales_invoice", "allocations__purchase_invoice"
        )

    @extend_schema(tags=["payments"], responses=PaymentSerializer(many=True))
    def get(self, request):
        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PaymentSerializer(page, many=True).data)
        return Response(PaymentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["payments"],
        request=PaymentCreateSerializer,
        responses={201: PaymentSerializer},
    )
    def post(self, request):
        s = PaymentCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)
        invoice_id = data.pop("invoice_id", None)

        try:
            if invoice_id:
                payment = create_payment_and_allocate(invoice_id=invoice_id, **data)
            else:
                payment = create_payment(**data)
        except ENGINE_ERRORS as exc:
            return error_response(exc)

        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class PaymentDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PaymentSerializer

    @extend_schema(tags=["payments"], responses=PaymentSerializer)
    def get(self, request, payment_id):
        payment = get_object_or_404(Payment, pk=payment_id)
        return Response(PaymentSerializer(payment).data, status=status.HTTP_200_OK)


class PaymentAllocationCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AllocationCreateSerializer

    @extend_schema(
        tags=["payments"],
        request=AllocationCreateSerializer,
        responses={201: PaymentAllocationSerializer},
    )
    def post(self, request, payment_id):
        s = AllocationCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            allocation = link_existing_payment(
                payment_id=payment_id,
                invoice_id=s.validated_data["invoice_id"],
                amount=s.validated_data["amount"],
            )
        except ENGINE_ERRORS as exc:
            return error_response(exc)

        return Response(
            PaymentAllocationSerializer(allocation).data, status=status.HTTP_201_CREATED
        )


class PaymentAllocationDeleteView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["payments"], responses={200: dict})
    def delete(self, request, allocation_id):
        try:
            paid_amount = unlink_allocation(allocation_id=allocation_id)
        except ENGINE_ERRORS as exc:
            return error_response(exc)

        return Response(
            {"allocation_id": str(allocation_id), "paid_amount": str(paid_amount)},
            status=status.HTTP_200_OK,
        )


class UnallocatedPaymentsView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["payments"],
        parameters=[
            OpenApiParameter(name="payment_type", type=str, required=True),
            OpenApiParameter(name="counterparty_id", type=str, required=True),
        ],
        responses=PaymentSerializer(many=True),
    )
    def get(self, request):
        q = UnallocatedQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)

        try:
            payments = unallocated_payments(
                q.validated_data["payment_type"], q.validated_data["counterparty_id"]
            )
        except ENGINE_ERRORS as exc:
            return error_response(exc)

        return Response(PaymentSerializer(payments, many=True).data, status=status.HTTP_200_OK)
