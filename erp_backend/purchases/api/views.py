# purchases/api/views.py

from django.db import transaction
from django.db.models import F
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import ENGINE_ERRORS, error_response
from accounting.services.concurrency import lock_row
from payments.models import Payment
from payments.services.reconciler import unallocated_payments
from purchases.api.serializers import (
    PurchaseInvoiceSerializer,
    PurchaseReturnSerializer,
    SupplierSerializer,
)
from purchases.models import PurchaseInvoice, PurchaseReturn, Supplier
from purchases.services.supplier_balance import supplier_balance_from_documents


class SupplierListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = SupplierSerializer

    @extend_schema(tags=["purchases"], responses=SupplierSerializer(many=True))
    def get(self, request):
        qs = Supplier.objects.order_by("name")
        if request.query_params.get("include_inactive") not in ("1", "true"):
            qs = qs.filter(is_active=True)
        return Response(
            SupplierSerializer(qs, many=True).data, status=status.HTTP_200_OK
        )

    @extend_schema(
        tags=["purchases"],
        request=SupplierSerializer,
        responses={201: SupplierSerializer},
    )
    def post(self, request):
        s = SupplierSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            supplier = s.save()
        except ENGINE_ERRORS as exc:
            return error_response(exc)
        return Response(
            SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED
        )


class SupplierDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = SupplierSerializer

    @extend_schema(tags=["purchases"], responses=SupplierSerializer)
    def get(self, request, supplier_id):
        supplier = get_object_or_404(Supplier, pk=supplier_id)
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=SupplierSerializer,
        responses=SupplierSerializer,
    )
    def patch(self, request, supplier_id):
        supplier = get_object_or_404(Supplier, pk=supplier_id)
        s = SupplierSerializer(supplier, data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        try:
            supplier = s.save()
        except ENGINE_ERRORS as exc:
            return error_response(exc)
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_200_OK)


class SupplierStatementView(GenericAPIView):
    """Running balance vs. rebuilt balance, open invoices, unallocated disbursements."""

    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["purchases"], responses={200: dict})
    def get(self, request, supplier_id):
        supplier = get_object_or_404(Supplier, pk=supplier_id)

        open_invoices = [
            {
                "id": str(inv.pk),
                "number": inv.number,
                "supplier_invoice_number": inv.supplier_invoice_number,
                "document_date": inv.document_date,
                "total": str(inv.total),
                "paid_amount": str(inv.paid_amount),
                "remaining_amount": str(inv.remaining_amount),
            }
            for inv in PurchaseInvoice.objects.filter(
                supplier=supplier,
                status=PurchaseInvoice.STATUS_POSTED,
                paid_amount__lt=F("total"),
            ).order_by("document_date", "number")
        ]

        disbursements = [
            {
                "id": str(p.pk),
                "number": p.number,
                "payment_date": p.payment_date,
                "amount": str(p.amount),
                "remaining_amount": str(p.remaining_amount),
            }
            for p in unallocated_payments(Payment.TYPE_DISBURSEMENT, supplier.pk)
        ]

        return Response(
            {
                "supplier": SupplierSerializer(supplier).data,
                "balance": str(supplier.balance),
                "balance_from_documents": str(supplier_balance_from_documents(supplier)),
                "open_invoices": open_invoices,
                "unallocated_disbursements": disbursements,
            },
            status=status.HTTP_200_OK,
        )


class _DocumentListCreateView(GenericAPIView):
    """List / create drafts. Subclasses set model + serializer_class."""

    permission_classes = [IsAuthenticated]
    model = None

    def get_queryset(self):
        qs = (
            self.model.objects.select_related("supplier")
            .prefetch_related("items", "items__product")
            .order_by("-document_date", "-number")
        )
        status_filter = (self.request.query_params.get("status") or "").strip().upper()
        if status_filter:
            qs = qs.filter(status=status_filter)
        supplier_id = self.request.query_params.get("supplier")
        if supplier_id:
            qs = qs.filter(supplier_id=supplier_id)
        return qs

    def get(self, request):
        qs = self.get_queryset()
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data, status=status.HTTP_200_OK)

    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            with transaction.atomic():
                document = s.save()
        except ENGINE_ERRORS as exc:
            return error_response(exc)
        return Response(self.get_serializer(document).data, status=status.HTTP_201_CREATED)


class _DocumentDetailView(GenericAPIView):
    """Retrieve / edit / delete one document; edits and deletes are draft-only."""

    permission_classes = [IsAuthenticated]
    model = None

    def _get(self, document_id):
        return get_object_or_404(self.model, pk=document_id)

    def get(self, request, document_id):
        return Response(self.get_serializer(self._get(document_id)).data, status=status.HTTP_200_OK)

    def patch(self, request, document_id):
        document = self._get(document_id)
        s = self.get_serializer(document, data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        try:
            with transaction.atomic():
                document = s.save()
        except ENGINE_ERRORS as exc:
            return error_response(exc)
        return Response(self.get_serializer(document).data, status=status.HTTP_200_OK)

    def delete(self, request, document_id):
        document = self._get(document_id)
        try:
            with transaction.atomic():
                lock_row(self.model, document.pk).delete()
        except ENGINE_ERRORS as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(tags=["purchases"])
class PurchaseInvoiceListCreateView(_DocumentListCreateView):
    model = PurchaseInvoice
    serializer_class = PurchaseInvoiceSerializer


@extend_schema(tags=["purchases"])
class PurchaseInvoiceDetailView(_DocumentDetailView):
    model = PurchaseInvoice
    serializer_class = PurchaseInvoiceSerializer


@extend_schema(tags=["purchases"])
class PurchaseReturnListCreateView(_DocumentListCreateView):
    model = PurchaseReturn
    serializer_class = PurchaseReturnSerializer


@extend_schema(tags=["purchases"])
class PurchaseReturnDetailView(_DocumentDetailView):
    model = PurchaseReturn
    serializer_class = PurchaseReturnSerializer
