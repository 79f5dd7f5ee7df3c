# sales/api/viewsets/customer.py

"""
CUSTOMER VIEWSET

- CRUD on customer master data (balance is engine-owned)
- GET /api/sales/customers/<id>/statement/
    running balance vs. the balance rebuilt from documents and receipts,
    open invoices, receipts with an unallocated remainder
"""

from django.db.models import F, ProtectedError
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import ENGINE_ERRORS, error_response
from payments.models import Payment
from payments.services.reconciler import unallocated_payments
from sales.models import Customer, SalesInvoice
from sales.serializers import CustomerSerializer
from sales.services.customer_balance import customer_balance_from_documents


@extend_schema(tags=["sales"])
class CustomerViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = CustomerSerializer
    filterset_fields = ["is_active", "code"]

    queryset = Customer.objects.all().order_by("name")

    def update(self, request, *args, **kwargs):
        try:
            return super().update(request, *args, **kwargs)
        except ENGINE_ERRORS as exc:
            return error_response(exc)

    def destroy(self, request, *args, **kwargs):
        try:
            return super().destroy(request, *args, **kwargs)
        except ProtectedError:
            return Response(
                {"detail": "Customer has documents or payments; deactivate it instead.", "code": "protected"},
                status=status.HTTP_400_BAD_REQUEST,
            )

    @extend_schema(responses={200: dict})
    @action(detail=True, methods=["get"])
    def statement(self, request, pk=None):
        customer = self.get_object()

        open_invoices = [
            {
                "id": str(inv.pk),
                "number": inv.number,
                "document_date": inv.document_date,
                "total": str(inv.total),
                "paid_amount": str(inv.paid_amount),
                "remaining_amount": str(inv.remaining_amount),
            }
            for inv in SalesInvoice.objects.filter(
                customer=customer,
                status=SalesInvoice.STATUS_POSTED,
                paid_amount__lt=F("total"),
            ).order_by("document_date", "number")
        ]

        receipts = [
            {
                "id": str(p.pk),
                "number": p.number,
                "payment_date": p.payment_date,
                "amount": str(p.amount),
                "remaining_amount": str(p.remaining_amount),
            }
            for p in unallocated_payments(Payment.TYPE_RECEIPT, customer.pk)
        ]

        return Response(
            {
                "customer": CustomerSerializer(customer).data,
                "balance": str(customer.balance),
                "balance_from_documents": str(customer_balance_from_documents(customer)),
                "open_invoices": open_invoices,
                "unallocated_receipts": receipts,
            },
            status=status.HTTP_200_OK,
        )
