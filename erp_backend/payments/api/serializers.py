# payments/api/serializers.py

from rest_framework import serializers

from payments.models import Payment, PaymentAllocation
from payments.services.reconciler import payment_remaining


class PaymentAllocationSerializer(serializers.ModelSerializer):
    invoice_number = serializers.SerializerMethodField()

    class Meta:
        model = PaymentAllocation
        fields = [
            "id",
            "payment",
            "sales_invoice",
            "purchase_invoice",
            "invoice_number",
            "allocated_amount",
            "created_at",
        ]
        read_only_fields = fields

    def get_invoice_number(self, obj):
        return getattr(obj.invoice, "number", None)


class PaymentSerializer(serializers.ModelSerializer):
    counterparty_name = serializers.SerializerMethodField()
    remaining_amount = serializers.SerializerMethodField()
    allocations = PaymentAllocationSerializer(many=True, read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "number",
            "payment_type",
            "customer",
            "supplier",
            "counterparty_name",
            "payment_date",
            "amount",
            "method",
            "reference",
            "notes",
            "status",
            "journal_entry",
            "remaining_amount",
            "allocations",
            "created_at",
        ]
        read_only_fields = fields

    def get_counterparty_name(self, obj):
        return getattr(obj.counterparty, "name", None)

    def get_remaining_amount(self, obj):
        remaining = getattr(obj, "remaining_amount", None)
        if remaining is None:
            remaining = payment_remaining(obj)
        return str(remaining)


class PaymentCreateSerializer(serializers.Serializer):
    payment_type = serializers.ChoiceField(choices=Payment.TYPES)
    counterparty_id = serializers.UUIDField()
    invoice_id = serializers.UUIDField(required=False, allow_null=True)

    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    method = serializers.ChoiceField(choices=Payment.METHODS, default=Payment.METHOD_CASH)
    payment_date = serializers.DateField(required=False)

    reference = serializers.CharField(required=False, allow_blank=True, max_length=100)
    notes = serializers.CharField(required=False, allow_blank=True)


class AllocationCreateSerializer(serializers.Serializer):
    invoice_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class UnallocatedQuerySerializer(serializers.Serializer):
    payment_type = serializers.ChoiceField(choices=Payment.TYPES)
    counterparty_id = serializers.UUIDField()
