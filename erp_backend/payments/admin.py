# payments/admin.py

from django.contrib import admin

from payments.models import Payment, PaymentAllocation


class PaymentAllocationInline(admin.TabularInline):
    model = PaymentAllocation
    extra = 0
    can_delete = False
    readonly_fields = ("sales_invoice", "purchase_invoice", "allocated_amount", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """Payments are posted through the reconciler; the admin is read-only."""

    list_display = (
        "number",
        "payment_type",
        "payment_date",
        "customer",
        "supplier",
        "amount",
        "method",
    )
    list_filter = ("payment_type", "method", "payment_date")
    search_fields = ("reference", "customer__name", "supplier__name")
    inlines = [PaymentAllocationInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
