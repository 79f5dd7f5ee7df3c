# sales/admin.py

from django.contrib import admin

from sales.models import Customer, SalesInvoice, SalesInvoiceItem, SalesReturn, SalesReturnItem

# ======================================================
# CUSTOMER ADMIN
# ======================================================


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "phone", "balance", "is_active")
    list_filter = ("is_active",)
    search_fields = ("code", "name", "phone", "email")
    readonly_fields = ("balance", "version", "created_at", "updated_at")


# ======================================================
# DOCUMENT ADMIN
# Status, totals and journal links are written by the posting engine only.
# ======================================================

ENGINE_FIELDS = (
    "number",
    "status",
    "subtotal",
    "total",
    "cost_amount",
    "journal_entry",
    "posted_at",
    "version",
    "created_at",
    "updated_at",
)


class SalesInvoiceItemInline(admin.TabularInline):
    model = SalesInvoiceItem
    extra = 0
    readonly_fields = ("line_total", "unit_cost")


@admin.register(SalesInvoice)
class SalesInvoiceAdmin(admin.ModelAdmin):
    list_display = ("number", "document_date", "customer", "status", "total", "paid_amount")
    list_filter = ("status", "document_date")
    search_fields = ("number", "customer__name", "reference")
    readonly_fields = ENGINE_FIELDS + ("paid_amount", "cancelled_at", "reversal_entry")
    inlines = [SalesInvoiceItemInline]


class SalesReturnItemInline(admin.TabularInline):
    model = SalesReturnItem
    extra = 0
    readonly_fields = ("line_total", "unit_cost")


@admin.register(SalesReturn)
class SalesReturnAdmin(admin.ModelAdmin):
    list_display = ("number", "document_date", "customer", "sales_invoice", "status", "total")
    list_filter = ("status", "document_date")
    search_fields = ("number", "customer__name", "reason")
    readonly_fields = ENGINE_FIELDS
    inlines = [SalesReturnItemInline]
