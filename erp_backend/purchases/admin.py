# purchases/admin.py

from django.contrib import admin

from purchases.models import (
    PurchaseInvoice,
    PurchaseInvoiceItem,
    PurchaseReturn,
    PurchaseReturnItem,
    Supplier,
)
from sales.admin import ENGINE_FIELDS


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "phone", "balance", "is_active")
    list_filter = ("is_active",)
    search_fields = ("code", "name", "phone", "email")
    readonly_fields = ("balance", "version", "created_at", "updated_at")


class PurchaseInvoiceItemInline(admin.TabularInline):
    model = PurchaseInvoiceItem
    extra = 0
    readonly_fields = ("line_total", "unit_cost")


@admin.register(PurchaseInvoice)
class PurchaseInvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "number",
        "supplier_invoice_number",
        "document_date",
        "supplier",
        "status",
        "total",
        "paid_amount",
    )
    list_filter = ("status", "document_date")
    search_fields = ("number", "supplier_invoice_number", "supplier__name")
    readonly_fields = ENGINE_FIELDS + ("paid_amount", "cancelled_at", "reversal_entry")
    inlines = [PurchaseInvoiceItemInline]


class PurchaseReturnItemInline(admin.TabularInline):
    model = PurchaseReturnItem
    extra = 0
    readonly_fields = ("line_total", "unit_cost")


@admin.register(PurchaseReturn)
class PurchaseReturnAdmin(admin.ModelAdmin):
    list_display = ("number", "document_date", "supplier", "purchase_invoice", "status", "total")
    list_filter = ("status", "document_date")
    search_fields = ("number", "supplier__name", "reason")
    readonly_fields = ENGINE_FIELDS
    inlines = [PurchaseReturnItemInline]
