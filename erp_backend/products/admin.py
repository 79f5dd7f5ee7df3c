# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe stock):

- quantity_on_hand is read-only here; stock only moves through posted
  documents or an opening balance (products.services.stock)
- InventoryMovement rows are shown read-only and can never be edited or deleted
"""

from django.contrib import admin

from products.models import InventoryAdjustment, InventoryAdjustmentItem, InventoryMovement, Product
from sales.admin import ENGINE_FIELDS


class InventoryMovementInline(admin.TabularInline):
    model = InventoryMovement
    extra = 0
    can_delete = False
    fields = (
        "movement_date",
        "movement_type",
        "direction",
        "quantity",
        "unit_cost",
        "total_cost",
        "reference_type",
        "reference_id",
        "reverses",
    )
    readonly_fields = fields
    ordering = ("-created_at",)

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "unit",
        "purchase_price",
        "selling_price",
        "quantity_on_hand",
        "min_stock_level",
        "is_active",
    )
    list_filter = ("is_active",)
    search_fields = ("code", "name")
    readonly_fields = ("quantity_on_hand", "version", "created_at", "updated_at")
    inlines = [InventoryMovementInline]


@admin.register(InventoryMovement)
class InventoryMovementAdmin(admin.ModelAdmin):
    list_display = (
        "created_at",
        "product",
        "movement_type",
        "direction",
        "quantity",
        "unit_cost",
        "total_cost",
        "reference_type",
    )
    list_filter = ("movement_type", "direction", "movement_date")
    search_fields = ("product__code", "product__name", "notes")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class InventoryAdjustmentItemInline(admin.TabularInline):
    model = InventoryAdjustmentItem
    extra = 0
    readonly_fields = ("system_quantity", "difference", "unit_cost", "total_cost")


@admin.register(InventoryAdjustment)
class InventoryAdjustmentAdmin(admin.ModelAdmin):
    list_display = ("number", "document_date", "status", "total", "cost_amount")
    list_filter = ("status", "document_date")
    readonly_fields = ENGINE_FIELDS
    inlines = [InventoryAdjustmentItemInline]
