# accounting/api/serializers/documents.py

"""
Shared serializers for draft documents.

Concrete apps subclass these with their own Meta.model. Items are nested and
writable while the document is a draft; on update a supplied `items` list
replaces the existing lines. Totals are recomputed from the lines, never
taken from the payload.

Edits re-read the document under a row lock and write only the submitted
columns, so an edit racing a posting either waits for it and fails the draft
check or commits first and bumps the version the posting can check.
"""

from django.db import transaction
from rest_framework import serializers

from accounting.services.concurrency import check_expected_version, lock_row, save_locked_fields
from accounting.services.exceptions import InvalidDocumentStateError

DOCUMENT_READ_ONLY_FIELDS = (
    "id",
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

INVOICE_READ_ONLY_FIELDS = DOCUMENT_READ_ONLY_FIELDS + (
    "paid_amount",
    "cancelled_at",
    "reversal_entry",
)


class DocumentItemSerializer(serializers.ModelSerializer):
    product_code = serializers.CharField(source="product.code", read_only=True, default=None)
    product_name = serializers.CharField(source="product.name", read_only=True, default=None)

    class Meta:
        fields = (
            "id",
            "product",
            "product_code",
            "product_name",
            "description",
            "quantity",
            "unit_price",
            "discount",
            "line_total",
            "unit_cost",
        )
        read_only_fields = ("id", "line_total", "unit_cost")


class DraftDocumentSerializer(serializers.ModelSerializer):
    """Subclasses declare `items = <ItemSerializer>(many=True, required=False)`."""

    expected_version = serializers.IntegerField(write_only=True, required=False, min_value=0)

    class Meta:
        fields = "__all__"
        read_only_fields = DOCUMENT_READ_ONLY_FIELDS

    def _write_items(self, document, items_data):
        item_model = self.fields["items"].child.Meta.model
        for item in items_data:
            item_model.objects.create(document=document, **item)

    def create(self, validated_data):
        validated_data.pop("expected_version", None)
        items_data = validated_data.pop("items", [])
        document = super().create(validated_data)
        self._write_items(document, items_data)
        document.recalculate_totals()
        return document

    def update(self, instance, validated_data):
        items_data = validated_data.pop("items", None)
        expected_version = validated_data.pop("expected_version", None)

        with transaction.atomic():
            document = lock_row(type(instance), instance.pk)
            if not document.is_draft:
                raise InvalidDocumentStateError(
                    f"{document} is {document.status.lower()}; only drafts can be edited"
                )
            check_expected_version(document, expected_version)

            save_locked_fields(document, validated_data)

            if items_data is not None:
                for item in document.items.all():
                    item.delete()
                self._write_items(document, items_data)

            document.recalculate_totals()
        return document


class DocumentTransitionSerializer(serializers.Serializer):
    expected_version = serializers.IntegerField(required=False, min_value=0)
    cancel_date = serializers.DateField(required=False)
