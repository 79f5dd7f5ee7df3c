# accounting/api/serializers/master_data.py

from django.db import transaction
from rest_framework import serializers

from accounting.services.concurrency import check_expected_version, lock_row, save_locked_fields


class MasterDataSerializer(serializers.ModelSerializer):
    """
    Updates lock the current row and write only the submitted fields.

    Rows like products and counterparties also carry engine-owned columns
    (quantity_on_hand, balance, version) that postings change concurrently;
    a full-row save from the instance read by the view would put them back.
    Send `expected_version` to get a conflict instead of a silent overwrite.
    """

    expected_version = serializers.IntegerField(write_only=True, required=False, min_value=0)

    def create(self, validated_data):
        validated_data.pop("expected_version", None)
        return super().create(validated_data)

    def update(self, instance, validated_data):
        expected_version = validated_data.pop("expected_version", None)
        with transaction.atomic():
            locked = lock_row(type(instance), instance.pk)
            check_expected_version(locked, expected_version)
            save_locked_fields(locked, validated_data)
        return locked
