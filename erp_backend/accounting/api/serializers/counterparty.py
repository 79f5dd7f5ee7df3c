# accounting/api/serializers/counterparty.py

from accounting.api.serializers.master_data import MasterDataSerializer

COUNTERPARTY_FIELDS = [
    "id",
    "code",
    "name",
    "phone",
    "email",
    "address",
    "tax_number",
    "balance",
    "is_active",
    "version",
    "expected_version",
    "created_at",
    "updated_at",
]


class CounterpartySerializer(MasterDataSerializer):
    """balance and version are engine-owned; subclasses set Meta.model."""

    class Meta:
        fields = COUNTERPARTY_FIELDS
        read_only_fields = ["id", "balance", "version", "created_at", "updated_at"]
