# sales/serializers/customer.py

from accounting.api.serializers.counterparty import CounterpartySerializer
from sales.models import Customer


class CustomerSerializer(CounterpartySerializer):
    class Meta(CounterpartySerializer.Meta):
        model = Customer
