from rest_framework import serializers


class StoreOrderQuerySerializer(serializers.Serializer):
    """Query parameters for listing a store's orders"""

    status = serializers.CharField(required=False, help_text="Comma-separated statuses, e.g. paid,shipped")
    start_date = serializers.DateTimeField(required=False, help_text="Created at or after (ISO 8601)")
    end_date = serializers.DateTimeField(required=False, help_text="Created at or before (ISO 8601)")
    customer_id = serializers.CharField(required=False, help_text="Buyer's user id")
    min_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    max_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    page_size = serializers.IntegerField(min_value=1, required=False, default=10)

    def to_filters(self) -> dict:
        data = self.validated_data
        statuses = [value.strip() for value in data.get("status", "").split(",") if value.strip()]
        return {
            "statuses": statuses,
            "start_date": data.get("start_date"),
            "end_date": data.get("end_date"),
            "customer_id": data.get("customer_id"),
            "min_amount": data.get("min_amount"),
            "max_amount": data.get("max_amount"),
        }


class DateRangeQuerySerializer(serializers.Serializer):
    start_date = serializers.DateTimeField(required=False)
    end_date = serializers.DateTimeField(required=False)


class TopProductsQuerySerializer(DateRangeQuerySerializer):
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=10)


class RevenueTrendsQuerySerializer(serializers.Serializer):
    period = serializers.ChoiceField(choices=["day", "week", "month"], required=False, default="day")
    days = serializers.IntegerField(min_value=1, max_value=365, required=False, default=30)
