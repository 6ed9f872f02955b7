from rest_framework import serializers
from django.conf import settings
from .models import Order, OrderItem


class OrderItemCreateSerializer(serializers.Serializer):
    menu_item_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)
    special_instructions = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')

    def validate_quantity(self, value):
        limit = settings.CANTEEN['MAX_ITEM_QUANTITY']
        if value > limit:
            raise serializers.ValidationError(f"At most {limit} of one item per order")
        return value


class OrderCreateSerializer(serializers.Serializer):
    items = OrderItemCreateSerializer(many=True, allow_empty=False)
    payment_method = serializers.ChoiceField(choices=Order.PAYMENT_METHOD_CHOICES)
    order_type = serializers.ChoiceField(choices=Order.ORDER_TYPE_CHOICES, required=False, default='instant')
    scheduled_time = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs.get('order_type') == 'pre-order' and not attrs.get('scheduled_time'):
            raise serializers.ValidationError({'scheduled_time': "Pre-orders need a scheduled time"})
        return attrs


class OrderItemReadSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'menu_item', 'menu_item_name', 'quantity', 'price', 'line_total', 'special_instructions']


class OrderReadSerializer(serializers.ModelSerializer):
    items = OrderItemReadSerializer(many=True, read_only=True)
    user_email = serializers.EmailField(source='user.email', read_only=True)
    user_name = serializers.SerializerMethodField()
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'user', 'user_email', 'user_name', 'items',
            'total_amount', 'status', 'status_display', 'payment_method', 'payment_status',
            'order_type', 'scheduled_time', 'estimated_time', 'actual_completion_time',
            'notes', 'is_rated', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_user_name(self, obj):
        return obj.user.get_full_name() or obj.user.email


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
