from rest_framework import serializers
from django.conf import settings
from decimal import Decimal
from .models import Transaction


class TransactionSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source='order.order_number', read_only=True, default=None)
    user_email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = Transaction
        fields = [
            'id', 'transaction_id', 'user', 'user_email', 'type', 'amount', 'description',
            'category', 'payment_method', 'order', 'order_number', 'status',
            'balance_after', 'performed_by', 'created_at'
        ]
        read_only_fields = fields


class RechargeSerializer(serializers.Serializer):
    RECHARGE_METHODS = ['card', 'upi', 'net-banking']

    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    payment_method = serializers.ChoiceField(choices=RECHARGE_METHODS)

    def validate_amount(self, value):
        low = Decimal(settings.CANTEEN['MIN_WALLET_RECHARGE'])
        high = Decimal(settings.CANTEEN['MAX_WALLET_RECHARGE'])
        if value < low or value > high:
            raise serializers.ValidationError(f"Amount must be between {low} and {high}")
        return value


class AdjustSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    type = serializers.ChoiceField(choices=Transaction.TYPE_CHOICES)
    reason = serializers.CharField(max_length=150)

    def validate_amount(self, value):
        limit = Decimal(settings.CANTEEN['MAX_WALLET_ADJUSTMENT'])
        if value == 0:
            raise serializers.ValidationError("Amount cannot be zero")
        if abs(value) > limit:
            raise serializers.ValidationError(f"Amount must be between -{limit} and {limit}")
        return value
