from rest_framework import serializers
from .models import Feedback


ASPECT_FIELD = dict(min_value=1, max_value=5, required=False, allow_null=True)


class FeedbackSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()
    menu_item_name = serializers.CharField(source='menu_item.name', read_only=True)
    order_number = serializers.CharField(source='order.order_number', read_only=True)
    aspects = serializers.DictField(read_only=True)
    helpful_count = serializers.SerializerMethodField()

    class Meta:
        model = Feedback
        fields = [
            'id', 'user', 'user_name', 'order', 'order_number', 'menu_item', 'menu_item_name',
            'rating', 'review', 'aspects', 'is_anonymous', 'status',
            'admin_response', 'responded_by', 'responded_at', 'helpful_count',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_user_name(self, obj):
        if obj.is_anonymous:
            return 'Anonymous'
        return obj.user.get_full_name() or obj.user.email

    def get_helpful_count(self, obj):
        return obj.helpful_users.count()

    def to_representation(self, instance):
        data = super().to_representation(instance)
        # Anonymous reviewers stay hidden from the public list
        if instance.is_anonymous and self.context.get('hide_anonymous'):
            data['user'] = None
        return data


class FeedbackCreateSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    menu_item_id = serializers.IntegerField()
    rating = serializers.IntegerField(min_value=1, max_value=5)
    review = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
    taste = serializers.IntegerField(**ASPECT_FIELD)
    quality = serializers.IntegerField(**ASPECT_FIELD)
    quantity = serializers.IntegerField(**ASPECT_FIELD)
    presentation = serializers.IntegerField(**ASPECT_FIELD)
    service = serializers.IntegerField(**ASPECT_FIELD)
    is_anonymous = serializers.BooleanField(required=False, default=False)


class FeedbackUpdateSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5, required=False)
    review = serializers.CharField(max_length=500, required=False, allow_blank=True)
    taste = serializers.IntegerField(**ASPECT_FIELD)
    quality = serializers.IntegerField(**ASPECT_FIELD)
    quantity = serializers.IntegerField(**ASPECT_FIELD)
    presentation = serializers.IntegerField(**ASPECT_FIELD)
    service = serializers.IntegerField(**ASPECT_FIELD)
    is_anonymous = serializers.BooleanField(required=False)


class FeedbackResponseSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=300)


class FeedbackStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Feedback.STATUS_CHOICES)
