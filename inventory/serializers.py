from rest_framework import serializers
from .models import MenuItem, WEEKDAYS


class MenuItemSerializer(serializers.ModelSerializer):
    available_days = serializers.ListField(
        child=serializers.ChoiceField(choices=WEEKDAYS),
        source='days',
        required=False,
        allow_empty=True
    )
    ingredients = serializers.ListField(
        child=serializers.CharField(max_length=100),
        required=False,
        allow_empty=True
    )
    nutritional_info = serializers.DictField(
        child=serializers.IntegerField(min_value=0),
        required=False
    )
    ratings = serializers.SerializerMethodField()

    class Meta:
        model = MenuItem
        fields = [
            'id', 'name', 'description', 'category', 'price', 'image',
            'ingredients', 'nutritional_info', 'is_vegetarian', 'is_vegan',
            'is_gluten_free', 'spice_level', 'preparation_time', 'is_available',
            'available_days', 'available_from', 'available_to', 'quantity',
            'ratings', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'ratings', 'created_at', 'updated_at']

    def get_fields(self):
        fields = super().get_fields()
        # Stock on an existing item only moves through orders and restock
        if self.instance is not None:
            fields['quantity'].read_only = True
        return fields

    def get_ratings(self, obj):
        return {'average': obj.rating_average, 'count': obj.rating_count}

    def update(self, instance, validated_data):
        update_fields = []
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
            update_fields.append('available_days' if attr == 'days' else attr)

        instance.save(update_fields=update_fields + ['updated_at'])
        return instance

    def validate_nutritional_info(self, value):
        unknown = set(value) - {'calories', 'protein', 'carbs', 'fat'}
        if unknown:
            raise serializers.ValidationError(f"Unknown nutrition keys: {', '.join(sorted(unknown))}")
        return value

    def validate(self, attrs):
        start = attrs.get('available_from', getattr(self.instance, 'available_from', None))
        end = attrs.get('available_to', getattr(self.instance, 'available_to', None))
        if start and end and start > end:
            raise serializers.ValidationError("available_from must be before available_to")
        return attrs


class MenuItemListSerializer(serializers.ModelSerializer):
    ratings = serializers.SerializerMethodField()

    class Meta:
        model = MenuItem
        fields = [
            'id', 'name', 'category', 'price', 'image', 'is_vegetarian',
            'is_vegan', 'is_gluten_free', 'spice_level', 'is_available',
            'quantity', 'ratings'
        ]

    def get_ratings(self, obj):
        return {'average': obj.rating_average, 'count': obj.rating_count}


class RestockSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=0, max_value=10000)
