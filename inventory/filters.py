import django_filters

from .models import MenuItem


class MenuItemFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(method='filter_category')
    available = django_filters.BooleanFilter(field_name='is_available')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')

    class Meta:
        model = MenuItem
        fields = ['category', 'is_vegetarian', 'is_vegan', 'is_gluten_free', 'spice_level', 'available']

    def filter_category(self, queryset, name, value):
        if not value or value == 'all':
            return queryset
        return queryset.filter(category=value)
