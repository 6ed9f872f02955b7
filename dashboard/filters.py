import django_filters
from django.db.models import Q

from authentication.models import CustomUser


class StudentFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search')
    department = django_filters.CharFilter(field_name='department', lookup_expr='iexact')

    class Meta:
        model = CustomUser
        fields = ['search', 'department', 'year', 'is_active']

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(first_name__icontains=value) |
            Q(last_name__icontains=value) |
            Q(email__icontains=value) |
            Q(student_id__icontains=value)
        )
