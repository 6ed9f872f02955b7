from rest_framework import generics, status, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters
from django.utils import timezone
from drf_yasg.utils import swagger_auto_schema
import logging

from authentication.permissions import IsAdminRole
from .filters import MenuItemFilter
from .models import MenuItem
from .serializers import MenuItemSerializer, MenuItemListSerializer, RestockSerializer
from .services import restock

logger = logging.getLogger(__name__)


class AdminWriteMixin:
    """Reads are public, writes need an admin"""

    def get_permissions(self):
        if self.request.method in ['POST', 'PUT', 'PATCH', 'DELETE']:
            return [IsAdminRole()]
        return [permissions.AllowAny()]

    def get_queryset(self):
        queryset = MenuItem.objects.all()
        user = self.request.user
        # Students only see what is served today
        if not (user.is_authenticated and user.is_admin):
            queryset = queryset.today()
        return queryset


class MenuItemListCreateView(AdminWriteMixin, generics.ListCreateAPIView):
    """
    get: List menu items (filter by category, dietary flags, availability, search)
    post: Create a menu item (admins only)
    """
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = MenuItemFilter
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'price', 'rating_average', 'created_at']
    ordering = ['category', 'name']
    pagination_class = None

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return MenuItemSerializer
        return MenuItemListSerializer

    def perform_create(self, serializer):
        item = serializer.save()
        logger.info(f"Menu item {item.name} created by {self.request.user.email}")


class MenuItemDetailView(AdminWriteMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Menu item details
    put/patch: Update menu item (admins only)
    delete: Delete menu item (admins only); past orders keep their snapshot
    """
    serializer_class = MenuItemSerializer

    def get_queryset(self):
        # Detail lookups are not restricted to today's menu
        return MenuItem.objects.all()

    def perform_destroy(self, instance):
        logger.info(f"Menu item {instance.name} deleted by {self.request.user.email}")
        instance.delete()


@swagger_auto_schema(method='get', responses={200: MenuItemListSerializer(many=True)})
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def menu_by_category(request, category):
    """Available items of one category served today"""
    valid = [choice for choice, _ in MenuItem.CATEGORY_CHOICES]
    if category not in valid:
        return Response(
            {'error': True, 'message': 'Invalid category', 'details': {'valid_categories': valid}},
            status=status.HTTP_400_BAD_REQUEST
        )

    items = MenuItem.objects.today().filter(category=category, is_available=True).order_by('name')
    serializer = MenuItemListSerializer(items, many=True)
    return Response({'count': len(serializer.data), 'results': serializer.data})


@swagger_auto_schema(method='get', operation_description="Items served right now, grouped by category")
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def today_special(request):
    """Items available today within their serving window, grouped by category"""
    items = MenuItem.objects.today().served_at(timezone.localtime()).filter(
        is_available=True
    ).order_by('category', 'name')

    grouped = {}
    for item in items:
        grouped.setdefault(item.category, []).append(MenuItemListSerializer(item).data)

    return Response(grouped)


@swagger_auto_schema(method='patch', responses={200: MenuItemSerializer})
@api_view(['PATCH'])
@permission_classes([IsAdminRole])
def toggle_availability(request, pk):
    menu_item = get_object_or_404(MenuItem, pk=pk)
    menu_item.is_available = not menu_item.is_available
    menu_item.save(update_fields=['is_available', 'updated_at'])
    logger.info(f"{menu_item.name} availability set to {menu_item.is_available}")
    return Response(MenuItemSerializer(menu_item).data)


@swagger_auto_schema(method='patch', request_body=RestockSerializer, responses={200: MenuItemSerializer})
@api_view(['PATCH'])
@permission_classes([IsAdminRole])
def restock_item(request, pk):
    """Set the day's remaining quantity"""
    menu_item = get_object_or_404(MenuItem, pk=pk)
    serializer = RestockSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    restock(menu_item, serializer.validated_data['quantity'])
    return Response(MenuItemSerializer(menu_item).data)
