from rest_framework import status, generics
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from authentication.permissions import IsAdminRole, IsOwnerOrAdmin
from .models import Order
from .serializers import OrderCreateSerializer, OrderReadSerializer, OrderStatusUpdateSerializer
from .services import place_order, cancel_order, update_order_status, order_stats


def _with_items(queryset):
    return queryset.select_related('user').prefetch_related('items')


class OrderCreateView(generics.CreateAPIView):
    """Place an order; wallet orders are charged immediately"""
    serializer_class = OrderCreateSerializer
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Place an order with items",
        request_body=OrderCreateSerializer,
        responses={
            201: OrderReadSerializer,
            400: 'Validation error, unavailable item, insufficient stock or insufficient funds',
            404: 'Menu item not found'
        }
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = place_order(
            request.user,
            data['items'],
            data['payment_method'],
            order_type=data.get('order_type'),
            scheduled_time=data.get('scheduled_time'),
            notes=data.get('notes'),
        )

        response_serializer = OrderReadSerializer(_with_items(Order.objects).get(pk=order.pk))
        return Response(response_serializer.data, status=status.HTTP_201_CREATED)


class MyOrderListView(generics.ListAPIView):
    """List the current user's orders"""
    serializer_class = OrderReadSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        queryset = _with_items(Order.objects.filter(user=self.request.user))

        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        return queryset.order_by('-created_at')

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('status', openapi.IN_QUERY, description="Filter by order status", type=openapi.TYPE_STRING),
        ]
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class OrderDetailView(generics.RetrieveAPIView):
    """Order details for its owner or an admin"""
    serializer_class = OrderReadSerializer
    permission_classes = [IsAuthenticated, IsOwnerOrAdmin]
    queryset = _with_items(Order.objects.all())


class AdminOrderListView(generics.ListAPIView):
    """All orders, for admins"""
    serializer_class = OrderReadSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        queryset = _with_items(Order.objects.all())

        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        date_filter = self.request.query_params.get('date')
        if date_filter:
            queryset = queryset.filter(created_at__date=date_filter)

        return queryset.order_by('-created_at')

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('status', openapi.IN_QUERY, description="Filter by order status", type=openapi.TYPE_STRING),
            openapi.Parameter('date', openapi.IN_QUERY, description="Filter by date (YYYY-MM-DD)", type=openapi.TYPE_STRING),
        ]
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


@swagger_auto_schema(
    method='patch',
    operation_description="Cancel your own pending or confirmed order; wallet payments are refunded",
    responses={200: OrderReadSerializer, 400: 'Order can no longer be cancelled', 403: 'Not your order'}
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def cancel_order_view(request, pk):
    order = cancel_order(pk, request.user)
    return Response(OrderReadSerializer(_with_items(Order.objects).get(pk=order.pk)).data)


@swagger_auto_schema(
    method='patch',
    request_body=OrderStatusUpdateSerializer,
    responses={200: OrderReadSerializer, 400: 'Invalid status transition'}
)
@api_view(['PATCH'])
@permission_classes([IsAdminRole])
def update_status_view(request, pk):
    serializer = OrderStatusUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    order = update_order_status(pk, serializer.validated_data['status'], request.user)
    return Response(OrderReadSerializer(_with_items(Order.objects).get(pk=order.pk)).data)


@swagger_auto_schema(method='get', operation_description="Order counts and revenue")
@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_order_stats(request):
    return Response(order_stats())
