from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.exceptions import ValidationError
from django.conf import settings
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
import logging

from authentication.models import CustomUser
from authentication.permissions import IsAdminRole
from authentication.serializers import UserSerializer, AdminCreateSerializer, UserStatusSerializer
from .exports import build_dataset, DATASETS, FORMATS, RENDERERS
from .filters import StudentFilter
from .services import dashboard_overview, analytics as build_analytics, student_stats

logger = logging.getLogger(__name__)


def _days(request, default=30):
    try:
        days = int(request.query_params.get('period', default))
    except ValueError:
        raise ValidationError({'period': 'Must be a number of days'})
    if days < 1:
        raise ValidationError({'period': 'Must be at least one day'})
    return days


@swagger_auto_schema(method='post', request_body=AdminCreateSerializer, responses={201: UserSerializer})
@api_view(['POST'])
@permission_classes([IsAdminRole])
def create_admin(request):
    serializer = AdminCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    logger.info(f"Admin account {user.email} created by {request.user.email}")
    return Response({
        'message': 'Admin user created successfully',
        'user': UserSerializer(user).data,
    }, status=status.HTTP_201_CREATED)


@swagger_auto_schema(method='get', operation_description="Headline figures, today's orders, popular items and 7-day revenue")
@api_view(['GET'])
@permission_classes([IsAdminRole])
def dashboard(request):
    return Response(dashboard_overview())


class StudentListView(generics.ListAPIView):
    """Students, filterable by search, department, year and is_active"""
    serializer_class = UserSerializer
    permission_classes = [IsAdminRole]
    filter_backends = [DjangoFilterBackend]
    filterset_class = StudentFilter

    def get_queryset(self):
        return CustomUser.objects.filter(role=CustomUser.ROLE_STUDENT).order_by('-created_at')


@swagger_auto_schema(method='get', operation_description="A user with order, transaction and feedback statistics")
@api_view(['GET'])
@permission_classes([IsAdminRole])
def user_detail(request, pk):
    user = get_object_or_404(CustomUser, pk=pk)
    return Response({
        'user': UserSerializer(user).data,
        'stats': student_stats(user),
    })


@swagger_auto_schema(method='patch', request_body=UserStatusSerializer, responses={200: UserSerializer})
@api_view(['PATCH'])
@permission_classes([IsAdminRole])
def update_user_status(request, pk):
    user = get_object_or_404(CustomUser, pk=pk)
    serializer = UserStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    if user.pk == request.user.pk:
        raise ValidationError({'is_active': 'You cannot change your own status'})

    user.is_active = serializer.validated_data['is_active']
    user.save(update_fields=['is_active', 'updated_at'])

    state = 'activated' if user.is_active else 'deactivated'
    logger.info(f"User {user.email} {state} by {request.user.email}")
    return Response({
        'message': f"User {state} successfully",
        'user': UserSerializer(user).data,
    })


@swagger_auto_schema(
    method='get',
    manual_parameters=[openapi.Parameter('period', openapi.IN_QUERY, description="Days to look back (default 30)", type=openapi.TYPE_INTEGER)]
)
@api_view(['GET'])
@permission_classes([IsAdminRole])
def analytics(request):
    return Response(build_analytics(_days(request)))


@swagger_auto_schema(
    method='get',
    manual_parameters=[
        openapi.Parameter('export_format', openapi.IN_QUERY, description="json, csv or xlsx", type=openapi.TYPE_STRING),
        openapi.Parameter('start_date', openapi.IN_QUERY, description="YYYY-MM-DD", type=openapi.TYPE_STRING),
        openapi.Parameter('end_date', openapi.IN_QUERY, description="YYYY-MM-DD", type=openapi.TYPE_STRING),
    ]
)
@api_view(['GET'])
@permission_classes([IsAdminRole])
def export_data(request, kind):
    if kind not in DATASETS:
        raise ValidationError({'type': f"Invalid export type, expected one of {', '.join(DATASETS)}"})

    export_format = request.query_params.get('export_format', 'json')
    if export_format not in FORMATS:
        raise ValidationError({'export_format': f"Expected one of {', '.join(FORMATS)}"})

    headers, rows = build_dataset(
        kind, request.query_params.get('start_date'), request.query_params.get('end_date')
    )
    logger.info(f"{request.user.email} exported {len(rows)} {kind} as {export_format}")
    return RENDERERS[export_format](kind, headers, rows)


@swagger_auto_schema(method='get', operation_description="Canteen configuration")
@api_view(['GET'])
@permission_classes([IsAdminRole])
def canteen_settings(request):
    canteen = settings.CANTEEN
    return Response({
        'canteen': {
            'name': canteen['NAME'],
            'open_time': canteen['OPEN_TIME'],
            'close_time': canteen['CLOSE_TIME'],
            'max_order_value': canteen['MAX_ORDER_VALUE'],
            'min_wallet_recharge': canteen['MIN_WALLET_RECHARGE'],
            'max_wallet_recharge': canteen['MAX_WALLET_RECHARGE'],
        },
        'orders': {
            'max_item_quantity': canteen['MAX_ITEM_QUANTITY'],
            'estimated_preparation_minutes': canteen['ESTIMATED_PREPARATION_MINUTES'],
        },
        'notifications': canteen['NOTIFICATIONS'],
    })
