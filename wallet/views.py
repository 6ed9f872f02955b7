from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from django.utils import timezone
from datetime import timedelta
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from authentication.models import CustomUser
from authentication.permissions import IsAdminRole, IsOwnerOrAdmin
from .models import Transaction
from .serializers import TransactionSerializer, RechargeSerializer, AdjustSerializer
from .services import recharge_wallet, adjust_wallet, verify_ledger, user_wallet_stats, admin_wallet_stats


TYPE_PARAM = openapi.Parameter('type', openapi.IN_QUERY, description="credit or debit", type=openapi.TYPE_STRING)
CATEGORY_PARAM = openapi.Parameter('category', openapi.IN_QUERY, description="Transaction category", type=openapi.TYPE_STRING)


def _filter_transactions(queryset, params):
    if params.get('type'):
        queryset = queryset.filter(type=params['type'])
    if params.get('category'):
        queryset = queryset.filter(category=params['category'])
    return queryset


@swagger_auto_schema(
    method='get',
    responses={200: openapi.Schema(type=openapi.TYPE_OBJECT, properties={'balance': openapi.Schema(type=openapi.TYPE_STRING)})}
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def wallet_balance(request):
    request.user.refresh_from_db(fields=['wallet_balance'])
    return Response({'balance': request.user.wallet_balance})


@swagger_auto_schema(method='post', request_body=RechargeSerializer, responses={200: TransactionSerializer})
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def recharge(request):
    """Top up the wallet; the payment is simulated as successful"""
    serializer = RechargeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    txn = recharge_wallet(
        request.user,
        serializer.validated_data['amount'],
        serializer.validated_data['payment_method'],
    )
    return Response({
        'message': 'Wallet recharged successfully',
        'transaction': TransactionSerializer(txn).data,
        'new_balance': txn.balance_after,
    }, status=status.HTTP_200_OK)


class MyTransactionListView(generics.ListAPIView):
    """The current user's ledger, newest first"""
    serializer_class = TransactionSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        queryset = Transaction.objects.filter(user=self.request.user).select_related('order', 'user')
        return _filter_transactions(queryset, self.request.query_params)

    @swagger_auto_schema(manual_parameters=[TYPE_PARAM, CATEGORY_PARAM])
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class TransactionDetailView(generics.RetrieveAPIView):
    serializer_class = TransactionSerializer
    permission_classes = [IsAuthenticated, IsOwnerOrAdmin]
    queryset = Transaction.objects.select_related('order', 'user')


@swagger_auto_schema(
    method='get',
    manual_parameters=[openapi.Parameter('period', openapi.IN_QUERY, description="Days to look back (default 30)", type=openapi.TYPE_INTEGER)]
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def wallet_stats(request):
    try:
        period = int(request.query_params.get('period', 30))
    except ValueError:
        raise ValidationError({'period': 'Must be a number of days'})

    since = timezone.now() - timedelta(days=period)
    return Response(user_wallet_stats(request.user, since))


# =============== ADMIN VIEWS ===============

class AdminTransactionListView(generics.ListAPIView):
    """Every ledger entry, filterable by type, category and user"""
    serializer_class = TransactionSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        queryset = Transaction.objects.select_related('order', 'user')
        queryset = _filter_transactions(queryset, self.request.query_params)
        user_filter = self.request.query_params.get('user')
        if user_filter:
            queryset = queryset.filter(user_id=user_filter)
        return queryset

    @swagger_auto_schema(manual_parameters=[
        TYPE_PARAM, CATEGORY_PARAM,
        openapi.Parameter('user', openapi.IN_QUERY, description="User id", type=openapi.TYPE_STRING),
    ])
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


@swagger_auto_schema(method='post', request_body=AdjustSerializer, responses={200: TransactionSerializer})
@api_view(['POST'])
@permission_classes([IsAdminRole])
def admin_adjust(request):
    serializer = AdjustSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    txn = adjust_wallet(request.user, data['user_id'], data['amount'], data['type'], data['reason'])
    return Response({
        'message': 'Wallet adjusted successfully',
        'transaction': TransactionSerializer(txn).data,
        'new_balance': txn.balance_after,
    })


@swagger_auto_schema(method='get', operation_description="Wallet totals across all users")
@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_stats(request):
    return Response(admin_wallet_stats())


@swagger_auto_schema(method='get', operation_description="Replay a user's ledger and compare it with the stored balance")
@api_view(['GET'])
@permission_classes([IsAdminRole])
def ledger_check(request, user_id):
    user = get_object_or_404(CustomUser, pk=user_id)
    return Response(verify_ledger(user))
