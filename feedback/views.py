from rest_framework import generics, status, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework.exceptions import PermissionDenied
from django.db.models import Count
from django.shortcuts import get_object_or_404
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from authentication.permissions import IsAdminRole
from inventory.models import MenuItem
from .models import Feedback
from .serializers import (
    FeedbackSerializer, FeedbackCreateSerializer, FeedbackUpdateSerializer,
    FeedbackResponseSerializer, FeedbackStatusSerializer
)
from . import services


def _with_relations(queryset):
    return queryset.select_related('user', 'menu_item', 'order').prefetch_related('helpful_users')


@swagger_auto_schema(
    method='post',
    request_body=FeedbackCreateSerializer,
    responses={201: FeedbackSerializer, 409: 'Feedback already submitted for this item'}
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_feedback(request):
    serializer = FeedbackCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)

    feedback = services.submit_feedback(request.user, data.pop('order_id'), data.pop('menu_item_id'), **data)
    return Response(FeedbackSerializer(feedback).data, status=status.HTTP_201_CREATED)


class MenuItemFeedbackView(generics.ListAPIView):
    """Active feedback for one menu item, with its rating distribution"""
    serializer_class = FeedbackSerializer
    permission_classes = [permissions.AllowAny]

    def get_queryset(self):
        queryset = _with_relations(Feedback.objects.filter(
            menu_item_id=self.kwargs['menu_item_id'], status=Feedback.STATUS_ACTIVE
        ))
        rating = self.request.query_params.get('rating')
        if rating:
            queryset = queryset.filter(rating=rating)
        return queryset

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['hide_anonymous'] = True
        return context

    @swagger_auto_schema(manual_parameters=[
        openapi.Parameter('rating', openapi.IN_QUERY, description="Only this star rating", type=openapi.TYPE_INTEGER),
    ])
    def get(self, request, *args, **kwargs):
        get_object_or_404(MenuItem, pk=kwargs['menu_item_id'])
        response = super().get(request, *args, **kwargs)
        response.data['rating_distribution'] = list(
            Feedback.objects.filter(
                menu_item_id=kwargs['menu_item_id'], status=Feedback.STATUS_ACTIVE
            ).values('rating').annotate(count=Count('id')).order_by('rating')
        )
        return response


class MyFeedbackView(generics.ListAPIView):
    serializer_class = FeedbackSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return _with_relations(Feedback.objects.filter(user=self.request.user))


class FeedbackDetailView(generics.GenericAPIView):
    """
    put/patch: Update your feedback
    delete: Delete your feedback (admins may delete any)
    """
    permission_classes = [IsAuthenticated]
    serializer_class = FeedbackUpdateSerializer
    queryset = Feedback.objects.all()

    def _update(self, request, partial):
        feedback = self.get_object()
        if feedback.user_id != request.user.pk:
            raise PermissionDenied("Not authorized to update this feedback")

        serializer = FeedbackUpdateSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        feedback = services.update_feedback(feedback, **serializer.validated_data)
        return Response(FeedbackSerializer(feedback).data)

    @swagger_auto_schema(request_body=FeedbackUpdateSerializer, responses={200: FeedbackSerializer})
    def put(self, request, pk):
        return self._update(request, partial=False)

    @swagger_auto_schema(request_body=FeedbackUpdateSerializer, responses={200: FeedbackSerializer})
    def patch(self, request, pk):
        return self._update(request, partial=True)

    def delete(self, request, pk):
        feedback = self.get_object()
        if feedback.user_id != request.user.pk and not request.user.is_admin:
            raise PermissionDenied("Not authorized to delete this feedback")

        services.delete_feedback(feedback)
        return Response({'message': 'Feedback deleted successfully'})


@swagger_auto_schema(method='post', operation_description="Mark a review as helpful, once per user")
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_helpful(request, pk):
    feedback = get_object_or_404(Feedback, pk=pk)
    count = services.mark_helpful(feedback, request.user)
    return Response({'message': 'Marked as helpful', 'helpful_count': count})


# =============== ADMIN VIEWS ===============

class AdminFeedbackListView(generics.ListAPIView):
    serializer_class = FeedbackSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        queryset = _with_relations(Feedback.objects.all())
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        rating = self.request.query_params.get('rating')
        if rating:
            queryset = queryset.filter(rating=rating)
        return queryset

    @swagger_auto_schema(manual_parameters=[
        openapi.Parameter('status', openapi.IN_QUERY, description="active, hidden or flagged", type=openapi.TYPE_STRING),
        openapi.Parameter('rating', openapi.IN_QUERY, description="Star rating", type=openapi.TYPE_INTEGER),
    ])
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


@swagger_auto_schema(method='post', request_body=FeedbackResponseSerializer, responses={200: FeedbackSerializer})
@api_view(['POST'])
@permission_classes([IsAdminRole])
def respond_to_feedback(request, pk):
    feedback = get_object_or_404(Feedback, pk=pk)
    serializer = FeedbackResponseSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    feedback = services.respond(feedback, request.user, serializer.validated_data['message'])
    return Response(FeedbackSerializer(feedback).data)


@swagger_auto_schema(method='patch', request_body=FeedbackStatusSerializer, responses={200: FeedbackSerializer})
@api_view(['PATCH'])
@permission_classes([IsAdminRole])
def update_feedback_status(request, pk):
    feedback = get_object_or_404(Feedback, pk=pk)
    serializer = FeedbackStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    feedback = services.set_status(feedback, serializer.validated_data['status'])
    return Response(FeedbackSerializer(feedback).data)
