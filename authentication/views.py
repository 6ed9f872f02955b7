from rest_framework import generics, status, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView
from django.db import connection, DatabaseError
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiExample
import logging

from .serializers import UserSerializer, LoginSerializer, RegisterSerializer

logger = logging.getLogger(__name__)


# =============== AUTHENTICATION VIEWS ===============

class CustomTokenObtainPairView(TokenObtainPairView):
    """
    JWT authentication endpoint.

    Returns access and refresh tokens carrying the user's role as a claim,
    together with the user's profile and wallet balance.
    """
    serializer_class = LoginSerializer
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        summary="User Login with JWT Token",
        description="Authenticate with email and password. Returns JWT tokens and the user profile.",
        request=LoginSerializer,
        responses={
            200: {
                'type': 'object',
                'properties': {
                    'refresh': {'type': 'string', 'description': 'JWT refresh token'},
                    'access': {'type': 'string', 'description': 'JWT access token'},
                    'user': {'type': 'object', 'description': 'User information'},
                }
            },
            400: {'description': 'Invalid credentials or validation errors'},
        },
        examples=[
            OpenApiExample(
                'Student Login',
                value={"email": "john@student.edu", "password": "student123"}
            ),
        ]
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data['user']

        # Update last login
        user.last_login_at = timezone.now()
        user.save(update_fields=['last_login_at'])

        # Generate tokens
        refresh = RefreshToken.for_user(user)
        refresh['role'] = user.role
        refresh['email'] = user.email

        logger.info(f"User {user.email} logged in")

        return Response({
            'refresh': str(refresh),
            'access': str(refresh.access_token),
            'user': UserSerializer(user).data,
        }, status=status.HTTP_200_OK)


@extend_schema(
    summary="Register Student",
    description="Create a student account. The wallet starts at zero and is funded through recharges.",
    request=RegisterSerializer,
    responses={201: UserSerializer, 400: {'description': 'Validation errors'}},
)
@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def register(request):
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()

    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    refresh['email'] = user.email

    logger.info(f"Registered student {user.email}")

    return Response({
        'refresh': str(refresh),
        'access': str(refresh.access_token),
        'user': UserSerializer(user).data,
    }, status=status.HTTP_201_CREATED)


# =============== USER PROFILE ===============

class MyProfileView(generics.RetrieveUpdateAPIView):
    """
    Get and update current user's profile information.
    """
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        summary="Get My Profile",
        description="Get current user's profile information",
        responses={200: UserSerializer},
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_object(self):
        return self.request.user

    def perform_update(self, serializer):
        # Email is the login identifier and is not changed here
        serializer.validated_data.pop('email', None)
        serializer.save()


# =============== SYSTEM ===============

@extend_schema(summary="Health Check", responses={200: {'type': 'object'}, 503: {'type': 'object'}})
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def health_check(request):
    try:
        # Test database connection
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")

        return Response({
            'status': 'healthy',
            'timestamp': timezone.now().isoformat(),
            'database': 'connected',
            'version': '1.0.0'
        })
    except DatabaseError as e:
        logger.error(f"Health check failed: {e}")
        return Response({
            'status': 'unhealthy',
            'timestamp': timezone.now().isoformat(),
            'database': 'disconnected',
            'error': str(e)
        }, status=status.HTTP_503_SERVICE_UNAVAILABLE)
