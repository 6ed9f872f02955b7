from django.contrib import admin
from django.urls import path, include
from drf_yasg.views import get_schema_view
from drf_yasg import openapi
from rest_framework import permissions
from django.conf.urls.static import static
from django.conf import settings

# Setup Swagger schema view
schema_view = get_schema_view(
    openapi.Info(
        title='API Documentation CAMPUS CANTEEN',
        default_version='v1',
        description="API for ordering, wallet payments and feedback at the campus canteen",
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path('admin/', admin.site.urls),
    path("", include("authentication.urls")),
    path("menu/", include("inventory.urls")),
    path("orders/", include('orders.urls')),
    path("wallet/", include('wallet.urls')),
    path("feedback/", include('feedback.urls')),
    path("admin-panel/", include('dashboard.urls')),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
