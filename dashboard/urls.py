from django.urls import path
from . import views


urlpatterns = [
    path('create-admin/', views.create_admin, name='admin-create-admin'),
    path('dashboard/', views.dashboard, name='admin-dashboard'),

    # Users
    path('users/', views.StudentListView.as_view(), name='admin-users'),
    path('users/<uuid:pk>/', views.user_detail, name='admin-user-detail'),
    path('users/<uuid:pk>/status/', views.update_user_status, name='admin-user-status'),

    # Reports
    path('analytics/', views.analytics, name='admin-analytics'),
    path('export/<str:kind>/', views.export_data, name='admin-export'),
    path('settings/', views.canteen_settings, name='admin-settings'),
]
