from django.urls import path
from . import views


urlpatterns = [
    # Student URLs
    path('', views.OrderCreateView.as_view(), name='order-create'),
    path('my-orders/', views.MyOrderListView.as_view(), name='my-orders'),
    path('<int:pk>/', views.OrderDetailView.as_view(), name='order-detail'),
    path('<int:pk>/cancel/', views.cancel_order_view, name='order-cancel'),

    # Admin URLs
    path('admin/all/', views.AdminOrderListView.as_view(), name='admin-order-list'),
    path('admin/stats/', views.admin_order_stats, name='admin-order-stats'),
    path('<int:pk>/status/', views.update_status_view, name='order-update-status'),
]
