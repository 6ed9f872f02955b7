from django.urls import path
from . import views


urlpatterns = [
    # Menu URLs
    path('items/', views.MenuItemListCreateView.as_view(), name='menu-list-create'),
    path('items/<int:pk>/', views.MenuItemDetailView.as_view(), name='menu-detail'),

    # Additional Menu URLs
    path('items/category/<str:category>/', views.menu_by_category, name='menu-by-category'),
    path('items/today/special/', views.today_special, name='menu-today-special'),
    path('items/<int:pk>/toggle-availability/', views.toggle_availability, name='menu-toggle-availability'),
    path('items/<int:pk>/restock/', views.restock_item, name='menu-restock'),
]
