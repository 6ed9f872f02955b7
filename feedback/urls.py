from django.urls import path
from . import views


urlpatterns = [
    path('', views.create_feedback, name='feedback-create'),
    path('menu-item/<int:menu_item_id>/', views.MenuItemFeedbackView.as_view(), name='feedback-menu-item'),
    path('my-feedback/', views.MyFeedbackView.as_view(), name='feedback-mine'),
    path('<int:pk>/', views.FeedbackDetailView.as_view(), name='feedback-detail'),
    path('<int:pk>/helpful/', views.mark_helpful, name='feedback-helpful'),

    # Admin URLs
    path('admin/all/', views.AdminFeedbackListView.as_view(), name='feedback-admin-list'),
    path('<int:pk>/respond/', views.respond_to_feedback, name='feedback-respond'),
    path('<int:pk>/status/', views.update_feedback_status, name='feedback-status'),
]
