from django.contrib import admin

from .models import Feedback


@admin.register(Feedback)
class FeedbackAdmin(admin.ModelAdmin):
    list_display = ['menu_item', 'user', 'rating', 'status', 'is_anonymous', 'created_at']
    list_filter = ['status', 'rating']
    search_fields = ['review', 'user__email', 'menu_item__name']
