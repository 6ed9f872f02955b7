from django.contrib import admin

from .models import MenuItem


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'price', 'quantity', 'is_available', 'rating_average']
    list_filter = ['category', 'is_available', 'is_vegetarian', 'spice_level']
    search_fields = ['name', 'description']
    readonly_fields = ['rating_average', 'rating_count', 'created_at', 'updated_at']
