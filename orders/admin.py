from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['menu_item', 'menu_item_name', 'quantity', 'price', 'special_instructions']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'user', 'total_amount', 'status', 'payment_method', 'payment_status', 'created_at']
    list_filter = ['status', 'payment_method', 'payment_status', 'order_type']
    search_fields = ['order_number', 'user__email']
    # Status and payment move through the order service
    readonly_fields = ['order_number', 'user', 'total_amount', 'status', 'payment_status', 'created_at', 'updated_at']
    inlines = [OrderItemInline]
