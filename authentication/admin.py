from django.contrib import admin

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    list_display = ['email', 'first_name', 'last_name', 'role', 'student_id', 'wallet_balance', 'is_active']
    list_filter = ['role', 'is_active', 'department', 'year']
    search_fields = ['email', 'first_name', 'last_name', 'student_id']
    # Balance moves only through the wallet ledger
    readonly_fields = ['wallet_balance', 'last_login_at', 'created_at', 'updated_at']
    exclude = ['password']
